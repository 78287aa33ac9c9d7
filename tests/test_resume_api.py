"""HTTP-level tests for /api/resumes."""

from beanie import PydanticObjectId
from starlette.datastructures import UploadFile

from app.models.resume_document import ResumeDocument, ResumeStatus

MISSING_ID = "65f000000000000000000000"


def _files(content: bytes, name: str = "resume.pdf", content_type: str = "application/pdf", field: str = "resume"):
    return {field: (name, content, content_type)}


async def _upload(client, content: bytes) -> dict:
    r = await client.post("/api/resumes/upload", files=_files(content))
    assert r.status_code == 201, r.text
    return r.json()["data"]["resume"]


# Upload


async def test_upload_extracts_text(client, sample_pdf):
    r = await client.post("/api/resumes/upload", files=_files(sample_pdf, name="Jane Roe CV.pdf"))
    assert r.status_code == 201
    body = r.json()
    assert body["status"] == "success"
    resume = body["data"]["resume"]
    assert resume["status"] == "processed"
    assert resume["wordCount"] > 0
    assert resume["pageCount"] == 1
    assert resume["originalName"] == "Jane Roe CV.pdf"
    assert resume["filename"].endswith("Jane_Roe_CV.pdf")
    assert resume["mimeType"] == "application/pdf"
    assert resume["fileSizeBytes"] == len(sample_pdf)
    assert "python" in resume["extractedText"].lower()
    assert resume["analysisResult"] is None
    assert "storagePath" not in resume
    assert "storage_path" not in resume


async def test_upload_rejects_non_pdf(client, db):
    r = await client.post("/api/resumes/upload", files=_files(b"hello world", name="test.txt", content_type="text/plain"))
    assert r.status_code == 400
    assert r.json() == {"status": "fail", "message": "Only PDF files are allowed.", "request_id": r.headers["X-Request-ID"]}
    assert await ResumeDocument.find_all().count() == 0


async def test_upload_without_file(client, db):
    r = await client.post("/api/resumes/upload", data={"note": "no file here"})
    assert r.status_code == 400
    assert r.json()["message"] == "Please upload a PDF file."
    assert await ResumeDocument.find_all().count() == 0


async def test_upload_wrong_field_name(client, sample_pdf):
    r = await client.post("/api/resumes/upload", files=_files(sample_pdf, field="file"))
    assert r.status_code == 400
    assert "resume" in r.json()["message"]


async def test_upload_too_many_files(client, sample_pdf):
    files = [
        ("resume", ("a.pdf", sample_pdf, "application/pdf")),
        ("resume", ("b.pdf", sample_pdf, "application/pdf")),
    ]
    r = await client.post("/api/resumes/upload", files=files)
    assert r.status_code == 400
    assert r.json()["message"].startswith("Too many files")


async def test_upload_too_large(client, db, monkeypatch):
    reads = []
    original_read = UploadFile.read

    async def counting_read(self, size=-1):
        data = await original_read(self, size)
        reads.append(len(data))
        return data

    monkeypatch.setattr(UploadFile, "read", counting_read)
    content = b"%PDF-1.4\n" + b"0" * (5 * 1024 * 1024)
    r = await client.post("/api/resumes/upload", files=_files(content))
    assert r.status_code == 413
    assert r.json() == {
        "status": "fail",
        "message": "File too large. Maximum size is 1MB.",
        "request_id": r.headers["X-Request-ID"],
    }
    assert sum(reads) <= 1024 * 1024 + 1
    assert await ResumeDocument.find_all().count() == 0


async def test_upload_corrupt_pdf_marks_record_failed(client, storage):
    r = await client.post("/api/resumes/upload", files=_files(b"this is not really a pdf"))
    assert r.status_code == 422
    assert r.json()["message"].startswith("Failed to parse PDF")

    docs = await ResumeDocument.find_all().to_list()
    assert len(docs) == 1
    assert docs[0].status == ResumeStatus.FAILED
    assert docs[0].extracted_text == ""
    assert docs[0].error_message.startswith("Failed to parse PDF")
    # file kept for auditing
    assert await storage.get(docs[0].storage_path) == b"this is not really a pdf"


async def test_upload_image_only_pdf_is_unprocessable(client, pdf_factory):
    r = await client.post("/api/resumes/upload", files=_files(pdf_factory(["Scan"])))
    assert r.status_code == 422
    assert "no extractable text" in r.json()["message"]
    doc = (await ResumeDocument.find_all().to_list())[0]
    assert doc.status == ResumeStatus.FAILED


# Get


async def test_get_resume(client, sample_pdf):
    created = await _upload(client, sample_pdf)
    r = await client.get(f"/api/resumes/{created['id']}")
    assert r.status_code == 200
    resume = r.json()["data"]["resume"]
    assert resume["id"] == created["id"]
    assert resume["extractedText"] == created["extractedText"]
    assert "storagePath" not in resume


async def test_get_missing_resume(client, db):
    r = await client.get(f"/api/resumes/{MISSING_ID}")
    assert r.status_code == 404
    assert r.json()["message"] == f"No resume found with ID: {MISSING_ID}"


async def test_malformed_id_rejected_everywhere(client, db):
    for method, path in (
        ("GET", "/api/resumes/not-an-id"),
        ("POST", "/api/resumes/not-an-id/analyze"),
        ("DELETE", "/api/resumes/not-an-id"),
    ):
        r = await client.request(method, path)
        assert r.status_code == 400, path
        assert r.json() == {
            "status": "fail",
            "message": 'Invalid ID format: "not-an-id"',
            "request_id": r.headers["X-Request-ID"],
        }


# List


async def test_list_excludes_text_and_orders_newest_first(client, sample_pdf):
    first = await _upload(client, sample_pdf)
    second = await _upload(client, sample_pdf)
    r = await client.get("/api/resumes")
    assert r.status_code == 200
    data = r.json()["data"]
    assert [x["id"] for x in data["resumes"]] == [second["id"], first["id"]]
    assert all("extractedText" not in x and "storagePath" not in x for x in data["resumes"])
    assert data["pagination"] == {"total": 2, "page": 1, "limit": 10, "totalPages": 1}


async def test_list_clamps_paging(client, sample_pdf):
    for _ in range(3):
        await _upload(client, sample_pdf)

    r = await client.get("/api/resumes", params={"limit": 200, "page": 0})
    assert r.json()["data"]["pagination"] == {"total": 3, "page": 1, "limit": 50, "totalPages": 1}

    r = await client.get("/api/resumes", params={"limit": 2, "page": 2})
    data = r.json()["data"]
    assert data["pagination"] == {"total": 3, "page": 2, "limit": 2, "totalPages": 2}
    assert len(data["resumes"]) == 1

    r = await client.get("/api/resumes", params={"limit": 0})
    assert r.json()["data"]["pagination"]["limit"] == 1


async def test_list_empty(client, db):
    r = await client.get("/api/resumes")
    assert r.json()["data"] == {
        "resumes": [],
        "pagination": {"total": 0, "page": 1, "limit": 10, "totalPages": 0},
    }


async def test_list_rejects_non_integer_page(client, db):
    r = await client.get("/api/resumes", params={"page": "abc"})
    assert r.status_code == 400
    assert r.json()["status"] == "fail"


# Analyze


async def test_analyze_end_to_end(client, sample_pdf):
    created = await _upload(client, sample_pdf)
    r = await client.post(f"/api/resumes/{created['id']}/analyze")
    assert r.status_code == 200
    data = r.json()["data"]
    analysis = data["analysis"]
    assert data["resume"]["status"] == "analyzed"
    assert data["resume"]["analysisResult"] == analysis
    assert analysis["sections"]["hasContact"] is True
    assert analysis["sections"]["hasExperience"] is True
    assert {"python", "docker"} <= set(analysis["keywords"])
    assert analysis["overallScore"] >= 8 + 10 + 7 + 6
    assert analysis["experienceLevel"] == "mid"


async def test_analyze_accepts_job_description(client, sample_pdf, spy_provider):
    created = await _upload(client, sample_pdf)
    r = await client.post(
        f"/api/resumes/{created['id']}/analyze",
        json={"jobDescription": "Backend engineer, Python and Docker"},
    )
    assert r.status_code == 200
    assert spy_provider.calls == 1


async def test_reanalysis_overwrites_result(client, sample_pdf, spy_provider):
    created = await _upload(client, sample_pdf)
    first = await client.post(f"/api/resumes/{created['id']}/analyze")
    second = await client.post(f"/api/resumes/{created['id']}/analyze")
    assert first.status_code == second.status_code == 200
    assert second.json()["data"]["resume"]["status"] == "analyzed"
    assert spy_provider.calls == 2


async def test_analyze_failed_resume_never_calls_provider(client, spy_provider):
    await client.post("/api/resumes/upload", files=_files(b"garbage bytes"))
    doc = (await ResumeDocument.find_all().to_list())[0]
    r = await client.post(f"/api/resumes/{doc.id}/analyze")
    assert r.status_code == 422
    assert r.json()["message"] == "This resume failed to process and cannot be analyzed."
    assert spy_provider.calls == 0


async def test_analyze_insufficient_text(client, spy_provider):
    doc = ResumeDocument(
        filename="x.pdf",
        original_name="x.pdf",
        storage_path="x.pdf",
        file_size_bytes=10,
        extracted_text="too short",
        word_count=2,
        status=ResumeStatus.PROCESSED,
    )
    await doc.insert()
    r = await client.post(f"/api/resumes/{doc.id}/analyze")
    assert r.status_code == 422
    assert r.json()["message"] == "Resume has insufficient text content for analysis."
    assert spy_provider.calls == 0


async def test_analyze_missing_resume(client, db):
    r = await client.post(f"/api/resumes/{MISSING_ID}/analyze")
    assert r.status_code == 404


async def test_analyze_provider_failure_leaves_record_unchanged(client, sample_pdf, analyzer):
    from app.core.exceptions import AnalysisProviderError

    class Broken:
        name = "mock"

        async def analyze(self, text, job_description=None):
            raise AnalysisProviderError("heuristic exploded", self.name)

    created = await _upload(client, sample_pdf)
    analyzer.primary = Broken()
    r = await client.post(f"/api/resumes/{created['id']}/analyze")
    assert r.status_code == 500
    assert r.json()["status"] == "error"

    doc = await ResumeDocument.get(PydanticObjectId(created["id"]))
    assert doc.status == ResumeStatus.PROCESSED
    assert doc.analysis_result is None


# Delete


async def test_delete_resume(client, sample_pdf, storage):
    created = await _upload(client, sample_pdf)
    doc = await ResumeDocument.get(PydanticObjectId(created["id"]))

    r = await client.delete(f"/api/resumes/{created['id']}")
    assert r.status_code == 204
    assert r.content == b""

    assert (await client.get(f"/api/resumes/{created['id']}")).status_code == 404
    listing = (await client.get("/api/resumes")).json()["data"]
    assert listing["pagination"]["total"] == 0
    assert not (storage.root / doc.storage_path).exists()


async def test_delete_missing_resume(client, db):
    r = await client.delete(f"/api/resumes/{MISSING_ID}")
    assert r.status_code == 404
    assert r.json()["status"] == "fail"
