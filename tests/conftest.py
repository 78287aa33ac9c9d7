import os
from typing import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Test configuration; must be set before app settings are first loaded
os.environ.setdefault("ENV", "test")
os.environ.setdefault("MONGODB_DB_NAME", "resume_analyzer_test")
os.environ.setdefault("AI_PROVIDER", "mock")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("MAX_FILE_SIZE_MB", "1")


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def build_pdf(lines: list[str]) -> bytes:
    """Minimal one-page PDF with a Helvetica text layer, one entry per line."""
    ops = ["BT", "/F1 11 Tf", "14 TL", "50 760 Td"]
    ops += [f"({_escape(line)}) Tj T*" for line in lines]
    ops.append("ET")
    stream = "\n".join(ops).encode("latin-1")
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] /Contents 4 0 R "
        b"/Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    xref_at = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref_at)
    return bytes(out)


SAMPLE_RESUME_LINES = [
    "Jane Roe",
    "Email: x@y.com",
    "Experience: Software developer at Acme building backend services for five years",
    "Skills: Python Docker",
]


@pytest.fixture
def pdf_factory() -> Callable[[list[str]], bytes]:
    return build_pdf


@pytest.fixture
def sample_pdf() -> bytes:
    return build_pdf(SAMPLE_RESUME_LINES)


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory MongoDB with Beanie models registered."""
    from mongomock_motor import AsyncMongoMockClient

    from app.core.config import get_settings
    from app.db.init import init_db

    database = AsyncMongoMockClient()[get_settings().mongodb_db_name]
    await init_db(get_settings(), database=database)
    yield database


@pytest.fixture
def storage(tmp_path):
    from app.storage.local import LocalStorage
    return LocalStorage(tmp_path / "uploads")


class SpyProvider:
    """Heuristic provider that records how often it was called."""

    name = "spy"

    def __init__(self):
        from app.analysis.heuristic import HeuristicProvider
        self._inner = HeuristicProvider()
        self.calls = 0

    async def analyze(self, text, job_description=None):
        self.calls += 1
        return await self._inner.analyze(text, job_description)


@pytest.fixture
def spy_provider() -> SpyProvider:
    return SpyProvider()


@pytest.fixture
def analyzer(spy_provider):
    from app.analysis.analyzer import ResumeAnalyzer
    return ResumeAnalyzer(spy_provider)


@pytest_asyncio.fixture
async def client(db, storage, analyzer) -> AsyncGenerator[AsyncClient, None]:
    from app.deps import get_analyzer, get_storage_backend
    from app.main import app

    app.dependency_overrides[get_storage_backend] = lambda: storage
    app.dependency_overrides[get_analyzer] = lambda: analyzer
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
