import certifi
from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from app.core.config import Settings
from app.models.resume_document import ResumeDocument

DOCUMENT_MODELS = [ResumeDocument]

_database: AsyncIOMotorDatabase | None = None


def _use_tls(uri: str) -> bool:
    """True if URI uses TLS (Atlas or explicit tls=true). Avoids TLS for plain mongodb:// in CI."""
    return "mongodb+srv://" in uri or "tls=true" in uri.lower()


async def init_db(settings: Settings, database: AsyncIOMotorDatabase | None = None) -> None:
    """Connect and register document models. ``database`` overrides the configured one (tests)."""
    global _database
    if database is None:
        # Atlas in Docker: tlsCAFile + tlsDisableOCSPEndpointCheck avoid TLSV1_ALERT_INTERNAL_ERROR
        kwargs = {}
        if _use_tls(settings.mongodb_uri):
            kwargs["tlsCAFile"] = certifi.where()
            kwargs["tlsDisableOCSPEndpointCheck"] = True
        client = AsyncIOMotorClient(settings.mongodb_uri, **kwargs)
        database = client[settings.mongodb_db_name]
    await init_beanie(database=database, document_models=DOCUMENT_MODELS)
    _database = database


def close_db() -> None:
    global _database
    if _database is not None:
        _database.client.close()
        _database = None


async def database_status() -> str:
    if _database is None:
        return "disconnected"
    try:
        await _database.command("ping")
    except Exception:
        return "disconnected"
    return "connected"
