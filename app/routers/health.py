import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request, Response

from app.core.config import get_settings
from app.core.rate_limit import rate_limit
from app.db.init import database_status

router = APIRouter()

_STARTED_AT = time.monotonic()


@router.get("")
@rate_limit()
async def health(request: Request, response: Response):
    """Health check for load balancers and monitoring."""
    return {
        "status": "success",
        "environment": get_settings().env,
        "uptime": f"{int(time.monotonic() - _STARTED_AT)}s",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": await database_status(),
    }
