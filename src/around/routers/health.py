import asyncio
import logging

from fastapi import APIRouter, Request
from pydantic import BaseModel

router = APIRouter(tags=["health"])

logger = logging.getLogger(__name__)

PING_TIMEOUT_SECONDS = 2.0


class HealthResponse(BaseModel):
    status: str
    index: str


@router.get("/health", response_model=HealthResponse, status_code=200)
async def healthcheck(request: Request):
    """Liveness probe. Also reports whether the search index answers a ping;
    the status code is 200 even when it does not."""
    es = getattr(request.app.state, "es", None)
    index = "unknown"
    if es is not None:
        try:
            up = await asyncio.wait_for(es.ping(), timeout=PING_TIMEOUT_SECONDS)
        except Exception:
            logger.warning("Elasticsearch ping failed", exc_info=True)
            up = False
        index = "up" if up else "down"
    return {"status": "ok", "index": index}
