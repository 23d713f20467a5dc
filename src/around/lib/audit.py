"""Optional audit trail for ingested posts.

An audit sink receives a copy of every post after the ingestion response
has been committed. Sink failures are logged and never reach the caller.
No sink is configured by default.
"""

import logging
from typing import Protocol

from ..models import Post

logger = logging.getLogger(__name__)


class AuditSink(Protocol):
    async def record(self, post_id: str, post: Post) -> None:
        ...


async def dispatch_audit(sink: AuditSink, post_id: str, post: Post) -> None:
    """Send *post* to *sink*, logging rather than raising on failure."""
    try:
        await sink.record(post_id, post)
    except Exception:
        logger.exception("Audit write failed", extra={"post_id": post_id})
