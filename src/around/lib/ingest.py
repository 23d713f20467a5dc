"""Post ingestion pipeline.

Steps run strictly in order, and each must succeed before the next starts:

1. Generate a fresh post id.
2. Upload the media under that id and obtain its public URL.
3. Build the ``Post`` record.
4. Index the post under the same id, visible to searches immediately.

The id is the join key between the media store and the search index. A
failed upload aborts before anything is indexed. A failed index write
leaves an orphaned media object behind; there is no reconciliation.
"""

import logging
import math
import uuid
from dataclasses import dataclass
from typing import BinaryIO

from ..models import Location, Post
from ..security import Principal
from .elasticsearch import PostIndex
from .errors import MissingMediaError
from .media import MediaStore

logger = logging.getLogger(__name__)


@dataclass
class MediaUpload:
    """The attachment of a post, as handed over by the HTTP layer."""

    stream: BinaryIO
    content_type: str | None = None


def parse_coordinate(raw: str | None) -> float:
    """Parse a decimal-degree form value, defaulting to ``0.0``.

    Unparseable or missing values silently become ``0.0`` instead of
    rejecting the request. This places such posts at (0, 0); the behavior
    is kept on purpose and is not range-checked either.
    """
    # NaN and infinities are rejected by geo_point, so they also map to 0.0.
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    return value if math.isfinite(value) else 0.0


def new_post_id() -> str:
    return str(uuid.uuid4())


async def ingest_post(
    principal: Principal,
    message: str,
    lat: str | None,
    lon: str | None,
    media: MediaUpload | None,
    *,
    media_store: MediaStore,
    index: PostIndex,
) -> tuple[str, Post]:
    """Store the media and index a new post. Returns ``(post_id, post)``."""
    if media is None:
        raise MissingMediaError("A post requires an image attachment")

    logger.info("Received one post request from %s", principal.username)

    post_id = new_post_id()
    url = await media_store.put(post_id, media.stream, media.content_type)

    post = Post(
        user=principal.username,
        message=message,
        location=Location(lat=parse_coordinate(lat), lon=parse_coordinate(lon)),
        url=url,
    )
    await index.put(post_id, post)
    return post_id, post
