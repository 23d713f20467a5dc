"""Proximity search pipeline.

1. Build a ``geo_distance`` query around the requested point.
2. Run it once against the post index (index-native order, no re-sorting).
3. Decode each hit into a ``Post``, collecting per-hit decode errors.
4. Drop posts whose message the content policy blocks.

Any decode error fails the whole search with ``HitDecodeError`` so that a
malformed document is reported instead of silently skipped.
"""

import logging
from collections.abc import Iterable, Iterator

from pydantic import BaseModel, ValidationError

from ..models import Post
from ..settings import DEFAULT_RANGE
from .elasticsearch import PostIndex, geo_distance_query
from .errors import HitDecodeError
from .policy import ContentPolicyFilter

logger = logging.getLogger(__name__)

RANGE_UNIT = "km"


class DecodedHit(BaseModel):
    """Outcome of decoding one search hit: either ``post`` or ``error``."""

    hit_id: str | None = None
    post: Post | None = None
    error: str | None = None


def radius_from_param(raw: str | None, default: str = DEFAULT_RANGE) -> str:
    """Turn the ``range`` query parameter into an index distance string.

    The parameter is a bare number of kilometers; the unit is appended here.
    """
    if not raw:
        return default
    return f"{raw}{RANGE_UNIT}"


def decode_hit(hit: dict) -> DecodedHit:
    hit_id = hit.get("_id")
    src = hit.get("_source")
    if not isinstance(src, dict):
        return DecodedHit(hit_id=hit_id, error=f"hit {hit_id}: missing _source")
    try:
        return DecodedHit(hit_id=hit_id, post=Post.model_validate(src))
    except ValidationError as exc:
        return DecodedHit(hit_id=hit_id, error=f"hit {hit_id}: {exc.error_count()} invalid field(s)")


def filter_posts(decoded: Iterable[DecodedHit], policy: ContentPolicyFilter) -> Iterator[Post]:
    for item in decoded:
        if item.post is None:
            continue
        if policy.is_blocked(item.post.message):
            logger.info("Post %s contains blocked terms, not allowed to display", item.hit_id)
            continue
        yield item.post


async def search_nearby(
    lat: float,
    lon: float,
    distance: str,
    *,
    index: PostIndex,
    policy: ContentPolicyFilter,
) -> list[Post]:
    """Return the displayable posts within *distance* of (*lat*, *lon*)."""
    logger.info("Search received: %f %f %s", lat, lon, distance)

    hits = await index.query(geo_distance_query(lat, lon, distance))
    decoded = [decode_hit(hit) for hit in hits]

    errors = [item.error for item in decoded if item.error is not None]
    if errors:
        logger.error("Failed to decode %d of %d search hits", len(errors), len(hits))
        raise HitDecodeError(errors)

    posts = list(filter_posts(decoded, policy))
    logger.info("Found %d posts, %d displayable", len(hits), len(posts))
    return posts
