"""Search index adapter backed by Elasticsearch.

Posts live in a single index whose ``location`` field is mapped as a
``geo_point``. Writes use ``refresh=True`` so a post is searchable as soon
as ``PostIndex.put`` returns, trading indexing throughput for
read-after-write consistency.
"""

import asyncio
import logging

from elastic_transport import ObjectApiResponse

from ..models import Post
from .errors import IndexQueryError, IndexWriteError

logger = logging.getLogger(__name__)

POST_MAPPINGS = {"properties": {"location": {"type": "geo_point"}}}


def unwrap_es_response(resp) -> dict:
    """Unwrap an Elasticsearch response, handling both ObjectApiResponse and dict.

    Raises ``TypeError`` if the response type is unexpected.
    """
    if isinstance(resp, ObjectApiResponse):
        return resp.body
    elif isinstance(resp, dict):
        return resp
    else:
        logger.error("Unexpected Elasticsearch response type: %s", type(resp))
        raise TypeError(f"Unexpected Elasticsearch response type: {type(resp)}")


def geo_distance_query(lat: float, lon: float, distance: str) -> dict:
    """Match documents whose ``location`` lies within *distance* of a point.

    *distance* carries its unit (e.g. ``"200km"``). The boundary is
    inclusive, following Elasticsearch ``geo_distance`` semantics.
    """
    return {
        "geo_distance": {
            "distance": distance,
            "location": {"lat": lat, "lon": lon},
        }
    }


async def ensure_index(es, index: str) -> bool:
    """Create *index* with the post mapping unless it already exists.

    Returns ``True`` when the index was created by this call.
    """
    if await es.indices.exists(index=index):
        return False
    await es.indices.create(index=index, mappings=POST_MAPPINGS)
    logger.info("Created index %s", index)
    return True


class PostIndex:
    """Reads and writes ``Post`` documents in one Elasticsearch index.

    The wrapped ``AsyncElasticsearch`` client is safe to share across
    requests. Every call is bounded by *timeout* seconds when one is given.
    """

    def __init__(self, es, index: str, timeout: float | None = None, max_results: int = 100):
        self.es = es
        self.index = index
        self.timeout = timeout
        self.max_results = max_results

    async def put(self, post_id: str, post: Post) -> None:
        try:
            await asyncio.wait_for(
                self.es.index(
                    index=self.index,
                    id=post_id,
                    document=post.model_dump(),
                    refresh=True,
                ),
                timeout=self.timeout,
            )
        except Exception as exc:
            logger.exception(
                "Elasticsearch index write failed",
                extra={"index": self.index, "post_id": post_id},
            )
            raise IndexWriteError(f"Failed to index post {post_id}") from exc
        logger.info("Post %s saved to index %s", post_id, self.index)

    async def query(self, query: dict) -> list[dict]:
        """Run *query* and return the raw hits in index order."""
        try:
            resp = await asyncio.wait_for(
                self.es.search(index=self.index, query=query, size=self.max_results),
                timeout=self.timeout,
            )
            data = unwrap_es_response(resp)
        except Exception as exc:
            logger.exception(
                "Elasticsearch search failed",
                extra={"index": self.index, "query": query},
            )
            raise IndexQueryError("Elasticsearch request failed") from exc

        logger.debug("Query took %s ms", data.get("took"))
        return data.get("hits", {}).get("hits", []) or []
