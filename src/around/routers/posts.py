"""Post router: ingest geo-tagged posts and search them by proximity.

POST /post
    Multipart form with ``message``, ``lat``, ``lon`` and the ``image`` file.

GET /search
    Posts within ``range`` km of (``lat``, ``lon``), as a JSON array.

Pipeline failures propagate as ``PipelineError`` and are rendered as
500 plain-text responses by the handler installed in ``main``.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Query, Request, Response, UploadFile

from ..lib.audit import dispatch_audit
from ..lib.ingest import MediaUpload, ingest_post, parse_coordinate
from ..lib.search import radius_from_param, search_nearby
from ..models import Post
from ..security import RequirePrincipal, verify_token

router = APIRouter(tags=["posts"], dependencies=[Depends(verify_token)])

logger = logging.getLogger(__name__)

RESPONSE_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
}


@router.post("/post", status_code=200)
async def create_post(
    request: Request,
    principal: RequirePrincipal,
    background_tasks: BackgroundTasks,
    message: Annotated[str, Form()] = "",
    lat: Annotated[str | None, Form()] = None,
    lon: Annotated[str | None, Form()] = None,
    image: Annotated[UploadFile | None, File()] = None,
) -> Response:
    """Upload the attached image, then index the post under the same id."""
    media = None
    if image is not None:
        media = MediaUpload(stream=image.file, content_type=image.content_type)

    state = request.app.state
    post_id, post = await ingest_post(
        principal,
        message,
        lat,
        lon,
        media,
        media_store=state.media_store,
        index=state.post_index,
    )
    logger.info("Post %s created by %s", post_id, principal.username)

    sink = getattr(state, "audit_sink", None)
    if sink is not None:
        background_tasks.add_task(dispatch_audit, sink, post_id, post)

    return Response(status_code=200, media_type="application/json", headers=RESPONSE_HEADERS)


@router.get("/search", response_model=list[Post])
async def search_posts(
    request: Request,
    response: Response,
    lat: Annotated[str | None, Query()] = None,
    lon: Annotated[str | None, Query()] = None,
    range_: Annotated[str | None, Query(alias="range", description="Radius in km")] = None,
) -> list[Post]:
    """Return displayable posts near a point, most relevant first."""
    state = request.app.state
    distance = radius_from_param(range_, default=state.settings.default_range)

    posts = await search_nearby(
        parse_coordinate(lat),
        parse_coordinate(lon),
        distance,
        index=state.post_index,
        policy=state.policy,
    )

    response.headers.update(RESPONSE_HEADERS)
    return posts
