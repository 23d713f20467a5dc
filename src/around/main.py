import logging
from contextlib import asynccontextmanager

from elasticsearch import AsyncElasticsearch
from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from .lib.elasticsearch import PostIndex, ensure_index
from .lib.errors import PipelineError
from .lib.media import AzureBlobMediaStore
from .lib.policy import ContentPolicyFilter
from .routers import health, posts
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


def configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)
    root_logger = logging.getLogger()
    if root_logger.handlers:
        root_logger.setLevel(level)
        return
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def init_state(app: FastAPI, settings: Settings, es) -> None:
    """Attach the shared backing-store clients to ``app.state``.

    Tests call this with fake clients instead of running the lifespan.
    """
    app.state.settings = settings
    app.state.es = es
    app.state.post_index = PostIndex(
        es,
        settings.es_index,
        timeout=settings.backend_timeout_seconds,
        max_results=settings.search_max_results,
    )
    app.state.media_store = AzureBlobMediaStore.from_connection_string(
        settings.azure_storage_conn,
        settings.azure_blob_container,
        timeout=settings.backend_timeout_seconds,
    )
    app.state.policy = ContentPolicyFilter(settings.denylist)
    app.state.audit_sink = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level)

    es = AsyncElasticsearch(
        settings.es_url,
        api_key=settings.es_api_key,
        request_timeout=settings.backend_timeout_seconds,
    )
    init_state(app, settings, es)

    try:
        await ensure_index(es, settings.es_index)
    except Exception as exc:
        logger.warning("Elasticsearch unreachable, skipping index setup: %s", exc)

    logger.info("Started service, index=%s", settings.es_index)
    try:
        yield
    finally:
        await es.close()


app = FastAPI(
    title="Around API",
    description="Geo-tagged posts: upload a picture with a message, find posts nearby",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["Content-Type", "Authorization"],
)


INGEST_PATH = "/post"


@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError) -> PlainTextResponse:
    return PlainTextResponse(
        str(exc),
        status_code=500,
        headers={"Access-Control-Allow-Origin": "*"},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # A malformed upload (e.g. ``image`` sent as a text field) is a failed
    # ingestion, reported like the pipeline errors above.
    if request.url.path == INGEST_PATH:
        logger.warning("Rejected post request: %s", exc.errors())
        return PlainTextResponse(
            "Invalid post request",
            status_code=500,
            headers={"Access-Control-Allow-Origin": "*"},
        )
    return await request_validation_exception_handler(request, exc)


app.include_router(health.router)
app.include_router(posts.router)
