"""Runtime configuration read from the environment.

Values come from ``os.environ`` (populated from ``.env`` by the package
``__init__``). ``get_settings`` re-reads the environment on every call so
tests can patch variables without reloading modules.
"""

import os

from pydantic import BaseModel, Field

DEFAULT_DENYLIST = ("fuck", "shit", "bitch")
DEFAULT_RANGE = "200km"


class Settings(BaseModel):
    es_url: str = "http://localhost:9200"
    es_index: str = "around"
    es_api_key: str | None = None

    azure_storage_conn: str | None = None
    azure_blob_container: str = "post-images"

    jwt_signing_key: str | None = None

    default_range: str = DEFAULT_RANGE
    search_max_results: int = Field(100, ge=1, le=10000)
    backend_timeout_seconds: float = Field(30.0, gt=0)

    host: str = "0.0.0.0"
    port: int = Field(8080, ge=1, le=65535)

    log_level: str = "INFO"

    denylist: tuple[str, ...] = DEFAULT_DENYLIST


def get_settings() -> Settings:
    env = {
        "es_url": os.environ.get("ES_URL"),
        "es_index": os.environ.get("ES_INDEX"),
        "es_api_key": os.environ.get("ES_API_KEY"),
        "azure_storage_conn": os.environ.get("AZURE_STORAGE_CONN"),
        "azure_blob_container": os.environ.get("AZURE_BLOB_CONTAINER"),
        "jwt_signing_key": os.environ.get("JWT_SIGNING_KEY"),
        "default_range": os.environ.get("DEFAULT_RANGE"),
        "search_max_results": os.environ.get("SEARCH_MAX_RESULTS"),
        "backend_timeout_seconds": os.environ.get("BACKEND_TIMEOUT_SECONDS"),
        "host": os.environ.get("HOST"),
        "port": os.environ.get("PORT"),
        "log_level": os.environ.get("LOG_LEVEL"),
    }
    # Unset variables fall back to the model defaults.
    return Settings(**{k: v for k, v in env.items() if v})
