"""Error taxonomy for the ingestion and search pipelines.

Every pipeline failure is a hard fault: the request fails as a whole and
nothing is retried. ``around.main`` maps ``PipelineError`` to a 500
plain-text response.
"""


class PipelineError(Exception):
    """Base class for failures that abort a pipeline request."""


class MissingMediaError(PipelineError):
    """The post carried no media attachment."""


class MediaUploadError(PipelineError):
    """The media store rejected or failed the upload."""


class IndexWriteError(PipelineError):
    """The search index failed to store a post document."""


class IndexQueryError(PipelineError):
    """The search index failed to answer a geo query."""


class HitDecodeError(PipelineError):
    """One or more search hits did not match the ``Post`` shape."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(
            f"{len(errors)} search hit(s) failed to decode: " + "; ".join(errors)
        )
