from pydantic import BaseModel, ConfigDict, Field


class Location(BaseModel):
    """A WGS84 coordinate, stored in the index as a ``geo_point``."""

    model_config = ConfigDict(extra="forbid")

    lat: float = Field(..., description="Latitude in decimal degrees")
    lon: float = Field(..., description="Longitude in decimal degrees")


class Post(BaseModel):
    """A user-submitted post as stored in the search index.

    Decoding is strict: every field is required and unknown fields are
    rejected, so a malformed document surfaces as a validation error.
    """

    model_config = ConfigDict(extra="forbid")

    user: str = Field(..., description="Username of the author")
    message: str = Field(..., description="Free-text body, may be empty")
    location: Location
    url: str = Field(..., description="Public URL of the attached media")
