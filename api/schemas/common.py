"""Common Pydantic schemas shared across the API."""

from datetime import datetime
from typing import Annotated, Any, Optional
from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from core.utils.datetime import ensure_utc


# Naive datetimes coming back from the database are UTC
UTCDateTime = Annotated[datetime, AfterValidator(ensure_utc)]


class CamelModel(BaseModel):
    """Base model exposing camelCase field names on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(CamelModel):
    """Plain acknowledgement."""

    message: str = Field(description="Human-readable result")


class ErrorDetail(BaseModel):
    """Body of an error envelope."""

    code: str = Field(description="Error code for programmatic handling")
    message: str = Field(description="Human-readable error message")
    path: str = Field(description="Request path")
    method: str = Field(description="Request method")
    details: Optional[Any] = Field(None, description="Additional error information")


class ErrorResponse(BaseModel):
    """Error response model."""

    error: ErrorDetail
