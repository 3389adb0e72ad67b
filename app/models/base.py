"""
Base models for the image compression API.
These models define the camelCase JSON convention and the common
success/error envelope shared by every endpoint.
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional


class CamelModel(BaseModel):
    """Base class for models serialized with camelCase keys"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SuccessResponse(CamelModel):
    """Base class for successful responses"""
    success: bool = Field(True, description="Whether the request succeeded")


class ErrorResponse(CamelModel):
    """Body returned for client and server errors"""
    success: bool = Field(False, description="Always false for errors")
    error: str = Field(..., description="Human readable error message")
    details: Optional[str] = Field(None, description="Underlying error text, for server errors")
