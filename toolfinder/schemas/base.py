"""
Shared Pydantic base models.

The HTTP API speaks camelCase JSON (useCase, hasApiKey, additionalNotes);
Python code uses snake_case attributes. CamelModel bridges the two: requests
are accepted in either form and responses are serialized with camelCase
aliases (FastAPI serializes response_model by alias).
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model with camelCase JSON aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class MessageResponse(CamelModel):
    """Generic success acknowledgement."""
    success: bool = Field(True, description="Always true on success")
    message: str = Field(..., description="Human-readable confirmation")
