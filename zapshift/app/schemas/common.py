"""
Shared schema base.

The API speaks camelCase JSON; models accept either camelCase or
snake_case input and serialize with camelCase aliases.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class MessageResponse(CamelModel):
    """Schema for simple acknowledgements."""
    success: bool = True
    message: str
