"""Common/shared schemas for responses."""
from typing import Union, List
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for API payloads: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageResponse(CamelModel):
    message: str


class ErrorResponse(CamelModel):
    status_code: int
    message: Union[str, List[str]]
    error: str
