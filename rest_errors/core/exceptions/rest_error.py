"""REST error value object.

A ``RestError`` describes a failed request: the HTTP status plus optional
application code, user message, developer message and a documentation URL.
It is built once per request by a resolver and never mutated afterwards.

Usage:
    error = RestError(
        status=404,
        code=1402,
        message="Unable to find user with username 'foo'",
        more_info_url="https://example.com/errors/1402",
    )
"""

from http import HTTPStatus
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class RestError(BaseModel):
    """Immutable description of a REST error response."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    status: int = Field(ge=100, le=599, description="HTTP status code")
    code: int | None = Field(default=None, description="Application specific error code, unset when <= 0")
    message: str | None = Field(default=None, description="User facing error message")
    developer_message: str | None = Field(
        default=None, description="Internal message, not guaranteed safe for end users"
    )
    more_info_url: str | None = Field(
        default=None, description="URL of documentation describing the error"
    )

    @field_validator("code")
    @classmethod
    def _unset_non_positive_code(cls, value: int | None) -> int | None:
        if value is not None and value <= 0:
            return None
        return value

    @property
    def reason(self) -> str | None:
        """Standard reason phrase for the status, e.g. ``"Not Found"``."""
        try:
            return HTTPStatus(self.status).phrase
        except ValueError:
            return None

    def with_message(self, message: str | None) -> "RestError":
        return self.model_copy(update={"message": message})

    def with_developer_message(self, developer_message: str | None) -> "RestError":
        return self.model_copy(update={"developer_message": developer_message})

    def to_dict(self) -> dict[str, Any]:
        """Alias keyed representation without unset fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
