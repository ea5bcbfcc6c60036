"""Conversion of ``RestError`` instances into renderable bodies.

A converter is the bridge between a resolved ``RestError`` and the message
writers: it produces an object (by default an ordered ``dict``) that the
JSON / XML / form writers already know how to serialize.

Default map produced by ``MapRestErrorConverter``:

    key                 value                   notes
    status              error.status            always present
    code                error.code              only if code > 0
    message             error.message           only if not None
    developerMessage    error.developer_message only if not None
    moreInfoUrl         error.more_info_url     only if not None

Key names are configurable through ``ErrorKeyNames``.
"""

from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from .rest_error import RestError


@runtime_checkable
class RestErrorConverter(Protocol):
    """Turns a ``RestError`` into an object suited for a message writer."""

    def convert(self, error: RestError) -> Any: ...


class ErrorKeyNames(BaseModel):
    """Key names used by ``MapRestErrorConverter``."""

    model_config = ConfigDict(frozen=True)

    status_key: str = "status"
    code_key: str = "code"
    message_key: str = "message"
    developer_message_key: str = "developerMessage"
    more_info_url_key: str = "moreInfoUrl"


class MapRestErrorConverter:
    """Converts a ``RestError`` into an insertion ordered ``dict``."""

    def __init__(self, key_names: ErrorKeyNames | None = None) -> None:
        self.key_names = key_names or ErrorKeyNames()

    def convert(self, error: RestError) -> dict[str, Any]:
        keys = self.key_names
        result = self.create_map()
        result[keys.status_key] = error.status

        if error.code is not None and error.code > 0:
            result[keys.code_key] = error.code

        if error.message is not None:
            result[keys.message_key] = error.message

        if error.developer_message is not None:
            result[keys.developer_message_key] = error.developer_message

        if error.more_info_url is not None:
            result[keys.more_info_url_key] = error.more_info_url

        return result

    def create_map(self) -> dict[str, Any]:
        """Return the empty mapping to populate. Override for another mapping type."""
        return {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(key_names={self.key_names!r})"
