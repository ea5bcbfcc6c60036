"""Message writers used to render error bodies.

A writer declares which body types and media types it can serialize
(``can_write``) and writes the serialized body plus ``Content-Type`` into a
buffered ``HttpOutputMessage`` (``write``). ``RestExceptionHandler`` picks
the first writer able to handle the negotiated media type.

Writers shipped here:
    BytesMessageWriter   bytes                 application/octet-stream, */*
    StringMessageWriter  str                   text/plain, */*
    JsonMessageWriter    dicts, lists, models  application/json, application/*+json
    XmlMessageWriter     dicts, models         application/xml, text/xml, application/*+xml
    FormMessageWriter    flat dicts            application/x-www-form-urlencoded
"""

import json
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any
from urllib.parse import urlencode

from pydantic import BaseModel
from starlette.responses import Response

from .media_type import (
    ALL,
    APPLICATION_FORM_URLENCODED,
    APPLICATION_JSON,
    APPLICATION_OCTET_STREAM,
    APPLICATION_XML,
    DEFAULT_CHARSET,
    TEXT_PLAIN,
    TEXT_XML,
    MediaType,
)
from .rest_error import RestError

_JSON_SCALARS = (str, int, float, bool, type(None))


def _model_to_dict(model: BaseModel) -> dict[str, Any]:
    if isinstance(model, RestError):
        return model.to_dict()
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


class HttpOutputMessage:
    """Buffered outgoing response. Nothing is sent until ``to_response()``."""

    def __init__(self, status_code: int = 200) -> None:
        self.status_code = status_code
        self.headers: dict[str, str] = {}
        self._body = bytearray()

    @property
    def body(self) -> bytes:
        return bytes(self._body)

    def write(self, data: bytes) -> None:
        self._body.extend(data)

    def to_response(self) -> Response:
        return Response(content=self.body, status_code=self.status_code, headers=self.headers)


class MessageWriter(ABC):
    """Serializes a body object as one of its supported media types."""

    supported_media_types: tuple[MediaType, ...] = ()

    @abstractmethod
    def supports(self, body_type: type) -> bool:
        """Whether bodies of ``body_type`` can be serialized at all."""

    @abstractmethod
    def serialize(self, body: Any, content_type: MediaType) -> bytes:
        """Serialize ``body`` for ``content_type``."""

    @property
    def default_content_type(self) -> MediaType:
        return self.supported_media_types[0]

    def can_write(self, body_type: type, media_type: MediaType | None) -> bool:
        return self.supports(body_type) and self._can_write_media_type(media_type)

    def _can_write_media_type(self, media_type: MediaType | None) -> bool:
        if media_type is None or media_type == ALL:
            return True
        return any(supported.is_compatible_with(media_type) for supported in self.supported_media_types)

    def write(self, body: Any, media_type: MediaType | None, output: HttpOutputMessage) -> None:
        content_type = self._content_type_for(media_type)
        output.headers["content-type"] = str(content_type)
        output.write(self.serialize(body, content_type))

    def _content_type_for(self, media_type: MediaType | None) -> MediaType:
        content_type = self.default_content_type
        if media_type is not None and media_type.is_concrete:
            content_type = media_type
        content_type = MediaType(
            content_type.type,
            content_type.subtype,
            tuple((name, value) for name, value in content_type.params if name != "q"),
        )
        if content_type.charset is None and self._is_textual(content_type):
            content_type = content_type.with_params(charset=DEFAULT_CHARSET)
        return content_type

    def _is_textual(self, content_type: MediaType) -> bool:
        return True

    @staticmethod
    def _encoding(content_type: MediaType) -> str:
        return content_type.charset or DEFAULT_CHARSET

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class BytesMessageWriter(MessageWriter):
    supported_media_types = (APPLICATION_OCTET_STREAM, ALL)

    def supports(self, body_type: type) -> bool:
        return issubclass(body_type, (bytes, bytearray))

    def serialize(self, body: Any, content_type: MediaType) -> bytes:
        return bytes(body)

    def _is_textual(self, content_type: MediaType) -> bool:
        return False


class StringMessageWriter(MessageWriter):
    supported_media_types = (TEXT_PLAIN, ALL)

    def supports(self, body_type: type) -> bool:
        return issubclass(body_type, str)

    def serialize(self, body: Any, content_type: MediaType) -> bytes:
        return body.encode(self._encoding(content_type))


class JsonMessageWriter(MessageWriter):
    """JSON writer.

    Args:
        pretty_print: indent output by two spaces
        prefix_json: prefix output with ``{} && `` so the response can not be
            evaluated as a script (JSON hijacking protection)
    """

    supported_media_types = (APPLICATION_JSON, MediaType("application", "*+json"))

    def __init__(self, pretty_print: bool = False, prefix_json: bool = False) -> None:
        self.pretty_print = pretty_print
        self.prefix_json = prefix_json

    def supports(self, body_type: type) -> bool:
        if issubclass(body_type, (bytes, bytearray)):
            return False
        return issubclass(body_type, (Mapping, Sequence, BaseModel, *_JSON_SCALARS))

    def serialize(self, body: Any, content_type: MediaType) -> bytes:
        if isinstance(body, BaseModel):
            body = _model_to_dict(body)

        text = json.dumps(
            body,
            ensure_ascii=False,
            indent=2 if self.pretty_print else None,
            separators=None if self.pretty_print else (",", ":"),
        )
        if self.prefix_json:
            text = "{} && " + text
        return text.encode(self._encoding(content_type))

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(pretty_print={self.pretty_print}, "
            f"prefix_json={self.prefix_json})"
        )


class XmlMessageWriter(MessageWriter):
    """Writes mappings as ``<root><key>value</key>...</root>``."""

    supported_media_types = (
        APPLICATION_XML,
        TEXT_XML,
        MediaType("application", "*+xml"),
    )

    def __init__(self, root_element: str = "error") -> None:
        self.root_element = root_element

    def supports(self, body_type: type) -> bool:
        return issubclass(body_type, (Mapping, BaseModel))

    def serialize(self, body: Any, content_type: MediaType) -> bytes:
        if isinstance(body, BaseModel):
            body = _model_to_dict(body)

        root = ET.Element(self.root_element)
        self._append(root, body)
        return ET.tostring(root, encoding=self._encoding(content_type), xml_declaration=True)

    def _append(self, parent: ET.Element, value: Any) -> None:
        if isinstance(value, Mapping):
            for key, item in value.items():
                self._append(ET.SubElement(parent, str(key)), item)
        elif isinstance(value, Sequence) and not isinstance(value, str):
            for item in value:
                self._append(ET.SubElement(parent, "item"), item)
        elif isinstance(value, bool):
            parent.text = "true" if value else "false"
        elif value is not None:
            parent.text = str(value)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(root_element={self.root_element!r})"


class FormMessageWriter(MessageWriter):
    supported_media_types = (APPLICATION_FORM_URLENCODED,)

    def supports(self, body_type: type) -> bool:
        return issubclass(body_type, Mapping)

    def serialize(self, body: Any, content_type: MediaType) -> bytes:
        return urlencode(
            [(str(key), "" if value is None else str(value)) for key, value in body.items()],
            encoding=self._encoding(content_type),
        ).encode("ascii")


def default_writers(
    json_pretty_print: bool = False,
    json_prefix: bool = False,
    xml_root_element: str = "error",
) -> list[MessageWriter]:
    """Default writer chain, in selection order."""
    return [
        BytesMessageWriter(),
        StringMessageWriter(),
        JsonMessageWriter(pretty_print=json_pretty_print, prefix_json=json_prefix),
        XmlMessageWriter(root_element=xml_root_element),
        FormMessageWriter(),
    ]
