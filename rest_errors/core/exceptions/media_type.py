"""Media types and ``Accept`` header handling for content negotiation."""

from typing import NamedTuple

WILDCARD = "*"
DEFAULT_CHARSET = "utf-8"


class MediaType(NamedTuple):
    """A ``type/subtype;param=value`` media type."""

    type: str
    subtype: str
    params: tuple[tuple[str, str], ...] = ()

    @classmethod
    def parse(cls, value: str) -> "MediaType":
        """Parse a single media type.

        Raises:
            ValueError: if the value is not of the form ``type/subtype``
        """
        full_type, *raw_params = value.split(";")
        full_type = full_type.strip()
        if full_type == WILDCARD:
            full_type = "*/*"

        main_type, sep, subtype = full_type.partition("/")
        main_type, subtype = main_type.strip().lower(), subtype.strip().lower()
        if not sep or not main_type or not subtype or "/" in subtype:
            msg = f"Invalid media type: '{value}'"
            raise ValueError(msg)
        if main_type == WILDCARD and subtype != WILDCARD:
            msg = f"Wildcard type is legal only in '*/*': '{value}'"
            raise ValueError(msg)

        params: list[tuple[str, str]] = []
        for raw_param in raw_params:
            name, sep, param_value = raw_param.partition("=")
            if not sep or not name.strip():
                continue
            params.append((name.strip().lower(), param_value.strip().strip('"')))

        return cls(main_type, subtype, tuple(params))

    def param(self, name: str) -> str | None:
        for key, value in self.params:
            if key == name:
                return value
        return None

    def with_params(self, **params: str) -> "MediaType":
        merged = dict(self.params)
        merged.update(params)
        return MediaType(self.type, self.subtype, tuple(merged.items()))

    @property
    def quality(self) -> float:
        raw = self.param("q")
        if raw is None:
            return 1.0
        try:
            value = float(raw)
        except ValueError:
            return 0.0
        return min(max(value, 0.0), 1.0)

    @property
    def charset(self) -> str | None:
        return self.param("charset")

    @property
    def is_wildcard_type(self) -> bool:
        return self.type == WILDCARD

    @property
    def is_wildcard_subtype(self) -> bool:
        return self.subtype == WILDCARD or self.subtype.startswith("*+")

    @property
    def is_concrete(self) -> bool:
        return not self.is_wildcard_type and not self.is_wildcard_subtype

    @property
    def suffix(self) -> str | None:
        _, plus, suffix = self.subtype.partition("+")
        return suffix if plus else None

    def includes(self, other: "MediaType") -> bool:
        """Whether ``other`` is covered by this type, e.g. ``text/*`` includes ``text/plain``."""
        if self.is_wildcard_type:
            return True
        if self.type != other.type:
            return False
        if self.subtype == other.subtype or self.subtype == WILDCARD:
            return True
        # application/*+json includes application/problem+json
        if self.subtype.startswith("*+"):
            return other.suffix == self.subtype[2:] or other.subtype == self.subtype[2:]
        return False

    def is_compatible_with(self, other: "MediaType") -> bool:
        return self.includes(other) or other.includes(self)

    def __str__(self) -> str:
        rendered = f"{self.type}/{self.subtype}"
        for name, value in self.params:
            rendered += f";{name}={value}"
        return rendered


ALL = MediaType("*", "*")
APPLICATION_JSON = MediaType("application", "json")
APPLICATION_XML = MediaType("application", "xml")
TEXT_XML = MediaType("text", "xml")
TEXT_PLAIN = MediaType("text", "plain")
APPLICATION_OCTET_STREAM = MediaType("application", "octet-stream")
APPLICATION_FORM_URLENCODED = MediaType("application", "x-www-form-urlencoded")


def _specificity(media_type: MediaType) -> tuple[int, int, int]:
    return (
        1 if media_type.is_wildcard_type else 0,
        1 if media_type.is_wildcard_subtype else 0,
        -len([name for name, _ in media_type.params if name != "q"]),
    )


def sort_by_quality(media_types: list[MediaType]) -> list[MediaType]:
    """Most preferred first: higher ``q``, then more specific types."""
    return sorted(media_types, key=lambda mt: (-mt.quality, *_specificity(mt)))


def parse_accept(header: str | None) -> list[MediaType]:
    """Parse an ``Accept`` header, skipping malformed entries."""
    if not header:
        return []

    media_types: list[MediaType] = []
    for entry in header.split(","):
        if not entry.strip():
            continue
        try:
            media_types.append(MediaType.parse(entry))
        except ValueError:
            continue
    return media_types
