"""Resolution of exceptions into ``RestError`` instances.

``DefaultRestErrorResolver`` resolves an exception in this order:

1. Walk the exception's MRO from the most derived class to ``object``.
   At every level the first matching rule registered for that class wins,
   then a plain mapping for that class (by class object, dotted name or
   simple name). Exceptions that carry their own status (``AppError``,
   ``HTTPException``) are resolved at their own level of the walk, so a
   broad ``Exception`` mapping never hides them.
2. Fall back to the configured default status (500) when nothing matched.
3. Return ``None`` only when default handling is disabled.

Mapping values can be an ``int`` status, a ``RestError`` template or a
definition string such as ``"404, code=1402, msg=_exmsg"``.
"""

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any, NamedTuple, Protocol, runtime_checkable

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .http_exceptions import AppError
from .rest_error import RestError

logger = logging.getLogger(__name__)

EXCEPTION_MESSAGE_PLACEHOLDER = "_exmsg"

ExceptionKey = type[BaseException] | str
ErrorTemplate = int | str | RestError

DEFAULT_EXCEPTION_MAPPINGS: dict[ExceptionKey, ErrorTemplate] = {
    RequestValidationError: RestError(status=422, message="Request validation failed"),
    NotImplementedError: status.HTTP_501_NOT_IMPLEMENTED,
}

_DEFINITION_KEYS = {
    "status": "status",
    "code": "code",
    "msg": "message",
    "devmsg": "developer_message",
    "infourl": "more_info_url",
}


@runtime_checkable
class RestErrorResolver(Protocol):
    """Produces a ``RestError`` for an exception, or ``None`` for default processing."""

    def resolve_error(
        self, request: Request, handler: Any | None, exc: BaseException
    ) -> RestError | None: ...


class ErrorRule(NamedTuple):
    """A mapping that only applies when ``predicate(exc)`` is true."""

    exception_type: type[BaseException]
    predicate: Callable[[BaseException], bool]
    template: ErrorTemplate


def parse_error_definition(definition: str) -> RestError:
    """Parse a definition string into a ``RestError`` template.

    Tokens are comma separated. ``status=``, ``code=``, ``msg=``, ``devMsg=``
    and ``infoUrl=`` set the matching field; a bare integer is the status and
    a bare word is the message.

    Raises:
        ValueError: if the definition has no status or an unknown key
    """
    values: dict[str, Any] = {}

    for raw_token in definition.split(","):
        token = raw_token.strip()
        if not token:
            continue

        name, sep, value = token.partition("=")
        if sep:
            field = _DEFINITION_KEYS.get(name.strip().lower())
            if field is None:
                msg = f"Unknown key '{name.strip()}' in error definition '{definition}'"
                raise ValueError(msg)
            values[field] = value.strip()
        elif token.isdigit() and "status" not in values:
            values["status"] = token
        else:
            values["message"] = token

    if "status" not in values:
        msg = f"Error definition '{definition}' does not specify a status"
        raise ValueError(msg)

    return RestError.model_validate(values)


def _to_template(value: ErrorTemplate) -> RestError:
    if isinstance(value, RestError):
        return value
    if isinstance(value, bool):
        msg = f"Invalid error template: {value!r}"
        raise TypeError(msg)
    if isinstance(value, int):
        return RestError(status=value)
    if isinstance(value, str):
        return parse_error_definition(value)
    msg = f"Invalid error template: {value!r}"
    raise TypeError(msg)


def exception_message(exc: BaseException) -> str | None:
    """The exception's own message text, ``None`` when it has none."""
    if isinstance(exc, AppError):
        return exc.message or None
    if isinstance(exc, StarletteHTTPException):
        return exc.detail if isinstance(exc.detail, str) and exc.detail else None
    text = str(exc)
    return text or None


class DefaultRestErrorResolver:
    """Mapping-table based ``RestErrorResolver``."""

    def __init__(
        self,
        exception_mappings: Mapping[ExceptionKey, ErrorTemplate] | None = None,
        rules: Sequence[ErrorRule] = (),
        default_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        default_message: str | None = None,
        default_handling: bool = True,
        include_default_mappings: bool = True,
    ) -> None:
        mappings: dict[ExceptionKey, ErrorTemplate] = {}
        if include_default_mappings:
            mappings.update(DEFAULT_EXCEPTION_MAPPINGS)
        if exception_mappings:
            mappings.update(exception_mappings)

        self._class_mappings: dict[type[BaseException], RestError] = {}
        self._name_mappings: dict[str, RestError] = {}
        for key, value in mappings.items():
            template = _to_template(value)
            if isinstance(key, str):
                self._name_mappings[key] = template
            else:
                self._class_mappings[key] = template

        self._rules: dict[type[BaseException], list[tuple[Callable[[BaseException], bool], RestError]]] = {}
        for rule in rules:
            self._rules.setdefault(rule.exception_type, []).append(
                (rule.predicate, _to_template(rule.template))
            )

        self.default_error = RestError(status=default_status, message=default_message)
        self.default_handling = default_handling

    def resolve_error(
        self, request: Request, handler: Any | None, exc: BaseException
    ) -> RestError | None:
        try:
            error = self._lookup(exc)
        except Exception:
            logger.error(
                "Error mapping lookup failed for %s, using default status %s",
                type(exc).__name__,
                self.default_error.status,
                exc_info=True,
            )
            return self.default_error

        if error is not None:
            return error

        if not self.default_handling:
            logger.debug("No mapping for %s and default handling is disabled", type(exc).__name__)
            return None

        return self.default_error

    def _lookup(self, exc: BaseException) -> RestError | None:
        for cls in type(exc).__mro__:
            for predicate, template in self._rules.get(cls, ()):
                if predicate(exc):
                    return self._apply_template(template, exc)

            template = self._template_for(cls)
            if template is not None:
                return self._apply_template(template, exc)

            if cls is AppError:
                return exc.to_rest_error()  # type: ignore[attr-defined]
            if cls is StarletteHTTPException:
                error = RestError(status=exc.status_code)  # type: ignore[attr-defined]
                return error.with_message(exception_message(exc) or error.reason)

        return None

    def _template_for(self, cls: type) -> RestError | None:
        template = self._class_mappings.get(cls)
        if template is None and self._name_mappings:
            template = self._name_mappings.get(f"{cls.__module__}.{cls.__qualname__}")
            if template is None:
                template = self._name_mappings.get(cls.__name__)
        return template

    def _apply_template(self, template: RestError, exc: BaseException) -> RestError:
        text = exception_message(exc)
        error = template

        if error.message is None or error.message == EXCEPTION_MESSAGE_PLACEHOLDER:
            error = error.with_message(text)
        if error.developer_message == EXCEPTION_MESSAGE_PLACEHOLDER:
            error = error.with_developer_message(text)

        return error
