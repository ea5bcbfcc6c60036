"""Exception handlers for FastAPI application.

``RestExceptionHandler`` turns any exception escaping a route into a REST
error response:

1. check the handler applies to the executing endpoint
2. resolve the exception into a ``RestError`` (``RestErrorResolver``)
3. apply the error status (skipped for include sub-requests)
4. convert the error into a body (``RestErrorConverter``)
5. negotiate the ``Accept`` header against the ordered message writers

Returning ``None`` from ``resolve_exception`` means "not handled": the
exception is left to FastAPI's own default handlers (``HTTPException``,
``RequestValidationError``) or to Starlette's plain ``500`` response.
"""

import logging
from collections.abc import Collection, Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from fastapi import Request
from fastapi.exception_handlers import (
    http_exception_handler,
    request_validation_exception_handler,
)
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .converter import ErrorKeyNames, MapRestErrorConverter, RestErrorConverter
from .media_type import ALL, MediaType, parse_accept, sort_by_quality
from .resolver import (
    DefaultRestErrorResolver,
    ErrorRule,
    ErrorTemplate,
    ExceptionKey,
    RestErrorResolver,
)
from .rest_error import RestError
from .writers import HttpOutputMessage, MessageWriter, default_writers

if TYPE_CHECKING:
    from rest_errors.main_config import RestErrorConfig

logger = logging.getLogger(__name__)

INCLUDE_REQUEST_URI_ATTRIBUTE = "include_request_uri"

_DEFAULT_CONVERTER: Any = object()


def is_include_request(request: Request) -> bool:
    """Whether the request is a nested include pass (its status belongs to the outer request)."""
    return getattr(request.state, INCLUDE_REQUEST_URI_ATTRIBUTE, None) is not None


class RestExceptionHandler:
    """Renders exceptions as REST error bodies through content negotiation.

    Configured once at startup; nothing is mutated while handling requests.

    Args:
        resolver: maps exceptions to ``RestError`` (``DefaultRestErrorResolver`` if omitted)
        converter: turns the ``RestError`` into the body; ``None`` writes the raw error
        writers: writers tried before the default ones
        register_default_writers: append ``default_writers()`` after ``writers``
        mapped_handlers: endpoints this handler applies to (all when empty)
        prevent_response_caching: add ``Cache-Control: no-store`` to error responses
    """

    def __init__(
        self,
        resolver: RestErrorResolver | None = None,
        converter: RestErrorConverter | None = _DEFAULT_CONVERTER,
        writers: Iterable[MessageWriter] = (),
        register_default_writers: bool = True,
        mapped_handlers: Collection[Any] = (),
        prevent_response_caching: bool = False,
    ) -> None:
        self.resolver = resolver if resolver is not None else DefaultRestErrorResolver()
        self.converter = MapRestErrorConverter() if converter is _DEFAULT_CONVERTER else converter

        all_writers = list(writers)
        if register_default_writers:
            all_writers.extend(default_writers())
        self.writers: tuple[MessageWriter, ...] = tuple(all_writers)

        self.mapped_handlers = frozenset(mapped_handlers)
        self.prevent_response_caching = prevent_response_caching

    @classmethod
    def from_config(
        cls,
        config: "RestErrorConfig",
        exception_mappings: Mapping[ExceptionKey, ErrorTemplate] | None = None,
        rules: Sequence[ErrorRule] = (),
        writers: Iterable[MessageWriter] = (),
        mapped_handlers: Collection[Any] = (),
    ) -> "RestExceptionHandler":
        """Build a handler from ``RestErrorConfig`` settings.

        Args:
            config: settings loaded at startup
            exception_mappings: exception -> status / template / definition string
            rules: predicate based mappings
            writers: writers tried before the default ones
            mapped_handlers: endpoints this handler applies to (all when empty)

        Returns:
            Configured handler
        """
        resolver = DefaultRestErrorResolver(
            exception_mappings=exception_mappings,
            rules=rules,
            default_status=config.default_status,
            default_message=config.default_message,
            default_handling=config.default_handling,
        )
        converter = MapRestErrorConverter(
            ErrorKeyNames(
                status_key=config.status_key,
                code_key=config.code_key,
                message_key=config.message_key,
                developer_message_key=config.developer_message_key,
                more_info_url_key=config.more_info_url_key,
            )
        )

        all_writers = list(writers)
        if config.register_default_writers:
            all_writers.extend(
                default_writers(
                    json_pretty_print=config.json_pretty_print,
                    json_prefix=config.json_prefix,
                    xml_root_element=config.xml_root_element,
                )
            )

        return cls(
            resolver=resolver,
            converter=converter,
            writers=all_writers,
            register_default_writers=False,
            mapped_handlers=mapped_handlers,
            prevent_response_caching=config.prevent_response_caching,
        )

    def should_apply_to(self, request: Request, handler: Any | None) -> bool:
        if not self.mapped_handlers:
            return True
        return handler is not None and handler in self.mapped_handlers

    def resolve_exception(
        self, request: Request, exc: BaseException, handler: Any | None = None
    ) -> Response | None:
        """Render ``exc`` as a REST error response.

        Args:
            request: current request
            exc: exception raised while handling the request
            handler: executing endpoint; read from the request scope if omitted

        Returns:
            The rendered response, or ``None`` when the exception is not handled
        """
        if handler is None:
            handler = request.scope.get("endpoint")

        if not self.should_apply_to(request, handler):
            return None

        try:
            error = self.resolver.resolve_error(request, handler, exc)
        except Exception:
            logger.error("Resolving RestError for exception [%r] failed", exc, exc_info=True)
            return None

        if error is None:
            return None

        try:
            return self._render(request, exc, error)
        except Exception:
            logger.error(
                "Rendering error response for exception [%r] resulted in an exception",
                exc,
                exc_info=True,
            )
            return None

    def _render(self, request: Request, exc: BaseException, error: RestError) -> Response | None:
        output = HttpOutputMessage()
        self._apply_status_if_possible(request, output, error)

        if isinstance(exc, StarletteHTTPException) and exc.headers:
            output.headers.update(exc.headers)
        if self.prevent_response_caching:
            output.headers["cache-control"] = "no-store"

        # Raw error unless a converter is configured
        body: Any = error
        if self.converter is not None:
            body = self.converter.convert(error)

        return self._write_body(body, request, output)

    def _apply_status_if_possible(
        self, request: Request, output: HttpOutputMessage, error: RestError
    ) -> None:
        if is_include_request(request):
            logger.debug("Include request, leaving response status unchanged")
            return
        output.status_code = error.status

    def _accepted_media_types(self, request: Request) -> list[MediaType]:
        accepted = parse_accept(request.headers.get("accept"))
        if not accepted:
            return [ALL]
        return sort_by_quality([mt for mt in accepted if mt.quality > 0])

    def _write_body(
        self, body: Any, request: Request, output: HttpOutputMessage
    ) -> Response | None:
        accepted = self._accepted_media_types(request)
        body_type = type(body)

        for media_type in accepted:
            for writer in self.writers:
                if writer.can_write(body_type, media_type):
                    writer.write(body, media_type, output)
                    return output.to_response()

        logger.warning(
            "Could not find a message writer that supports body type [%s] and %s",
            body_type.__name__,
            [str(mt) for mt in accepted],
        )
        return None


class RestExceptionMiddleware:
    """Renders exceptions that FastAPI's exception middleware let through.

    Runs inside Starlette's ``ServerErrorMiddleware``, so a handled
    exception ends with the error response and is not re-raised. When the
    handler declines, or the response has already started, the exception
    propagates to the server error middleware (plain ``500``).
    """

    def __init__(self, app: ASGIApp, handler: RestExceptionHandler) -> None:
        self.app = app
        self.handler = handler

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            if response_started:
                raise

            response = self.handler.resolve_exception(Request(scope, receive), exc)
            if response is None:
                raise
            await response(scope, receive, send)


async def _framework_default_response(
    request: Request, exc: StarletteHTTPException | RequestValidationError
) -> Response:
    if isinstance(exc, RequestValidationError):
        return await request_validation_exception_handler(request, exc)
    return await http_exception_handler(request, exc)


def register_exception_handlers(app: Any, handler: RestExceptionHandler | None = None) -> None:
    """Register the REST exception handler with FastAPI app.

    ``HTTPException`` and ``RequestValidationError`` go through FastAPI's
    exception handlers; every other exception is rendered by
    ``RestExceptionMiddleware``.

    Args:
        app: FastAPI application instance
        handler: configured handler (a default one if omitted)
    """
    rest_handler = handler if handler is not None else RestExceptionHandler()

    async def rest_exception_handler(request: Request, exc: Exception) -> Response:
        response = rest_handler.resolve_exception(request, exc)
        if response is None:
            return await _framework_default_response(request, exc)  # type: ignore[arg-type]
        return response

    app.add_exception_handler(StarletteHTTPException, rest_exception_handler)
    app.add_exception_handler(RequestValidationError, rest_exception_handler)
    app.add_middleware(RestExceptionMiddleware, handler=rest_handler)
    app.state.rest_exception_handler = rest_handler
