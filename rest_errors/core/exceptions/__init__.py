"""Exception handling package for FastAPI application.

Resolves exceptions into ``RestError`` instances and renders them as
content-negotiated REST error responses.
"""

from .converter import ErrorKeyNames, MapRestErrorConverter, RestErrorConverter
from .handlers import (
    INCLUDE_REQUEST_URI_ATTRIBUTE,
    RestExceptionHandler,
    RestExceptionMiddleware,
    is_include_request,
    register_exception_handlers,
)
from .http_exceptions import (
    AppError,
    BadRequestError,
    ClientError,
    ConflictError,
    ForbiddenError,
    InternalServerError,
    NotFoundError,
    NotImplementedAppError,
    ServerError,
    ServiceUnavailableError,
    UnauthorizedError,
    UnprocessableEntityError,
)
from .media_type import MediaType, parse_accept, sort_by_quality
from .resolver import (
    EXCEPTION_MESSAGE_PLACEHOLDER,
    DefaultRestErrorResolver,
    ErrorRule,
    RestErrorResolver,
    parse_error_definition,
)
from .rest_error import RestError
from .writers import (
    BytesMessageWriter,
    FormMessageWriter,
    HttpOutputMessage,
    JsonMessageWriter,
    MessageWriter,
    StringMessageWriter,
    XmlMessageWriter,
    default_writers,
)

__all__ = [
    # Base exceptions
    "AppError",
    # Client exceptions (4xx)
    "BadRequestError",
    # Writers
    "BytesMessageWriter",
    "ClientError",
    "ConflictError",
    # Resolver
    "DefaultRestErrorResolver",
    "EXCEPTION_MESSAGE_PLACEHOLDER",
    # Converter
    "ErrorKeyNames",
    "ErrorRule",
    "ForbiddenError",
    "FormMessageWriter",
    "HttpOutputMessage",
    # Handler
    "INCLUDE_REQUEST_URI_ATTRIBUTE",
    # Server Error (5xx)
    "InternalServerError",
    "JsonMessageWriter",
    "MapRestErrorConverter",
    # Negotiation
    "MediaType",
    "MessageWriter",
    "NotFoundError",
    "NotImplementedAppError",
    # Models
    "RestError",
    "RestErrorConverter",
    "RestErrorResolver",
    "RestExceptionHandler",
    "RestExceptionMiddleware",
    "ServerError",
    "ServiceUnavailableError",
    "StringMessageWriter",
    "UnauthorizedError",
    "UnprocessableEntityError",
    "XmlMessageWriter",
    "default_writers",
    "is_include_request",
    "parse_accept",
    "parse_error_definition",
    "register_exception_handlers",
    "sort_by_quality",
]
