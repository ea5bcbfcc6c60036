"""Exceptions that carry their own REST error details.

Raising one of these from a route skips the resolver's mapping table: the
exception already knows its status, code and messages.

Exception Hierarchy:
    AppError (HTTPException)
    ├── ClientError (4xx errors)
    │   ├── BadRequestError (400)
    │   ├── UnauthorizedError (401)
    │   ├── ForbiddenError (403)
    │   ├── NotFoundError (404)
    │   ├── ConflictError (409)
    │   └── UnprocessableEntityError (422)
    └── ServerError (5xx errors)
        ├── InternalServerError (500)
        ├── NotImplementedAppError (501)
        └── ServiceUnavailableError (503)

Usage:
    # Option 1: Pass individual parameters
    raise NotFoundError(
        message="User not found",
        code=1402,
        more_info_url="https://example.com/errors/1402",
    )

    # Option 2: Pass a RestError directly (its status wins)
    raise NotFoundError(RestError(status=410, message="User was deleted"))
"""

from fastapi import HTTPException, status

from .rest_error import RestError


class AppError(HTTPException):
    """Base exception for all application HTTP errors."""

    default_message = "An error occurred"

    def __init__(
        self,
        message: str | RestError | None = None,
        code: int | None = None,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        developer_message: str | None = None,
        more_info_url: str | None = None,
    ) -> None:
        # Handle RestError object
        if isinstance(message, RestError):
            error = message
            self.message = error.message
            self.code = error.code
            self.developer_message = error.developer_message
            self.more_info_url = error.more_info_url
            actual_status_code = error.status
        else:
            self.message = message if message is not None else self.default_message
            self.code = code
            self.developer_message = developer_message
            self.more_info_url = more_info_url
            actual_status_code = status_code

        super().__init__(status_code=actual_status_code, detail=self.message)

    def to_rest_error(self) -> RestError:
        """Convert exception to a RestError.

        Returns:
            RestError built from this exception's status and details
        """
        return RestError(
            status=self.status_code,
            code=self.code,
            message=self.message,
            developer_message=self.developer_message,
            more_info_url=self.more_info_url,
        )


# ============================================================================
# Client Exceptions (4xx)
# ============================================================================


class ClientError(AppError):
    """Base exception for client errors (4xx)."""

    default_message = "Client error"

    def __init__(
        self,
        message: str | RestError | None = None,
        code: int | None = None,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        developer_message: str | None = None,
        more_info_url: str | None = None,
    ) -> None:
        super().__init__(message, code, status_code, developer_message, more_info_url)


class _FixedStatusClientError(ClientError):
    status_code_value: int = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str | RestError | None = None,
        code: int | None = None,
        developer_message: str | None = None,
        more_info_url: str | None = None,
    ) -> None:
        super().__init__(message, code, self.status_code_value, developer_message, more_info_url)


class BadRequestError(_FixedStatusClientError):
    """400 Bad Request - Invalid request parameters."""

    default_message = "Bad request"
    status_code_value = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(_FixedStatusClientError):
    """401 Unauthorized - Authentication required."""

    default_message = "Unauthorized"
    status_code_value = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(_FixedStatusClientError):
    """403 Forbidden - Insufficient permissions."""

    default_message = "Forbidden"
    status_code_value = status.HTTP_403_FORBIDDEN


class NotFoundError(_FixedStatusClientError):
    """404 Not Found - Resource does not exist."""

    default_message = "Not found"
    status_code_value = status.HTTP_404_NOT_FOUND


class ConflictError(_FixedStatusClientError):
    """409 Conflict - Resource already exists or state conflict."""

    default_message = "Conflict"
    status_code_value = status.HTTP_409_CONFLICT


class UnprocessableEntityError(_FixedStatusClientError):
    """422 Unprocessable Entity - Validation error."""

    default_message = "Unprocessable entity"
    status_code_value = 422


# ============================================================================
# Server Exceptions (5xx)
# ============================================================================


class ServerError(AppError):
    """Base exception for server errors (5xx)."""

    default_message = "Server error"


class _FixedStatusServerError(ServerError):
    status_code_value: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str | RestError | None = None,
        code: int | None = None,
        developer_message: str | None = None,
        more_info_url: str | None = None,
    ) -> None:
        super().__init__(message, code, self.status_code_value, developer_message, more_info_url)


class InternalServerError(_FixedStatusServerError):
    """500 Internal Server Error - Unexpected server error."""

    default_message = "Internal server error"
    status_code_value = status.HTTP_500_INTERNAL_SERVER_ERROR


class NotImplementedAppError(_FixedStatusServerError):
    """501 Not Implemented - Feature not yet implemented."""

    default_message = "Not implemented"
    status_code_value = status.HTTP_501_NOT_IMPLEMENTED


class ServiceUnavailableError(_FixedStatusServerError):
    """503 Service Unavailable - Service temporarily unavailable."""

    default_message = "Service unavailable"
    status_code_value = status.HTTP_503_SERVICE_UNAVAILABLE
