"""Test cases for exception handling through a FastAPI application."""

import logging

import pytest
from fastapi import FastAPI, Request, status
from fastapi.testclient import TestClient
from pydantic import BaseModel

from rest_errors.core.exceptions import (
    INCLUDE_REQUEST_URI_ATTRIBUTE,
    BadRequestError,
    ConflictError,
    DefaultRestErrorResolver,
    ForbiddenError,
    InternalServerError,
    NotFoundError,
    RestError,
    RestExceptionHandler,
    UnauthorizedError,
    register_exception_handlers,
)


class NotFoundException(Exception):
    pass


@pytest.fixture
def app() -> FastAPI:
    """Create test FastAPI application."""
    test_app = FastAPI()
    handler = RestExceptionHandler(DefaultRestErrorResolver({NotFoundException: 404}))
    register_exception_handlers(test_app, handler)
    return test_app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def lenient_client(app: FastAPI) -> TestClient:
    """Test client for routes whose exception reaches Starlette's server error middleware."""
    return TestClient(app, raise_server_exceptions=False)


# =============================================================================
# Test Exception Classes with Individual Parameters
# =============================================================================


def test_not_found_error_with_params(app: FastAPI, client: TestClient) -> None:
    """Test NotFoundError with individual parameters."""

    @app.get("/test-not-found")
    async def route():
        raise NotFoundError(
            message="Resource not found",
            code=1001,
            developer_message="id 123 missing",
            more_info_url="https://example.com/errors/1001",
        )

    response = client.get("/test-not-found")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {
        "status": 404,
        "code": 1001,
        "message": "Resource not found",
        "developerMessage": "id 123 missing",
        "moreInfoUrl": "https://example.com/errors/1001",
    }


@pytest.mark.parametrize(
    ("exception", "expected_status", "expected_message"),
    [
        (BadRequestError(message="Invalid input"), status.HTTP_400_BAD_REQUEST, "Invalid input"),
        (UnauthorizedError(), status.HTTP_401_UNAUTHORIZED, "Unauthorized"),
        (ForbiddenError(message="Insufficient permissions"), status.HTTP_403_FORBIDDEN, "Insufficient permissions"),
        (ConflictError(), status.HTTP_409_CONFLICT, "Conflict"),
        (InternalServerError(message="Database error"), status.HTTP_500_INTERNAL_SERVER_ERROR, "Database error"),
    ],
)
def test_app_errors(
    app: FastAPI,
    client: TestClient,
    exception: Exception,
    expected_status: int,
    expected_message: str,
) -> None:
    """Test status and message of the AppError subclasses."""

    @app.get("/test-app-error")
    async def route():
        raise exception

    response = client.get("/test-app-error")

    assert response.status_code == expected_status
    assert response.json() == {"status": expected_status, "message": expected_message}


def test_not_found_error_with_rest_error(app: FastAPI, client: TestClient) -> None:
    """Test NotFoundError with a RestError object."""

    @app.get("/test-rest-error")
    async def route():
        raise NotFoundError(RestError(status=410, code=77, message="User was deleted"))

    response = client.get("/test-rest-error")

    assert response.status_code == status.HTTP_410_GONE
    assert response.json() == {"status": 410, "code": 77, "message": "User was deleted"}


# =============================================================================
# Test Mapped and Unmapped Exceptions
# =============================================================================


def test_mapped_exception_json(app: FastAPI, client: TestClient) -> None:
    """Mapped exception falls back to its own message."""

    @app.get("/test-mapped")
    async def route():
        raise NotFoundException("no such user: djones")

    response = client.get("/test-mapped", headers={"Accept": "application/json"})

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.headers["content-type"] == "application/json;charset=utf-8"
    assert response.text == '{"status":404,"message":"no such user: djones"}'


def test_unmapped_exception_uses_default_status(app: FastAPI, client: TestClient) -> None:
    """Unexpected errors are rendered without leaking their message."""

    @app.get("/test-unexpected")
    async def route():
        msg = "Unexpected error"
        raise ValueError(msg)

    response = client.get("/test-unexpected")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"status": 500}


def test_zero_division_error_handling(app: FastAPI, client: TestClient) -> None:
    """Test handling of ZeroDivisionError."""

    @app.get("/test-zero-division")
    async def route():
        return 1 / 0

    response = client.get("/test-zero-division")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"status": 500}


def test_name_keyed_mapping_is_handled() -> None:
    """Exceptions mapped by class name are rendered and not re-raised."""
    app = FastAPI()
    register_exception_handlers(app, RestExceptionHandler(DefaultRestErrorResolver({"KeyError": 400})))

    @app.get("/test-key-error")
    async def route():
        raise KeyError("missing")

    response = TestClient(app).get("/test-key-error")

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"status": 400, "message": "'missing'"}


def test_declined_exception_reaches_server_error_middleware() -> None:
    app = FastAPI()
    resolver = DefaultRestErrorResolver({"KeyError": 400}, default_handling=False)
    register_exception_handlers(app, RestExceptionHandler(resolver))

    @app.get("/test-declined")
    async def route():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        TestClient(app).get("/test-declined")

    response = TestClient(app, raise_server_exceptions=False).get("/test-declined")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.text == "Internal Server Error"


def test_unknown_route_is_rendered(client: TestClient) -> None:
    """Starlette's own 404 goes through the same pipeline."""
    response = client.get("/does-not-exist")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"status": 404, "message": "Not Found"}


def test_method_not_allowed_keeps_allow_header(app: FastAPI, client: TestClient) -> None:
    @app.get("/test-get-only")
    async def route():
        return {}

    response = client.post("/test-get-only")

    assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
    assert "GET" in response.headers["allow"]
    assert response.json() == {"status": 405, "message": "Method Not Allowed"}


# =============================================================================
# Test Pydantic Validation Error Handler
# =============================================================================


def test_validation_error(app: FastAPI, client: TestClient) -> None:
    """Test request validation error handling."""

    class TestModel(BaseModel):
        name: str
        age: int

    @app.post("/test-validation")
    async def route(data: TestModel):
        return data

    response = client.post("/test-validation", json={"name": "John", "age": "invalid"})

    assert response.status_code == 422
    assert response.json() == {"status": 422, "message": "Request validation failed"}


# =============================================================================
# Test Content Negotiation
# =============================================================================


def test_xml_accepted(app: FastAPI, client: TestClient) -> None:
    @app.get("/test-xml")
    async def route():
        raise NotFoundError(message="Not here")

    response = client.get("/test-xml", headers={"Accept": "application/xml"})

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.headers["content-type"] == "application/xml;charset=utf-8"
    assert "<error><status>404</status><message>Not here</message></error>" in response.text


def test_preferred_type_wins(app: FastAPI, client: TestClient) -> None:
    @app.get("/test-preference")
    async def route():
        raise NotFoundError()

    response = client.get(
        "/test-preference", headers={"Accept": "application/xml;q=0.5, application/json"}
    )

    assert response.headers["content-type"] == "application/json;charset=utf-8"


def test_no_writer_falls_back_to_framework_default(
    app: FastAPI, client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    """A negotiation miss leaves rendering to FastAPI's own handler."""

    @app.get("/test-image")
    async def route():
        raise NotFoundError(message="Not here")

    with caplog.at_level(logging.WARNING):
        response = client.get("/test-image", headers={"Accept": "image/png"})

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"detail": "Not here"}
    assert "Could not find a message writer" in caplog.text


def test_no_writer_for_unexpected_error_returns_plain_500(
    app: FastAPI, lenient_client: TestClient
) -> None:
    @app.get("/test-image-500")
    async def route():
        raise RuntimeError("boom")

    response = lenient_client.get("/test-image-500", headers={"Accept": "image/png"})

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.text == "Internal Server Error"


# =============================================================================
# Test Include Requests
# =============================================================================


def test_include_request_keeps_status(app: FastAPI, client: TestClient) -> None:
    """Nested include passes write the body but leave the status alone."""

    @app.get("/test-include")
    async def route(request: Request):
        setattr(request.state, INCLUDE_REQUEST_URI_ATTRIBUTE, "/fragment")
        raise NotFoundError(message="Not here")

    response = client.get("/test-include")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": 404, "message": "Not here"}


# =============================================================================
# Test Handler Configuration
# =============================================================================


def test_raw_rest_error_without_converter() -> None:
    app = FastAPI()
    register_exception_handlers(app, RestExceptionHandler(converter=None))

    @app.get("/test-raw")
    async def route():
        raise NotFoundError(message="Not here", developer_message="dev")

    response = TestClient(app).get("/test-raw")

    assert response.json() == {"status": 404, "message": "Not here", "developerMessage": "dev"}


def test_prevent_response_caching() -> None:
    app = FastAPI()
    register_exception_handlers(app, RestExceptionHandler(prevent_response_caching=True))

    @app.get("/test-no-cache")
    async def route():
        raise ConflictError()

    response = TestClient(app).get("/test-no-cache")

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.headers["cache-control"] == "no-store"


def test_mapped_handlers_limit_scope() -> None:
    app = FastAPI()

    async def covered():
        raise NotFoundError(message="covered")

    async def not_covered():
        raise NotFoundError(message="not covered")

    app.add_api_route("/covered", covered)
    app.add_api_route("/not-covered", not_covered)
    register_exception_handlers(app, RestExceptionHandler(mapped_handlers={covered}))
    client = TestClient(app)

    assert client.get("/covered").json() == {"status": 404, "message": "covered"}
    assert client.get("/not-covered").json() == {"detail": "not covered"}


def test_default_handler_when_none_given() -> None:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/test-default-handler")
    async def route():
        raise UnauthorizedError()

    response = TestClient(app).get("/test-default-handler")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"status": 401, "message": "Unauthorized"}
    assert isinstance(app.state.rest_exception_handler, RestExceptionHandler)
