"""
Example FastAPI application rendering REST error responses.

This module initializes the FastAPI application with:
- Structured logging with request correlation IDs
- REST exception handling configured from ``REST_ERROR_*`` settings
- Example user lookup routes and a catch-all unknown resource route

Try it:
    curl -i http://localhost:8000/api/users/jsmith
    curl -i http://localhost:8000/api/users/foo
    curl -i -H "Accept: application/xml" http://localhost:8000/api/nothing-here
"""

import uuid

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI

from rest_errors.core import setup_logging
from rest_errors.core.exceptions import ErrorRule, RestExceptionHandler, register_exception_handlers
from rest_errors.domain_errors import UnknownResourceException
from rest_errors.main_config import RestErrorConfig, fastapi_config, rest_error_config
from rest_errors.routes import fallback, health, users

# Unknown users get a dedicated application code and documentation link
EXCEPTION_RULES = [
    ErrorRule(
        UnknownResourceException,
        lambda exc: getattr(exc, "resource", None) == "user",
        "status=404, code=1402, msg=_exmsg, infoUrl=https://example.com/errors/1402",
    ),
]

EXCEPTION_MAPPINGS = {
    UnknownResourceException: "404, _exmsg",
    ValueError: "400, _exmsg",
}


def create_app(config: RestErrorConfig | None = None) -> FastAPI:
    """Create the example application.

    Args:
        config: REST error settings, the environment derived ``rest_error_config`` if omitted
    """
    app = FastAPI(
        title=fastapi_config.title,
        description=fastapi_config.description,
        version=fastapi_config.version,
        debug=fastapi_config.debug,
    )

    handler = RestExceptionHandler.from_config(
        config or rest_error_config,
        exception_mappings=EXCEPTION_MAPPINGS,
        rules=EXCEPTION_RULES,
    )
    register_exception_handlers(app, handler)

    # Outermost, so request ids are set while errors are rendered
    app.add_middleware(
        CorrelationIdMiddleware,
        header_name="X-Request-ID",
        generator=lambda: uuid.uuid4().hex[:16],
        validator=None,
        transformer=lambda x: x,
    )

    app.include_router(health.router)
    app.include_router(users.router)
    # Catch-all must be registered last
    app.include_router(fallback.router)

    return app


# =============================================================================
# Setup Logging (before app creation)
# =============================================================================
setup_logging()

app = create_app()

if __name__ == "__main__":
    import uvicorn

    from rest_errors.main_config import settings

    uvicorn.run(
        "rest_errors.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_config=None,  # Disable uvicorn's logging config to use our structlog setup
    )
