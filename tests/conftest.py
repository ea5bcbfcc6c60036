"""Shared fixtures for REST error tests."""

from collections.abc import Callable

import pytest
from fastapi import Request


def build_request(accept: str | None = None, path: str = "/test", **state: str) -> Request:
    """Build a bare request, optionally with an Accept header and request state."""
    headers = []
    if accept is not None:
        headers.append((b"accept", accept.encode("latin-1")))
    scope = {
        "type": "http",
        "method": "GET",
        "path": path,
        "headers": headers,
        "query_string": b"",
        "state": dict(state),
    }
    return Request(scope)


@pytest.fixture
def make_request() -> Callable[..., Request]:
    """Factory for bare requests."""
    return build_request
