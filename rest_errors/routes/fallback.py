"""Catch-all route: any path no other router matched is an unknown resource.

Include this router last.
"""

from fastapi import APIRouter, Request

from rest_errors.domain_errors import UnknownResourceException

router = APIRouter(tags=["fallback"])


@router.api_route("/{path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
async def unknown_resource(request: Request, path: str) -> None:
    """Reject requests for unknown paths."""
    raise UnknownResourceException(f"There is no resource for path {request.url.path}")
