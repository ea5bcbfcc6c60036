"""User lookup routes.

Only ``jsmith`` and ``djones`` exist; every other username raises
``UnknownResourceException``.
"""

from fastapi import APIRouter
from pydantic import BaseModel

from rest_errors.domain_errors import UnknownResourceException

router = APIRouter(
    prefix="/api/users",
    tags=["users"],
)


class User(BaseModel):
    """Schema for user response."""

    name: str
    username: str


_USERS = {
    "jsmith": User(name="Jane Smith", username="jsmith"),
    "djones": User(name="Don Jones", username="djones"),
}


def find_user(username: str) -> User:
    """Simulate a user lookup.

    Raises:
        ValueError: if the username is blank
        UnknownResourceException: if there is no user with that username
    """
    if not username.strip():
        raise ValueError("Username is required.")

    user = _USERS.get(username)
    if user is None:
        raise UnknownResourceException(
            f"Unable to find user with username '{username}'", resource="user"
        )
    return user


@router.get("/{username}", response_model=User)
async def get_user(username: str) -> User:
    """Get a user by username."""
    return find_user(username)
