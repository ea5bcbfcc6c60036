"""Domain errors raised by the example routes.

They carry no HTTP status: ``main.EXCEPTION_MAPPINGS`` decides how they are
rendered.
"""


class UnknownResourceException(Exception):
    """Raised when a requested resource does not exist."""

    def __init__(self, message: str, resource: str | None = None) -> None:
        super().__init__(message)
        self.resource = resource
