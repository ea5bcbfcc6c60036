"""REST error responses for FastAPI applications.

Exceptions escaping a route are resolved into ``RestError`` instances,
converted into a body and written in the representation the client accepts.
"""

__version__ = "0.1.0"
