"""Exceptions raised while decoding a compile request."""

from typing import Optional


class WorkerError(Exception):
    """Base class for errors the worker converts into failure responses."""


class StdinReadError(WorkerError):
    """Raised when standard input cannot be read as UTF-8 text."""


class RequestDecodeError(WorkerError):
    """
    Exception raised when request text is not a valid compile request.

    Attributes:
        message: Error description
        field_name: External (camelCase) name of the offending field, if any
        snippet: Start of the raw input that failed to decode
    """

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        snippet: Optional[str] = None,
    ):
        self.message = message
        self.field_name = field_name
        self.snippet = snippet

        parts = [message]
        if field_name:
            parts.append(f"(field: {field_name})")

        super().__init__(" ".join(parts))
