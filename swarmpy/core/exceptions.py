"""
Custom exceptions for Swarm upload operations.

This module defines the error taxonomy shared by the transport client,
the metadata store and the upload session.
"""
from typing import Optional


class SwarmException(Exception):
    """Base exception for all swarmpy errors."""

    def __init__(self, message: str, error_code: Optional[int] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            error_code: Numeric error code (HTTP status, exit code...) if available
        """
        self.error_code = error_code
        super().__init__(message)


class UnreachableError(SwarmException):
    """Raised when the local Bee endpoint cannot be reached."""
    pass


class RemoteError(SwarmException):
    """Raised when the Bee node answers with a non-2xx status."""

    def __init__(self, status: int, body: str = '') -> None:
        """
        Initialize the exception.

        Args:
            status: HTTP status code
            body: Raw response body
        """
        self.status = status
        self.body = body
        super().__init__(f"HTTP {status}: {body}".strip(), error_code=status)


class PreconditionFailedError(SwarmException):
    """Raised when an upload cannot start (missing batch id, empty directory...)."""
    pass


class LocalIOError(SwarmException):
    """Raised when archive packing or metadata persistence fails."""
    pass
