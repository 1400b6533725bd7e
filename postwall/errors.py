"""
Error types for PostWall.

This module defines every exception the service maps to an HTTP response:
- PostWallError: Base exception
- ValidationError: Required create fields are missing (400)
- PostNotFoundError: No post matches the requested id (404)
- StorageError: The database failed or is unreachable (500)

Invariants:
    - All errors inherit from PostWallError
    - status_code is the HTTP status the app responds with
    - StorageError never exposes its cause to clients
"""

from __future__ import annotations

from typing import Any


class PostWallError(Exception):
    """Base exception for all PostWall errors.

    Attributes:
        message: Error message sent to the client
        code: Error code for programmatic handling
        details: Additional error context sent to the client
        status_code: HTTP status for this error
    """

    status_code = 500

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "POSTWALL_ERROR"
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON error body."""
        body: dict[str, Any] = {"error": self.message, "error_code": self.code}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(PostWallError):
    """Request payload is missing required fields."""

    status_code = 400

    def __init__(
        self,
        message: str = "Todos los campos son requeridos",
        missing: list[str] | None = None,
    ) -> None:
        super().__init__(
            message,
            code="VALIDATION_ERROR",
            details={"missing": missing} if missing else None,
        )
        self.missing = missing or []


class BadRequestError(PostWallError):
    """Request could not be parsed (malformed JSON, non-integer id)."""

    status_code = 400

    def __init__(self, message: str = "Solicitud inválida", errors: list[str] | None = None) -> None:
        super().__init__(
            message,
            code="BAD_REQUEST",
            details={"errors": errors} if errors else None,
        )
        self.errors = errors or []


class PostNotFoundError(PostWallError):
    """No post matches the requested id."""

    status_code = 404

    def __init__(self, post_id: int) -> None:
        super().__init__("Post no encontrado", code="NOT_FOUND")
        self.post_id = post_id


class StorageError(PostWallError):
    """Database operation failed.

    Raised when:
    - The pool cannot reach the server
    - A query fails
    - The pool is used before connect() or after close()

    The client only ever sees the generic message; the original exception
    is kept as __cause__ for server-side logging.
    """

    status_code = 500

    def __init__(self, reason: str) -> None:
        super().__init__("Error interno del servidor", code="INTERNAL")
        self.reason = reason

    def __str__(self) -> str:
        return self.reason
