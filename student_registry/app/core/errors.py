"""
Error taxonomy shared by the store, the repository and the API layer.

Every failure the registry reports on purpose is a ``RegistryError``.
Each subclass carries the HTTP status the API layer answers with, so
the mapping from domain outcome to response code lives in one place.
None of these errors is retried: a failed mutation leaves the store
unchanged and the client decides what to do next.
"""


class RegistryError(Exception):
    """Base class for expected registry failures."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(RegistryError):
    """Malformed input: missing required field, bad id, bad query parameter."""

    status_code = 400


class ConflictError(RegistryError):
    """A record with the same primary key already exists."""

    status_code = 409


class NotFoundError(RegistryError):
    """The targeted record does not exist."""

    status_code = 404
