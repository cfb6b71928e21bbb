from enum import StrEnum
from typing import ClassVar

from starlette import status


class ErrorKind(StrEnum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    STORAGE_FAILURE = "storage_failure"


class CollectaError(Exception):
    """Base for every failure a request handler turns into an error envelope.

    The message is what the client sees, so it must never carry store or
    filesystem diagnostics.
    """

    kind: ClassVar[ErrorKind]
    status_code: ClassVar[int]
    default_message: ClassVar[str]

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(CollectaError):
    kind = ErrorKind.UNAUTHENTICATED
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated."


class Forbidden(CollectaError):
    kind = ErrorKind.FORBIDDEN
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Permission denied."


class NotFound(CollectaError):
    kind = ErrorKind.NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found."


class InvalidInput(CollectaError):
    kind = ErrorKind.INVALID_INPUT
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input."


class StorageFailure(CollectaError):
    kind = ErrorKind.STORAGE_FAILURE
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "The request could not be stored."


__all__ = [
    "ErrorKind",
    "CollectaError",
    "Unauthenticated",
    "Forbidden",
    "NotFound",
    "InvalidInput",
    "StorageFailure",
]
