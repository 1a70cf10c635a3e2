""" Errors raised by the services, translated to HTTP responses in app.main. """
from typing import Optional

from fastapi import status


class TaskerException(Exception):
    """Base class for errors that map onto an HTTP status code."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequestError(TaskerException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class AuthenticationError(TaskerException):
    """Credentials could not be established (login failure, bad token)."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class InvalidTokenError(AuthenticationError):
    """Missing, malformed, expired or wrongly signed token, or its subject is gone."""

    default_message = "Invalid or expired token"


class AuthorizationError(TaskerException):
    """Authenticated but not allowed to perform the operation."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(TaskerException):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"
