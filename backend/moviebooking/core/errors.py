"""
Application error taxonomy.

Services raise these; the handler registered in main.py turns them into
``{"message": ...}`` JSON bodies with the matching status code.
"""

from fastapi import status


class AppError(Exception):
    """Base class for errors that map onto an HTTP response"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class MalformedCredentials(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Authentication header is required!"


class InvalidCredentials(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication token is required!"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class StoreError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Database error occurred"


class DuplicateKeyError(StoreError):
    """A unique constraint rejected an insert or update"""
