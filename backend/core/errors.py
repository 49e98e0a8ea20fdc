"""
Domain error kinds.

Services raise these *before* touching the store; ``main.py`` renders them
as ``{"message": ...}`` with the status code carried by the class.  Anything
that is not an ``AppError`` is treated as an internal failure.
"""

from fastapi import status


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# -- 400 ---------------------------------------------------------------------


class DuplicateUsername(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Username already taken"


class DuplicateEmail(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Email already in use"


class DuplicateName(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Category name already exists"


class SelfDeleteDenied(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "You cannot delete your own account"


class InvalidReference(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Referenced records not found"


# -- 401 ---------------------------------------------------------------------


class InvalidCredentials(AppError):
    # Same message for "no such user" and "wrong password"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid user token"


# -- 403 / 404 ---------------------------------------------------------------


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


# -- 500 ---------------------------------------------------------------------


class Internal(AppError):
    pass
