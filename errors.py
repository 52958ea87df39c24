"""
Error taxonomy shared by the policy, services and the HTTP boundary.
Each error knows the status code it maps to; main.py turns them into responses.
"""

from typing import Optional


class AppError(Exception):
    status_code = 500
    default_detail = "Server error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    @property
    def kind(self) -> str:
        return type(self).__name__


class ValidationFailed(AppError):
    status_code = 400
    default_detail = "Validation failed"


class Unauthenticated(AppError):
    status_code = 401
    default_detail = "Could not validate credentials"


class InvalidCredentials(AppError):
    status_code = 401
    default_detail = "Invalid email or password"


class Forbidden(AppError):
    status_code = 403
    default_detail = "Insufficient permissions"


class NotFound(AppError):
    status_code = 404
    default_detail = "Not found"


class DuplicateEmail(AppError):
    status_code = 409
    default_detail = "Email already registered"


class Unexpected(AppError):
    status_code = 500
    default_detail = "Server error"
