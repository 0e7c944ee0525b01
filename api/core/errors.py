"""
API error taxonomy.

Services and repositories raise these; `main.py` turns them into
`{"success": false, "code": ..., "message": ...}` responses.
"""

from __future__ import annotations


class ApiError(RuntimeError):
    status_code = 500
    code = "STORE_ERROR"
    default_message = "Server error."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ApiError):
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Invalid request."


class SelfFollow(ValidationError):
    code = "SELF_FOLLOW"
    default_message = "You cannot follow yourself."


class AuthenticationError(ApiError):
    status_code = 401
    code = "AUTH_REQUIRED"
    default_message = "Authentication required."


class TokenMissing(AuthenticationError):
    code = "TOKEN_REQUIRED"
    default_message = "Token required."


class TokenInvalid(AuthenticationError):
    status_code = 403
    code = "TOKEN_INVALID"
    default_message = "Invalid or expired token."


class InvalidCredentials(AuthenticationError):
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid credentials."


class AuthorizationError(ApiError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "Unauthorized."


class NotFoundError(ApiError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Not found."


class NotFollowing(NotFoundError):
    code = "NOT_FOLLOWING"
    default_message = "You are not following this user or user not found."


class ConflictError(ApiError):
    status_code = 409
    code = "CONFLICT"
    default_message = "A duplicate entry occurred. Please check your input."


class AlreadyRegistered(ConflictError):
    code = "ALREADY_REGISTERED"
    default_message = "This email is already registered for this event."


class DuplicateReview(ConflictError):
    code = "DUPLICATE_REVIEW"
    default_message = "You have already reviewed this business."


class AlreadyFollowing(ConflictError):
    code = "ALREADY_FOLLOWING"
    default_message = "You are already following this user."


class DuplicateAccount(ConflictError):
    status_code = 400
    code = "ACCOUNT_EXISTS"
    default_message = "Username or email already exists."


class StoreError(ApiError):
    pass


class ParentInsertFailed(StoreError):
    default_message = "Failed to create the parent record."
