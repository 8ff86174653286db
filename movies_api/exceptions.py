"""
Error taxonomy shared by the core engines and the API layer.

The API layer maps each class to an HTTP status and an error code; the core
never imports FastAPI.
"""


class MoviesAPIError(Exception):
    """Base exception for the application."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, details=None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(MoviesAPIError):
    """Malformed or out-of-range caller input."""

    code = "VALIDATION_ERROR"
    status_code = 422


class BadRequestError(ValidationError):
    """A query parameter could not be parsed."""

    code = "BAD_REQUEST"
    status_code = 400


class InvalidCursorError(BadRequestError):
    """A pagination token could not be decoded."""

    def __init__(self, message: str = "invalid cursor", details=None):
        super().__init__(message, details)


class NotFoundError(MoviesAPIError):
    """Referenced entity does not exist (or a title lookup is ambiguous)."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, message: str = "Resource not found", details=None):
        super().__init__(message, details)


class AuthorizationError(MoviesAPIError):
    """Missing or invalid credential, or missing rater identity."""

    code = "UNAUTHORIZED"
    status_code = 401

    def __init__(self, message: str = "Missing or invalid authentication information", details=None):
        super().__init__(message, details)
