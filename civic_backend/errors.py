"""
Application error taxonomy. Each error carries the HTTP status it maps to;
main.py turns them into the {"error": "..."} response envelope.
"""


class CivicError(Exception):
    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
        self.message = message


class ValidationError(CivicError):
    """Malformed id, missing field, out-of-range coordinate, illegal transition."""
    status_code = 400


class AuthenticationError(CivicError):
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class AuthorizationError(CivicError):
    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message)


class NotFoundError(CivicError):
    status_code = 404


class ConflictError(CivicError):
    """Duplicate unique field or a stale write."""
    status_code = 409
