"""
Domain errors raised by the workflow and turned into JSON responses by
blog.middleware.ApiErrorMiddleware.
"""


class ApiError(Exception):
    status = 500
    default_message = "Something went wrong"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(ApiError):
    status = 400
    default_message = "Invalid input"


class AuthenticationRequired(ApiError):
    status = 401
    default_message = "Authentication required"


class Forbidden(ApiError):
    status = 403
    default_message = "Forbidden"


class NotFound(ApiError):
    status = 404
    default_message = "Not found"


class Conflict(ApiError):
    status = 409
    default_message = "Conflict"


class AuditLogImmutable(RuntimeError):
    """Raised on any attempt to change or remove an audit row."""
