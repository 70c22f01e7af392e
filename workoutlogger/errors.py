"""Error types shared by the services and the HTTP layer.

Services never raise these for expected outcomes; they hand them back as the
second element of a ``(value, error)`` tuple so the caller decides how to
answer. ``ApiError`` is still an exception so a handler registered on the app
can render one that escapes from anywhere else.
"""
from flask import jsonify


class ConfigurationError(RuntimeError):
    """Raised while building the app when a required setting is missing."""


class ApiError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, msg=None, errors=None):
        self.msg = msg or self.default_message
        self.errors = errors
        super().__init__(self.msg)

    def to_dict(self):
        body = {"msg": self.msg}
        if self.errors:
            body["errors"] = self.errors
        return body

    def __repr__(self):
        return f"{type(self).__name__}({self.msg!r})"


class ValidationFailure(ApiError):
    status_code = 400
    default_message = "Invalid request"


class Unauthorized(ApiError):
    status_code = 401
    default_message = "Invalid credentials"


class Forbidden(ApiError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(ApiError):
    status_code = 404
    default_message = "Record not found."


def error_response(error: ApiError):
    return jsonify(error.to_dict()), error.status_code
