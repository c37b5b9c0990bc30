"""Service-level error taxonomy.

Learn: Services raise these instead of HTTPException so they stay usable
outside a request (CLI, tests). create_app() registers one handler for
ServiceError that turns any of them into {"detail": ...} with the right
status. Anything not in this list becomes a generic 500.
"""


class ServiceError(Exception):
    """Base class — carries the HTTP status and the caller-safe message."""

    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class BadRequestError(ServiceError):
    status_code = 400
    default_detail = "Bad request"


class UnauthorizedError(ServiceError):
    status_code = 401
    default_detail = "Not authorized"


class NotFoundError(ServiceError):
    """Missing record — also used for records owned by someone else."""

    status_code = 404
    default_detail = "Not found"


class ConflictError(ServiceError):
    status_code = 409
    default_detail = "Already exists"


class InvalidOrExpiredTokenError(ServiceError):
    status_code = 400
    default_detail = "Password reset token is invalid or has expired."


class ServiceUnavailableError(ServiceError):
    status_code = 503
    default_detail = "Service temporarily unavailable"
