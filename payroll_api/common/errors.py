# payroll_api/common/errors.py
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from payroll_api.common.http import fail


class APIError(Exception):
    """Custom API Error class."""
    def __init__(self, code, message, status_code=400, payload=None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.payload = payload


class ValidationFailed(APIError):
    def __init__(self, message, payload=None):
        super().__init__("VALIDATION_ERROR", message, 422, payload)


class NotFound(APIError):
    def __init__(self, message, payload=None):
        super().__init__("NOT_FOUND", message, 404, payload)


class Conflict(APIError):
    """Overlapping periods, terminal-state mutation, batch-wide rejections.

    `errors` carries the per-member failure list when a whole batch is refused.
    """
    def __init__(self, message, errors=None, payload=None):
        super().__init__("CONFLICT", message, 409, payload)
        self.errors = errors or []


class InvalidComputation(APIError):
    def __init__(self, message, payload=None):
        super().__init__("INVALID_COMPUTATION", message, 422, payload)


def register_error_handlers(app):
    @app.errorhandler(APIError)
    def _api_error(e: APIError):
        return fail(message=e.message, status=e.status_code, code=e.code,
                    detail=e.payload, errors=getattr(e, "errors", None))

    @app.errorhandler(HTTPException)
    def _http(e: HTTPException):
        return fail(e.description or e.name, status=e.code or 500)

    @app.errorhandler(IntegrityError)
    def _integrity(e: IntegrityError):
        from payroll_api.extensions import db
        db.session.rollback()
        return fail("Duplicate or FK constraint failed", status=409, code="CONSTRAINT_ERROR",
                    detail=str(e.orig) if getattr(e, "orig", None) else str(e))

    @app.errorhandler(Exception)
    def _500(e: Exception):
        app.logger.exception(e)
        return fail("Internal server error", status=500)
