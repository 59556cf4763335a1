# finance_tracker/errors.py

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import structlog

logger = structlog.get_logger(__name__)


class FinanceError(Exception):
    """Base class for errors that map straight onto an HTTP response."""

    status_code = 400

    def __init__(self, message: str, field: str = None, value=None, **extra):
        super().__init__(message)
        self.message = message
        self.field = field
        self.value = value
        self.extra = extra

    def to_dict(self):
        body = {"message": self.message}
        if self.field is not None:
            body["field"] = self.field
            if self.value is not None:
                body["value"] = self.value
        body.update(self.extra)
        return body


class ValidationError(FinanceError):
    status_code = 400


class InvalidIdFormat(ValidationError):
    pass


class InvalidReferenceError(FinanceError):
    status_code = 400


class NotFoundError(FinanceError):
    status_code = 404


class ConflictError(FinanceError):
    status_code = 400


async def finance_error_handler(request: Request, exc: FinanceError):
    logger.info(
        "request_rejected",
        path=request.url.path,
        error=type(exc).__name__,
        message=exc.message,
        field=exc.field,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Report the first offending field the way business-rule errors are reported
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(loc) or None
    message = first.get("msg", "Invalid request")
    value = first.get("input")
    if isinstance(value, dict):
        value = None

    body = {"message": f"{field}: {message}" if field else message}
    if field:
        body["field"] = field
        if value is not None:
            body["value"] = value
    logger.info("request_invalid", path=request.url.path, field=field, message=message)
    return JSONResponse(status_code=400, content=body)


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("server_error", path=request.url.path, method=request.method)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})
