import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)


class ServiceFriosError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    code = "server_error"


class ValidationError(ServiceFriosError):
    status_code = 400
    code = "validation_error"


class RecurrenceConfigError(ValidationError):
    """A schedule's recurrence cannot be computed (bad frequency or options)."""

    code = "configuration_error"


class NotFoundError(ServiceFriosError):
    status_code = 404
    code = "not_found"


class DuplicateOccurrenceError(Exception):
    """An order already exists for (schedule, day, start time)."""


def _normalize_errors(errs):
    norm = []
    for e in errs:
        e = dict(e)
        val = e.get("input")
        if isinstance(val, (bytes, bytearray)):
            e["input"] = val.decode("utf-8", errors="ignore")
        # ctx may carry the raised exception itself
        if "ctx" in e:
            e["ctx"] = {k: str(v) for k, v in e["ctx"].items()}
        norm.append(e)
    return norm


def install_error_handlers(app: FastAPI):
    @app.exception_handler(ServiceFriosError)
    async def service_error_handler(request: Request, exc: ServiceFriosError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.code, "detail": str(exc)},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content={"success": False, "error": "validation_error", "detail": _normalize_errors(exc.errors())},
        )

    @app.exception_handler(IntegrityError)
    async def integrity_handler(request: Request, exc: IntegrityError):
        logger.warning(f"Integrity error on {request.url.path}: {exc.orig}")
        return JSONResponse(
            status_code=409,
            content={"success": False, "error": "conflict", "detail": str(exc.orig)},
        )
