"""
coach_gateway.api.errors

Central error handling for the HTTP surface.

Responsibilities:
- Log every failure (name, message, stack, cause) before responding.
- Translate `AppError` into `{"error": {"message", "code", ...}}` bodies.
- Hide the details of unexpected exceptions outside development.
- Answer unmatched routes with a fixed NOT_FOUND body.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from coach_gateway.errors import AppError, ErrorKind, is_operational_error
from coach_gateway.observability.logging import exception_fields, format_stack, get_logger
from coach_gateway.settings import Settings

log = get_logger(__name__)

GENERIC_MESSAGE = "An unexpected error occurred"


def app_error_body(exc: AppError, *, dev: bool) -> dict[str, Any]:
    error: dict[str, Any] = {"message": exc.message, "code": exc.code}
    match exc.kind:
        case ErrorKind.validation:
            error["errors"] = exc.errors or {}
    if dev:
        error["stack"] = format_stack(exc)
    return {"error": error}


def unexpected_error_body(exc: BaseException, *, dev: bool) -> dict[str, Any]:
    # Bug-class failures keep their details server-side outside development.
    message = str(exc) if is_operational_error(exc) or dev else GENERIC_MESSAGE
    error: dict[str, Any] = {"message": message, "code": "INTERNAL_ERROR"}
    if dev:
        error["stack"] = format_stack(exc)
    return {"error": error}


def unexpected_error_response(exc: Exception, *, dev: bool) -> JSONResponse:
    _log_failure(exc)
    return JSONResponse(unexpected_error_body(exc, dev=dev), status_code=500)


def validation_error_from_request(exc: RequestValidationError) -> AppError:
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in ("body", "query", "path", "header", "cookie"):
            loc = loc[1:]
        field = ".".join(loc) or "body"
        errors.setdefault(field, []).append(str(err.get("msg", "invalid")))
    return AppError.validation("Validation failed", errors)


def _log_failure(exc: BaseException) -> None:
    log.error("request_failed", **exception_fields(exc))


def register_error_handlers(app: FastAPI, *, settings: Settings) -> None:
    dev = settings.is_dev

    async def handle_app_error(_: Request, exc: AppError) -> JSONResponse:
        _log_failure(exc)
        return JSONResponse(app_error_body(exc, dev=dev), status_code=exc.status_code)

    async def handle_request_validation(_: Request, exc: RequestValidationError) -> JSONResponse:
        err = validation_error_from_request(exc)
        # Keep the framework error as the cause so the log shows the raw details.
        err.__cause__ = exc
        _log_failure(err)
        return JSONResponse(app_error_body(err, dev=dev), status_code=err.status_code)

    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            return not_found_response(request)
        _log_failure(exc)
        try:
            code = HTTPStatus(exc.status_code).name
        except ValueError:
            code = "HTTP_ERROR"
        return JSONResponse(
            {"error": {"message": str(exc.detail), "code": code}},
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    async def handle_unexpected(_: Request, exc: Exception) -> JSONResponse:
        return unexpected_error_response(exc, dev=dev)

    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected)


def not_found_response(request: Request) -> JSONResponse:
    return JSONResponse(
        {
            "error": {
                "message": f"Route {request.method} {request.url.path} not found",
                "code": "NOT_FOUND",
            }
        },
        status_code=404,
    )


# --- Module Notes -----------------------------------------------------------
# Untyped exceptions from routes are answered by `RequestContextMiddleware` via
# `unexpected_error_response`, so the log line and the 500 keep the request id.
# The bare `Exception` handler only sees failures raised outside that middleware.
