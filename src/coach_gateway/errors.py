"""
coach_gateway.errors

Application error taxonomy.

Responsibilities:
- Define the closed set of failure kinds (`ErrorKind`) with their HTTP status,
  default code and default message.
- Provide a single exception type (`AppError`) that every component raises.
- Distinguish operational errors (expected, safe to disclose) from
  programmer/bug-class errors.
"""

from __future__ import annotations

import enum


class ErrorKind(enum.StrEnum):
    bad_request = "bad_request"
    unauthorized = "unauthorized"
    forbidden = "forbidden"
    not_found = "not_found"
    conflict = "conflict"
    validation = "validation"
    rate_limited = "rate_limited"
    internal = "internal"


# kind -> (status code, default code, default message)
_KIND_DEFAULTS: dict[ErrorKind, tuple[int, str, str]] = {
    ErrorKind.bad_request: (400, "BAD_REQUEST", "Bad request"),
    ErrorKind.unauthorized: (401, "UNAUTHORIZED", "Authentication required"),
    ErrorKind.forbidden: (403, "FORBIDDEN", "Access denied"),
    ErrorKind.not_found: (404, "NOT_FOUND", "Resource not found"),
    ErrorKind.conflict: (409, "CONFLICT", "Resource conflict"),
    ErrorKind.validation: (422, "VALIDATION_ERROR", "Validation failed"),
    ErrorKind.rate_limited: (429, "RATE_LIMIT_EXCEEDED", "Too many requests"),
    ErrorKind.internal: (500, "INTERNAL_ERROR", "Internal server error"),
}


class AppError(Exception):
    """
    Tagged application failure.

    Dispatch on `kind`, not on the Python type. Chain the underlying exception
    with `raise AppError.<kind>(...) from exc`; the handler logs `__cause__`.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str | None = None,
        *,
        code: str | None = None,
        is_operational: bool = True,
        errors: dict[str, list[str]] | None = None,
    ) -> None:
        status_code, default_code, default_message = _KIND_DEFAULTS[kind]
        self.kind = kind
        self.status_code = status_code
        self.message = message if message is not None else default_message
        self.code = code or default_code
        self.is_operational = is_operational
        # Field-level details only exist for validation failures.
        self.errors = (errors or {}) if kind is ErrorKind.validation else None
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"AppError(kind={self.kind.value!r}, code={self.code!r}, message={self.message!r})"

    @classmethod
    def bad_request(cls, message: str = "Bad request", *, code: str = "BAD_REQUEST") -> AppError:
        return cls(ErrorKind.bad_request, message, code=code)

    @classmethod
    def unauthorized(
        cls, message: str = "Authentication required", *, code: str = "UNAUTHORIZED"
    ) -> AppError:
        return cls(ErrorKind.unauthorized, message, code=code)

    @classmethod
    def forbidden(cls, message: str = "Access denied", *, code: str = "FORBIDDEN") -> AppError:
        return cls(ErrorKind.forbidden, message, code=code)

    @classmethod
    def not_found(cls, message: str = "Resource not found", *, code: str = "NOT_FOUND") -> AppError:
        return cls(ErrorKind.not_found, message, code=code)

    @classmethod
    def conflict(cls, message: str = "Resource conflict", *, code: str = "CONFLICT") -> AppError:
        return cls(ErrorKind.conflict, message, code=code)

    @classmethod
    def validation(
        cls,
        message: str = "Validation failed",
        errors: dict[str, list[str]] | None = None,
    ) -> AppError:
        return cls(ErrorKind.validation, message, errors=errors)

    @classmethod
    def rate_limited(
        cls, message: str = "Too many requests", *, code: str = "RATE_LIMIT_EXCEEDED"
    ) -> AppError:
        return cls(ErrorKind.rate_limited, message, code=code)

    @classmethod
    def internal(
        cls, message: str = "Internal server error", *, is_operational: bool = True
    ) -> AppError:
        # is_operational=False marks a bug-class failure: logged in full, never swallowed.
        return cls(ErrorKind.internal, message, is_operational=is_operational)


def is_operational_error(exc: BaseException) -> bool:
    if isinstance(exc, AppError):
        return exc.is_operational
    return False


# --- Module Notes -----------------------------------------------------------
# Responses are produced only by `coach_gateway.api.errors`; components raise
# `AppError` and never format HTTP bodies themselves.
