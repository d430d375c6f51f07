"""Custom exceptions and RFC 7807 Problem Detail error handlers."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

BASE_ERROR_URI = "https://siap-cuti.id/errors"


# ── Exception hierarchy ─────────────────────────────────────────────

class AppException(Exception):
    """Base for all application exceptions → RFC 7807 JSON."""

    def __init__(
        self,
        status_code: int,
        error_type: str,
        title: str,
        detail: str,
        errors: Optional[dict[str, Any]] = None,
    ) -> None:
        self.status_code = status_code
        self.error_type = error_type
        self.title = title
        self.detail = detail
        self.errors = errors
        super().__init__(detail)


class NotFoundException(AppException):
    """404 — entity not found."""

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(
            status_code=404,
            error_type="not-found",
            title=f"{entity_type} Not Found",
            detail=f"{entity_type} with id '{entity_id}' does not exist.",
        )


class ConflictError(AppException):
    """409 — unique-constraint / duplicate."""

    def __init__(self, field: str, value: Any) -> None:
        super().__init__(
            status_code=409,
            error_type="conflict",
            title="Conflict",
            detail=f"An entry with {field}='{value}' already exists.",
            errors={field: [f"'{value}' is already in use."]},
        )


class ForbiddenException(AppException):
    """403 — insufficient permissions."""

    def __init__(
        self,
        detail: str = "You do not have permission to perform this action.",
    ) -> None:
        super().__init__(
            status_code=403,
            error_type="forbidden",
            title="Forbidden",
            detail=detail,
        )


class ValidationException(AppException):
    """422 — business-logic validation failures."""

    def __init__(
        self,
        errors: dict[str, list[str]],
        detail: str = "Data tidak valid. Silakan periksa kembali isian Anda.",
    ) -> None:
        super().__init__(
            status_code=422,
            error_type="validation-error",
            title="Validation Error",
            detail=detail,
            errors=errors,
        )


class DateRangeException(AppException):
    """422 — end date falls before start date."""

    def __init__(self) -> None:
        super().__init__(
            status_code=422,
            error_type="date-range",
            title="Invalid Date Range",
            detail="Tanggal selesai tidak boleh sebelum tanggal mulai.",
            errors={"end_date": ["Tanggal selesai tidak boleh sebelum tanggal mulai."]},
        )


class InsufficientBalanceException(AppException):
    """422 — requested duration exceeds the remaining annual balance."""

    def __init__(self, remaining: int, requested: int) -> None:
        self.remaining = remaining
        self.requested = requested
        super().__init__(
            status_code=422,
            error_type="insufficient-balance",
            title="Insufficient Leave Balance",
            detail=f"Jatah cuti tidak mencukupi. Sisa cuti Anda: {remaining} hari.",
            errors={"remaining": [str(remaining)], "requested": [str(requested)]},
        )


class InvalidTransitionException(AppException):
    """409 — status change not allowed from the request's current state."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            status_code=409,
            error_type="invalid-transition",
            title="Invalid Status Transition",
            detail=f"Pengajuan dengan status '{current}' tidak dapat diubah menjadi '{target}'.",
        )


# ── Notification kinds (caught by callers, never fatal) ─────────────

class ConfigurationException(AppException):
    """503 — email sender credentials are not configured."""

    def __init__(self, detail: str) -> None:
        super().__init__(
            status_code=503,
            error_type="configuration",
            title="Email Not Configured",
            detail=detail,
        )


class DeliveryException(AppException):
    """502 — the transactional email API rejected or failed the send."""

    def __init__(self, detail: str) -> None:
        super().__init__(
            status_code=502,
            error_type="delivery",
            title="Email Delivery Failed",
            detail=detail,
        )


# ── RFC 7807 builder ────────────────────────────────────────────────

def _build_problem_detail(exc: AppException, request: Request) -> dict[str, Any]:
    body: dict[str, Any] = {
        "type": f"{BASE_ERROR_URI}/{exc.error_type}",
        "title": exc.title,
        "status": exc.status_code,
        "detail": exc.detail,
        "instance": str(request.url.path),
    }
    if exc.errors:
        body["errors"] = exc.errors
    return body


# ── FastAPI handlers ────────────────────────────────────────────────

async def _handle_app_exception(
    request: Request,
    exc: AppException,
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_build_problem_detail(exc, request),
        media_type="application/problem+json",
    )


def _error_message(err: dict[str, Any]) -> str:
    """Validator-raised ValueErrors carry their own user-facing text."""
    if err.get("type") == "value_error":
        cause = (err.get("ctx") or {}).get("error")
        if cause is not None:
            return str(cause)
        return str(err.get("msg", "")).removeprefix("Value error, ")
    return err.get("msg", "Invalid value")


async def _handle_validation_error(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    field_errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = err.get("loc", ())
        name = (
            ".".join(str(p) for p in loc[1:])
            if len(loc) > 1
            else str(loc[0]) if loc else "unknown"
        )
        field_errors.setdefault(name, []).append(_error_message(err))

    return JSONResponse(
        status_code=422,
        content={
            "type": f"{BASE_ERROR_URI}/validation-error",
            "title": "Validation Error",
            "status": 422,
            "detail": "Request validation failed.",
            "instance": str(request.url.path),
            "errors": field_errors,
        },
        media_type="application/problem+json",
    )


# ── Registration helper (called from main.py) ──────────────────────

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""
    app.add_exception_handler(AppException, _handle_app_exception)          # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
