"""Exception handlers for FastAPI.

Обработчики исключений для FastAPI приложения.
"""

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from src.shared.errors.base import AppException
from src.shared.errors.context import get_trace_id
from src.shared.errors.schemas import ErrorResponse


def _format_request_errors(errors: list[dict[str, Any]]) -> list[str]:
    """Привести ошибки FastAPI к виду "field: message"."""
    violations = []
    for error in errors:
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(location) or "body"
        violations.append(f"{field}: {error.get('msg', 'invalid value')}")
    return violations


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Обработчик доменных исключений.

    Args:
        request: HTTP запрос.
        exc: Исключение AppException.

    Returns:
        JSON ответ с ошибкой.

    """
    trace_id = get_trace_id()

    logger.warning(
        f"Business error: {exc.code}",
        error_code=exc.code,
        message=exc.message,
        details=exc.details,
        path=request.url.path,
        trace_id=trace_id,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(),
        headers={**exc.headers, "X-Error-Code": exc.code, "X-Trace-Id": trace_id},
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Обработчик ошибок формы запроса (битый JSON, нечисловой id).

    Args:
        request: HTTP запрос.
        exc: Исключение валидации.

    Returns:
        JSON ответ 400 с перечнем нарушений.

    """
    trace_id = get_trace_id()
    violations = _format_request_errors(list(exc.errors()))

    logger.warning(
        "Request validation error",
        violations=violations,
        path=request.url.path,
        trace_id=trace_id,
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(
            error="; ".join(violations) or "Invalid input",
            code="INVALID_INPUT",
            details={"violations": violations},
            trace_id=trace_id,
        ).model_dump(),
        headers={"X-Error-Code": "INVALID_INPUT", "X-Trace-Id": trace_id},
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Последний обработчик для непредвиденных ошибок.

    Args:
        request: HTTP запрос.
        exc: Любое исключение.

    Returns:
        JSON ответ с общей ошибкой.

    """
    trace_id = get_trace_id()

    logger.exception(
        "Unhandled exception",
        exception_type=type(exc).__name__,
        exception_message=str(exc),
        path=request.url.path,
        trace_id=trace_id,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="Internal server error",
            code="INTERNAL_SERVER_ERROR",
            details={},
            trace_id=trace_id,
        ).model_dump(),
        headers={"X-Trace-Id": trace_id},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Зарегистрировать обработчики исключений в FastAPI.

    Args:
        app: Экземпляр FastAPI приложения.

    """
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)

    logger.info("Exception handlers registered")
