"""Форматтеры логов для Loguru.

- JSON формат для staging/production (structured logging с trace_id)
- Human-readable формат для development
- Маскировка секретов (bearer токены, api ключи)
"""

import re
from typing import Any

import orjson

SENSITIVE_KEYS = {"password", "token", "secret", "api_key", "provider_api_key", "authorization"}

SENSITIVE_PATTERNS = [
    (re.compile(r"(Bearer\s+)[A-Za-z0-9._\-]+", re.IGNORECASE), r"\1***"),
    (re.compile(r"(api_key|apikey|secret|token)=\S+", re.IGNORECASE), r"\1=***"),
]


def sanitize_sensitive_data(text: str) -> str:
    """Замаскировать секреты в строке.

    Args:
        text: Текст для sanitization

    Returns:
        Текст с замаскированными секретами

    """
    for pattern, replacement in SENSITIVE_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def _jsonable(value: Any) -> Any:
    """Fallback сериализация для значений, которые orjson не знает."""
    return str(value)


def json_formatter(record: dict[str, Any]) -> str:
    """JSON форматтер для structured logging.

    Args:
        record: Loguru record dictionary

    Returns:
        Шаблон Loguru, подставляющий сериализованную запись

    """
    log_entry: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
        "message": record["message"],
    }

    for key, value in record["extra"].items():
        if key == "serialized":
            continue
        log_entry[key] = "***REDACTED***" if key.lower() in SENSITIVE_KEYS else value

    if record["exception"] is not None:
        exception_info = record["exception"]
        log_entry["exception"] = {
            "type": exception_info.type.__name__ if exception_info.type else None,
            "value": str(exception_info.value) if exception_info.value else None,
        }

    json_str = orjson.dumps(log_entry, default=_jsonable).decode("utf-8")
    # Loguru интерпретирует возвращаемую строку как шаблон
    record["extra"]["serialized"] = sanitize_sensitive_data(json_str)
    return "{extra[serialized]}\n"


def console_format(record: dict[str, Any]) -> str:
    """Human-readable формат для development.

    Формат:
    2024-01-06 12:34:56.789 | INFO     | module:function:42 | [trace_id] - Message

    Args:
        record: Loguru record dictionary

    Returns:
        Шаблон формата для консоли

    """
    base_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>"
    )

    trace_id = record["extra"].get("trace_id")
    if trace_id and trace_id != "no-trace":
        base_format += " | <yellow>[{extra[trace_id]:.8}]</yellow>"

    base_format += " - <level>{message}</level>\n"

    if record["exception"] is not None:
        base_format += "{exception}\n"

    return base_format
