"""Модуль структурированного логирования.

Единый интерфейс для логирования во всем приложении:
- trace_id текущего запроса в каждой записи
- JSON формат для production structured logging
- Human-readable формат для development
- Маскировка секретов

Основное использование:
    >>> from src.shared.logging import setup_logging, get_logger
    >>> setup_logging(level="INFO", env="development")  # Один раз при старте
    >>> logger = get_logger()
    >>> logger.info("Задача создана", task_id=42)
"""

from src.shared.logging.config import (
    InterceptHandler,
    configure_third_party_loggers,
    get_logger,
    setup_logging,
    trace_id_patcher,
)
from src.shared.logging.formatters import (
    console_format,
    json_formatter,
    sanitize_sensitive_data,
)

__all__ = [
    "InterceptHandler",
    "configure_third_party_loggers",
    "console_format",
    "get_logger",
    "json_formatter",
    "sanitize_sensitive_data",
    "setup_logging",
    "trace_id_patcher",
]
