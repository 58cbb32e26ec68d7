"""Logging configuration.

Настройка логирования через Loguru.

- Loguru для собственных логов
- Перехват логов сторонних библиотек (uvicorn, fastapi, httpx, redis) и перенаправление в Loguru
- trace_id текущего запроса в extra каждой записи
"""

import logging
import sys
from typing import TYPE_CHECKING

from loguru import logger

from src.shared.errors.context import trace_id_var
from src.shared.logging.formatters import console_format, json_formatter

if TYPE_CHECKING:
    from loguru import Logger


class InterceptHandler(logging.Handler):
    """Обработчик для перехвата логов стандартной библиотеки logging."""

    def emit(self, record: logging.LogRecord) -> None:
        """Перехват и отправка логов в Loguru.

        Args:
            record: Запись лога из стандартного logging.

        """
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Глубина стека, чтобы Loguru показал место вызова, а не logging
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def trace_id_patcher(record: dict) -> None:
    """Добавить trace_id в запись лога.

    Args:
        record: Запись лога.

    """
    record["extra"].setdefault("trace_id", trace_id_var.get() or "no-trace")


def setup_logging(
    level: str = "INFO",
    env: str = "development",
    debug: bool = False,
    log_file: str = "logs/task_tracker_{time:YYYY-MM-DD}.log",
) -> None:
    """Настроить Loguru для всего приложения.

    Конфигурация:
    - development: human-readable в stdout с цветами
    - staging/production: JSON строки (orjson) с маскировкой секретов
    - debug: дополнительно JSON файл с ротацией

    Args:
        level: Уровень логирования.
        env: Окружение приложения.
        debug: Режим отладки.
        log_file: Путь к файлу логов (только в debug).

    """
    logger.remove()
    logger.configure(patcher=trace_id_patcher)

    if env == "development":
        logger.add(
            sys.stdout,
            format=console_format,
            level=level,
            colorize=True,
            backtrace=True,
            diagnose=debug,
        )
    else:
        logger.add(
            sys.stdout,
            format=json_formatter,
            level=level,
            backtrace=True,
            diagnose=False,
            enqueue=True,
        )

    if debug:
        logger.add(
            log_file,
            format=json_formatter,
            level="DEBUG",
            rotation="50 MB",
            retention="7 days",
            compression="zip",
            backtrace=True,
            diagnose=True,
        )

    configure_third_party_loggers(env)

    logger.info("Логгер настроен", level=level, env=env)


def configure_third_party_loggers(env: str = "development") -> None:
    """Перенаправить логи сторонних библиотек в Loguru.

    Args:
        env: Окружение приложения (в production httpx и access log только WARNING).

    """
    loggers_to_intercept = [
        "uvicorn",
        "uvicorn.access",
        "uvicorn.error",
        "fastapi",
        "httpx",
        "redis",
    ]

    for logger_name in loggers_to_intercept:
        logging_logger = logging.getLogger(logger_name)
        logging_logger.handlers = [InterceptHandler()]
        logging_logger.propagate = False

        if logger_name in {"uvicorn.access", "httpx"} and env == "production":
            logging_logger.setLevel(logging.WARNING)
        else:
            logging_logger.setLevel(logging.INFO)

    logger.debug("Сторонние логгеры настроены")


def get_logger(name: str | None = None) -> "Logger":
    """Получить настроенный logger instance.

    Args:
        name: Имя компонента (попадает в extra как component)

    Returns:
        Настроенный Loguru logger

    """
    if name:
        return logger.bind(component=name)
    return logger
