"""Task Tracker API - FastAPI Application.

Composition root: собирает store, rate limiter, уведомления и TaskService.
"""

import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from redis.asyncio import Redis

from config.settings import Settings, settings
from src.api import router as api_router
from src.core.constants import MAX_REQUEST_ID_LENGTH, REQUEST_ID_HEADER
from src.core.enums import StorageBackend
from src.services.notification import NotificationDispatcher, NotificationQueue
from src.services.rate_limit import create_rate_limiter
from src.services.storage import create_task_store
from src.services.task import TaskService
from src.shared.errors import get_trace_id, reset_trace_id, set_trace_id, setup_exception_handlers
from src.shared.logging import get_logger, setup_logging

API_VERSION = "1.0.0"

logger = get_logger()

_REQUEST_ID_PATTERN = re.compile(rf"[\x21-\x7e]{{1,{MAX_REQUEST_ID_LENGTH}}}")


def parse_request_id(raw: bytes) -> str | None:
    """X-Request-ID клиента, если это видимый ASCII не длиннее MAX_REQUEST_ID_LENGTH."""
    value = raw.decode("latin-1").strip()
    return value if _REQUEST_ID_PATTERN.fullmatch(value) else None


class TraceContextMiddleware:
    """Middleware для установки trace_id в контекст запроса.

    trace_id берётся из X-Request-ID (или генерируется) и возвращается в X-Trace-Id.
    """

    def __init__(self, app: Any) -> None:
        self.app = app

    async def __call__(self, scope: dict, receive: Any, send: Any) -> None:
        """Обработка запроса с установкой trace_id.

        Args:
            scope: ASGI scope.
            receive: ASGI receive callable.
            send: ASGI send callable.

        """
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        # Невалидный или слишком длинный X-Request-ID заменяется сгенерированным
        token = set_trace_id(parse_request_id(headers.get(REQUEST_ID_HEADER.lower().encode(), b"")))
        trace_id = get_trace_id()

        async def send_with_trace(message: dict) -> None:
            if message["type"] == "http.response.start":
                response_headers = list(message.get("headers", []))
                if not any(name.lower() == b"x-trace-id" for name, _ in response_headers):
                    response_headers.append((b"x-trace-id", trace_id.encode()))
                message["headers"] = response_headers
            await send(message)

        try:
            await self.app(scope, receive, send_with_trace)
        finally:
            reset_trace_id(token)


def build_redis_client(config: Settings) -> Redis | None:
    """Общий Redis client для store и rate limiter (None для memory backend)."""
    if StorageBackend(config.storage_backend) is not StorageBackend.REDIS:
        return None
    return Redis.from_url(config.redis_url, decode_responses=True)


def create_app(config: Settings = settings) -> FastAPI:
    """Создание и настройка FastAPI приложения.

    Создает экземпляр FastAPI с настроенными:
    - Lifespan (store, rate limiter, очередь уведомлений, TaskService)
    - Middleware (trace_id, CORS, Prometheus вне development)
    - Exception handlers
    - API роутерами

    Args:
        config: Настройки приложения.

    Returns:
        Настроенный экземпляр FastAPI приложения.

    """
    setup_logging(level=config.log_level, env=config.app_env, debug=config.debug)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Lifespan context manager для startup/shutdown.

        Args:
            app: FastAPI application

        Yields:
            None

        """
        # =================================================================
        # Startup
        # =================================================================
        logger.info(
            "Task Tracker API запускается",
            env=config.app_env,
            debug=config.debug,
            storage_backend=config.storage_backend,
            rate_limit_policy=config.rate_limit_refill_policy,
        )

        redis_client = build_redis_client(config)

        store = create_task_store(config.storage_backend, redis_client=redis_client)
        rate_limiter = create_rate_limiter(
            config.storage_backend,
            capacity=config.rate_limit_capacity,
            interval_seconds=config.rate_limit_interval_seconds,
            policy=config.rate_limit_refill_policy,
            redis_client=redis_client,
        )
        logger.info("TaskStore и RateLimiter инициализированы", backend=config.storage_backend)

        dispatcher = NotificationDispatcher(
            api_key=config.provider_api_key,
            from_email=config.from_email,
            endpoint=config.provider_url,
            timeout=config.notification_timeout_seconds,
        )
        if config.provider_api_key is None:
            logger.warning("provider_api_key не задан, уведомления отключены")

        notification_queue = NotificationQueue(dispatcher, max_size=config.notification_queue_size)
        await notification_queue.start()
        logger.info("Notification worker запущен", queue_size=config.notification_queue_size)

        app.state.redis = redis_client
        app.state.notification_queue = notification_queue
        app.state.task_service = TaskService(store, rate_limiter, notification_queue)

        logger.info(
            "Task Tracker API готов",
            server_host=config.server_host,
            server_port=config.server_port,
        )

        yield

        # =================================================================
        # Shutdown
        # =================================================================
        logger.info("Task Tracker API останавливается")

        await notification_queue.stop()
        logger.info("Notification worker остановлен", dropped=notification_queue.pending)

        await rate_limiter.close()
        await store.close()

        if redis_client is not None:
            await redis_client.aclose()
            logger.info("Redis connection закрыт")

        logger.info("Task Tracker API остановлен")

    app = FastAPI(
        title=config.app_name,
        description="REST API для управления задачами пользователей",
        version=API_VERSION,
        lifespan=lifespan,
        debug=config.debug,
        docs_url="/docs" if config.debug else None,  # Swagger UI только в debug
        redoc_url="/redoc" if config.debug else None,
    )
    app.state.settings = config
    app.state.redis = None

    # =================================================================
    # Middleware
    # =================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # trace_id
    app.add_middleware(TraceContextMiddleware)

    if config.app_env != "development":
        Instrumentator().instrument(app).expose(app)
        logger.info("Prometheus metrics enabled на /metrics")

    # =================================================================
    # Exception handlers и routes
    # =================================================================

    setup_exception_handlers(app)
    app.include_router(api_router)

    @app.get("/", tags=["root"])
    async def root() -> dict[str, str]:
        """Root endpoint.

        Returns:
            Информация о сервисе

        """
        return {
            "service": config.app_name,
            "version": API_VERSION,
            "status": "running",
            "docs": "/docs" if config.debug else "disabled",
        }

    return app


app = create_app()
