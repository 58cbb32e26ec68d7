"""Health API Routes для Task Tracker.

Liveness check сервиса и его зависимостей.
"""

from fastapi import APIRouter, Request
from redis.exceptions import RedisError

from src.api.schemas.responses import HealthResponse
from src.core.dependencies import NotificationQueueDep
from src.core.enums import HealthStatus
from src.shared.logging import get_logger

logger = get_logger()

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    summary="Health check",
    description="Проверяет доступность Redis (если используется) и worker уведомлений",
)
async def health_check(request: Request, notification_queue: NotificationQueueDep) -> HealthResponse:
    """Health check сервиса.

    Returns:
        HealthResponse: unhealthy если Redis недоступен, degraded если
        worker уведомлений остановлен

    """
    settings = request.app.state.settings
    redis_client = request.app.state.redis

    health = HealthStatus.HEALTHY

    if not notification_queue.is_running:
        health = HealthStatus.DEGRADED

    if redis_client is not None:
        try:
            await redis_client.ping()
        except (RedisError, OSError) as e:
            logger.error("Redis недоступен", error=str(e))
            health = HealthStatus.UNHEALTHY

    return HealthResponse(
        status=health.value,
        service=settings.app_name,
        version=request.app.version,
        storage_backend=settings.storage_backend,
        notifications_pending=notification_queue.pending,
    )
