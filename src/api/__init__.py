"""Task Tracker - API Module.

Главный роутер API: задачи и health check.
"""

from fastapi import APIRouter

from src.api.routes import health, tasks

# Создаем главный API роутер
router = APIRouter()

# Подключаем sub-routers
router.include_router(tasks.router)
router.include_router(health.router)

__all__ = ["router"]
