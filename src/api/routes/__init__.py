"""Task Tracker - API Routes."""

from src.api.routes import health, tasks

__all__ = ["health", "tasks"]
