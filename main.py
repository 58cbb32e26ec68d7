"""Task Tracker API - Entry Point.

Запускает FastAPI приложение через uvicorn.
"""

import uvicorn
from config.settings import settings


def main() -> None:
    """Запустить Task Tracker API."""
    uvicorn.run(
        "src.app:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug,  # Auto-reload только в debug
        log_level=settings.log_level.lower(),
        access_log=settings.debug,
        workers=1,  # In-memory store и rate limiter живут в процессе
    )


if __name__ == "__main__":
    main()
