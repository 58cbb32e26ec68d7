"""Task Tracker API - Configuration Settings.

Pydantic Settings для управления конфигурацией через env vars.
Компоненты получают значения через конструктор, singleton читает только composition root.
"""

from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Главные настройки приложения."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =================================================================
    # Application
    # =================================================================
    app_name: str = Field(default="Task Tracker API", description="Название приложения")
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Окружение"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Уровень логирования"
    )
    debug: bool = Field(default=False, description="Режим отладки")

    # =================================================================
    # Server
    # =================================================================
    server_host: str = Field(default="0.0.0.0", description="Хост сервера")
    server_port: int = Field(default=8000, description="Порт сервера")
    cors_allowed_origins: list[str] = Field(default=["*"], description="Разрешённые origins для CORS")

    @field_validator("server_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Валидация порта."""
        if not 1 <= v <= 65535:
            msg = f"Порт должен быть в диапазоне 1-65535, получено: {v}"
            raise ValueError(msg)
        return v

    # =================================================================
    # Storage (TaskStore + RateLimiter)
    # =================================================================
    storage_backend: Literal["memory", "redis"] = Field(
        default="memory",
        description="Backend для задач и rate limiter"
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="URL подключения к Redis"
    )

    # =================================================================
    # Notifications (transactional email provider)
    # =================================================================
    provider_api_key: str | None = Field(default=None, description="Bearer токен email провайдера")
    provider_url: str = Field(
        default="https://api.sendgrid.com/v3/mail/send",
        description="Endpoint email провайдера"
    )
    from_email: str = Field(default="noreply@example.com", description="Адрес отправителя")
    notification_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        le=60,
        description="Timeout запроса к провайдеру"
    )
    notification_queue_size: int = Field(
        default=1000,
        ge=1,
        le=100000,
        description="Размер очереди уведомлений"
    )

    @field_validator("provider_api_key")
    @classmethod
    def validate_api_key(cls, v: str | None) -> str | None:
        """Пустой ключ означает отключённые уведомления."""
        if v is not None and not v.strip():
            return None
        return v

    # =================================================================
    # Rate limiting (только create)
    # =================================================================
    rate_limit_capacity: int = Field(default=10, ge=1, description="Единиц на интервал")
    rate_limit_interval_seconds: int = Field(
        default=60,
        ge=1,
        description="Длина окна / время полного пополнения"
    )
    rate_limit_refill_policy: Literal["fixed_window", "sliding_window", "token_bucket"] = Field(
        default="sliding_window",
        description="Политика rate limiter"
    )

    @model_validator(mode="after")
    def validate_backend_policy(self) -> "Settings":
        """token_bucket поддерживается только in-memory backend."""
        if self.storage_backend == "redis" and self.rate_limit_refill_policy == "token_bucket":
            msg = "token_bucket политика недоступна для redis backend"
            raise ValueError(msg)
        return self


# Singleton instance
settings = Settings()
