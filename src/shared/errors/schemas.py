"""Error schemas.

Pydantic схемы для ошибок.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorDetail(BaseModel):
    """Детальная информация об ошибке."""

    model_config = ConfigDict(extra="allow")

    violations: list[str] | None = Field(default=None, description="Нарушенные ограничения полей")
    context: dict[str, Any] | None = Field(default=None, description="Дополнительный контекст")


class ErrorResponse(BaseModel):
    """Стандартный ответ с ошибкой."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "Task not found",
                "code": "TASK_NOT_FOUND",
                "details": {"task_id": 42},
                "trace_id": "a1b2c3d4-e5f6-4789-9012-345678901234",
            }
        }
    )

    error: str = Field(..., description="Человекочитаемое сообщение")
    code: str = Field(..., description="Код ошибки")
    details: dict[str, Any] = Field(default_factory=dict, description="Дополнительные детали")
    trace_id: str = Field(default="", description="ID трассировки для отладки")
