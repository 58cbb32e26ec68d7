"""Request context management.

trace_id текущего запроса: ставится middleware, читается логгером и обработчиками ошибок.
"""

from contextvars import ContextVar, Token
from uuid import uuid4

trace_id_var: ContextVar[str] = ContextVar("trace_id", default="")


def get_trace_id() -> str:
    """Получить текущий trace_id или сгенерировать новый."""
    trace_id = trace_id_var.get()
    if not trace_id:
        trace_id = str(uuid4())
        trace_id_var.set(trace_id)
    return trace_id


def set_trace_id(trace_id: str | None) -> Token[str]:
    """Установить trace_id запроса.

    Args:
        trace_id: Значение из X-Request-ID (пустое - сгенерировать).

    Returns:
        Token для восстановления предыдущего значения.

    """
    return trace_id_var.set(trace_id or str(uuid4()))


def reset_trace_id(token: Token[str]) -> None:
    """Вернуть trace_id, действовавший до set_trace_id."""
    trace_id_var.reset(token)
