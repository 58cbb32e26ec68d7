"""Валидация полей задачи.

Собирает все нарушения сразу (а не первое) и бросает InvalidInputError.
Используется и при создании, и при обновлении задачи.
"""

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from src.core.constants import TITLE_MAX_LENGTH
from src.core.enums import TaskStatus
from src.shared.errors import InvalidInputError

TASK_FIELDS = ("title", "description", "status", "due_date")


def parse_due_date(value: datetime | str) -> datetime:
    """Привести due_date к timezone-aware UTC.

    Принимает ISO 8601: "2024-05-01", "2024-05-01 10:00:00", "2024-05-01T10:00:00+02:00".
    Naive значения считаются UTC.

    Raises:
        ValueError: Значение не распознано как дата

    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        parsed = datetime.fromisoformat(value.strip())
    else:
        msg = f"Не удалось распознать дату: {value!r}"
        raise ValueError(msg)

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def extract_fields(payload: Any) -> dict[str, Any]:
    """Поля задачи, присутствующие в payload.

    null считается отсутствием поля, неизвестные ключи игнорируются.

    Raises:
        InvalidInputError: payload не JSON объект

    """
    if not isinstance(payload, Mapping):
        raise InvalidInputError(["body: This value should be a JSON object."])
    return {key: payload[key] for key in TASK_FIELDS if payload.get(key) is not None}


def validate_task_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Проверить полный набор полей задачи.

    Args:
        fields: title, description, status, due_date (raw или уже типизированные)

    Returns:
        Нормализованные значения: status как TaskStatus, due_date как datetime UTC

    Raises:
        InvalidInputError: Со списком всех нарушений

    """
    violations: list[str] = []

    title = fields.get("title")
    if not isinstance(title, str):
        violations.append("title: This value should be of type string.")
    elif not title.strip():
        violations.append("title: This value should not be blank.")
    elif len(title) > TITLE_MAX_LENGTH:
        violations.append(
            f"title: This value is too long. It should have {TITLE_MAX_LENGTH} characters or less."
        )

    description = fields.get("description", "")
    if not isinstance(description, str):
        violations.append("description: This value should be of type string.")

    status: TaskStatus | None = None
    try:
        status = TaskStatus(fields.get("status", TaskStatus.PENDING))
    except (TypeError, ValueError):
        choices = ", ".join(s.value for s in TaskStatus)
        violations.append(f"status: The value you selected is not a valid choice ({choices}).")

    due_date = fields.get("due_date")
    if due_date is not None:
        try:
            due_date = parse_due_date(due_date)
        except (TypeError, ValueError):
            violations.append("due_date: This value is not a valid datetime.")

    if violations:
        raise InvalidInputError(violations)

    return {
        "title": title,
        "description": description,
        "status": status,
        "due_date": due_date,
    }
