"""Tasks API Routes для Task Tracker.

CRUD endpoints задач текущего пользователя.
"""

import re
from typing import Annotated, Any

from fastapi import APIRouter, Body, Query, status

from src.api.schemas.responses import (
    MessageResponse,
    TaskEnvelope,
    TaskListResponse,
    TaskMutationResponse,
    TaskSchema,
)
from src.core.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, INT64_MAX, TASKS_API_PREFIX
from src.core.dependencies import CurrentUserDep, TaskServiceDep
from src.shared.errors import InvalidInputError, RateLimitedError, TaskNotFoundError, UnauthorizedError


router = APIRouter(prefix=TASKS_API_PREFIX, tags=["tasks"])

_LEADING_INT = re.compile(r"^\s*([+-]?)(\d+)")
_INT64_DIGITS = len(str(INT64_MAX))

_COMMON_RESPONSES: dict[int | str, dict[str, Any]] = {
    401: UnauthorizedError.openapi_response(),
}
_NOT_FOUND_RESPONSES: dict[int | str, dict[str, Any]] = {
    **_COMMON_RESPONSES,
    404: TaskNotFoundError.openapi_response(),
}

JsonBody = Annotated[Any, Body()]


def parse_int_param(raw: str | None, default: int) -> int:
    """Привести query параметр к int без отказа.

    Берутся ведущие цифры ("3abc" -> 3), иначе 0. Отсутствующий параметр -> default.
    Значения за пределами int64 насыщаются до границы.
    """
    if raw is None:
        return default
    match = _LEADING_INT.match(raw)
    if not match:
        return 0
    sign, digits = match.group(1), match.group(2).lstrip("0")
    bound = -INT64_MAX - 1 if sign == "-" else INT64_MAX
    if len(digits) > _INT64_DIGITS:
        return bound
    value = int(sign + digits) if digits else 0
    return max(-INT64_MAX - 1, min(INT64_MAX, value))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Создать задачу",
    description="Создаёт задачу текущего пользователя (rate limited)",
    responses={
        201: {"description": "Задача создана успешно"},
        400: InvalidInputError.openapi_response(),
        429: RateLimitedError.openapi_response(),
        **_COMMON_RESPONSES,
    },
)
async def create_task(
    user: CurrentUserDep,
    service: TaskServiceDep,
    payload: JsonBody = None,
) -> TaskMutationResponse:
    """Создать задачу.

    Args:
        user: Principal из X-User-Email
        service: TaskService
        payload: JSON объект с title, description, status, due_date

    Returns:
        TaskMutationResponse с созданной задачей

    """
    task = await service.create(user, payload if payload is not None else {})
    return TaskMutationResponse(
        message="Task created successfully",
        task=TaskSchema.from_task(task),
    )


@router.get(
    "",
    summary="Список задач",
    description="Задачи текущего пользователя, новые первыми. search игнорирует status",
    responses=_COMMON_RESPONSES,
)
async def list_tasks(
    user: CurrentUserDep,
    service: TaskServiceDep,
    page: Annotated[str | None, Query(description="Номер страницы (>= 1)")] = None,
    limit: Annotated[str | None, Query(description="Размер страницы (1-100)")] = None,
    status_filter: Annotated[str | None, Query(alias="status", description="Фильтр по статусу")] = None,
    search: Annotated[str | None, Query(description="Подстрока в title или description")] = None,
) -> TaskListResponse:
    """Страница задач пользователя."""
    result = await service.list(
        user,
        page=parse_int_param(page, DEFAULT_PAGE),
        limit=parse_int_param(limit, DEFAULT_PAGE_SIZE),
        status=status_filter,
        search=search,
    )
    return TaskListResponse(
        page=result.page,
        limit=result.limit,
        tasks=[TaskSchema.from_task(task) for task in result.tasks],
    )


@router.get(
    "/{task_id}",
    summary="Получить задачу",
    responses=_NOT_FOUND_RESPONSES,
)
async def get_task(task_id: int, user: CurrentUserDep, service: TaskServiceDep) -> TaskEnvelope:
    """Получить задачу по ID.

    Raises:
        TaskNotFoundError: Задачи нет или она принадлежит другому пользователю

    """
    task = await service.get(user, task_id)
    return TaskEnvelope(task=TaskSchema.from_task(task))


@router.put(
    "/{task_id}",
    summary="Обновить задачу",
    description="Частичное обновление: меняются только присланные поля",
    responses={
        400: InvalidInputError.openapi_response(),
        **_NOT_FOUND_RESPONSES,
    },
)
async def update_task(
    task_id: int,
    user: CurrentUserDep,
    service: TaskServiceDep,
    payload: JsonBody = None,
) -> TaskMutationResponse:
    """Обновить задачу.

    Args:
        task_id: ID задачи
        user: Principal из X-User-Email
        service: TaskService
        payload: JSON объект с изменяемыми полями

    Returns:
        TaskMutationResponse с обновлённой задачей

    """
    task = await service.update(user, task_id, payload if payload is not None else {})
    return TaskMutationResponse(
        message="Task updated successfully",
        task=TaskSchema.from_task(task),
    )


@router.delete(
    "/{task_id}",
    summary="Удалить задачу",
    responses=_NOT_FOUND_RESPONSES,
)
async def delete_task(task_id: int, user: CurrentUserDep, service: TaskServiceDep) -> MessageResponse:
    """Удалить задачу (hard delete)."""
    await service.delete(user, task_id)
    return MessageResponse(message="Task deleted successfully")
