"""Unit тесты для HTTP API задач (src/api/routes, src/app.py)."""

import re

import pytest
from httpx import ASGITransport, AsyncClient

from config.settings import Settings
from src.api.routes.tasks import parse_int_param
from src.app import create_app, parse_request_id
from src.core.constants import INT64_MAX, MAX_PAGE

ALICE = {"X-User-Email": "a@x.com"}
BOB = {"X-User-Email": "b@x.com"}
DATETIME_RE = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")


@pytest.fixture
async def client() -> AsyncClient:
    """Test client для FastAPI приложения с in-memory backend и выполненным lifespan."""
    settings = Settings(
        app_env="development",
        storage_backend="memory",
        provider_api_key=None,
        rate_limit_capacity=3,
        rate_limit_refill_policy="sliding_window",
    )
    app = create_app(settings)

    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac


class TestParseIntParam:
    """Тесты для parse_int_param."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [(None, 7), ("3", 3), (" 12", 12), ("5abc", 5), ("abc", 0), ("", 0), ("-2", -2), ("+4", 4)],
    )
    def test_lenient_parsing(self, raw: str | None, expected: int) -> None:
        assert parse_int_param(raw, default=7) == expected

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("9" * 5000, INT64_MAX),
            ("-" + "9" * 5000, -INT64_MAX - 1),
            ("9223372036854775808", INT64_MAX),
            ("0" * 30 + "42", 42),
        ],
    )
    def test_out_of_range_saturates(self, raw: str, expected: int) -> None:
        assert parse_int_param(raw, default=7) == expected


class TestParseRequestId:
    """Тесты для parse_request_id."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (b"req-123", "req-123"),
            (b"  req-123 ", "req-123"),
            (b"", None),
            (b"\xff\xfe", None),
            (b"has space", None),
            (b"x" * 129, None),
            (b"x" * 128, "x" * 128),
        ],
    )
    def test_parse(self, raw: bytes, expected: str | None) -> None:
        assert parse_request_id(raw) == expected


class TestRootAndHealth:
    """Тесты для / и /health."""

    @pytest.mark.asyncio
    async def test_root_endpoint(self, client: AsyncClient) -> None:
        response = await client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "Task Tracker API"
        assert data["status"] == "running"

    @pytest.mark.asyncio
    async def test_health_endpoint(self, client: AsyncClient) -> None:
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["storage_backend"] == "memory"
        assert data["notifications_pending"] == 0

    @pytest.mark.asyncio
    async def test_trace_id_echoed(self, client: AsyncClient) -> None:
        response = await client.get("/", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Trace-Id"] == "req-123"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("request_id", [b"\xff\xfe", b"r" * 500])
    async def test_unusable_request_id_replaced(self, client: AsyncClient, request_id: bytes) -> None:
        """Не ASCII или слишком длинный X-Request-ID не ломает запрос и не возвращается клиенту."""
        response = await client.get("/", headers=[(b"X-Request-ID", request_id)])

        assert response.status_code == 200
        trace_id = response.headers["X-Trace-Id"]
        assert trace_id.encode() != request_id
        assert len(trace_id) == 36

    @pytest.mark.asyncio
    async def test_openapi_error_examples(self, client: AsyncClient) -> None:
        response = await client.get("/openapi.json")

        responses = response.json()["paths"]["/api/tasks/{task_id}"]["get"]["responses"]
        assert responses["404"]["content"]["application/json"]["example"]["code"] == "TASK_NOT_FOUND"
        assert responses["401"]["content"]["application/json"]["example"]["code"] == "UNAUTHORIZED"


class TestTaskScenario:
    """Сквозной сценарий create -> update -> delete -> get."""

    @pytest.mark.asyncio
    async def test_buy_milk_lifecycle(self, client: AsyncClient) -> None:
        created = await client.post("/api/tasks", json={"title": "Buy milk"}, headers=ALICE)

        assert created.status_code == 201
        body = created.json()
        assert body["message"] == "Task created successfully"
        task = body["task"]
        assert task["title"] == "Buy milk"
        assert task["status"] == "pending"
        assert task["description"] == ""
        assert task["due_date"] is None
        assert DATETIME_RE.match(task["created_at"])
        assert DATETIME_RE.match(task["updated_at"])
        assert set(task) == {"id", "title", "description", "status", "due_date", "created_at", "updated_at"}
        task_id = task["id"]

        updated = await client.put(f"/api/tasks/{task_id}", json={"status": "completed"}, headers=ALICE)

        assert updated.status_code == 200
        assert updated.json()["message"] == "Task updated successfully"
        assert updated.json()["task"]["title"] == "Buy milk"
        assert updated.json()["task"]["status"] == "completed"

        fetched = await client.get(f"/api/tasks/{task_id}", headers=ALICE)
        assert fetched.status_code == 200
        assert fetched.json()["task"]["status"] == "completed"

        deleted = await client.delete(f"/api/tasks/{task_id}", headers=ALICE)

        assert deleted.status_code == 200
        assert deleted.json() == {"message": "Task deleted successfully"}

        missing = await client.get(f"/api/tasks/{task_id}", headers=ALICE)

        assert missing.status_code == 404
        assert missing.json()["error"] == "Task not found"
        assert missing.json()["code"] == "TASK_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_due_date_format(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/tasks",
            json={"title": "Report", "due_date": "2024-05-01T10:00:00+02:00"},
            headers=ALICE,
        )

        assert response.status_code == 201
        assert response.json()["task"]["due_date"] == "2024-05-01 08:00:00"


class TestOwnership:
    """Чужие задачи неотличимы от несуществующих."""

    @pytest.mark.asyncio
    async def test_foreign_task_returns_404(self, client: AsyncClient) -> None:
        created = await client.post("/api/tasks", json={"title": "Secret"}, headers=ALICE)
        task_id = created.json()["task"]["id"]

        foreign_get = await client.get(f"/api/tasks/{task_id}", headers=BOB)
        foreign_put = await client.put(f"/api/tasks/{task_id}", json={"title": "Mine"}, headers=BOB)
        foreign_delete = await client.delete(f"/api/tasks/{task_id}", headers=BOB)
        nonexistent = await client.get("/api/tasks/9999", headers=BOB)

        for response in (foreign_get, foreign_put, foreign_delete):
            assert response.status_code == 404
            assert response.json()["error"] == nonexistent.json()["error"]

        still_there = await client.get(f"/api/tasks/{task_id}", headers=ALICE)
        assert still_there.json()["task"]["title"] == "Secret"

    @pytest.mark.asyncio
    async def test_list_only_own_tasks(self, client: AsyncClient) -> None:
        await client.post("/api/tasks", json={"title": "Alice task"}, headers=ALICE)
        await client.post("/api/tasks", json={"title": "Bob task"}, headers=BOB)

        response = await client.get("/api/tasks", headers=BOB)

        assert [t["title"] for t in response.json()["tasks"]] == ["Bob task"]

    @pytest.mark.asyncio
    async def test_missing_principal(self, client: AsyncClient) -> None:
        response = await client.get("/api/tasks")

        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"


class TestListing:
    """Тесты для GET /api/tasks."""

    @pytest.mark.asyncio
    async def test_lenient_pagination(self, client: AsyncClient) -> None:
        """Некорректные page/limit приводятся к допустимым, а не отклоняются."""
        for title in ("one", "two"):
            await client.post("/api/tasks", json={"title": title}, headers=ALICE)

        response = await client.get("/api/tasks", params={"page": "0", "limit": "abc"}, headers=ALICE)

        assert response.status_code == 200
        data = response.json()
        assert (data["page"], data["limit"]) == (1, 1)
        assert [t["title"] for t in data["tasks"]] == ["two"]

    @pytest.mark.asyncio
    async def test_defaults_and_max_limit(self, client: AsyncClient) -> None:
        default = await client.get("/api/tasks", headers=ALICE)
        huge = await client.get("/api/tasks", params={"limit": "500"}, headers=ALICE)

        assert (default.json()["page"], default.json()["limit"]) == (1, 10)
        assert huge.json()["limit"] == 100

    @pytest.mark.asyncio
    async def test_out_of_range_page(self, client: AsyncClient) -> None:
        """Огромные page/limit насыщаются, а не приводят к 500."""
        await client.post("/api/tasks", json={"title": "Buy milk"}, headers=ALICE)

        response = await client.get("/api/tasks", params={"page": "9" * 5000, "limit": "9" * 5000}, headers=ALICE)

        assert response.status_code == 200
        assert response.json() == {"page": MAX_PAGE, "limit": 100, "tasks": []}

    @pytest.mark.asyncio
    async def test_status_and_search(self, client: AsyncClient) -> None:
        await client.post("/api/tasks", json={"title": "Buy milk", "status": "completed"}, headers=ALICE)
        await client.post("/api/tasks", json={"title": "Walk dog"}, headers=ALICE)

        completed = await client.get("/api/tasks", params={"status": "completed"}, headers=ALICE)
        searched = await client.get("/api/tasks", params={"search": "DOG", "status": "completed"}, headers=ALICE)

        assert [t["title"] for t in completed.json()["tasks"]] == ["Buy milk"]
        assert [t["title"] for t in searched.json()["tasks"]] == ["Walk dog"]


class TestErrors:
    """Ошибочные ответы API."""

    @pytest.mark.asyncio
    async def test_blank_title(self, client: AsyncClient) -> None:
        response = await client.post("/api/tasks", json={"title": ""}, headers=ALICE)

        assert response.status_code == 400
        data = response.json()
        assert data["code"] == "INVALID_INPUT"
        assert data["details"]["violations"] == ["title: This value should not be blank."]
        assert "task" not in data

    @pytest.mark.asyncio
    async def test_invalid_update(self, client: AsyncClient) -> None:
        created = await client.post("/api/tasks", json={"title": "Buy milk"}, headers=ALICE)
        task_id = created.json()["task"]["id"]

        response = await client.put(
            f"/api/tasks/{task_id}", json={"status": "archived", "due_date": "someday"}, headers=ALICE
        )

        assert response.status_code == 400
        assert len(response.json()["details"]["violations"]) == 2

    @pytest.mark.asyncio
    async def test_body_not_an_object(self, client: AsyncClient) -> None:
        response = await client.post("/api/tasks", json=["Buy milk"], headers=ALICE)

        assert response.status_code == 400
        assert response.json()["details"]["violations"] == ["body: This value should be a JSON object."]

    @pytest.mark.asyncio
    async def test_malformed_json(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/tasks",
            content=b"{not json",
            headers={**ALICE, "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_INPUT"

    @pytest.mark.asyncio
    async def test_non_integer_id(self, client: AsyncClient) -> None:
        response = await client.get("/api/tasks/abc", headers=ALICE)

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_INPUT"

    @pytest.mark.asyncio
    async def test_rate_limited_create(self, client: AsyncClient) -> None:
        """capacity=3: четвёртое создание подряд - 429 с Retry-After, чтение не лимитируется."""
        for i in range(3):
            ok = await client.post("/api/tasks", json={"title": f"task {i}"}, headers=ALICE)
            assert ok.status_code == 201

        limited = await client.post("/api/tasks", json={"title": "one more"}, headers=ALICE)

        assert limited.status_code == 429
        assert limited.json()["code"] == "RATE_LIMITED"
        assert int(limited.headers["Retry-After"]) >= 1

        listing = await client.get("/api/tasks", headers=ALICE)
        assert listing.status_code == 200
        assert len(listing.json()["tasks"]) == 3

        other_user = await client.post("/api/tasks", json={"title": "bob"}, headers=BOB)
        assert other_user.status_code == 201
