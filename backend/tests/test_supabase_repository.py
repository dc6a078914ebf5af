"""Tests for the Supabase repositories against a scripted fake client."""
from types import SimpleNamespace

import pytest
from postgrest.exceptions import APIError

from app.core.exceptions import DatabaseError
from app.models.routine import CompletionCreate, DateRange, Pagination, RoutineCreate, StreakUpdate
from app.models.user import UserUpdate
from app.services.routines import RoutineRepository, SupabaseRoutineRepository
from app.services.users import SupabaseUserRepository, UserRepository

ROUTINE_ROW = {
    "id": "r1",
    "user_id": "alice",
    "title": "Read",
    "description": None,
    "schedule": {"time": "07:00"},
    "auto_share": False,
    "visibility": "private",
    "current_streak": 0,
    "max_streak": 0,
    "created_at": "2024-04-01T09:00:00+00:00",
    "updated_at": "2024-04-01T09:00:00+00:00",
    "deleted_at": None,
}

COMPLETION_ROW = {
    "id": "c1",
    "routine_id": "r1",
    "user_id": "alice",
    "date": "2024-04-01",
    "created_at": "2024-04-01T09:00:00+00:00",
}


class FakeQuery:
    """Records the builder chain and pops the next scripted result on execute()"""

    def __init__(self, client, table):
        self.client = client
        self.table = table
        self.calls = []

    def __getattr__(self, name):
        def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self
        return method

    async def execute(self):
        self.client.executed.append(self)
        outcome = self.client.results.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeClient:
    def __init__(self, *results):
        self.results = list(results)
        self.executed = []

    def table(self, name):
        return FakeQuery(self, name)


def result(data=None, count=None):
    return SimpleNamespace(data=data if data is not None else [], count=count)


def call_names(query):
    return [name for name, _, _ in query.calls]


def has_call(query, name, *args):
    return any(n == name and a == args for n, a, _ in query.calls)


class TestRoutineRepository:
    def test_satisfies_protocol(self):
        assert isinstance(SupabaseRoutineRepository(FakeClient()), RoutineRepository)

    async def test_get_by_id_filters_by_owner(self):
        client = FakeClient(result([ROUTINE_ROW]))
        repo = SupabaseRoutineRepository(client)

        routine = await repo.get_by_id("alice", "r1")

        query = client.executed[0]
        assert query.table == "routines"
        assert has_call(query, "eq", "id", "r1")
        assert has_call(query, "eq", "user_id", "alice")
        assert routine.schedule == {"time": "07:00"}

    async def test_get_by_id_returns_none_when_no_row(self):
        repo = SupabaseRoutineRepository(FakeClient(result([])))
        assert await repo.get_by_id("bob", "r1") is None

    async def test_backend_failure_becomes_database_error(self):
        repo = SupabaseRoutineRepository(FakeClient(ConnectionError("boom")))
        with pytest.raises(DatabaseError):
            await repo.get_by_id("alice", "r1")

    async def test_list_by_user_pages_and_counts(self):
        client = FakeClient(result([ROUTINE_ROW], count=42))
        repo = SupabaseRoutineRepository(client)

        page = await repo.list_by_user("alice", Pagination(page=3, limit=10))

        query = client.executed[0]
        assert has_call(query, "range", 20, 29)
        assert has_call(query, "is_", "deleted_at", "null")
        orders = [call for call in query.calls if call[0] == "order"]
        assert orders == [
            ("order", ("created_at",), {"desc": True}),
            ("order", ("id",), {"desc": True}),
        ]
        assert page.total == 42
        assert [r.id for r in page.items] == ["r1"]

    async def test_create_inserts_full_row(self):
        client = FakeClient(result([ROUTINE_ROW]))
        repo = SupabaseRoutineRepository(client)

        await repo.create("alice", RoutineCreate(title="Read", schedule={"time": "07:00"}))

        name, args, _ = client.executed[0].calls[0]
        assert name == "insert"
        row = args[0]
        assert row["user_id"] == "alice"
        assert row["visibility"] == "private"
        assert row["current_streak"] == 0 and row["max_streak"] == 0
        assert row["deleted_at"] is None
        assert row["created_at"] == row["updated_at"]

    async def test_update_sends_only_mutable_fields(self):
        client = FakeClient(result([{**ROUTINE_ROW, "title": "Write"}]))
        repo = SupabaseRoutineRepository(client)

        updated = await repo.update("alice", "r1", {"title": "Write", "user_id": "bob", "schedule": None})

        query = client.executed[0]
        payload = query.calls[0][1][0]
        assert set(payload) == {"title", "schedule", "updated_at"}
        assert payload["schedule"] == {}
        assert has_call(query, "eq", "user_id", "alice")
        assert updated.title == "Write"

    async def test_update_streaks_returns_none_for_foreign_routine(self):
        repo = SupabaseRoutineRepository(FakeClient(result([])))
        assert await repo.update_streaks("bob", "r1", StreakUpdate(current_streak=1, max_streak=1)) is None

    async def test_count_by_user(self):
        client = FakeClient(result([{"id": "r1"}], count=2))
        assert await SupabaseRoutineRepository(client).count_by_user("alice") == 2
        assert ("select", ("id",), {"count": "exact"}) in client.executed[0].calls

    async def test_list_by_schedule_time_queries_json_field(self):
        client = FakeClient(result([ROUTINE_ROW]))
        due = await SupabaseRoutineRepository(client).list_by_schedule_time("07:00")
        assert has_call(client.executed[0], "eq", "schedule->>time", "07:00")
        assert [r.id for r in due] == ["r1"]

    async def test_list_completions_applies_range(self):
        client = FakeClient(result([ROUTINE_ROW]), result([COMPLETION_ROW]))
        repo = SupabaseRoutineRepository(client)

        items = await repo.list_completions(
            "alice", "r1", DateRange(from_date="2024-04-01", to_date="2024-04-30")
        )

        query = client.executed[1]
        assert query.table == "routine_completions"
        assert has_call(query, "gte", "date", "2024-04-01")
        assert has_call(query, "lte", "date", "2024-04-30")
        assert [c.date for c in items] == ["2024-04-01"]

    async def test_list_completions_for_foreign_routine_is_empty(self):
        client = FakeClient(result([]))
        assert await SupabaseRoutineRepository(client).list_completions("bob", "r1") == []
        assert len(client.executed) == 1

    async def test_add_completion_returns_existing_record(self):
        client = FakeClient(result([ROUTINE_ROW]), result([COMPLETION_ROW]))
        repo = SupabaseRoutineRepository(client)

        completion = await repo.add_completion("alice", "r1", CompletionCreate(date="2024-04-01"))

        assert completion.id == "c1"
        assert "insert" not in call_names(client.executed[-1])

    async def test_add_completion_inserts_when_absent(self):
        client = FakeClient(result([ROUTINE_ROW]), result([]), result([{**COMPLETION_ROW, "id": "c2"}]))
        repo = SupabaseRoutineRepository(client)

        completion = await repo.add_completion("alice", "r1", CompletionCreate(date="2024-04-01"))

        assert completion.id == "c2"
        assert call_names(client.executed[-1]) == ["insert"]

    async def test_add_completion_race_rereads_winner(self):
        conflict = APIError({"message": "duplicate key", "code": "23505"})
        client = FakeClient(result([ROUTINE_ROW]), result([]), conflict, result([COMPLETION_ROW]))
        repo = SupabaseRoutineRepository(client)

        completion = await repo.add_completion("alice", "r1", CompletionCreate(date="2024-04-01"))
        assert completion.id == "c1"

    async def test_add_completion_other_api_errors_propagate(self):
        failure = APIError({"message": "permission denied", "code": "42501"})
        client = FakeClient(result([ROUTINE_ROW]), result([]), failure)
        with pytest.raises(DatabaseError):
            await SupabaseRoutineRepository(client).add_completion(
                "alice", "r1", CompletionCreate(date="2024-04-01")
            )

    async def test_remove_completion(self):
        client = FakeClient(result([ROUTINE_ROW]), result([COMPLETION_ROW]), result([ROUTINE_ROW]), result([]))
        repo = SupabaseRoutineRepository(client)
        assert await repo.remove_completion("alice", "r1", "2024-04-01") is True
        assert await repo.remove_completion("alice", "r1", "2024-04-01") is False


class TestUserRepository:
    def test_satisfies_protocol(self):
        assert isinstance(SupabaseUserRepository(FakeClient()), UserRepository)

    async def test_get_by_id(self):
        row = {
            "id": "alice",
            "display_name": "Alice",
            "photo_url": None,
            "is_premium": None,
            "notification_settings": {"whatsapp_enabled": True, "whatsapp_number": "+15550001"},
            "created_at": "2024-04-01T09:00:00+00:00",
            "updated_at": "2024-04-01T09:00:00+00:00",
        }
        user = await SupabaseUserRepository(FakeClient(result([row]))).get_by_id("alice")
        assert user.is_premium is False
        assert user.notification_settings.whatsapp_number == "+15550001"

    async def test_update_missing_user(self):
        client = FakeClient(result([]))
        assert await SupabaseUserRepository(client).update("ghost", UserUpdate(display_name="x")) is None
        payload = client.executed[0].calls[0][1][0]
        assert set(payload) == {"display_name", "updated_at"}
