"""
Integration tests: TodoService against real gateways.

Every test runs once per gateway (SQLite file and in-memory).
"""
import pytest

from todocore.exceptions import TodoNotFoundError, ValidationError
from todocore.models import TodoStatus
from todocore.services import TodoService


@pytest.fixture
def service(gateway):
    return TodoService(gateway)


class TestTodoLifecycle:

    def test_create_starts_at_init_with_fresh_id(self, service):
        seen = set()
        for i in range(5):
            todo = service.create_todo(f"task {i}", "details")
            assert todo.status is TodoStatus.INIT
            assert todo.id not in seen
            seen.add(todo.id)

    def test_create_empty_task_persists_nothing(self, service):
        with pytest.raises(ValidationError):
            service.create_todo("", "x")
        assert service.fetch_todos() == []

    def test_fetch_matches_created(self, service):
        created = service.create_todo("Buy milk", "2 liters")
        assert service.fetch_todo(created.id) == created

    def test_update_status_is_persisted(self, service):
        todo = service.create_todo("Buy milk")

        updated = service.update_status(todo.id, "DONE")

        assert updated.status is TodoStatus.DONE
        assert service.fetch_todo(todo.id).status is TodoStatus.DONE

    def test_invalid_status_leaves_record_unchanged(self, service):
        todo = service.create_todo("Buy milk")
        service.update_status(todo.id, "IN_PROGRESS")

        with pytest.raises(ValidationError):
            service.update_status(todo.id, "BOGUS")

        assert service.fetch_todo(todo.id).status is TodoStatus.IN_PROGRESS

    def test_update_status_missing_id(self, service):
        with pytest.raises(TodoNotFoundError):
            service.update_status(12345, "DONE")

    def test_delete_then_fetch_not_found(self, service):
        todo = service.create_todo("Buy milk")

        service.delete_todo(todo.id)

        with pytest.raises(TodoNotFoundError):
            service.fetch_todo(todo.id)

    def test_delete_twice(self, service):
        todo = service.create_todo("Buy milk")
        service.delete_todo(todo.id)
        with pytest.raises(TodoNotFoundError):
            service.delete_todo(todo.id)

    def test_fetch_todos_empty_store(self, service):
        assert service.fetch_todos() == []

    def test_fetch_todos_lists_everything(self, service):
        a = service.create_todo("a")
        b = service.create_todo("b", "with description")
        service.update_status(b.id, "DONE")

        todos = {t.id: t for t in service.fetch_todos()}

        assert set(todos) == {a.id, b.id}
        assert todos[b.id].status is TodoStatus.DONE
        assert todos[b.id].description == "with description"

    def test_fetch_todos_after_delete(self, service):
        a = service.create_todo("a")
        b = service.create_todo("b")
        service.delete_todo(a.id)
        assert [t.id for t in service.fetch_todos()] == [b.id]

    def test_to_dict_uses_json_field_names(self, service):
        todo = service.create_todo("Buy milk", "2 liters")
        data = todo.to_dict()
        assert data["id"] == todo.id
        assert data["task"] == "Buy milk"
        assert data["description"] == "2 liters"
        assert data["status"] == "INIT"


class TestGatewayRoundTrip:

    @pytest.mark.parametrize("record", [
        {"task": "plain", "description": ""},
        {"task": "unicode ✓ задача", "description": "multi\nline"},
        {"task": "quotes ' \" ;", "description": "DROP TABLE todos; --"},
        {"task": "status set", "description": "x", "status": "DONE"},
    ])
    def test_insert_find_preserves_fields(self, gateway, record):
        todo_id = gateway.insert(record)
        stored = gateway.find_by_id(todo_id)
        for key, value in record.items():
            assert stored[key] == value


class TestIdsOutsideKeyRange:
    """Ids no engine column can hold behave like any other missing id."""

    @pytest.mark.parametrize("todo_id", [2**63, 2**64 + 1])
    def test_fetch_not_found(self, service, todo_id):
        with pytest.raises(TodoNotFoundError) as exc_info:
            service.fetch_todo(todo_id)
        assert exc_info.value.todo_id == todo_id

    @pytest.mark.parametrize("todo_id", [2**63, 2**64 + 1])
    def test_update_status_not_found(self, service, todo_id):
        with pytest.raises(TodoNotFoundError):
            service.update_status(todo_id, "DONE")

    @pytest.mark.parametrize("todo_id", [2**63, 2**64 + 1])
    def test_delete_not_found(self, service, todo_id):
        service.create_todo("untouched")
        with pytest.raises(TodoNotFoundError):
            service.delete_todo(todo_id)
        assert len(service.fetch_todos()) == 1
