"""Tests for the shared workflow layer."""

from datetime import datetime, timedelta

import pytest

from agenda.adapters.yaml_log import YamlActionLog
from agenda.config import Config
from agenda.core import actions as a
from agenda.core.events import Cause
from agenda.core.todos import Estimate, Status
from agenda.workflows import (
    AgendaError,
    add_dependent,
    add_todo,
    get_log,
    load_state,
    parse_estimate,
    parse_status,
    remove_dependent,
    remove_event,
    remove_todo,
    schedule_event,
    set_deadline,
    set_estimate,
    set_status,
    set_title,
)


@pytest.fixture
def log(tmp_path):
    return YamlActionLog(tmp_path / "todo.yaml")


@pytest.fixture
def todo(log):
    return add_todo(log, "Write spec")


class TestGetLog:
    def test_uses_configured_path(self, tmp_path):
        config = Config(log_file=str(tmp_path / "mine.yaml"))
        assert get_log(config).path == tmp_path / "mine.yaml"


class TestLoadState:
    def test_empty_log(self, log):
        state = load_state(log)
        assert state.todos == {}

    def test_limit(self, log, todo):
        set_title(log, todo.id, "Renamed")
        assert load_state(log).resolve_todo(todo.id).title == "Renamed"
        assert load_state(log, limit=1).resolve_todo(todo.id).title == "Write spec"


class TestParsing:
    def test_single_value_estimate(self):
        assert parse_estimate("30") == Estimate(30, 30)

    def test_range_estimate(self):
        assert parse_estimate("30-60") == Estimate(30, 60)

    def test_inverted_estimate_rejected(self):
        with pytest.raises(AgendaError, match="low <= high"):
            parse_estimate("60-30")

    def test_garbage_estimate_rejected(self):
        with pytest.raises(AgendaError, match="Invalid estimate"):
            parse_estimate("soon")

    def test_status_aliases(self):
        assert parse_status("in_progress") is Status.IN_PROGRESS
        assert parse_status("Complete") is Status.COMPLETE

    def test_unknown_status_rejected(self):
        with pytest.raises(AgendaError, match="Valid statuses"):
            parse_status("someday")


class TestTodoWrites:
    def test_add_todo_appends_create(self, log, todo):
        [action] = log.read()
        assert action.type == a.TODO_CREATE
        assert action.todo_id == todo.id
        assert todo.title == "Write spec"
        assert todo.status == Status.READY

    def test_add_todo_with_fields(self, log):
        deadline = datetime(2025, 1, 15, 17)
        todo = add_todo(log, "  Ship  ", estimate=Estimate(10, 20), deadline=deadline)
        stored = load_state(log).resolve_todo(todo.id)
        assert stored.title == "Ship"
        assert stored.estimate == Estimate(10, 20)
        assert stored.deadline == deadline

    def test_add_todo_rejects_empty_title(self, log):
        with pytest.raises(AgendaError):
            add_todo(log, "   ")
        assert log.exists() is False

    def test_add_todo_rejects_invalid_estimate(self, log):
        with pytest.raises(AgendaError):
            add_todo(log, "x", estimate=Estimate(-1, 5))

    def test_set_title(self, log, todo):
        assert set_title(log, todo.id, "Renamed").title == "Renamed"

    def test_set_status(self, log, todo):
        assert set_status(log, todo.id, Status.COMPLETE).status == Status.COMPLETE
        assert load_state(log).resolve_todo(todo.id).status_glyph() == "✓"

    def test_set_same_status_writes_nothing(self, log, todo):
        set_status(log, todo.id, Status.READY)
        assert len(log.read()) == 1

    def test_set_and_clear_estimate(self, log, todo):
        assert set_estimate(log, todo.id, Estimate(5, 10)).estimate == Estimate(5, 10)
        assert set_estimate(log, todo.id, None).estimate is None

    def test_set_estimate_rejects_invalid(self, log, todo):
        with pytest.raises(AgendaError):
            set_estimate(log, todo.id, Estimate(10, 5))

    def test_set_deadline(self, log, todo):
        when = datetime(2025, 2, 1, 9)
        assert set_deadline(log, todo.id, when).deadline == when
        assert set_deadline(log, todo.id, None).deadline is None

    def test_missing_todo(self, log):
        with pytest.raises(AgendaError, match="No todo with id nope"):
            set_title(log, "nope", "x")
        assert log.read() == []

    def test_remove_todo(self, log, todo):
        removed = remove_todo(log, todo.id)
        assert removed.title == "Write spec"
        assert load_state(log).resolve_todo(todo.id) is None


class TestDependentWrites:
    def test_add_and_remove(self, log, todo):
        other = add_todo(log, "Review")
        assert add_dependent(log, todo.id, other.id).dependent_ids == (other.id,)
        assert remove_dependent(log, todo.id, other.id).dependent_ids == ()

    def test_add_twice_writes_once(self, log, todo):
        other = add_todo(log, "Review")
        add_dependent(log, todo.id, other.id)
        add_dependent(log, todo.id, other.id)
        assert load_state(log).resolve_todo(todo.id).dependent_ids == (other.id,)

    def test_self_dependency_rejected(self, log, todo):
        with pytest.raises(AgendaError, match="itself"):
            add_dependent(log, todo.id, todo.id)

    def test_unknown_dependent_rejected(self, log, todo):
        with pytest.raises(AgendaError):
            add_dependent(log, todo.id, "ghost")


class TestEventWrites:
    def test_schedule_for_todo(self, log, todo):
        start = datetime(2025, 1, 15, 9)
        event = schedule_event(log, "", start=start, duration=timedelta(hours=1), todo_id=todo.id)
        assert event.title == "Write spec"
        assert event.causes == (Cause.todo(todo.id),)
        assert load_state(log).resolve_event(event.id).start == start

    def test_schedule_requires_title(self, log):
        with pytest.raises(AgendaError):
            schedule_event(log, "")

    def test_schedule_rejects_negative_duration(self, log):
        with pytest.raises(AgendaError):
            schedule_event(log, "x", duration=timedelta(minutes=-5))

    def test_remove_event(self, log):
        event = schedule_event(log, "Focus")
        assert remove_event(log, event.id).title == "Focus"
        assert load_state(log).events == {}

    def test_remove_missing_event(self, log):
        with pytest.raises(AgendaError, match="No event"):
            remove_event(log, "ghost")
