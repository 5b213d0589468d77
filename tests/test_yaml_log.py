"""Tests for the YAML action log adapter."""

from datetime import datetime

import pytest

from agenda.adapters.yaml_log import ActionLogError, YamlActionLog
from agenda.core import actions as a
from agenda.core.actions import Action, create_todo
from agenda.core.reducer import replay
from agenda.core.todos import Estimate, Status, Todo

SAMPLE_LOG = """\
---
type: agenda/todo/create
todoId: t1
todo:
  title: Write spec
---
type: agenda/todo/create
todoId: t2
todo:
  title: Review spec
  estimate:
    lowEstimate: 15
    highEstimate: 30
---
type: agenda/todo/dependent/add
todoId: t1
dependentId: t2
---
type: agenda/todo/set/status
todoId: t1
status: complete
---
"""


@pytest.fixture
def log_path(tmp_path):
    return tmp_path / "todo.yaml"


@pytest.fixture
def log(log_path):
    return YamlActionLog(log_path)


class TestRead:
    def test_missing_file_is_empty(self, log):
        assert log.exists() is False
        assert log.read() == []

    def test_reads_documents_in_order(self, log, log_path):
        log_path.write_text(SAMPLE_LOG)
        actions = log.read()
        assert [x.type for x in actions] == [
            a.TODO_CREATE,
            a.TODO_CREATE,
            a.TODO_ADD_DEPENDENT,
            a.TODO_SET_STATUS,
        ]

    def test_replay_of_sample_log(self, log, log_path):
        log_path.write_text(SAMPLE_LOG)
        snapshot = replay(log.read())
        assert snapshot.todos["t1"].status == Status.COMPLETE
        assert snapshot.todos["t1"].dependent_ids == ("t2",)
        assert snapshot.todos["t2"].estimate == Estimate(15, 30)

    def test_yaml_timestamps(self, log, log_path):
        log_path.write_text(
            "type: agenda/todo/set/deadline\ntodoId: t1\ndeadline: 2025-01-15 17:00:00\n"
        )
        [action] = log.read()
        assert action.deadline == datetime(2025, 1, 15, 17, 0)

    def test_malformed_yaml(self, log, log_path):
        log_path.write_text("type: [unclosed\n")
        with pytest.raises(ActionLogError, match="Malformed YAML"):
            log.read()

    def test_non_mapping_document(self, log, log_path):
        log_path.write_text("---\n- just\n- a list\n")
        with pytest.raises(ActionLogError, match="document 1"):
            log.read()

    def test_undecodable_action_names_document(self, log, log_path):
        log_path.write_text(SAMPLE_LOG + "type: agenda/todo/set/title\ntitle: orphan\n")
        with pytest.raises(ActionLogError, match="document 5.*todoId"):
            log.read()

    def test_unknown_types_pass_through(self, log, log_path):
        log_path.write_text("type: agenda/todo/archive\ntodoId: t1\n")
        [action] = log.read()
        assert action.is_known is False


class TestAppend:
    def test_append_then_read(self, log):
        todo = Todo(id="t1", title="Write spec", estimate=Estimate(30, 60), deadline=datetime(2025, 1, 15, 17))
        log.append(create_todo(todo))
        log.append(Action(type=a.TODO_SET_STATUS, todo_id="t1", status=Status.IN_PROGRESS))

        snapshot = replay(log.read())
        assert snapshot.todos["t1"] == Todo(
            id="t1",
            title="Write spec",
            status=Status.IN_PROGRESS,
            estimate=Estimate(30, 60),
            deadline=datetime(2025, 1, 15, 17),
        )

    def test_creates_parent_directories(self, tmp_path):
        log = YamlActionLog(tmp_path / "nested" / "dir" / "todo.yaml")
        log.append(Action(type=a.TODO_DESTROY, todo_id="t1"))
        assert log.exists()

    def test_append_after_file_without_trailing_newline(self, log, log_path):
        log_path.write_text("type: agenda/todo/create\ntodoId: t1")
        log.append(Action(type=a.TODO_SET_TITLE, todo_id="t1", title="Renamed"))
        snapshot = replay(log.read())
        assert snapshot.todos["t1"].title == "Renamed"

    def test_unicode_titles(self, log):
        log.append(create_todo(Todo(id="t1", title="Café ✓")))
        assert "Café ✓" in log.path.read_text(encoding="utf-8")
        assert replay(log.read()).todos["t1"].title == "Café ✓"
