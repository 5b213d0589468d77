"""Tests for the agenda CLI."""

import json

import pytest
from click.testing import CliRunner

from agenda.adapters.yaml_log import YamlActionLog
from agenda.cli import main
from agenda.config import Config
from agenda.core.todos import Estimate, Status
from agenda.workflows import load_state


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    monkeypatch.setattr("agenda.cli.load_config", lambda: Config())


@pytest.fixture
def log_path(tmp_path):
    return tmp_path / "todo.yaml"


@pytest.fixture
def run(log_path):
    runner = CliRunner()

    def invoke(*args):
        return runner.invoke(main, ["--log", str(log_path), *args])

    return invoke


def only_todo(log_path):
    [todo] = load_state(YamlActionLog(log_path)).todos.values()
    return todo


class TestAdd:
    def test_add_and_list(self, run, log_path):
        result = run("add", "Write spec", "--estimate", "30-60", "--deadline", "2025-01-15")
        assert result.exit_code == 0, result.output
        todo = only_todo(log_path)
        assert result.output.strip() == f"{todo.id}.   Write spec"
        assert todo.estimate == Estimate(30, 60)

        listed = run("list")
        assert listed.exit_code == 0
        assert f"{todo.id}.   Write spec" in listed.output

    def test_invalid_estimate(self, run, log_path):
        result = run("add", "Write spec", "--estimate", "60-30")
        assert result.exit_code == 1
        assert "Error: Invalid estimate" in result.output
        assert not log_path.exists()

    def test_invalid_deadline(self, run):
        result = run("add", "Write spec", "--deadline", "tomorrow")
        assert result.exit_code == 2


class TestStatus:
    def test_done(self, run, log_path):
        run("add", "Ship")
        todo = only_todo(log_path)
        result = run("done", todo.id)
        assert result.exit_code == 0
        assert result.output.strip() == f"{todo.id}. ✓ Ship"
        assert only_todo(log_path).status == Status.COMPLETE

    def test_status_command(self, run, log_path):
        run("add", "Ship")
        todo = only_todo(log_path)
        assert run("status", todo.id, "blocked").exit_code == 0
        assert only_todo(log_path).status == Status.BLOCKED

    def test_unknown_status(self, run, log_path):
        run("add", "Ship")
        result = run("status", only_todo(log_path).id, "someday")
        assert result.exit_code == 1
        assert "Unknown status" in result.output

    def test_missing_todo(self, run):
        result = run("start", "ghost")
        assert result.exit_code == 1
        assert "No todo with id ghost" in result.output


class TestList:
    def test_empty(self, run):
        result = run("list")
        assert result.exit_code == 0
        assert "No todos." in result.output

    def test_json(self, run, log_path):
        run("add", "Write spec")
        todo = only_todo(log_path)
        result = run("list", "--json")
        assert json.loads(result.output) == [
            {"id": todo.id, "title": "Write spec", "status": "ready", "estimate": None, "deadline": None}
        ]

    def test_at_shows_earlier_state(self, run, log_path):
        run("add", "Write spec")
        todo = only_todo(log_path)
        run("title", todo.id, "Renamed")
        assert "Renamed" in run("list").output
        earlier = run("list", "--at", "1").output
        assert "Write spec" in earlier
        assert "Renamed" not in earlier

    def test_overdue(self, run, log_path):
        run("add", "Late", "--deadline", "2000-01-01")
        run("add", "Later", "--deadline", "2999-01-01")
        result = run("list", "--overdue")
        assert "Late" in result.output
        assert "Later" not in result.output

    def test_corrupt_log(self, run, log_path):
        log_path.write_text("type: [unclosed\n")
        result = run("list")
        assert result.exit_code == 1
        assert "Error: Malformed YAML" in result.output


class TestShowAndDependents:
    def test_depend_and_show(self, run, log_path):
        run("add", "Write")
        run("add", "Review")
        state = load_state(YamlActionLog(log_path))
        ids = {t.title: t.id for t in state.todos.values()}

        assert run("depend", ids["Write"], ids["Review"]).exit_code == 0
        shown = run("show", ids["Write"])
        assert "blocks: Review" in shown.output

        data = json.loads(run("show", ids["Write"], "--json").output)
        assert data["dependentIDs"] == [ids["Review"]]

        assert run("undepend", ids["Write"], ids["Review"]).exit_code == 0
        assert "blocks" not in run("show", ids["Write"]).output

    def test_show_missing(self, run):
        result = run("show", "ghost")
        assert result.exit_code == 1

    def test_rm(self, run, log_path):
        run("add", "Write")
        todo = only_todo(log_path)
        result = run("rm", todo.id)
        assert result.output.strip() == "Removed: Write"
        assert load_state(YamlActionLog(log_path)).todos == {}


class TestEvents:
    def test_schedule_and_list(self, run, log_path):
        run("add", "Write")
        todo = only_todo(log_path)
        result = run("schedule", "--todo", todo.id, "--start", "2025-01-15T09:00", "--minutes", "45")
        assert result.exit_code == 0, result.output
        assert "2025-01-15 09:00 Write (45 min)" in result.output

        listed = json.loads(run("events", "--json").output)
        assert listed[0]["causes"] == [{"type": "Todo", "value": todo.id}]
        assert listed[0]["duration_minutes"] == 45

    def test_no_events(self, run):
        assert run("events").output.strip() == "No events."

    def test_unschedule(self, run):
        event_line = run("schedule", "Focus").output
        event_id = event_line.split(".")[0]
        assert run("unschedule", event_id).output.strip() == "Removed: Focus"
