"""Tests for taskstore.py - task file persistence and export."""

import json
import sys
from pathlib import Path

import pytest

# Add scripts to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "scripts"))

from taskstore import (
    Status,
    Task,
    TaskFileError,
    export_tasks,
    load_tasks,
    parse_line,
    parse_tasks,
    render_tasks,
    save_tasks,
)


@pytest.fixture
def tasks_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the module's default paths into a temp dir."""
    import taskstore

    path = tmp_path / "tasks.md"
    monkeypatch.setattr(taskstore, "TASKS_FILE", path)
    monkeypatch.setattr(taskstore, "EXPORT_FILE", tmp_path / "tasks.json")
    return path


class TestTask:
    """Tests for Task construction and status cycling."""

    def test_create_defaults_to_pending(self) -> None:
        task = Task.create("Write spec")
        assert task.description == "Write spec"
        assert task.status is Status.PENDING

    @pytest.mark.parametrize("text", ["", " ", "\t  "])
    def test_create_rejects_blank(self, text: str) -> None:
        with pytest.raises(ValueError):
            Task.create(text)

    def test_with_description_rejects_blank(self) -> None:
        task = Task("Write spec", Status.WORKING)
        with pytest.raises(ValueError):
            task.with_description("   ")

    def test_create_strips_surrounding_whitespace(self) -> None:
        assert Task.create("  padded  ").description == "padded"
        assert Task("x").with_description("\tedited ").description == "edited"

    def test_with_description_keeps_status(self) -> None:
        task = Task("Write spec", Status.WORKING).with_description("Write tests")
        assert task == Task("Write tests", Status.WORKING)

    def test_cycle_order(self) -> None:
        assert Status.PENDING.cycled() is Status.DONE
        assert Status.DONE.cycled() is Status.WORKING
        assert Status.WORKING.cycled() is Status.PENDING

    @pytest.mark.parametrize("status", list(Status))
    def test_three_cycles_is_identity(self, status: Status) -> None:
        task = Task("x", status)
        assert task.cycled().cycled().cycled() == task


class TestParse:
    """Tests for checklist line parsing."""

    def test_markers(self) -> None:
        assert parse_line("- [ ] a") == Task("a", Status.PENDING)
        assert parse_line("- [~] b") == Task("b", Status.WORKING)
        assert parse_line("- [x] c") == Task("c", Status.DONE)
        assert parse_line("- [X] d") == Task("d", Status.DONE)

    def test_unknown_and_bare_markers_are_pending(self) -> None:
        assert parse_line("- [?] a") == Task("a", Status.PENDING)
        assert parse_line("- [] b") == Task("b", Status.PENDING)

    def test_indented_line(self) -> None:
        assert parse_line("   - [x] nested  ") == Task("nested", Status.DONE)

    def test_non_checklist_lines_ignored(self) -> None:
        content = "# Tasks\n\n## Pending\nsome note\n* [ ] star bullet\n- [ ] real\n"
        assert parse_tasks(content) == [Task("real", Status.PENDING)]

    def test_empty_description_skipped(self) -> None:
        assert parse_line("- [ ]") is None
        assert parse_line("- [x]    ") is None


class TestRender:
    """Tests for the status-grouped file layout."""

    def test_groups_in_fixed_order(self) -> None:
        tasks = [
            Task("done one", Status.DONE),
            Task("pending one", Status.PENDING),
            Task("working one", Status.WORKING),
            Task("pending two", Status.PENDING),
        ]
        assert render_tasks(tasks) == (
            "# Tasks\n"
            "\n"
            "## Working\n"
            "- [~] working one\n"
            "\n"
            "## Pending\n"
            "- [ ] pending one\n"
            "- [ ] pending two\n"
            "\n"
            "## Done\n"
            "- [x] done one\n"
        )

    def test_empty_groups_omitted(self) -> None:
        content = render_tasks([Task("a", Status.DONE)])
        assert "## Done" in content
        assert "## Pending" not in content
        assert "## Working" not in content

    def test_empty_list_is_heading_only(self) -> None:
        assert render_tasks([]) == "# Tasks\n"


class TestLoadSave:
    """Tests for load_tasks/save_tasks."""

    def test_missing_file_is_empty(self, tasks_file: Path) -> None:
        assert not tasks_file.exists()
        assert load_tasks() == []

    def test_round_trip_groups_by_status(self, tasks_file: Path) -> None:
        tasks = [
            Task("c", Status.DONE),
            Task("a", Status.PENDING),
            Task("b", Status.WORKING),
            Task("d", Status.PENDING),
        ]
        save_tasks(tasks)
        loaded = load_tasks()

        assert sorted(loaded, key=repr) == sorted(tasks, key=repr)
        assert loaded == [
            Task("b", Status.WORKING),
            Task("a", Status.PENDING),
            Task("d", Status.PENDING),
            Task("c", Status.DONE),
        ]

    def test_round_trip_preserves_typed_descriptions(self, tasks_file: Path) -> None:
        tasks = [
            Task.create("  padded  "),
            Task.create("inner  spaces kept", Status.WORKING),
            Task.create("- [x] looks like a marker", Status.DONE),
        ]
        save_tasks(tasks)

        assert sorted(load_tasks(), key=repr) == sorted(tasks, key=repr)

    def test_add_keeps_order_within_group(self, tasks_file: Path) -> None:
        tasks = [Task("Write spec")]
        tasks.append(Task.create("Write spec 2"))
        save_tasks(tasks)

        content = tasks_file.read_text()
        assert "## Pending" in content
        assert content.index("- [ ] Write spec\n") < content.index("- [ ] Write spec 2\n")

    def test_explicit_path(self, tmp_path: Path) -> None:
        path = tmp_path / "other.md"
        save_tasks([Task("x")], path)
        assert load_tasks(path) == [Task("x")]

    def test_save_failure_raises(self, tmp_path: Path) -> None:
        with pytest.raises(TaskFileError):
            save_tasks([Task("x")], tmp_path / "missing-dir" / "tasks.md")

    def test_undecodable_file_raises(self, tasks_file: Path) -> None:
        tasks_file.write_bytes(b"- [ ] \xff\xfe\n")
        with pytest.raises(TaskFileError):
            load_tasks()


class TestExport:
    """Tests for export_tasks."""

    def test_writes_pretty_json(self, tasks_file: Path) -> None:
        export_tasks([Task("a", Status.WORKING), Task("b", Status.DONE)])

        export_file = tasks_file.parent / "tasks.json"
        data = json.loads(export_file.read_text())
        assert data == [
            {"description": "a", "status": "working"},
            {"description": "b", "status": "done"},
        ]
        assert '\n  {' in export_file.read_text()

    def test_overwrites(self, tasks_file: Path) -> None:
        export_tasks([Task("a"), Task("b")])
        export_tasks([Task("c")])

        data = json.loads((tasks_file.parent / "tasks.json").read_text())
        assert data == [{"description": "c", "status": "pending"}]

    def test_failure_raises(self, tmp_path: Path) -> None:
        with pytest.raises(TaskFileError):
            export_tasks([Task("x")], tmp_path / "missing-dir" / "tasks.json")
