"""Unit tests for raw task description validation."""

import pytest

from taskweave.core.exceptions import StructureError
from taskweave.files.records import FileRecord
from taskweave.tasks.validator import validate_description


class TestAcceptedShapes:
    """Descriptions that pass validation."""

    @pytest.mark.parametrize(
        "description",
        [
            "other-task",
            lambda: None,
            {"src": "src/*.txt"},
            {"src": ["a.txt", "!b.txt"]},
            {"task": "other-task"},
            {"series": []},
            {"parallel": ["a", "b"]},
            {"watch": "src/*.txt", "series": ["build"]},
            {"src": "a.txt", "watch": True},
        ],
    )
    def test_valid(self, description: object) -> None:
        """Test that well-formed descriptions pass."""
        validate_description(description)

    def test_inline_record_src(self) -> None:
        """Test that an inline file record is an acceptable source."""
        validate_description({"src": FileRecord(path="a.txt", contents=b"a")})


class TestRejectedShapes:
    """Each documented structural rule."""

    @pytest.mark.parametrize(
        ("description", "message"),
        [
            (True, "A task must be a string, function, or object."),
            (42, "A task must be a string, function, or object."),
            (None, "A task must be a string, function, or object."),
            ({}, "A task must do something."),
            ({"watch": "a.txt"}, "A task must do something."),
            (
                {"series": [], "parallel": []},
                "A task can only have one of .task/.series/.parallel properties.",
            ),
            (
                {"task": "a", "series": ["b"]},
                "A task can only have one of .task/.series/.parallel properties.",
            ),
            (
                {"src": "a.txt", "series": ["b"]},
                "A task can't have both .src and .task/.series/.parallel properties.",
            ),
            ({"src": 12}, "Task's .src must be a path string or a file record."),
            ({"watch": True, "series": ["a"]}, "No path given to watch."),
            ({"series": "abc"}, "Task's .series must be a list of tasks."),
            ({"src": "a.txt", "transforms": ["nope"]}, "Task's .transforms must be a list of functions."),
            ({"src": "a.txt", "watch": 3}, "Task's .watch must be a boolean or path string(s)."),
        ],
    )
    def test_invalid(self, description: object, message: str) -> None:
        """Test that malformed descriptions raise with the documented message."""
        with pytest.raises(StructureError) as exc_info:
            validate_description(description)

        assert str(exc_info.value) == message

    def test_watch_true_without_src(self) -> None:
        """Test that watch=True on a task with nothing to watch is rejected."""
        with pytest.raises(StructureError, match="No path given to watch"):
            validate_description({"watch": True, "task": "build"})
