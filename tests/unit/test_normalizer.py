"""Unit tests for task normalization."""

from functools import partial

import pytest

from taskweave.core.exceptions import StructureError
from taskweave.execution.actions import Convention
from taskweave.files.records import FileRecord
from taskweave.tasks.models import (
    AliasTask,
    CallbackTask,
    ParallelTask,
    PipelineTask,
    SeriesTask,
    WrappedTask,
    in_thread,
    uses_done,
)
from taskweave.tasks.normalizer import Normalizer, infer_name, normalize_table


def build() -> None:
    pass


class TestScalars:
    """Strings and functions."""

    def test_string_becomes_alias(self) -> None:
        """Test that a name normalizes to an alias named after the key."""
        task = Normalizer().normalize("build", name="default")

        assert isinstance(task, AliasTask)
        assert task.name == "default"
        assert task.target == "build"

    def test_unnamed_alias_takes_target_name(self) -> None:
        """Test that a nested alias is named after its target."""
        task = Normalizer().normalize("build")

        assert task.name == "build"

    def test_function_becomes_callback(self) -> None:
        """Test that a function normalizes to a callback task."""
        task = Normalizer().normalize(build)

        assert isinstance(task, CallbackTask)
        assert task.name == "build"
        assert task.fn is build
        assert task.convention == Convention.SYNC

    def test_explicit_name_wins(self) -> None:
        """Test that the table key beats the function name."""
        task = Normalizer().normalize(build, name="compile")

        assert task.name == "compile"

    def test_anonymous_functions(self) -> None:
        """Test that lambdas and partials stay anonymous."""
        assert infer_name(lambda: None) is None
        assert infer_name(partial(build)) is None
        task = Normalizer().normalize(lambda: None)
        assert task.name is None
        assert task.display_name == "<anonymous>"

    def test_conventions(self) -> None:
        """Test that declared calling conventions are picked up."""

        async def fetch() -> None:
            pass

        @uses_done
        def wait(done) -> None:
            done()

        @in_thread
        def block() -> None:
            pass

        normalizer = Normalizer()
        assert normalizer.normalize(fetch).convention == Convention.ASYNC
        assert normalizer.normalize(wait).convention == Convention.CALLBACK
        assert normalizer.normalize(block).convention == Convention.THREAD


class TestPipelines:
    """Transform-shaped mappings."""

    def test_defaults_applied(self) -> None:
        """Test that missing pipeline keys get the defaults."""
        task = Normalizer().normalize({"src": "birds/*.txt"}, name="copy")

        assert isinstance(task, PipelineTask)
        assert task.src == "birds/*.txt"
        assert task.transforms == []
        assert task.dest == "."
        assert task.rename is None

    def test_template_never_overrides(self) -> None:
        """Test that explicit keys beat the template."""

        def upper(contents: bytes, file: FileRecord) -> bytes:
            return contents.upper()

        template = {"dest": "build", "transforms": [upper], "base": "src"}
        task = Normalizer(template).normalize({"src": "src/a.txt", "dest": "out"})

        assert task.dest == "out"
        assert task.transforms == [upper]
        assert task.base == "src"

    def test_template_not_applied_to_nested(self) -> None:
        """Test that nested pipelines only get the built-in defaults."""
        normalizer = Normalizer({"dest": "build"})
        task = normalizer.normalize({"series": [{"src": "a.txt"}]}, name="s")

        assert task.steps[0].dest == "."

    def test_input_not_mutated(self) -> None:
        """Test that normalization leaves the raw mapping alone."""
        raw = {"src": "a.txt", "watch": True}
        template = {"dest": "build"}

        Normalizer(template).normalize(raw)

        assert raw == {"src": "a.txt", "watch": True}
        assert template == {"dest": "build"}

    def test_watch_true_reuses_src(self) -> None:
        """Test that watch=True watches the source pattern."""
        task = Normalizer().normalize({"src": "birds/*.txt", "watch": True})

        assert task.watch == ["birds/*.txt"]

    def test_watch_paths(self) -> None:
        """Test that explicit watch paths are kept."""
        task = Normalizer().normalize({"series": ["a"], "watch": ["x/*.py", "y.cfg"]})

        assert task.watch == ["x/*.py", "y.cfg"]

    def test_inline_record(self) -> None:
        """Test that an inline record stays a record."""
        record = FileRecord(path="inline.txt", contents=b"x")
        task = Normalizer().normalize({"src": record})

        assert task.src is record


class TestComposites:
    """Wrapped, series and parallel mappings."""

    def test_wrapped_inherits_inner_name(self) -> None:
        """Test that a wrapper is named after the wrapped task."""
        task = Normalizer().normalize({"task": build})

        assert isinstance(task, WrappedTask)
        assert task.name == "build"
        assert isinstance(task.inner, CallbackTask)

    def test_series_and_parallel(self) -> None:
        """Test that steps are normalized recursively."""
        normalizer = Normalizer()
        series = normalizer.normalize({"series": ["a", build, {"src": "x.txt"}]}, name="s")
        parallel = normalizer.normalize({"parallel": ["a", "b"]}, name="p")

        assert isinstance(series, SeriesTask)
        assert [type(s) for s in series.steps] == [AliasTask, CallbackTask, PipelineTask]
        assert isinstance(parallel, ParallelTask)
        assert [s.target for s in parallel.steps] == ["a", "b"]

    def test_shared_mapping_normalizes_once(self) -> None:
        """Test that one raw mapping reached twice yields one task."""
        shared = {"src": "a.txt", "watch": True}
        table = normalize_table({"x": {"series": [shared]}, "y": {"parallel": [shared]}})

        assert table["x"].steps[0] is table["y"].steps[0]

    def test_fresh_mappings_never_share(self) -> None:
        """Test that short-lived mappings each get their own task."""
        normalizer = Normalizer()

        for i in range(50):
            raw = {"parallel": [str(i)]} if i % 2 else {"series": [str(i)]}
            task = normalizer.normalize(raw, name=f"t{i}")
            del raw

            assert isinstance(task, ParallelTask if i % 2 else SeriesTask)
            assert task.name == f"t{i}"
            assert task.steps[0].target == str(i)

    def test_mapping_under_two_keys(self) -> None:
        """Test that a mapping shared by two keys is named after each key."""
        shared = {"src": "a.txt", "watch": True}
        table = normalize_table({"first": shared, "second": shared})

        assert table["first"].name == "first"
        assert table["second"].name == "second"
        assert table["first"].uid != table["second"].uid
        assert table["second"].src == "a.txt"
        assert table["first"].watch == ["a.txt"]
        assert table["second"].watch is None

    def test_nested_invalid_aborts(self) -> None:
        """Test that an invalid nested description fails the whole call."""
        with pytest.raises(StructureError, match="must do something"):
            normalize_table({"ok": "a", "bad": {"series": ["a", {}]}})

    def test_self_containing_mapping(self) -> None:
        """Test that a mapping nested in itself is rejected."""
        loop: dict = {"series": []}
        loop["series"].append(loop)

        with pytest.raises(StructureError, match="contain itself"):
            normalize_table({"loop": loop})
