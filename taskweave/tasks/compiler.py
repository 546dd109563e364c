"""
Task compiler - the top-level entry point.

raw mapping -> validate + normalize -> synthesize watch -> compose -> register
"""

from collections.abc import Mapping
from typing import Any

from loguru import logger as default_logger

from taskweave.core.config import Settings, get_settings
from taskweave.core.logging import TaskLogger, resolve_logger
from taskweave.execution.actions import Action
from taskweave.tasks.composer import Composer
from taskweave.tasks.models import Task
from taskweave.tasks.normalizer import Normalizer
from taskweave.tasks.registry import TaskRegistry
from taskweave.watch.beep import Beeper
from taskweave.watch.synthesizer import WATCH_TASK_NAME, ObserveFn, WatchSynthesizer


class TaskCompiler:
    """
    Compile raw task mappings into named actions.

    Each ``compile`` call builds a fresh task table; nothing carries over
    from earlier calls. Compilation is all-or-nothing: on error the
    registry is left untouched.

    Example:
        >>> compiler = TaskCompiler(registry=TaskRegistry())
        >>> actions = compiler.compile({"build": build, "default": "build"}, register=True)
        >>> await actions["default"]()
    """

    def __init__(
        self,
        settings: Settings | None = None,
        logger: TaskLogger | None = default_logger,
        registry: TaskRegistry | None = None,
        observe_fn: ObserveFn | None = None,
        beeper: Beeper | None = None,
    ):
        """
        Initialize the compiler.

        Args:
            settings: Settings override. Uses default if not provided.
            logger: Logger for compiled tasks; ``None`` silences them.
            registry: Registry filled when compiling with ``register=True``.
            observe_fn: Filesystem observer factory for the watch task.
            beeper: Beeper used when watch beeping is enabled.
        """
        self.settings = settings or get_settings()
        self.logger = resolve_logger(logger)
        self.registry = registry if registry is not None else TaskRegistry()
        self.observe_fn = observe_fn
        self.beeper = beeper
        self.table: dict[str, Task] = {}

    def compile(
        self,
        tasks: Mapping[str, Any],
        template: Mapping[str, Any] | None = None,
        beep: bool | None = None,
        register: bool = False,
    ) -> dict[str, Action]:
        """
        Compile a raw task mapping.

        Args:
            tasks: Task name -> raw description (name, function or mapping).
            template: Defaults merged into every top-level pipeline task.
            beep: Beep when watch-triggered runs finish (settings default).
            register: Replace the registry contents with the compiled actions.

        Returns:
            Task name -> action, including a synthesized ``watch`` task when
            any task declares watch paths and none is named ``watch``.

        Raises:
            StructureError: If a description is malformed.
            UndefinedTaskError: If an alias names a missing task.
            CircularAliasError: If aliases form a cycle.
        """
        if beep is None:
            beep = self.settings.taskweave_beep

        normalizer = Normalizer(
            template,
            defaults={"dest": self.settings.taskweave_default_dest},
        )
        table: dict[str, Task] = {
            name: normalizer.normalize(raw, name) for name, raw in tasks.items()
        }

        composer = Composer(table, logger=self.logger)
        synthesizer = WatchSynthesizer(
            logger=self.logger,
            beep=beep,
            observe_fn=self.observe_fn,
            beeper=self.beeper,
            delay=self.settings.taskweave_watch_delay,
            grace=self.settings.taskweave_beep_grace,
        )
        watch_task = synthesizer.synthesize(table, composer)
        if watch_task is not None:
            table[WATCH_TASK_NAME] = watch_task

        actions = composer.compose_all()

        self.table = table
        if register:
            self.registry.reset()
            for name, action in actions.items():
                self.registry.register(name, action)

        return actions


def compile_tasks(
    tasks: Mapping[str, Any],
    template: Mapping[str, Any] | None = None,
    logger: TaskLogger | None = default_logger,
    beep: bool | None = None,
    register: bool = False,
    registry: TaskRegistry | None = None,
    settings: Settings | None = None,
) -> dict[str, Action]:
    """
    Compile a raw task mapping into named actions.

    Args:
        tasks: Task name -> raw description.
        template: Defaults merged into every top-level pipeline task.
        logger: Logger for compiled tasks; ``None`` silences them.
        beep: Beep when watch-triggered runs finish.
        register: Also register every action into ``registry``.
        registry: Registry to reset and fill when ``register`` is set.
        settings: Settings override.

    Returns:
        Task name -> action.

    Example:
        >>> actions = compile_tasks({"a": "b", "b": lambda: print("hi")})
        >>> actions["a"].run_sync()
        hi
    """
    compiler = TaskCompiler(settings=settings, logger=logger, registry=registry)
    return compiler.compile(tasks, template=template, beep=beep, register=register)
