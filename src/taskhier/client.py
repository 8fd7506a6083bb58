"""Taskwarrior store client.

TaskStore is the capability the cache depends on: create, export and
modify tasks. TaskwarriorStore implements it by running the ``task``
executable; tests substitute an in-memory implementation.

Example:
    >>> store = TaskwarriorStore()
    >>> new_uuid = store.create("Write report")
    >>> store.add_tag(new_uuid, "work")
    >>> store.export_one(new_uuid).tags
    ['work']
"""

import json
import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING
from uuid import UUID

from taskhier.errors import TaskError
from taskhier.logging import Loggers
from taskhier.models import Task, parse_uuid
from taskhier.runner import CommandResult, CommandRunner

if TYPE_CHECKING:
    from taskhier.config import BaseSettings

logger = Loggers.client()

UUID_RE = re.compile(
    "[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"
)


class TaskStore(ABC):
    """Operations on the external task store.

    Mutations return nothing: callers re-export the task to observe the
    effect.
    """

    @abstractmethod
    def create(self, description: str, partof: UUID | None = None) -> UUID:
        """Create a task and return its newly assigned uuid."""

    @abstractmethod
    def export_all(self) -> list[Task]:
        """Export every task, in store order."""

    @abstractmethod
    def export_one(self, task_uuid: UUID) -> Task:
        """Export one task. Raises NOT_FOUND if the store has no such task."""

    @abstractmethod
    def query_identifiers(self, filter_expression: str) -> list[UUID]:
        """Return the uuids matching a filter expression."""

    @abstractmethod
    def set_project(self, task_uuid: UUID, project: str | None) -> None:
        """Set the project, or clear it when project is None."""

    @abstractmethod
    def set_status_done(self, task_uuid: UUID) -> None: ...

    @abstractmethod
    def set_status_deleted(self, task_uuid: UUID) -> None: ...

    @abstractmethod
    def set_status_pending(self, task_uuid: UUID) -> None: ...

    @abstractmethod
    def set_parent(self, task_uuid: UUID, partof: UUID | None) -> None:
        """Link a task to its parent, or unlink it when partof is None."""

    @abstractmethod
    def set_description(self, task_uuid: UUID, description: str) -> None: ...

    @abstractmethod
    def add_tag(self, task_uuid: UUID, tag: str) -> None: ...

    @abstractmethod
    def remove_tag(self, task_uuid: UUID, tag: str) -> None: ...


def parse_export(output: str) -> list[Task]:
    """Parse ``task export`` output into Task records.

    Blank output is treated as an empty export.

    Raises:
        TaskError: DECODE if the output is not a JSON array of task objects.
    """
    if not output.strip():
        return []
    try:
        records = json.loads(output)
    except json.JSONDecodeError as e:
        raise TaskError.decode(f"Export output is not valid JSON: {e}") from e
    if not isinstance(records, list):
        raise TaskError.decode("Export output is not a JSON array")
    return [Task.from_dict(record) for record in records]


class TaskwarriorStore(TaskStore):
    """TaskStore backed by the Taskwarrior command line.

    Every call spawns one process and blocks until it exits.
    """

    def __init__(self, runner: CommandRunner | None = None) -> None:
        self._runner = runner or CommandRunner()

    @classmethod
    def from_settings(cls, settings: "BaseSettings") -> "TaskwarriorStore":
        return cls(CommandRunner.from_settings(settings))

    @property
    def runner(self) -> CommandRunner:
        return self._runner

    def create(self, description: str, partof: UUID | None = None) -> UUID:
        args = ["add", "rc.verbose=new-uuid", description]
        if partof is not None:
            args.append(f"partof:{partof}")
        result = self._runner.run(*args)
        match = UUID_RE.search(result.stdout)
        if match is None:
            raise TaskError.not_found(
                "No uuid in task feedback found",
                stdout=result.stdout,
                stderr=result.stderr,
            )
        return parse_uuid(match.group(0))

    def export_all(self) -> list[Task]:
        return parse_export(self._runner.run("export").stdout)

    def export_one(self, task_uuid: UUID) -> Task:
        tasks = parse_export(self._runner.run("export", f"uuid:{task_uuid}").stdout)
        if not tasks:
            raise TaskError.not_found(
                f"Could not load task {task_uuid}", uuid=str(task_uuid)
            )
        return tasks[0]

    def query_identifiers(self, filter_expression: str) -> list[UUID]:
        args = ["_uuid"]
        if filter_expression.strip():
            args.append(filter_expression)
        result = self._runner.run(*args)
        return [parse_uuid(token) for token in result.stdout.split()]

    def _modify(self, task_uuid: UUID, *args: str) -> CommandResult:
        result = self._runner.run(str(task_uuid), *args)
        if not result.success:
            logger.warning(
                "task_modify_failed",
                uuid=str(task_uuid),
                args=list(args),
                return_code=result.return_code,
                stderr=result.stderr.strip(),
            )
        return result

    def set_project(self, task_uuid: UUID, project: str | None) -> None:
        self._modify(task_uuid, "mod", f"project:{project or ''}")

    def set_status_done(self, task_uuid: UUID) -> None:
        self._modify(task_uuid, "done")

    def set_status_deleted(self, task_uuid: UUID) -> None:
        self._modify(task_uuid, "delete", "rc.confirmation:0")

    def set_status_pending(self, task_uuid: UUID) -> None:
        self._modify(task_uuid, "mod", "status:pending")

    def set_parent(self, task_uuid: UUID, partof: UUID | None) -> None:
        self._modify(task_uuid, "mod", f"partof:{partof if partof is not None else ''}")

    def set_description(self, task_uuid: UUID, description: str) -> None:
        self._modify(task_uuid, "mod", f'description:"{description}"')

    def add_tag(self, task_uuid: UUID, tag: str) -> None:
        self._modify(task_uuid, "mod", f"+{tag}")

    def remove_tag(self, task_uuid: UUID, tag: str) -> None:
        self._modify(task_uuid, "mod", f"-{tag}")
