"""Shared test fixtures and utilities for taskhier tests.

Provides:
- FakeTaskStore, an in-memory TaskStore that records every call
- ScriptedRunner, a CommandRunner that replays canned task output
- Settings isolation fixtures

Logging is deliberately left unconfigured so tests see the package defaults.
"""

import dataclasses
import os
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator
from unittest.mock import patch
from uuid import UUID, uuid4

import pytest

from taskhier import ops
from taskhier.client import TaskStore
from taskhier.config import BaseSettings, reload_settings, set_settings
from taskhier.errors import TaskError
from taskhier.models import Task, TaskStatus
from taskhier.runner import CommandResult, CommandRunner

ENTRY = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


class FakeTaskStore(TaskStore):
    """In-memory TaskStore with Taskwarrior-like mutation semantics.

    ``calls`` records (operation, *arguments) for every method invoked;
    ``mutations`` filters it down to the modify operations.
    """

    MUTATIONS = {
        "set_project",
        "set_status_done",
        "set_status_deleted",
        "set_status_pending",
        "set_parent",
        "set_description",
        "add_tag",
        "remove_tag",
    }

    def __init__(self) -> None:
        self.records: dict[UUID, Task] = {}
        self.calls: list[tuple] = []

    @property
    def mutations(self) -> list[tuple]:
        return [c for c in self.calls if c[0] in self.MUTATIONS]

    def reset_calls(self) -> None:
        self.calls.clear()

    def seed(
        self,
        description: str,
        partof: UUID | None = None,
        status: TaskStatus = TaskStatus.PENDING,
        project: str | None = None,
        tags: list[str] | None = None,
    ) -> UUID:
        """Put a task directly into the store without recording a call."""
        task_uuid = uuid4()
        self.records[task_uuid] = Task(
            status=status,
            uuid=task_uuid,
            entry=ENTRY,
            description=description,
            partof=partof,
            project=project,
            tags=tuple(tags) if tags is not None else None,
        )
        return task_uuid

    def _replace(self, task_uuid: UUID, **changes) -> None:
        if task_uuid not in self.records:
            return
        self.records[task_uuid] = dataclasses.replace(self.records[task_uuid], **changes)

    def create(self, description: str, partof: UUID | None = None) -> UUID:
        self.calls.append(("create", description, partof))
        task_uuid = uuid4()
        self.records[task_uuid] = Task(
            status=TaskStatus.PENDING,
            uuid=task_uuid,
            entry=ENTRY,
            description=description,
            partof=partof,
        )
        return task_uuid

    def export_all(self) -> list[Task]:
        self.calls.append(("export_all",))
        return list(self.records.values())

    def export_one(self, task_uuid: UUID) -> Task:
        self.calls.append(("export_one", task_uuid))
        try:
            return self.records[task_uuid]
        except KeyError:
            raise TaskError.not_found(f"Could not load task {task_uuid}") from None

    def query_identifiers(self, filter_expression: str) -> list[UUID]:
        self.calls.append(("query_identifiers", filter_expression))
        expr = filter_expression.strip()
        matches = []
        for task in self.records.values():
            if not expr:
                matches.append(task.uuid)
            elif expr.startswith("+") and task.has_tag(expr[1:]):
                matches.append(task.uuid)
            elif expr.startswith("status:") and task.status.value == expr[7:]:
                matches.append(task.uuid)
            elif not expr.startswith(("+", "status:")) and expr in task.description:
                matches.append(task.uuid)
        return matches

    def set_project(self, task_uuid: UUID, project: str | None) -> None:
        self.calls.append(("set_project", task_uuid, project))
        self._replace(task_uuid, project=project or None)

    def set_status_done(self, task_uuid: UUID) -> None:
        self.calls.append(("set_status_done", task_uuid))
        self._replace(task_uuid, status=TaskStatus.COMPLETED)

    def set_status_deleted(self, task_uuid: UUID) -> None:
        self.calls.append(("set_status_deleted", task_uuid))
        self._replace(task_uuid, status=TaskStatus.DELETED)

    def set_status_pending(self, task_uuid: UUID) -> None:
        self.calls.append(("set_status_pending", task_uuid))
        self._replace(task_uuid, status=TaskStatus.PENDING)

    def set_parent(self, task_uuid: UUID, partof: UUID | None) -> None:
        self.calls.append(("set_parent", task_uuid, partof))
        self._replace(task_uuid, partof=partof)

    def set_description(self, task_uuid: UUID, description: str) -> None:
        self.calls.append(("set_description", task_uuid, description))
        self._replace(task_uuid, description=description)

    def add_tag(self, task_uuid: UUID, tag: str) -> None:
        self.calls.append(("add_tag", task_uuid, tag))
        tags = self.records[task_uuid].tags or ()
        if tag not in tags:
            tags = (*tags, tag)
        self._replace(task_uuid, tags=tags)

    def remove_tag(self, task_uuid: UUID, tag: str) -> None:
        self.calls.append(("remove_tag", task_uuid, tag))
        tags = tuple(t for t in (self.records[task_uuid].tags or ()) if t != tag)
        self._replace(task_uuid, tags=tags or None)


class ScriptedRunner(CommandRunner):
    """CommandRunner that records argv and replays queued output.

    Usage:
        runner = ScriptedRunner()
        runner.queue(stdout="[]")
        TaskwarriorStore(runner).export_all()
        assert runner.commands == [["export"]]
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.commands: list[list[str]] = []
        self._responses: deque[tuple[str, str, int]] = deque()

    def queue(self, stdout: str = "", stderr: str = "", return_code: int = 0) -> None:
        self._responses.append((stdout, stderr, return_code))

    def run(self, *args: str) -> CommandResult:
        self.commands.append(list(args))
        stdout, stderr, return_code = (
            self._responses.popleft() if self._responses else ("", "", 0)
        )
        return CommandResult(
            args=[self.binary, *self.rc_overrides, *args],
            stdout=stdout,
            stderr=stderr,
            return_code=return_code,
            duration_ms=0,
        )


@pytest.fixture(autouse=True)
def _isolate_globals() -> Generator[None, None, None]:
    """Reset the shared store and settings singletons around every test."""
    ops.set_store(None)
    yield
    ops.set_store(None)
    reload_settings()


@pytest.fixture
def fake_store() -> FakeTaskStore:
    return FakeTaskStore()


@pytest.fixture
def shared_fake_store(fake_store: FakeTaskStore) -> FakeTaskStore:
    """Install the fake as the default store used by taskhier.ops."""
    ops.set_store(fake_store)
    return fake_store


@pytest.fixture
def runner() -> ScriptedRunner:
    return ScriptedRunner()


@pytest.fixture
def clean_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> BaseSettings:
    """Settings built with no TASKHIER_* environment and no JSON config files."""
    monkeypatch.chdir(tmp_path)
    with patch.dict(os.environ, {"HOME": str(tmp_path)}, clear=True):
        settings = BaseSettings()
    set_settings(settings)
    return settings
