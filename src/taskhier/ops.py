"""Mutation helpers independent of any TaskCache.

Each helper prints one ``Setting <uuid>: <change>`` line to stdout, then
applies the change through a TaskStore. Nothing is re-exported: call
``TaskCache.update`` afterwards to observe the effect.

The store defaults to a TaskwarriorStore built from the current settings;
pass ``store=`` to target another one.
"""

from uuid import UUID

from rich.console import Console

from taskhier.client import TaskStore, TaskwarriorStore
from taskhier.config import get_settings
from taskhier.logging import Loggers, configure_logging

logger = Loggers.ops()

# file=None makes rich resolve sys.stdout at print time
console = Console(highlight=False, markup=False, emoji=False)

_default_store: TaskStore | None = None


def get_store() -> TaskStore:
    """Get the shared store, creating it from settings on first use.

    Logging is configured from the same settings when the store is built.
    """
    global _default_store
    if _default_store is None:
        settings = get_settings()
        configure_logging(settings)
        _default_store = TaskwarriorStore.from_settings(settings)
    return _default_store


def set_store(store: TaskStore | None) -> None:
    """Replace the shared store (None rebuilds it from settings on next use)."""
    global _default_store
    _default_store = store


def _resolve(store: TaskStore | None) -> TaskStore:
    return store if store is not None else get_store()


def _announce(task_uuid: UUID, change: str) -> None:
    console.print(f"Setting {task_uuid}: {change}", soft_wrap=True)
    logger.info("task_mutation", uuid=str(task_uuid), change=change)


def get_tasks(filter_expression: str, store: TaskStore | None = None) -> list[UUID]:
    """Return the uuids of tasks matching a Taskwarrior filter.

    An empty result is an empty list, not an error.
    """
    return _resolve(store).query_identifiers(filter_expression)


def set_project(
    task_uuid: UUID, project: str | None, store: TaskStore | None = None
) -> None:
    _announce(task_uuid, f"project:{project or ''}")
    _resolve(store).set_project(task_uuid, project)


def mark_done(task_uuid: UUID, store: TaskStore | None = None) -> None:
    _announce(task_uuid, "done")
    _resolve(store).set_status_done(task_uuid)


def mark_deleted(task_uuid: UUID, store: TaskStore | None = None) -> None:
    _announce(task_uuid, "deleted")
    _resolve(store).set_status_deleted(task_uuid)


def mark_pending(task_uuid: UUID, store: TaskStore | None = None) -> None:
    _announce(task_uuid, "pending")
    _resolve(store).set_status_pending(task_uuid)


def set_parent(
    task_uuid: UUID, partof: UUID | None, store: TaskStore | None = None
) -> None:
    _announce(task_uuid, f"partof:{partof if partof is not None else ''}")
    _resolve(store).set_parent(task_uuid, partof)


def set_description(
    task_uuid: UUID, description: str, store: TaskStore | None = None
) -> None:
    _announce(task_uuid, f'description:"{description}"')
    _resolve(store).set_description(task_uuid, description)


def add_tag(task_uuid: UUID, tag: str, store: TaskStore | None = None) -> None:
    _announce(task_uuid, f"+{tag}")
    _resolve(store).add_tag(task_uuid, tag)


def remove_tag(task_uuid: UUID, tag: str, store: TaskStore | None = None) -> None:
    _announce(task_uuid, f"-{tag}")
    _resolve(store).remove_tag(task_uuid, tag)
