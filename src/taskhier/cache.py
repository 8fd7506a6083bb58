"""In-memory mirror of Taskwarrior state with a parent/child index.

TaskCache keeps two maps:

- tasks: uuid -> Task, the latest exported snapshot of each task
- children: parent uuid -> uuids of its *active* children, in export order

and two optional self-healing policies that are applied when a task is
read through ``get_task``:

- project derivation: a task's project is the dotted, lowercased,
  whitespace-free path of its ancestors' descriptions (root first)
- hierarchy tag: a task carries the project tag if and only if it has at
  least one active child

Reading is therefore read-with-repair: ``get_task`` may issue corrective
mutations against the store and re-export the task. Call ``reconcile``
explicitly if the repair step should happen separately from the read.

Not thread-safe: guard the whole cache with one lock if it is shared.

Example:
    >>> cache = TaskCache(TaskwarriorStore(), enable_hierarchy_tag=True)
    >>> cache.refresh()
    >>> parent = cache.create("Move house")
    >>> child = cache.create("Pack books", partof=parent.uuid)
    >>> cache.get_task(parent.uuid).has_tag("project")
    True
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING
from uuid import UUID

from taskhier import ops
from taskhier.client import TaskStore, TaskwarriorStore
from taskhier.config import get_settings
from taskhier.errors import ErrorKind, TaskError
from taskhier.logging import Loggers, bind_context, configure_logging, unbind_context
from taskhier.models import Task

if TYPE_CHECKING:
    from taskhier.config import BaseSettings

logger = Loggers.cache()


class TaskCache:
    """Cache of Taskwarrior tasks keyed by uuid.

    Args:
        store: Store used for every export and mutation.
        enable_project_derivation: Keep project names equal to the
            ancestor path on read.
        enable_hierarchy_tag: Keep the project tag in sync with whether a
            task has active children on read.
        project_tag: Name of the hierarchy tag.
    """

    def __init__(
        self,
        store: TaskStore,
        *,
        enable_project_derivation: bool = False,
        enable_hierarchy_tag: bool = False,
        project_tag: str = "project",
    ) -> None:
        self._store = store
        self.enable_project_derivation = enable_project_derivation
        self.enable_hierarchy_tag = enable_hierarchy_tag
        self.project_tag = project_tag
        self._tasks: dict[UUID, Task] = {}
        self._children: dict[UUID, list[UUID]] = {}

    @classmethod
    def from_settings(
        cls,
        settings: "BaseSettings | None" = None,
        store: TaskStore | None = None,
    ) -> "TaskCache":
        """Build a cache whose policies, store and logging come from settings."""
        settings = settings or get_settings()
        configure_logging(settings)
        return cls(
            store if store is not None else TaskwarriorStore.from_settings(settings),
            enable_project_derivation=settings.enable_project_derivation,
            enable_hierarchy_tag=settings.enable_hierarchy_tag,
            project_tag=settings.project_tag,
        )

    @property
    def store(self) -> TaskStore:
        return self._store

    @property
    def tasks(self) -> Mapping[UUID, Task]:
        """Read-only view of the cached tasks."""
        return MappingProxyType(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_uuid: object) -> bool:
        return task_uuid in self._tasks

    def children_of(self, task_uuid: UUID) -> list[UUID]:
        """Return the active children of a task (empty for a leaf)."""
        return list(self._children.get(task_uuid, ()))

    def has_children(self, task_uuid: UUID) -> bool:
        return bool(self._children.get(task_uuid))

    def _lookup(self, task_uuid: UUID) -> Task:
        try:
            return self._tasks[task_uuid]
        except KeyError:
            raise TaskError.not_found(
                f"Uuid {task_uuid} not found in cache", uuid=str(task_uuid)
            ) from None

    # ---- loading ----

    def refresh(self) -> None:
        """Reload every task and rebuild the children index from scratch."""
        tasks = self._store.export_all()
        self._tasks = {}
        self._children = {}
        for task in tasks:
            if task.partof is not None and task.is_active:
                self._children.setdefault(task.partof, []).append(task.uuid)
            self._tasks[task.uuid] = task
        logger.debug("cache_refreshed", tasks=len(self._tasks), parents=len(self._children))

    def create(self, description: str, partof: UUID | None = None) -> Task:
        """Create a task in the store and cache it.

        If the export after creation fails, the task exists in the store
        but not in the cache; ``refresh`` reconciles the two.
        """
        task_uuid = self._store.create(description, partof)
        logger.info("task_created", uuid=str(task_uuid), partof=str(partof) if partof else None)
        return self.update(task_uuid)

    def update(self, task_uuid: UUID) -> Task:
        """Re-export one task, replace its cache entry and re-index it."""
        task = self._store.export_one(task_uuid)
        previous = self._tasks.get(task_uuid)
        self._tasks[task_uuid] = task
        self._reindex(previous, task)
        return task

    def _reindex(self, previous: Task | None, task: Task) -> None:
        indexed = task.is_active and task.partof is not None
        if (
            previous is not None
            and previous.partof is not None
            and (not indexed or previous.partof != task.partof)
        ):
            self._unlink(previous.partof, task.uuid)
        if indexed:
            siblings = self._children.setdefault(task.partof, [])
            if task.uuid not in siblings:
                siblings.append(task.uuid)

    def _unlink(self, parent: UUID, child: UUID) -> None:
        siblings = self._children.get(parent)
        if siblings is None or child not in siblings:
            return
        siblings.remove(child)
        if not siblings:
            del self._children[parent]

    # ---- hierarchy ----

    def get_project_name(self, task_uuid: UUID) -> str | None:
        """Derive the expected project name of a task from its ancestors.

        Walks partof links up to the root, joins the ancestors'
        descriptions root first with ``.``, lowercases the result and
        strips all whitespace. The task's own description is not part of
        its project. Works purely off the cache.

        Returns:
            The dotted ancestor path, or None for a root task.

        Raises:
            TaskError: NOT_FOUND if the task or an ancestor is not cached,
                HIERARCHY if the partof links loop.
        """
        task = self._lookup(task_uuid)
        descriptions: list[str] = []
        seen = {task.uuid}
        while task.partof is not None:
            if task.partof in seen:
                raise TaskError(
                    f"Cycle in partof links at {task.partof}",
                    ErrorKind.HIERARCHY,
                    {"uuid": str(task_uuid)},
                )
            task = self._lookup(task.partof)
            seen.add(task.uuid)
            descriptions.append(task.description)
        if not descriptions:
            return None
        path = ".".join(reversed(descriptions)).lower()
        return "".join(path.split())

    def reconcile(self, task_uuid: UUID) -> bool:
        """Apply the enabled policies to one cached task.

        Each policy that finds drift issues a corrective mutation and
        re-exports the task.

        Log lines emitted meanwhile carry the task_uuid.

        Returns:
            True if any corrective mutation was issued.
        """
        bind_context(task_uuid=str(task_uuid))
        try:
            return self._apply_policies(task_uuid)
        finally:
            unbind_context("task_uuid")

    def _apply_policies(self, task_uuid: UUID) -> bool:
        changed = False
        if self.enable_project_derivation:
            expected = self.get_project_name(task_uuid)
            if self._lookup(task_uuid).project != expected:
                ops.set_project(task_uuid, expected, store=self._store)
                self.update(task_uuid)
                changed = True

        if self.enable_hierarchy_tag:
            has_tag = self._lookup(task_uuid).has_tag(self.project_tag)
            needs_tag = self.has_children(task_uuid)
            if has_tag and not needs_tag:
                ops.remove_tag(task_uuid, self.project_tag, store=self._store)
            elif needs_tag and not has_tag:
                ops.add_tag(task_uuid, self.project_tag, store=self._store)
            if has_tag != needs_tag:
                self.update(task_uuid)
                changed = True

        if changed:
            logger.info("task_reconciled")
        return changed

    def get_task(self, task_uuid: UUID) -> Task:
        """Return a cached task after repairing its derived attributes.

        Not read-only: with a policy enabled this may modify the task in
        the store (see ``reconcile``).

        Raises:
            TaskError: NOT_FOUND if the task is not cached.
        """
        self.reconcile(task_uuid)
        return self._lookup(task_uuid)
