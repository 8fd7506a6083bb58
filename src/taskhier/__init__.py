"""taskhier - task hierarchies on top of Taskwarrior.

Mirrors Taskwarrior state in memory and adds explicit parent/child
hierarchies through the ``partof`` attribute, with automatically derived
project names and a hierarchy tag:

- Task records parsed from ``task export``
- A TaskStore client that drives the ``task`` executable
- TaskCache, the uuid-keyed cache with its children index and
  self-healing policies
- Mutation helpers that announce each change before applying it
"""

from taskhier.cache import TaskCache
from taskhier.client import TaskStore, TaskwarriorStore
from taskhier.config import (
    BaseSettings,
    SettingsContext,
    SettingsValidationError,
    get_settings,
    set_settings,
    reload_settings,
    validate_settings,
)
from taskhier.errors import ErrorKind, TaskError
from taskhier.logging import configure_logging
from taskhier.models import Annotation, Task, TaskStatus
from taskhier.ops import (
    add_tag,
    get_tasks,
    mark_deleted,
    mark_done,
    mark_pending,
    remove_tag,
    set_description,
    set_parent,
    set_project,
)
from taskhier.runner import CommandResult, CommandRunner

__all__ = [
    # Core
    "TaskCache",
    "Task",
    "TaskStatus",
    "Annotation",
    # Store
    "TaskStore",
    "TaskwarriorStore",
    "CommandRunner",
    "CommandResult",
    # Errors
    "TaskError",
    "ErrorKind",
    # Mutation helpers
    "get_tasks",
    "set_project",
    "mark_done",
    "mark_deleted",
    "mark_pending",
    "set_parent",
    "set_description",
    "add_tag",
    "remove_tag",
    # Settings
    "BaseSettings",
    "SettingsContext",
    "SettingsValidationError",
    "get_settings",
    "set_settings",
    "reload_settings",
    "validate_settings",
    "configure_logging",
]

__version__ = "0.1.0"
