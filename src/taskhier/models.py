"""Task records mirrored from Taskwarrior exports.

A Task is a snapshot of one external task at the moment it was exported.
Records are never patched in place: the cache swaps in a freshly exported
record after every mutation.

Example:
    >>> task = Task.from_dict(json.loads(export_output)[0])
    >>> task.partof  # UUID of the parent task, or None for a root task
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID

from taskhier.errors import TaskError

# Taskwarrior's compact UTC timestamp, e.g. 20240131T093000Z
DATE_FORMAT = "%Y%m%dT%H%M%SZ"


class TaskStatus(Enum):
    """Status values reported by Taskwarrior."""

    PENDING = "pending"
    COMPLETED = "completed"
    DELETED = "deleted"
    WAITING = "waiting"
    RECURRING = "recurring"


INACTIVE_STATUSES = frozenset({TaskStatus.COMPLETED, TaskStatus.DELETED})


def parse_date(value: str) -> datetime:
    """Parse a Taskwarrior timestamp (compact or ISO-8601) as aware UTC."""
    try:
        return datetime.strptime(value, DATE_FORMAT).replace(tzinfo=timezone.utc)
    except (TypeError, ValueError):
        pass
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError) as e:
        raise TaskError.decode(f"Invalid timestamp: {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_date(value: datetime) -> str:
    """Format a timestamp the way Taskwarrior exports it."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(DATE_FORMAT)


def parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except (TypeError, ValueError, AttributeError) as e:
        raise TaskError.decode(f"Invalid uuid: {value!r}") from e


@dataclass(frozen=True)
class Annotation:
    """A timestamped note attached to a task."""

    entry: datetime
    description: str

    def to_dict(self) -> dict[str, Any]:
        return {"entry": format_date(self.entry), "description": self.description}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Annotation":
        try:
            return cls(
                entry=parse_date(data["entry"]),
                description=str(data["description"]),
            )
        except (KeyError, TypeError) as e:
            raise TaskError.decode(f"Malformed annotation: {data!r}") from e


@dataclass(frozen=True)
class Task:
    """A snapshot of one Taskwarrior task.

    Attributes:
        status: Lifecycle status as reported by Taskwarrior.
        uuid: Primary key, stable for the lifetime of the task.
        entry: Creation timestamp.
        description: Free-form text label.
        partof: UUID of the parent task. None marks a root task.
        annotations: Timestamped notes, in export order.
        due: Due timestamp.
        modified: Last modification timestamp.
        wait: Wait-until timestamp.
        project: Project label (may be derived from the hierarchy).
        tags: Tag labels (may include the managed hierarchy tag).

    List-valued export fields are held as tuples so records stay hashable.
    """

    status: TaskStatus
    uuid: UUID
    entry: datetime
    description: str
    partof: UUID | None = None
    annotations: tuple[Annotation, ...] | None = None
    due: datetime | None = None
    modified: datetime | None = None
    wait: datetime | None = None
    project: str | None = None
    tags: tuple[str, ...] | None = None

    @property
    def is_active(self) -> bool:
        """True unless the task is completed or deleted."""
        return self.status not in INACTIVE_STATUSES

    def has_tag(self, tag: str) -> bool:
        return self.tags is not None and tag in self.tags

    def to_dict(self) -> dict[str, Any]:
        """Convert to Taskwarrior's export shape.

        Absent optional fields are omitted rather than written as null,
        so the result can be fed back to ``task import``.

        Returns:
            Dictionary representation of the task.
        """
        data: dict[str, Any] = {
            "status": self.status.value,
            "uuid": str(self.uuid),
            "entry": format_date(self.entry),
            "description": self.description,
        }
        if self.partof is not None:
            data["partof"] = str(self.partof)
        if self.annotations is not None:
            data["annotations"] = [a.to_dict() for a in self.annotations]
        for name in ("due", "modified", "wait"):
            value = getattr(self, name)
            if value is not None:
                data[name] = format_date(value)
        if self.project is not None:
            data["project"] = self.project
        if self.tags is not None:
            data["tags"] = list(self.tags)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        """Create a Task from one export record.

        Unknown fields (urgency, id, user-defined attributes other than
        partof, ...) are ignored.

        Args:
            data: One object from ``task export`` output.

        Returns:
            A new Task instance.

        Raises:
            TaskError: DECODE if a required field is missing or malformed.
        """
        if not isinstance(data, dict):
            raise TaskError.decode(f"Export record is not an object: {data!r}")
        try:
            status = TaskStatus(data["status"])
            task_uuid = parse_uuid(data["uuid"])
            entry = parse_date(data["entry"])
            description = str(data["description"])
        except KeyError as e:
            raise TaskError.decode(
                f"Export record is missing field {e.args[0]!r}", record=data
            ) from e
        except ValueError as e:
            raise TaskError.decode(
                f"Unknown task status: {data.get('status')!r}", record=data
            ) from e

        partof = data.get("partof")
        annotations = data.get("annotations")
        tags = data.get("tags")
        return cls(
            status=status,
            uuid=task_uuid,
            entry=entry,
            description=description,
            partof=parse_uuid(partof) if partof else None,
            annotations=(
                tuple(Annotation.from_dict(a) for a in annotations)
                if annotations is not None
                else None
            ),
            due=parse_date(data["due"]) if data.get("due") else None,
            modified=parse_date(data["modified"]) if data.get("modified") else None,
            wait=parse_date(data["wait"]) if data.get("wait") else None,
            project=data.get("project"),
            tags=tuple(str(t) for t in tags) if tags is not None else None,
        )
