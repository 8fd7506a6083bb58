"""Settings mixins for the Taskwarrior connection and cache policies.

TaskwarriorSettingsMixin: How the ``task`` executable is invoked.
PolicySettingsMixin: Which derived attributes the cache keeps in sync.
LoggingSettingsMixin: Logging verbosity and format.

These are composed into BaseSettings in config.py.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator


class TaskwarriorSettingsMixin:
    """Settings for invoking the Taskwarrior executable.

    Should be composed with BaseSettings via multiple inheritance.
    """

    task_binary: str = Field(
        default="task",
        title="Task Binary",
        description="Name or path of the Taskwarrior executable",
    )
    taskrc: Path | None = Field(
        default=None,
        title="Taskrc",
        description="Alternate taskrc file (exported to the tool as TASKRC)",
    )
    taskdata: Path | None = Field(
        default=None,
        title="Task Data",
        description="Alternate data directory (exported to the tool as TASKDATA)",
    )
    rc_overrides: list[str] = Field(
        default_factory=list,
        title="RC Overrides",
        description="Extra rc.<name>=<value> arguments passed to every command",
    )
    command_timeout: float | None = Field(
        default=None,
        title="Command Timeout",
        description="Seconds before a task invocation is abandoned (None waits forever)",
    )

    @field_validator("taskrc", "taskdata", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path | None) -> Path | None:
        """Expand ~ in paths."""
        if isinstance(v, str):
            return Path(v).expanduser()
        return v

    @field_validator("rc_overrides", mode="after")
    @classmethod
    def normalize_overrides(cls, v: list[str]) -> list[str]:
        """Accept overrides with or without the leading ``rc.``."""
        return [o if o.startswith("rc.") else f"rc.{o}" for o in v]


class PolicySettingsMixin:
    """Settings for the self-healing policies of TaskCache.

    Both policies are off by default.
    """

    enable_project_derivation: bool = Field(
        default=False,
        title="Project Derivation",
        description="Keep each task's project equal to its dotted ancestor path",
    )
    enable_hierarchy_tag: bool = Field(
        default=False,
        title="Hierarchy Tag",
        description="Tag tasks that have active children",
    )
    project_tag: str = Field(
        default="project",
        title="Hierarchy Tag Name",
        description="Tag carried by tasks that have active children",
    )


class LoggingSettingsMixin:
    """Settings for logging output."""

    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="warning",
        title="Log Level",
        description="Logging verbosity level",
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        title="Log Format",
        description="Log output format (console for dev, json for production)",
    )
