"""Process runner for the Taskwarrior executable.

Runs one ``task`` invocation at a time, blocking until it exits, and
returns its decoded output. Spawn failures, timeouts and undecodable
output are raised as TaskError; a non-zero exit status is not an error
at this layer, callers decide what it means.
"""

import os
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from taskhier.errors import TaskError
from taskhier.logging import Loggers

if TYPE_CHECKING:
    from taskhier.config import BaseSettings

logger = Loggers.client()


@dataclass
class CommandResult:
    """Result of one task invocation.

    Attributes:
        args: Full argument vector, executable first.
        stdout: Decoded standard output.
        stderr: Decoded standard error.
        return_code: Exit code of the process.
        duration_ms: Wall time in milliseconds.
    """

    args: list[str]
    stdout: str
    stderr: str
    return_code: int
    duration_ms: int

    @property
    def success(self) -> bool:
        return self.return_code == 0


@dataclass
class CommandRunner:
    """Spawns the Taskwarrior executable with a fixed environment.

    Attributes:
        binary: Executable name or path.
        taskrc: Exported as TASKRC when set.
        taskdata: Exported as TASKDATA when set.
        rc_overrides: rc.<name>=<value> arguments prepended to every command.
        timeout_seconds: Per-invocation limit; None waits indefinitely.
    """

    binary: str = "task"
    taskrc: Path | None = None
    taskdata: Path | None = None
    rc_overrides: list[str] = field(default_factory=list)
    timeout_seconds: float | None = None

    @classmethod
    def from_settings(cls, settings: "BaseSettings") -> "CommandRunner":
        return cls(
            binary=settings.task_binary,
            taskrc=settings.taskrc,
            taskdata=settings.taskdata,
            rc_overrides=list(settings.rc_overrides),
            timeout_seconds=settings.command_timeout,
        )

    def _build_env(self) -> dict[str, str] | None:
        if self.taskrc is None and self.taskdata is None:
            return None
        env = os.environ.copy()
        if self.taskrc is not None:
            env["TASKRC"] = str(self.taskrc)
        if self.taskdata is not None:
            env["TASKDATA"] = str(self.taskdata)
        return env

    def run(self, *args: str) -> CommandResult:
        """Run the executable with the given arguments.

        Args:
            *args: Command arguments, e.g. ``("export", "uuid:...")``.

        Returns:
            CommandResult with decoded output.

        Raises:
            TaskError: IO if the process cannot be spawned or times out,
                DECODE if its output is not valid UTF-8.
        """
        argv = [self.binary, *self.rc_overrides, *args]
        start = time.monotonic()
        try:
            completed = subprocess.run(
                argv,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                env=self._build_env(),
                timeout=self.timeout_seconds,
            )
        except subprocess.TimeoutExpired as e:
            raise TaskError.io(
                f"{self.binary} did not finish within {self.timeout_seconds}s",
                args=argv,
            ) from e
        except OSError as e:
            raise TaskError.io(f"Could not run {self.binary}: {e}", args=argv) from e
        duration_ms = int((time.monotonic() - start) * 1000)

        try:
            stdout = completed.stdout.decode("utf-8")
            stderr = completed.stderr.decode("utf-8", errors="replace")
        except UnicodeDecodeError as e:
            raise TaskError.decode(
                f"{self.binary} produced output that is not UTF-8", args=argv
            ) from e

        logger.debug(
            "task_command",
            args=argv,
            return_code=completed.returncode,
            duration_ms=duration_ms,
        )
        return CommandResult(
            args=argv,
            stdout=stdout,
            stderr=stderr,
            return_code=completed.returncode,
            duration_ms=duration_ms,
        )
