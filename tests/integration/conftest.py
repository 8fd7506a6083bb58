"""Shared fixtures for integration tests against a real Taskwarrior.

Provides:
- taskwarrior_settings: BaseSettings pointing at a throwaway taskrc and data dir
- tw_store: TaskwarriorStore built from those settings

Tests are skipped when the ``task`` executable is not installed.
"""

from pathlib import Path

import pytest

from taskhier.client import TaskwarriorStore
from taskhier.config import BaseSettings, set_settings

TASKRC = """\
data.location={data}
uda.partof.type=string
uda.partof.label=Part of
confirmation=off
json.array=on
news.version=99.99.99
"""


@pytest.fixture
def taskwarrior_settings(tmp_path: Path) -> BaseSettings:
    data = tmp_path / "data"
    data.mkdir()
    taskrc = tmp_path / "taskrc"
    taskrc.write_text(TASKRC.format(data=data))
    settings = BaseSettings(
        taskrc=taskrc,
        taskdata=data,
        rc_overrides=["rc.color=off", "rc.hooks=off"],
        command_timeout=30,
    )
    set_settings(settings)
    return settings


@pytest.fixture
def tw_store(taskwarrior_settings: BaseSettings) -> TaskwarriorStore:
    return TaskwarriorStore.from_settings(taskwarrior_settings)
