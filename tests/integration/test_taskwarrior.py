"""End-to-end tests driving the real ``task`` executable."""

import shutil

import pytest

from taskhier import ops
from taskhier.cache import TaskCache
from taskhier.models import TaskStatus

pytestmark = pytest.mark.skipif(
    shutil.which("task") is None, reason="Taskwarrior is not installed"
)


def test_create_and_update(tw_store):
    cache = TaskCache(tw_store)
    task = cache.create("Buy milk")
    reloaded = cache.update(task.uuid)
    assert reloaded.description == "Buy milk"
    assert reloaded.partof is None
    assert reloaded.status is TaskStatus.PENDING


def test_empty_filter_result(tw_store):
    assert ops.get_tasks("+nosuchtag", store=tw_store) == []


def test_hierarchy_reconciled(tw_store, capsys):
    cache = TaskCache(tw_store, enable_project_derivation=True, enable_hierarchy_tag=True)
    foo = cache.create("Foo")
    bar = cache.create("Bar", partof=foo.uuid)
    baz = cache.create("Baz", partof=bar.uuid)
    cache.refresh()

    assert cache.get_task(baz.uuid).project == "foo.bar"
    assert cache.get_task(foo.uuid).has_tag("project")
    assert not cache.get_task(baz.uuid).has_tag("project")
    capsys.readouterr()

    for task_uuid in (foo.uuid, bar.uuid, baz.uuid):
        cache.get_task(task_uuid)
    assert capsys.readouterr().out == ""


def test_tag_removed_when_last_child_deleted(tw_store):
    cache = TaskCache(tw_store, enable_hierarchy_tag=True)
    parent = cache.create("Parent")
    child = cache.create("Child", partof=parent.uuid)
    cache.refresh()
    assert cache.get_task(parent.uuid).has_tag("project")

    ops.mark_deleted(child.uuid, store=tw_store)
    cache.refresh()
    assert not cache.get_task(parent.uuid).has_tag("project")


def test_mutation_helpers(tw_store):
    cache = TaskCache(tw_store)
    task = cache.create("Draft")
    ops.set_description(task.uuid, "Final draft", store=tw_store)
    ops.add_tag(task.uuid, "writing", store=tw_store)
    ops.mark_done(task.uuid, store=tw_store)
    updated = cache.update(task.uuid)
    assert "Final draft" in updated.description
    assert updated.has_tag("writing")
    assert updated.status is TaskStatus.COMPLETED
