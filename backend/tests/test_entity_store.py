"""Entity store tests: optimistic application, ordering, rollback."""

import asyncio

import pytest

from teamsync.exceptions import StorageError
from teamsync.repositories.gateway import PersistenceGateway
from teamsync.repositories.local_store import LocalRecordStore
from teamsync.schemas.activity import Activity
from teamsync.schemas.common import Category
from teamsync.schemas.document import Document
from teamsync.schemas.folder import Folder
from teamsync.schemas.task import Task
from teamsync.services.entity_store import EntityKind, EntityStore, Mutation


def _doc(doc_id="d1", **overrides) -> Document:
    fields = dict(id=doc_id, title="Plan", author_id="alice", author_name="Alice", category=Category.TEAM)
    fields.update(overrides)
    return Document(**fields)


def _fail_when(collection, method_name, predicate):
    """Wrap a collection method so calls matching ``predicate`` raise StorageError."""
    original = getattr(collection, method_name)

    async def wrapper(arg):
        if predicate(arg):
            raise StorageError("backend unavailable", collection.name)
        return await original(arg)

    setattr(collection, method_name, wrapper)


class TestOptimistic:
    @pytest.mark.asyncio
    async def test_local_state_changes_before_persist(self, sql_gateway):
        store = EntityStore(sql_gateway)
        task = store.apply_optimistic(Mutation.create(EntityKind.DOCS, _doc()))

        assert store.get(EntityKind.DOCS, "d1") is not None
        assert store.pending_writes == 1

        assert await task is True
        assert [d.id for d in await sql_gateway.docs.list()] == ["d1"]
        assert store.pending_writes == 0

    @pytest.mark.asyncio
    async def test_prepend_create_goes_first(self, sql_gateway):
        store = EntityStore(sql_gateway)
        store.apply_optimistic(Mutation.create(EntityKind.DOCS, _doc("a")))
        store.apply_optimistic(Mutation.create(EntityKind.DOCS, _doc("b"), prepend=True))
        assert [d.id for d in store.all(EntityKind.DOCS)] == ["b", "a"]
        await store.flush()

    @pytest.mark.asyncio
    async def test_same_entity_writes_land_in_issue_order(self, tmp_path):
        gateway = PersistenceGateway(LocalRecordStore(tmp_path, latency_ms=5))
        await gateway.docs.create(_doc())
        store = EntityStore(gateway)
        await store.load("alice")

        for title in ("one", "two", "three"):
            store.apply_optimistic(Mutation.update(EntityKind.DOCS, _doc(title=title)))
        await store.flush()

        [stored] = await gateway.docs.list()
        assert stored.title == "three"
        assert store.get(EntityKind.DOCS, "d1").title == "three"


class TestRollback:
    @pytest.mark.asyncio
    async def test_failed_update_restores_previous_value(self, sql_gateway):
        await sql_gateway.docs.create(_doc())
        store = EntityStore(sql_gateway)
        await store.load("alice")
        _fail_when(sql_gateway.docs, "update", lambda doc: True)

        ok = await store.apply_optimistic(Mutation.update(EntityKind.DOCS, _doc(title="Changed")))

        assert ok is False
        assert store.get(EntityKind.DOCS, "d1").title == "Plan"
        [failure] = store.sync_failures
        assert failure.rolled_back is True
        assert isinstance(failure.error, StorageError)

    @pytest.mark.asyncio
    async def test_failed_create_removes_entity(self, sql_gateway):
        _fail_when(sql_gateway.docs, "create", lambda doc: True)
        store = EntityStore(sql_gateway)
        await store.apply_optimistic(Mutation.create(EntityKind.DOCS, _doc()))
        assert store.get(EntityKind.DOCS, "d1") is None

    @pytest.mark.asyncio
    async def test_failed_delete_restores_at_original_position(self, sql_gateway):
        for doc_id in ("a", "b", "c"):
            await sql_gateway.docs.create(_doc(doc_id))
        store = EntityStore(sql_gateway)
        await store.load("alice")
        _fail_when(sql_gateway.docs, "delete", lambda doc_id: True)

        await store.apply_optimistic(Mutation.delete(EntityKind.DOCS, "b"))

        assert [d.id for d in store.all(EntityKind.DOCS)] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_newer_local_change_is_kept(self, sql_gateway):
        await sql_gateway.docs.create(_doc())
        store = EntityStore(sql_gateway)
        await store.load("alice")
        _fail_when(sql_gateway.docs, "update", lambda doc: doc.title == "first")

        first = store.apply_optimistic(Mutation.update(EntityKind.DOCS, _doc(title="first")))
        second = store.apply_optimistic(Mutation.update(EntityKind.DOCS, _doc(title="second")))

        assert await first is False
        assert await second is True
        assert store.get(EntityKind.DOCS, "d1").title == "second"
        assert store.sync_failures[0].rolled_back is False

    @pytest.mark.asyncio
    async def test_sync_error_callback(self, sql_gateway):
        seen = []
        _fail_when(sql_gateway.tasks, "create", lambda task: True)
        store = EntityStore(sql_gateway, on_sync_error=seen.append)

        await store.apply_optimistic(Mutation.create(EntityKind.TASKS, Task(id="t1", user_id="alice", title="x")))

        assert [f.mutation.entity_id for f in seen] == ["t1"]


class TestStaged:
    @pytest.mark.asyncio
    async def test_stages_run_in_order(self, sql_gateway):
        await sql_gateway.folders.create(Folder(id="f1", name="F", user_id="alice", category=Category.TEAM))
        await sql_gateway.docs.create(_doc(folder_id="f1"))
        store = EntityStore(sql_gateway)
        await store.load("alice")

        ok = await store.apply_staged([
            [Mutation.update(EntityKind.DOCS, _doc(folder_id=None))],
            [Mutation.delete(EntityKind.FOLDERS, "f1")],
        ])

        assert ok is True
        assert await sql_gateway.folders.list() == []
        assert (await sql_gateway.docs.list())[0].folder_id is None

    @pytest.mark.asyncio
    async def test_later_stage_skipped_after_failure(self, sql_gateway):
        await sql_gateway.folders.create(Folder(id="f1", name="F", user_id="alice", category=Category.TEAM))
        await sql_gateway.docs.create(_doc(folder_id="f1"))
        store = EntityStore(sql_gateway)
        await store.load("alice")
        _fail_when(sql_gateway.docs, "update", lambda doc: True)

        task = store.apply_staged([
            [Mutation.update(EntityKind.DOCS, _doc(folder_id=None))],
            [Mutation.delete(EntityKind.FOLDERS, "f1")],
        ])
        assert store.get(EntityKind.FOLDERS, "f1") is None

        assert await task is False
        assert len(await sql_gateway.folders.list()) == 1
        assert store.get(EntityKind.FOLDERS, "f1") is not None
        assert store.get(EntityKind.DOCS, "d1").folder_id == "f1"
        assert len(store.sync_failures) == 2


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_load_reconciles_and_filters_tasks(self, sql_gateway):
        await sql_gateway.tasks.create(Task(id="t1", user_id="alice", title="Mine"))
        await sql_gateway.tasks.create(Task(id="t2", user_id="bob", title="His"))
        await sql_gateway.docs.create(_doc())
        store = EntityStore(sql_gateway)
        store.reconcile(EntityKind.DOCS, [_doc("stale")])

        await store.load("alice")

        assert [t.id for t in store.all(EntityKind.TASKS)] == ["t1"]
        assert [d.id for d in store.all(EntityKind.DOCS)] == ["d1"]

    @pytest.mark.asyncio
    async def test_insert_local_caps_prepended_feed(self, sql_gateway):
        store = EntityStore(sql_gateway)
        for i in range(4):
            entry = Activity(id=f"a{i}", user="Alice", action="Task completed", target=str(i), time="t")
            store.insert_local(EntityKind.ACTIVITIES, entry, prepend=True, limit=3)
        assert [a.id for a in store.all(EntityKind.ACTIVITIES)] == ["a3", "a2", "a1"]
        assert await sql_gateway.activities.list() == []

    @pytest.mark.asyncio
    async def test_flush_then_teardown(self, sql_gateway):
        store = EntityStore(sql_gateway)
        for i in range(3):
            store.apply_optimistic(Mutation.create(EntityKind.DOCS, _doc(f"d{i}")))

        await store.flush()
        store.teardown()

        assert store.all(EntityKind.DOCS) == []
        assert len(await sql_gateway.docs.list()) == 3

    @pytest.mark.asyncio
    async def test_writes_on_different_entities_run_concurrently(self, tmp_path):
        gateway = PersistenceGateway(LocalRecordStore(tmp_path, latency_ms=1))
        store = EntityStore(gateway)
        tasks = [store.apply_optimistic(Mutation.create(EntityKind.DOCS, _doc(f"d{i}"))) for i in range(5)]
        assert all(await asyncio.gather(*tasks))
        assert len(await gateway.docs.list()) == 5

    @pytest.mark.asyncio
    async def test_entity_locks_released_after_writes_settle(self, tmp_path):
        gateway = PersistenceGateway(LocalRecordStore(tmp_path, latency_ms=1))
        store = EntityStore(gateway)
        store.apply_optimistic(Mutation.create(EntityKind.DOCS, _doc("a")))
        store.apply_optimistic(Mutation.update(EntityKind.DOCS, _doc("a", title="Second")))
        store.apply_optimistic(Mutation.create(EntityKind.DOCS, _doc("b")))

        await store.flush()

        assert store._book.locks == {}
        assert {d.id: d.title for d in await gateway.docs.list()} == {"a": "Second", "b": "Plan"}
