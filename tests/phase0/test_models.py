"""Contract tests for the canonical models and the import task state machine."""

import pytest

from ddbimporter.importer.queue import (
    CANCELLED_ERROR,
    ImportQueue,
    ImportTask,
    InvalidTransitionError,
)
from ddbimporter.models import (
    CONTENT_KINDS,
    KIND_LABELS,
    ContentReference,
    ContentSet,
    Session,
    kind_label,
)


class TestContentKinds:
    def test_closed_set(self):
        assert set(CONTENT_KINDS) == {"adventure", "sourcebook", "homebrew", "character"}

    def test_every_kind_has_a_label(self):
        assert set(KIND_LABELS) == set(CONTENT_KINDS)

    def test_labels(self):
        assert kind_label("homebrew") == "Homebrew Content"
        assert kind_label("character") == "Character"

    def test_unknown_kind_label(self):
        assert kind_label("spell") == "Content"


class TestContentSet:
    def test_by_kind_returns_live_partition(self):
        content = ContentSet()
        content.by_kind("sourcebook").append(
            ContentReference(id="1", name="PHB", kind="sourcebook")
        )
        assert [c.name for c in content.sourcebooks] == ["PHB"]

    def test_all_keeps_partition_order(self):
        content = ContentSet(
            adventures=[ContentReference(id="a", name="A", kind="adventure")],
            homebrew=[ContentReference(id="h", name="H", kind="homebrew")],
        )
        assert [c.id for c in content.all()] == ["a", "h"]

    def test_by_kind_character_is_empty(self):
        assert ContentSet().by_kind("character") == []


class TestSession:
    def test_defaults_unauthenticated(self):
        s = Session()
        assert s.authenticated is False
        assert s.profile is None
        assert s.credential is None


class TestImportTask:
    def test_new_task_is_pending(self):
        task = ImportTask("A1", "adventure", overwrite=False)
        assert task.status == "pending"
        assert task.error is None
        assert task.is_terminal is False

    def test_identity_is_read_only(self):
        task = ImportTask("A1", "adventure", overwrite=True)
        with pytest.raises(AttributeError):
            task.id = "B2"  # type: ignore[misc]
        with pytest.raises(AttributeError):
            task.kind = "character"  # type: ignore[misc]
        with pytest.raises(AttributeError):
            task.overwrite = False  # type: ignore[misc]

    def test_happy_path(self):
        task = ImportTask("A1", "adventure", overwrite=False)
        task.start()
        assert task.status == "processing"
        task.complete()
        assert task.status == "completed"
        assert task.error is None

    def test_fail_records_error(self):
        task = ImportTask("C1", "character", overwrite=False)
        task.start()
        task.fail("boom")
        assert task.status == "failed"
        assert task.error == "boom"
        assert task.is_terminal

    def test_cannot_complete_pending(self):
        task = ImportTask("A1", "adventure", overwrite=False)
        with pytest.raises(InvalidTransitionError):
            task.complete()

    def test_cannot_fail_pending(self):
        task = ImportTask("A1", "adventure", overwrite=False)
        with pytest.raises(InvalidTransitionError):
            task.fail(CANCELLED_ERROR)
        assert task.error is None

    @pytest.mark.parametrize("terminal", ["complete", "fail"])
    def test_terminal_states_are_final(self, terminal):
        task = ImportTask("A1", "adventure", overwrite=False)
        task.start()
        if terminal == "complete":
            task.complete()
        else:
            task.fail("x")
        with pytest.raises(InvalidTransitionError):
            task.start()
        with pytest.raises(InvalidTransitionError):
            task.complete()
        with pytest.raises(InvalidTransitionError):
            task.fail("again")

    def test_snapshot(self):
        task = ImportTask("A1", "adventure", overwrite=True)
        snap = task.snapshot()
        assert snap.model_dump() == {
            "id": "A1",
            "kind": "adventure",
            "overwrite": True,
            "status": "pending",
            "error": None,
        }


class TestImportQueue:
    def test_counts(self):
        tasks = [ImportTask(str(i), "homebrew", False) for i in range(3)]
        tasks[0].start()
        tasks[0].complete()
        queue = ImportQueue(tasks=tasks)
        assert len(queue) == 3
        assert queue.count("completed") == 1
        assert queue.count("pending") == 2
        assert queue.cancelled is False

    def test_queue_ids_unique(self):
        assert ImportQueue(tasks=[]).queue_id != ImportQueue(tasks=[]).queue_id
