"""Tests for studio.state: Variant transitions, Batch phase, Session views."""

from dataclasses import FrozenInstanceError

import pytest

from studio.state import (
    Artifact,
    Batch,
    RequestDescription,
    Session,
    TranscriptEntry,
    Variant,
    aggregate_phase,
)


def _artifact(text="x"):
    return Artifact(source=f"export default function A() {{ return '{text}'; }}")


class TestVariant:
    def test_starts_pending(self):
        variant = Variant(slot=0)
        assert variant.status == "pending"
        assert variant.artifact is None
        assert variant.error is None

    def test_succeed_sets_artifact(self):
        variant = Variant(slot=0)
        artifact = _artifact()
        variant.succeed(artifact)
        assert variant.status == "succeeded"
        assert variant.artifact is artifact

    def test_fail_sets_error(self):
        variant = Variant(slot=1)
        variant.fail("timeout")
        assert variant.status == "failed"
        assert variant.error == "timeout"
        assert variant.artifact is None

    def test_cannot_settle_twice(self):
        variant = Variant(slot=0)
        variant.succeed(_artifact())
        with pytest.raises(ValueError, match="already settled"):
            variant.fail("late")
        with pytest.raises(ValueError, match="already settled"):
            variant.succeed(_artifact("again"))

    def test_ids_are_unique(self):
        assert Variant(slot=0).id != Variant(slot=0).id


class TestAggregatePhase:
    def test_all_pending(self):
        assert aggregate_phase([Variant(slot=i) for i in range(3)]) == "allPending"

    def test_all_failed(self):
        variants = [Variant(slot=i) for i in range(3)]
        for v in variants:
            v.fail("boom")
        assert aggregate_phase(variants) == "allFailed"

    def test_one_success_is_ready(self):
        variants = [Variant(slot=i) for i in range(3)]
        variants[0].fail("boom")
        variants[1].succeed(_artifact())
        variants[2].fail("boom")
        assert aggregate_phase(variants) == "ready"


class TestBatch:
    def test_dispatch_creates_pending_slots(self):
        batch = Batch.dispatch(RequestDescription(goal="x"), 3)
        assert batch.size == 3
        assert [v.slot for v in batch.variants] == [0, 1, 2]
        assert batch.phase == "allPending"
        assert not batch.settled

    def test_get_and_successes(self):
        batch = Batch.dispatch(RequestDescription(goal="x"), 2)
        batch.variants[0].succeed(_artifact())
        batch.variants[1].fail("boom")
        assert batch.get(batch.variants[1].id) is batch.variants[1]
        assert batch.get("var-missing") is None
        assert batch.successes() == [batch.variants[0]]
        assert batch.settled

    def test_distinct_batches_have_distinct_ids(self):
        request = RequestDescription(goal="x")
        assert Batch.dispatch(request, 1).id != Batch.dispatch(request, 1).id


class TestRequestDescription:
    def test_is_immutable(self):
        request = RequestDescription(goal="x")
        with pytest.raises(FrozenInstanceError):
            request.goal = "y"


class TestSession:
    def test_selected_variant_none_without_selection(self):
        session = Session(request=RequestDescription(goal="x"))
        assert session.selected_variant is None
        session.batch = Batch.dispatch(session.request, 3)
        assert session.selected_variant is None

    def test_current_variant_wraps_index(self):
        session = Session(request=RequestDescription(goal="x"))
        session.batch = Batch.dispatch(session.request, 3)
        session.current_index = 4
        assert session.current_variant is session.batch.variants[1]

    def test_tier_follows_request(self):
        session = Session(request=RequestDescription(goal="x", tier="quality"))
        assert session.tier == "quality"


class TestTranscriptEntry:
    def test_describe(self):
        entry = TranscriptEntry(step=2, feedback="make it blue", variant_id="var-1")
        assert entry.describe() == "Refinement 2: make it blue"
