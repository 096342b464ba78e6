"""Tests for studio.agents.refiner — refinement request construction."""

from studio.agents.refiner import (
    ROUNDS_TO_KEEP_VERBATIM,
    build_refinement_goal,
    build_refinement_request,
)
from studio.state import Attachment, ExternalContext, RequestDescription, TranscriptEntry


def _entries(n):
    return [TranscriptEntry(step=i + 1, feedback=f"change {i + 1}", variant_id=f"var-{i}") for i in range(n)]


class TestBuildRefinementGoal:
    def test_embeds_artifact_and_feedback(self, sample_artifact):
        goal = build_refinement_goal(sample_artifact, "make the header blue")
        assert sample_artifact.source in goal
        assert '"make the header blue"' in goal
        assert goal.index("## Current Component") < goal.index("## Requested Change")
        assert "## Earlier Feedback" not in goal

    def test_identical_inputs_give_identical_goal(self, sample_artifact):
        first = build_refinement_goal(sample_artifact, "add a sidebar", _entries(2))
        second = build_refinement_goal(sample_artifact, "add a sidebar", _entries(2))
        assert first == second

    def test_lists_recent_feedback(self, sample_artifact):
        goal = build_refinement_goal(sample_artifact, "next", _entries(2))
        assert "- change 1" in goal
        assert "- change 2" in goal
        assert "omitted" not in goal

    def test_older_feedback_is_counted_not_listed(self, sample_artifact):
        goal = build_refinement_goal(sample_artifact, "next", _entries(ROUNDS_TO_KEEP_VERBATIM + 2))
        assert "- change 1\n" not in goal
        assert "- change 2\n" not in goal
        assert "(2 earlier refinement step(s) omitted)" in goal
        assert f"- change {ROUNDS_TO_KEEP_VERBATIM + 2}" in goal


class TestBuildRefinementRequest:
    def test_carries_over_settings_and_drops_context(self, sample_artifact):
        previous = RequestDescription(
            goal="Build a CRM dashboard",
            tier="quality",
            attachments=(Attachment(url="https://img/a.png", role="asset"),),
            context=ExternalContext(url="https://example.com"),
            domain="business",
            instructions="Be corporate.",
        )
        refined = build_refinement_request(previous, sample_artifact, "add a sidebar")

        assert refined.tier == "quality"
        assert refined.domain == "business"
        assert refined.instructions == "Be corporate."
        assert refined.attachments == previous.attachments
        assert refined.context is None
        assert "add a sidebar" in refined.goal
        assert previous.goal == "Build a CRM dashboard"

    def test_identical_inputs_give_equal_requests(self, sample_artifact, request_description):
        first = build_refinement_request(request_description, sample_artifact, "dark mode")
        second = build_refinement_request(request_description, sample_artifact, "dark mode")
        assert first == second
