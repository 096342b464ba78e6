"""Refinement Controller — derives a new request from a chosen artifact plus feedback.

Refinement is "regenerate from scratch with more context": the prior
component is embedded verbatim together with the feedback, and the backend
is asked for a new variant that keeps what works. The artifact is never
parsed or validated here.
"""

from collections.abc import Sequence
from dataclasses import replace

from studio.state import Artifact, RequestDescription, TranscriptEntry

# Earlier feedback steps shown verbatim; older ones are only counted
ROUNDS_TO_KEEP_VERBATIM = 3

REFINEMENT_INSTRUCTION = """\
Produce a NEW version of the component above that applies the requested change.
- Preserve everything that already works: layout, data, behaviour and styling \
the feedback does not mention.
- Change only what the feedback asks for.
- Return the complete component, not a diff."""


def _render_history(transcript: Sequence[TranscriptEntry]) -> str:
    if not transcript:
        return ""
    recent = transcript[-ROUNDS_TO_KEEP_VERBATIM:]
    omitted = len(transcript) - len(recent)
    lines = ["## Earlier Feedback (already applied)"]
    if omitted:
        lines.append(f"({omitted} earlier refinement step(s) omitted)")
    lines += [f"- {entry.feedback}" for entry in recent]
    return "\n".join(lines)


def build_refinement_goal(
    artifact: Artifact,
    feedback: str,
    transcript: Sequence[TranscriptEntry] = (),
) -> str:
    """Construct the goal text for a refinement step."""
    parts = [
        "## Current Component",
        f"```jsx\n{artifact.source}\n```",
    ]
    history = _render_history(transcript)
    if history:
        parts.append(history)
    parts.append(f'## Requested Change\n"{feedback}"')
    parts.append(f"## Instructions\n{REFINEMENT_INSTRUCTION}")
    return "\n\n".join(parts)


def build_refinement_request(
    previous: RequestDescription,
    artifact: Artifact,
    feedback: str,
    transcript: Sequence[TranscriptEntry] = (),
) -> RequestDescription:
    """Return a new RequestDescription for regenerating `artifact` with `feedback`.

    Tier, domain, instruction template and attachments carry over from
    `previous`; external context is dropped because the artifact already
    reflects it. The previous request is left untouched.
    """
    return replace(
        previous,
        goal=build_refinement_goal(artifact, feedback, transcript),
        context=None,
    )
