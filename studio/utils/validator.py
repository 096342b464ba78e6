"""Input validation — checks a request is usable before a Session starts."""

from dataclasses import replace

from studio.state import TIERS, RequestDescription


def validate_request(request: RequestDescription) -> RequestDescription:
    """Validate that the request carries a goal or at least one image.

    Returns a copy with the goal stripped on success.
    Raises ValueError if both are missing or the tier is unknown.
    """
    if not isinstance(request, RequestDescription):
        raise ValueError("Request must be a RequestDescription.")
    goal = request.goal.strip() if isinstance(request.goal, str) else ""
    if not goal and not request.attachments:
        raise ValueError("Request needs a goal or at least one attached image.")
    if request.tier not in TIERS:
        raise ValueError(f"Unknown tier '{request.tier}'. Must be one of: {TIERS}")
    return replace(request, goal=goal)


def validate_feedback(feedback: str) -> str | None:
    """Return stripped feedback text, or None when there is nothing to apply."""
    if not isinstance(feedback, str) or not feedback.strip():
        return None
    return feedback.strip()
