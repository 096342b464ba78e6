"""Studio state — the Session aggregate and everything reachable from it.

RequestDescription, Attachment, ExternalContext and Artifact are immutable
values. Variant, Batch and Session are mutable records owned exclusively by
the Orchestrator.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

Tier = Literal["fast", "quality"]
AttachmentRole = Literal["style", "asset"]
VariantStatus = Literal["pending", "succeeded", "failed"]
BatchPhase = Literal["allPending", "ready", "allFailed"]

TIERS = ("fast", "quality")


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Attachment:
    """Reference image attached to a request.

    role="style" is inspiration only; role="asset" must be embedded as-is.
    """

    url: str
    role: AttachmentRole = "style"
    name: str = ""


@dataclass(frozen=True)
class ExternalContext:
    url: str = ""  # Page to scrape for content.
    search_query: str = ""  # Web search to run for reference material.
    brand_domain: str = ""  # Domain whose brand identity should be matched.

    def is_empty(self) -> bool:
        return not (self.url or self.search_query or self.brand_domain)


@dataclass(frozen=True)
class RequestDescription:
    """Immutable input to one generation attempt."""

    goal: str = ""
    tier: Tier = "fast"
    attachments: tuple[Attachment, ...] = ()
    context: ExternalContext | None = None
    domain: str = ""
    instructions: str = ""  # Domain instruction template, opaque to the core.


@dataclass(frozen=True)
class Artifact:
    source: str  # Generated component source text.
    file_name: str = "GeneratedComponent.jsx"
    model: str = ""
    preview_handle: str | None = None
    deployment_handle: str | None = None

    @property
    def has_preview(self) -> bool:
        return self.preview_handle is not None


@dataclass
class Variant:
    """One candidate generation attempt. Leaves `pending` exactly once."""

    slot: int
    id: str = field(default_factory=lambda: _new_id("var"))
    status: VariantStatus = "pending"
    artifact: Artifact | None = None
    error: str | None = None

    def succeed(self, artifact: Artifact) -> None:
        if self.status != "pending":
            raise ValueError(f"Variant {self.id} already settled as '{self.status}'.")
        self.status = "succeeded"
        self.artifact = artifact

    def fail(self, error: str) -> None:
        if self.status != "pending":
            raise ValueError(f"Variant {self.id} already settled as '{self.status}'.")
        self.status = "failed"
        self.error = error


def aggregate_phase(variants: list[Variant]) -> BatchPhase:
    """Derive a Batch's aggregate state from its Variants."""
    if all(v.status == "pending" for v in variants):
        return "allPending"
    if all(v.status == "failed" for v in variants):
        return "allFailed"
    return "ready"


@dataclass
class Batch:
    """Fixed-size set of Variants dispatched together from one request."""

    request: RequestDescription
    variants: list[Variant]
    id: str = field(default_factory=lambda: _new_id("batch"))
    dispatched_at: datetime = field(default_factory=_now)

    @classmethod
    def dispatch(cls, request: RequestDescription, size: int) -> "Batch":
        return cls(request=request, variants=[Variant(slot=i) for i in range(size)])

    @property
    def size(self) -> int:
        return len(self.variants)

    @property
    def phase(self) -> BatchPhase:
        return aggregate_phase(self.variants)

    @property
    def settled(self) -> bool:
        return all(v.status != "pending" for v in self.variants)

    def get(self, variant_id: str) -> Variant | None:
        for variant in self.variants:
            if variant.id == variant_id:
                return variant
        return None

    def successes(self) -> list[Variant]:
        return [v for v in self.variants if v.status == "succeeded"]


@dataclass(frozen=True)
class TranscriptEntry:
    step: int
    feedback: str
    variant_id: str
    created_at: datetime = field(default_factory=_now)

    def describe(self) -> str:
        return f"Refinement {self.step}: {self.feedback}"


@dataclass
class Session:
    request: RequestDescription  # Replaced by each refinement request.
    batch: Batch | None = None
    selected_variant_id: str | None = None
    current_index: int = 0
    transcript: list[TranscriptEntry] = field(default_factory=list)  # Append-only.
    id: str = field(default_factory=lambda: _new_id("session"))
    origin: RequestDescription | None = None  # The request the session started from.

    def __post_init__(self):
        if self.origin is None:
            self.origin = self.request

    @property
    def tier(self) -> Tier:
        return self.request.tier

    @property
    def selected_variant(self) -> Variant | None:
        if self.batch is None or self.selected_variant_id is None:
            return None
        return self.batch.get(self.selected_variant_id)

    @property
    def current_variant(self) -> Variant | None:
        if self.batch is None or not self.batch.variants:
            return None
        return self.batch.variants[self.current_index % self.batch.size]
