"""Orchestrator — owns the Session and drives every Batch through its lifecycle.

All mutation happens on the event loop thread between suspension points, so
no locking is needed. The only suspension point is waiting for a batch to
settle; select/export/reset/next/prev are plain synchronous transitions.

Preconditions are guarded: an operation that is not allowed in the current
state is a no-op that returns None/False rather than raising.
"""

import asyncio
import sys

from studio.agents.refiner import build_refinement_request
from studio.config import get_config
from studio.graph import run_batch_graph
from studio.state import Batch, RequestDescription, Session, TranscriptEntry, Variant
from studio.utils.exporter import export_artifact
from studio.utils.validator import validate_feedback, validate_request


class Orchestrator:
    """Session lifecycle: start, retry, select, refine, export, reset.

    Args:
        client: async Generation Client `(request, *, slot, context) -> Artifact`.
            None uses the LLM-backed default.
        exporter: Export collaborator `(artifact, target, request) -> Any`.
        resolver: async external-context resolver `(context) -> str`.
        batch_size: variants per batch (config `batch_size`).
        max_inflight_batches: unsettled batches allowed at once, the active one
            included (config `max_inflight_batches`).
    """

    def __init__(
        self,
        client=None,
        exporter=None,
        resolver=None,
        batch_size: int | None = None,
        max_inflight_batches: int | None = None,
    ):
        config = get_config()
        self.client = client
        self.exporter = exporter or export_artifact
        self.resolver = resolver
        self.batch_size = batch_size or config.get("batch_size", 3)
        self.max_inflight_batches = max(
            1, max_inflight_batches or config.get("max_inflight_batches", 3)
        )
        self.session: Session | None = None
        self._inflight: dict[str, asyncio.Task] = {}  # batch id → task, oldest first

    # --- Read-only views ---

    @property
    def batch(self) -> Batch | None:
        return self.session.batch if self.session else None

    @property
    def phase(self) -> str | None:
        """Aggregate state of the active batch, or None before the first submission."""
        return self.batch.phase if self.batch else None

    @property
    def inflight_count(self) -> int:
        return len(self._inflight)

    # --- Lifecycle operations ---

    def start(self, request: RequestDescription) -> Batch:
        """Create a new Session for `request` and dispatch its first batch.

        Returns immediately with the batch in `allPending`; await `settled()`
        to observe completion. Raises ValueError if the request has neither
        a goal nor an attached image.
        """
        loop = asyncio.get_running_loop()
        validated = validate_request(request)
        self.session = Session(request=validated)
        return self._dispatch(loop)

    def retry(self) -> Batch | None:
        """Re-dispatch the current request as a fresh batch."""
        if self.session is None:
            return None
        return self._dispatch(asyncio.get_running_loop())

    def select(self, variant_id: str) -> bool:
        """Select a succeeded variant of the active batch. Returns False if rejected."""
        batch = self.batch
        if batch is None:
            return False
        variant = batch.get(variant_id)
        if variant is None or variant.status != "succeeded":
            return False
        self.session.selected_variant_id = variant.id
        self.session.current_index = variant.slot
        return True

    def refine(self, feedback: str) -> Batch | None:
        """Regenerate from the selected variant plus feedback.

        Requires a selected, succeeded variant and non-empty feedback.
        """
        session = self.session
        if session is None:
            return None
        text = validate_feedback(feedback)
        variant = session.selected_variant
        if text is None or variant is None or variant.status != "succeeded":
            return None

        loop = asyncio.get_running_loop()
        refined = build_refinement_request(session.request, variant.artifact, text, session.transcript)
        session.transcript.append(
            TranscriptEntry(step=len(session.transcript) + 1, feedback=text, variant_id=variant.id)
        )
        session.request = refined
        return self._dispatch(loop)

    def export_artifact(self, variant_id: str | None = None, target: str = "download"):
        """Hand an artifact to the export collaborator.

        Defaults to the selected variant. Returns the exporter's result, or
        None when no artifact is available or the export failed.
        """
        batch = self.batch
        if batch is None:
            return None
        variant = batch.get(variant_id) if variant_id else self.session.selected_variant
        if variant is None or variant.status != "succeeded" or variant.artifact is None:
            return None
        try:
            return self.exporter(variant.artifact, target, self.session.origin)
        except Exception as exc:
            print(f"[Studio] Export to '{target}' failed: {exc!r}", file=sys.stderr)
            return None

    def reset(self) -> None:
        """Destroy the Session. In-flight calls finish and are discarded."""
        self.session = None

    def next(self) -> Variant | None:
        return self._step(1)

    def prev(self) -> Variant | None:
        return self._step(-1)

    # --- Awaiting ---

    async def settled(self) -> Batch | None:
        """Wait until the active batch has settled and return it.

        If a newer batch supersedes the one being awaited, waits for the newer one.
        """
        while True:
            batch = self.batch
            if batch is None:
                return None
            task = self._inflight.get(batch.id)
            if task is None or task.done():
                return batch
            await asyncio.wait({task})

    async def drain(self) -> None:
        """Wait for every in-flight batch, stale ones included."""
        while True:
            pending = [t for t in self._inflight.values() if not t.done()]
            if not pending:
                return
            await asyncio.wait(pending)

    # --- Internals ---

    def _step(self, delta: int) -> Variant | None:
        batch = self.batch
        if batch is None or batch.size == 0:
            return None
        self.session.current_index = (self.session.current_index + delta) % batch.size
        return self.session.current_variant

    def _dispatch(self, loop: asyncio.AbstractEventLoop) -> Batch:
        """Replace the active batch with a fresh all-pending one and start it."""
        session = self.session
        batch = Batch.dispatch(session.request, self.batch_size)
        session.batch = batch
        session.selected_variant_id = None
        session.current_index = 0

        self._enforce_inflight_bound()
        task = loop.create_task(self._run_batch(batch), name=batch.id)
        self._inflight[batch.id] = task
        task.add_done_callback(lambda _t, batch_id=batch.id: self._inflight.pop(batch_id, None))

        print(
            f"[Studio] Dispatched {batch.id}: {batch.size} variants, tier={batch.request.tier}",
            file=sys.stderr,
        )
        return batch

    def _enforce_inflight_bound(self) -> None:
        """Cancel the oldest superseded batches so the new one fits under the bound."""
        for batch_id in [bid for bid, task in self._inflight.items() if task.done()]:
            del self._inflight[batch_id]
        while len(self._inflight) >= self.max_inflight_batches:
            oldest_id = next(iter(self._inflight))
            task = self._inflight.pop(oldest_id)
            task.cancel()
            print(
                f"[Studio] Cancelled superseded {oldest_id} "
                f"(max_inflight_batches={self.max_inflight_batches}).",
                file=sys.stderr,
            )

    def _is_active(self, batch: Batch) -> bool:
        return self.session is not None and self.session.batch is batch

    async def _run_batch(self, batch: Batch) -> None:
        try:
            outcomes = await run_batch_graph(
                batch.request,
                batch.id,
                batch.size,
                client=self.client,
                resolver=self.resolver,
            )
        except Exception as exc:
            print(f"[Studio] Batch {batch.id} workflow error: {exc!r}", file=sys.stderr)
            message = str(exc) or exc.__class__.__name__
            outcomes = [
                {"slot": v.slot, "status": "failed", "error": message} for v in batch.variants
            ]

        if not self._is_active(batch):
            print(f"[Studio] Discarding stale results for {batch.id}.", file=sys.stderr)
            return

        # Single update: every variant settles at once.
        for outcome in outcomes:
            variant = batch.variants[outcome["slot"]]
            if outcome["status"] == "succeeded":
                variant.succeed(outcome["artifact"])
            else:
                variant.fail(outcome["error"])

        if batch.phase == "allFailed":
            print(
                f"[Studio] All {batch.size} variants of {batch.id} failed; retry() or reset().",
                file=sys.stderr,
            )
