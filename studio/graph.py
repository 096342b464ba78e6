"""LangGraph StateGraph for one Generation Batch.

    START → gather_context ─┬─ Send(generate, slot 0) ─┐
                            ├─ Send(generate, slot 1) ─┼→ END
                            └─ Send(generate, slot N-1)┘

The N generate tasks run concurrently in one superstep and the graph only
returns once every one of them has settled. Each task catches its own
failure and reports it as an outcome, so one bad variant never aborts the
others. Outcomes carry their slot; attribution never depends on completion
order.
"""

import operator
import sys
from typing import Annotated, TypedDict

from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, START, StateGraph
from langgraph.types import Send

from studio.agents.generator import generate_component
from studio.state import Artifact, RequestDescription
from studio.utils.context import resolve_context


class BatchState(TypedDict):
    request: RequestDescription
    batch_id: str
    size: int
    context: str  # Resolved external context, shared by every slot.
    outcomes: Annotated[list[dict], operator.add]  # One entry per settled slot.


class SlotTask(TypedDict):
    request: RequestDescription
    batch_id: str
    slot: int
    context: str


def _configurable(config: RunnableConfig | None) -> dict:
    return (config or {}).get("configurable", {})


async def _gather_context(state: BatchState, config: RunnableConfig) -> dict:
    """Resolve the request's external context once for the whole batch."""
    resolver = _configurable(config).get("resolve_context", resolve_context)
    return {"context": await resolver(state["request"].context)}


def _fan_out(state: BatchState) -> list[Send]:
    """Conditional edge: one generate task per slot, all started together."""
    return [
        Send(
            "generate",
            {
                "request": state["request"],
                "batch_id": state["batch_id"],
                "slot": slot,
                "context": state.get("context", ""),
            },
        )
        for slot in range(state["size"])
    ]


NO_ARTIFACT_ERROR = "Generation Client returned no artifact source."


def _error_message(exc: Exception) -> str:
    return str(exc) or exc.__class__.__name__


async def _generate_variant(task: SlotTask, config: RunnableConfig) -> dict:
    """Run the Generation Client for one slot and record the outcome."""
    client = _configurable(config).get("client", generate_component)
    slot = task["slot"]
    try:
        artifact = await client(task["request"], slot=slot, context=task["context"])
    except Exception as exc:
        print(
            f"[Studio] Batch {task['batch_id']} variant {slot} failed: {exc!r}",
            file=sys.stderr,
        )
        return {"outcomes": [{"slot": slot, "status": "failed", "error": _error_message(exc)}]}
    if not isinstance(artifact, Artifact) or not isinstance(artifact.source, str) or not artifact.source.strip():
        print(
            f"[Studio] Batch {task['batch_id']} variant {slot} returned no artifact source.",
            file=sys.stderr,
        )
        return {"outcomes": [{"slot": slot, "status": "failed", "error": NO_ARTIFACT_ERROR}]}
    return {"outcomes": [{"slot": slot, "status": "succeeded", "artifact": artifact}]}


# --- Build the graph ---

workflow = StateGraph(BatchState)

workflow.add_node("gather_context", _gather_context)
workflow.add_node("generate", _generate_variant)

workflow.add_edge(START, "gather_context")
workflow.add_conditional_edges("gather_context", _fan_out, ["generate"])
workflow.add_edge("generate", END)

graph = workflow.compile()


async def run_batch_graph(
    request: RequestDescription,
    batch_id: str,
    size: int,
    client=None,
    resolver=None,
) -> list[dict]:
    """Run one batch to completion and return outcomes ordered by slot.

    `client` and `resolver` override the default Generation Client and
    context resolver (both async callables).
    """
    configurable = {}
    if client is not None:
        configurable["client"] = client
    if resolver is not None:
        configurable["resolve_context"] = resolver

    final_state = await graph.ainvoke(
        {
            "request": request,
            "batch_id": batch_id,
            "size": size,
            "context": "",
            "outcomes": [],
        },
        config={"configurable": configurable},
    )

    by_slot = {outcome["slot"]: outcome for outcome in final_state["outcomes"]}
    return [
        by_slot.get(slot, {"slot": slot, "status": "failed", "error": "No result returned."})
        for slot in range(size)
    ]
