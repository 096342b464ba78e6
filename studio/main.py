"""Entry point: builds a request, runs the orchestrator, drives the review loop."""

import argparse
import asyncio
import sys

from studio.domains import DOMAINS, get_domain
from studio.orchestrator import Orchestrator
from studio.state import Attachment, Batch, ExternalContext, RequestDescription

HELP_TEXT = """\
Commands:
  s <n>          select variant n
  r <feedback>   refine the selected variant
  again          regenerate all variants from the same request
  n / p          next / previous variant
  show           print the current variant's code
  x [target]     export the selected variant (download | link | deployment)
  new            reset and start a new session
  q              quit"""


def _render_batch(batch: Batch, selected_id: str | None, current_index: int) -> str:
    """Build a plain-text table of the batch's variants."""
    lines = [f"Batch {batch.id}: {batch.phase}"]
    for variant in batch.variants:
        marker = "*" if variant.id == selected_id else " "
        cursor = ">" if variant.slot == current_index else " "
        if variant.status == "succeeded":
            preview = "preview" if variant.artifact.has_preview else "no preview available"
            detail = f"{variant.artifact.file_name} ({preview})"
        elif variant.status == "failed":
            detail = f"error: {variant.error}"
        else:
            detail = "generating..."
        lines.append(f"{cursor}{marker} {variant.slot + 1}. [{variant.status}] {detail}")
    return "\n".join(lines)


def build_request(args: argparse.Namespace, goal: str) -> RequestDescription:
    """Translate parsed CLI arguments into a RequestDescription."""
    domain = get_domain(args.domain)
    attachments = tuple(Attachment(url=url, role="style") for url in args.style) + tuple(
        Attachment(url=url, role="asset") for url in args.asset
    )
    context = ExternalContext(url=args.url, search_query=args.search, brand_domain=args.brand)
    return RequestDescription(
        goal=goal,
        tier="quality" if args.quality else "fast",
        attachments=attachments,
        context=None if context.is_empty() else context,
        domain=domain.name,
        instructions=domain.instruction_template,
    )


async def _prompt(text: str) -> str:
    return (await asyncio.to_thread(input, text)).strip()


async def _read_goal() -> str:
    print("Describe what you want to build (empty line to submit):")
    lines = []
    while True:
        line = await asyncio.to_thread(input)
        if not line.strip():
            break
        lines.append(line)
    return "\n".join(lines)


async def _await_batch(orchestrator: Orchestrator) -> None:
    print("[Studio] Generating variants...")
    batch = await orchestrator.settled()
    session = orchestrator.session
    print(_render_batch(batch, session.selected_variant_id, session.current_index))
    if batch.phase == "allFailed":
        print("All variants failed. Type 'again' to retry or 'new' to start over.")


async def _review_loop(orchestrator: Orchestrator) -> bool:
    """Handle commands until the user quits (False) or asks for a new session (True)."""
    while True:
        raw = await _prompt("studio> ")
        command, _, arg = raw.partition(" ")
        arg = arg.strip()
        session = orchestrator.session

        if command == "q":
            return False
        if command == "new":
            orchestrator.reset()
            return True
        if command == "again":
            orchestrator.retry()
            await _await_batch(orchestrator)
        elif command == "s":
            variant = _variant_at(orchestrator, arg)
            if variant is None or not orchestrator.select(variant.id):
                print("Only a finished, successful variant can be selected.")
            else:
                print(f"Selected variant {variant.slot + 1}.")
        elif command == "r":
            if orchestrator.refine(arg) is None:
                print("Select a successful variant and describe the change first.")
            else:
                print(f"[Studio] Refinement {len(session.transcript)}: {arg}")
                await _await_batch(orchestrator)
        elif command in ("n", "p"):
            if command == "n":
                orchestrator.next()
            else:
                orchestrator.prev()
            print(_render_batch(orchestrator.batch, session.selected_variant_id, session.current_index))
        elif command == "show":
            variant = session.current_variant
            if variant and variant.artifact:
                print(variant.artifact.source)
            else:
                print("Nothing to show for this variant.")
        elif command == "x":
            result = orchestrator.export_artifact(target=arg or "download")
            if result is None:
                print("Nothing exported.")
            else:
                print(f"[Studio] Exported: {result}")
        else:
            print(HELP_TEXT)


def _variant_at(orchestrator: Orchestrator, arg: str):
    batch = orchestrator.batch
    try:
        index = int(arg) - 1
    except ValueError:
        return None
    if batch is None or not 0 <= index < batch.size:
        return None
    return batch.variants[index]


async def run(args: argparse.Namespace, goal: str | None = None) -> None:
    """Run interactive sessions until the user quits."""
    orchestrator = Orchestrator()
    while True:
        text = goal if goal is not None else await _read_goal()
        goal = None
        try:
            orchestrator.start(build_request(args, text))
        except ValueError as exc:
            print(f"[Studio] {exc}")
            continue
        await _await_batch(orchestrator)
        print(HELP_TEXT)
        if not await _review_loop(orchestrator):
            break
    await orchestrator.drain()


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="studio", description="Generate and refine UI variants.")
    parser.add_argument("goal", nargs="*", help="What to build. Read interactively if omitted.")
    parser.add_argument("--domain", choices=sorted(DOMAINS), help="Studio domain.")
    parser.add_argument("--quality", action="store_true", help="Use the high-quality tier.")
    parser.add_argument("--style", action="append", default=[], metavar="URL",
                        help="Style inspiration image (repeatable).")
    parser.add_argument("--asset", action="append", default=[], metavar="URL",
                        help="Image to embed in the result (repeatable).")
    parser.add_argument("--url", default="", help="Page to use as content context.")
    parser.add_argument("--search", default="", help="Web search to use as context.")
    parser.add_argument("--brand", default="", help="Brand domain to match.")
    return parser


def main() -> None:
    """CLI entry point. Takes the goal from arguments or prompts for it."""
    args = _parser().parse_args()
    goal = " ".join(args.goal) if args.goal else None
    try:
        asyncio.run(run(args, goal))
    except (KeyboardInterrupt, EOFError):
        print("\n[Studio] Bye.", file=sys.stderr)


if __name__ == "__main__":
    main()
