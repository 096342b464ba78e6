"""Export collaborator — hands a finished artifact off to the user.

Targets:
- "download": write the component source to export_dir as a .jsx file
- "deployment": open the artifact's deployment URL in a browser
- "link": return the deployment or preview link for copying
"""

import webbrowser
from datetime import datetime
from pathlib import Path
from typing import Literal

from studio.config import get_config
from studio.state import Artifact, RequestDescription

ExportTarget = Literal["download", "deployment", "link"]
EXPORT_TARGETS = ("download", "deployment", "link")


def render_source_file(artifact: Artifact, request: RequestDescription | None, created: datetime) -> str:
    """Prefix the component source with a provenance header."""
    lines = (request.goal if request else "").splitlines()
    # First line that is neither blank nor a markdown heading.
    goal_line = next(
        (line.strip() for line in lines if line.strip() and not line.lstrip().startswith("#")),
        "Generated component",
    )[:120]
    header = [
        "// Generated Studio Component",
        f"// Created: {created.isoformat(timespec='seconds')}",
        f"// Model: {artifact.model or 'unknown'}",
        f"// Goal: {goal_line}",
        "//",
        "// Dependencies:",
        "// - react",
        "// - tailwindcss",
    ]
    return "\n".join(header) + "\n\n" + artifact.source.rstrip() + "\n"


def write_artifact(artifact: Artifact, request: RequestDescription | None = None) -> Path:
    """Write the artifact to export_dir and return the file path."""
    config = get_config()
    output_dir = Path(config.get("export_dir", "./output"))
    output_dir.mkdir(parents=True, exist_ok=True)

    created = datetime.now()
    stem = Path(artifact.file_name).stem or "component"
    stamp = created.strftime("%Y%m%d-%H%M%S")

    # Find a non-conflicting filename
    output_path = output_dir / f"{stem}-{stamp}.jsx"
    counter = 1
    while output_path.exists():
        counter += 1
        output_path = output_dir / f"{stem}-{stamp} ({counter}).jsx"

    output_path.write_text(render_source_file(artifact, request, created), encoding="utf-8")
    return output_path


def export_artifact(
    artifact: Artifact,
    target: ExportTarget = "download",
    request: RequestDescription | None = None,
):
    """Dispatch an artifact to an export target.

    Returns the written Path for "download" and the URL for "deployment"/"link".
    Raises ValueError for an unknown target or when the target needs a handle
    the artifact does not have.
    """
    if target == "download":
        return write_artifact(artifact, request)

    if target == "deployment":
        if not artifact.deployment_handle:
            raise ValueError("Artifact has no deployment to open.")
        webbrowser.open(artifact.deployment_handle)
        return artifact.deployment_handle

    if target == "link":
        link = artifact.deployment_handle or artifact.preview_handle
        if not link:
            raise ValueError("Artifact has no shareable link.")
        return link

    raise ValueError(f"Unknown export target '{target}'. Must be one of: {EXPORT_TARGETS}")
