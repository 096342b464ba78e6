"""Generator Agent — turns a RequestDescription into one React component artifact.

The quality tier picks the backend model (fast → Gemini, quality → Claude by
default, overridable per domain). Output is cleaned so it renders in a
browser without a build step.
"""

import sys
import uuid

from langchain_anthropic import ChatAnthropic
from langchain_google_genai import ChatGoogleGenerativeAI

from studio.config import get_config
from studio.domains import get_domain
from studio.state import Artifact, RequestDescription
from studio.utils.parsing import (
    ainvoke_with_retry,
    clean_component_code,
    component_name,
    has_default_export,
    response_text,
)
from studio.utils.preview import build_preview_handle

SYSTEM_PROMPT = """\
You are an expert React developer. Generate one COMPLETE, production-ready React \
component using JavaScript (JSX) and Tailwind CSS.

The component is rendered directly in a browser preview, so:
1. Write plain JavaScript/JSX — no TypeScript annotations, interfaces or generics.
2. Do NOT write import statements; React and its hooks are available globally.
3. Do NOT add a 'use client' directive.
4. Style everything with Tailwind utility classes.
5. Export it as: export default function ComponentName() { ... }
6. Keep it fully self-contained, with realistic sample data inline.
7. Make it responsive (sm:, md:, lg: breakpoints) and accessible (labels, focus rings, contrast).

Reference images:
- "style" images are inspiration for layout, palette and typography. Do not embed them.
- "asset" images must be embedded with <img src="..."> using the exact URL given.

Respond with ONLY the component code wrapped in ```jsx ... ```. No explanations."""

_CORRECTION_PROMPT = (
    "Your response did not contain a default-exported React component. "
    "Reply again with ONLY the complete component code in a ```jsx``` block, "
    "declared as `export default function ComponentName() { ... }`."
)


def _build_llm(request: RequestDescription):
    """Return (chat model, model label) for the request's tier and domain."""
    config = get_config()
    model = get_domain(request.domain).model_for(request.tier)
    provider = model.get("provider", "google")
    model_name = model["model"]
    kwargs = {
        "model": model_name,
        "temperature": config.get("temperature", 0.7),
    }

    if provider == "anthropic":
        llm = ChatAnthropic(max_tokens=config.get("max_output_tokens", 4096), **kwargs)
    elif provider == "google":
        llm = ChatGoogleGenerativeAI(
            max_output_tokens=config.get("max_output_tokens", 4096), **kwargs
        )
    else:
        raise ValueError(f"Unknown model provider '{provider}' for tier '{request.tier}'.")

    return llm, f"{provider}/{model_name}"


def _build_system_prompt(request: RequestDescription) -> str:
    instructions = request.instructions or get_domain(request.domain).instruction_template
    if instructions:
        return f"{instructions}\n\n{SYSTEM_PROMPT}"
    return SYSTEM_PROMPT


def _build_user_content(request: RequestDescription, context: str = "") -> list[dict]:
    """Construct the multimodal user message from the request."""
    parts = [f"## Goal\n{request.goal or 'Build a component based on the attached images.'}"]
    if context:
        parts.append(f"## External Context\n{context}")

    content = [{"type": "text", "text": "\n\n".join(parts)}]
    for i, attachment in enumerate(request.attachments, 1):
        if attachment.role == "asset":
            label = f"Image {i} (asset, embed with src=\"{attachment.url}\")"
        else:
            label = f"Image {i} (style inspiration)"
        if attachment.name:
            label += f": {attachment.name}"
        content.append({"type": "text", "text": label})
        content.append({"type": "image_url", "image_url": {"url": attachment.url}})
    return content


async def generate_component(request: RequestDescription, *, slot: int = 0, context: str = "") -> Artifact:
    """Generation Client: produce one component artifact for `request`.

    `slot` identifies the Variant being filled and is used only for
    diagnostics. Raises on any failure; the caller records it per Variant.
    """
    llm, model_label = _build_llm(request)

    messages = [
        {"role": "system", "content": _build_system_prompt(request)},
        {"role": "user", "content": _build_user_content(request, context)},
    ]

    # First attempt
    response = await ainvoke_with_retry(llm, messages)
    code = clean_component_code(response_text(response))

    if not has_default_export(code):
        # Re-prompt once before raising
        print(
            f"[Studio] Variant {slot}: no default export in model output, re-prompting.",
            file=sys.stderr,
        )
        messages.append({"role": "assistant", "content": response.content})
        messages.append({"role": "user", "content": _CORRECTION_PROMPT})
        response = await ainvoke_with_retry(llm, messages)
        code = clean_component_code(response_text(response))
        if not has_default_export(code):
            raise ValueError("Model output did not contain a default-exported component.")

    name = component_name(code)
    artifact_id = f"artifact-{uuid.uuid4().hex[:12]}"
    return Artifact(
        source=code,
        file_name=f"{name}.jsx",
        model=model_label,
        preview_handle=build_preview_handle(code, name, artifact_id),
    )
