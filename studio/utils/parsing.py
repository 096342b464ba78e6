"""Shared parsing and LLM utilities for generated components."""

import re
import sys

import httpx
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

_FENCE_RE = re.compile(
    r"```(?:jsx|tsx|javascript|js|typescript|ts|react)?\s*\n?(.*?)\n?\s*```",
    re.DOTALL | re.IGNORECASE,
)
_NAMED_DEFAULT_RE = re.compile(r"export\s+default\s+((?:async\s+)?(?:function|class)\s+(?!extends\b)(\w+))")
_DEFAULT_IDENTIFIER_RE = re.compile(
    r"^[ \t]*export\s+default\s+([A-Za-z_$][\w$]*)[ \t]*;?[ \t]*$\n?", re.MULTILINE
)
_BARE_DEFAULT_RE = re.compile(r"\bexport\s+default\s+")
_HOOK_GENERIC_RE = re.compile(
    r"\b(useState|useRef|useCallback|useMemo|useReducer|useContext|createContext)<[^>]+>"
)

DEFAULT_COMPONENT_NAME = "GeneratedComponent"


def strip_fences(text: str) -> str:
    """Strip markdown code fences from LLM output if present."""
    match = _FENCE_RE.search(text)
    return match.group(1).strip() if match else text.strip()


def response_text(response) -> str:
    """Flatten an LLM response's content into plain text.

    Providers return either a string or a list of content blocks.
    """
    content = getattr(response, "content", response)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for item in content:
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, dict) and isinstance(item.get("text"), str):
                parts.append(item["text"])
        return "\n\n".join(parts)
    return "" if content is None else str(content)


def clean_component_code(text: str) -> str:
    """Normalize generated JSX so it runs in a browser without a build step.

    Removes fences, 'use client' directives, imports and the TypeScript
    constructs models most often emit despite being told not to.
    """
    cleaned = strip_fences(text)

    cleaned = re.sub(r"""['"]use client['"];?\s*""", "", cleaned)
    cleaned = re.sub(r"^import\s+.*$", "", cleaned, flags=re.MULTILINE)

    cleaned = re.sub(r"^type\s+\w+\s*=\s*\{[\s\S]*?\};\s*$", "", cleaned, flags=re.MULTILINE)
    cleaned = re.sub(r"^interface\s+\w+\s*\{[\s\S]*?\}\s*$", "", cleaned, flags=re.MULTILINE)

    cleaned = _HOOK_GENERIC_RE.sub(r"\1", cleaned)
    cleaned = re.sub(r":\s*React\.\w+(<[^>]+>)?", "", cleaned)
    cleaned = re.sub(r":\s*(string|number|boolean|void|any)\b", "", cleaned)
    cleaned = re.sub(r"\s+as\s+(string|number|boolean|any|const)\b", "", cleaned)

    cleaned = re.sub(r"\n{3,}", "\n\n", cleaned)
    return cleaned.strip()


def component_name(code: str) -> str:
    """Return the default-exported component name, or a generic fallback.

    Handles ``export default function Name``, ``export default class Name``
    and a trailing ``export default Name;`` after a const or arrow component.
    """
    match = _NAMED_DEFAULT_RE.search(code)
    if match:
        return match.group(2)
    match = _DEFAULT_IDENTIFIER_RE.search(code)
    return match.group(1) if match else DEFAULT_COMPONENT_NAME


def strip_default_export(code: str, name: str | None = None) -> str:
    """Rewrite the default export as a plain top-level declaration.

    Classic (non-module) scripts reject ``export``, so the preview page needs
    the component bound to an ordinary name it can mount.
    """
    name = name or component_name(code)
    code = _NAMED_DEFAULT_RE.sub(r"\1", code)
    code = _DEFAULT_IDENTIFIER_RE.sub("", code)
    return _BARE_DEFAULT_RE.sub(f"const {name} = ", code)


def has_default_export(code: str) -> bool:
    return "export default" in code


def _is_transient(exc: BaseException) -> bool:
    """Return True if the exception is a transient HTTP/network error worth retrying."""
    if isinstance(exc, httpx.TimeoutException):
        return True
    if isinstance(exc, httpx.ConnectError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in (429, 500, 502, 503)
    return False


async def ainvoke_with_retry(llm, messages, max_retries: int = 3):
    """Await llm.ainvoke(messages) with exponential backoff on transient errors.

    Retries on HTTP 429/500/502/503, connection errors, and timeouts.
    Non-transient errors (auth failures, bad requests) are raised immediately.
    """
    from studio.config import get_config

    config = get_config()
    retries = config.get("llm_max_retries", max_retries)

    retrying = AsyncRetrying(
        stop=stop_after_attempt(retries + 1),  # +1 because first attempt counts
        wait=wait_exponential(multiplier=1, min=2, max=16),
        retry=retry_if_exception(_is_transient),
        reraise=True,
        before_sleep=lambda state: print(
            f"[Studio] Transient error: {state.outcome.exception()!r}. "
            f"Retrying in {state.next_action.sleep:.0f}s "
            f"(attempt {state.attempt_number}/{retries})...",
            file=sys.stderr,
        ),
    )
    async for attempt in retrying:
        with attempt:
            return await llm.ainvoke(messages)
