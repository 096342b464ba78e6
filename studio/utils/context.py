"""External context resolution — scrape a URL, run a web search, resolve a brand.

Uses the Firecrawl HTTP API. Each source is optional; a source that fails
is logged and skipped so generation can proceed without it.
"""

import os
import sys

import httpx

from studio.config import get_config
from studio.state import ExternalContext

SEARCH_RESULT_LIMIT = 5
REQUEST_TIMEOUT = 60.0


def _api_url(path: str) -> str:
    base = get_config().get("firecrawl_api_url", "https://api.firecrawl.dev")
    return f"{base.rstrip('/')}{path}"


def _headers() -> dict:
    api_key = os.environ.get("FIRECRAWL_API_KEY")
    if not api_key:
        raise RuntimeError("FIRECRAWL_API_KEY environment variable is not set")
    return {"Content-Type": "application/json", "Authorization": f"Bearer {api_key}"}


async def scrape_url(client: httpx.AsyncClient, url: str) -> dict:
    """Return {title, description, markdown} for a page."""
    response = await client.post(
        _api_url("/v1/scrape"),
        headers=_headers(),
        json={"url": url, "formats": ["markdown"]},
    )
    response.raise_for_status()
    payload = response.json()
    if payload.get("success") is False:
        raise RuntimeError(f"Failed to scrape {url}: {payload.get('error', 'unknown error')}")
    data = payload.get("data") or payload
    metadata = data.get("metadata") or {}
    return {
        "title": metadata.get("title", ""),
        "description": metadata.get("description", ""),
        "markdown": data.get("markdown", ""),
    }


async def search_web(client: httpx.AsyncClient, query: str) -> list[dict]:
    """Return up to SEARCH_RESULT_LIMIT results as {url, title, description}."""
    response = await client.post(
        _api_url("/v1/search"),
        headers=_headers(),
        json={"query": query, "limit": SEARCH_RESULT_LIMIT},
    )
    response.raise_for_status()
    return [
        {
            "url": item.get("url", ""),
            "title": item.get("title") or item.get("url", ""),
            "description": item.get("description", ""),
        }
        for item in response.json().get("data", [])
    ]


def _brand_url(domain: str) -> str:
    domain = domain.strip().rstrip("/")
    if domain.startswith(("http://", "https://")):
        return domain
    return f"https://{domain}"


async def resolve_context(context: ExternalContext | None, client: httpx.AsyncClient | None = None) -> str:
    """Resolve every source in `context` into one prompt-ready text block.

    Returns an empty string when there is nothing to resolve or every source failed.
    """
    if context is None or context.is_empty():
        return ""

    limit = get_config().get("context_char_limit", 12000)
    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=REQUEST_TIMEOUT)

    sections = []
    try:
        if context.url:
            try:
                page = await scrape_url(client, context.url)
                sections.append(
                    f"### Reference page: {page['title'] or context.url}\n"
                    f"{page['description']}\n\n{page['markdown']}".strip()
                )
            except (httpx.HTTPError, RuntimeError, ValueError) as exc:
                print(f"[Studio] Could not scrape {context.url}: {exc!r}", file=sys.stderr)

        if context.search_query:
            try:
                results = await search_web(client, context.search_query)
                lines = [f"### Search results for \"{context.search_query}\""]
                lines += [f"- {r['title']} ({r['url']}): {r['description']}" for r in results]
                sections.append("\n".join(lines))
            except (httpx.HTTPError, RuntimeError, ValueError) as exc:
                print(
                    f"[Studio] Search for {context.search_query!r} failed: {exc!r}",
                    file=sys.stderr,
                )

        if context.brand_domain:
            brand_url = _brand_url(context.brand_domain)
            try:
                page = await scrape_url(client, brand_url)
                sections.append(
                    f"### Brand: {page['title'] or context.brand_domain}\n"
                    f"{page['description']}\n"
                    f"Match this brand's name, tone and colour palette ({brand_url})."
                )
            except (httpx.HTTPError, RuntimeError, ValueError) as exc:
                print(f"[Studio] Could not resolve brand {brand_url}: {exc!r}", file=sys.stderr)
    finally:
        if owns_client:
            await client.aclose()

    text = "\n\n".join(sections)
    return text[:limit]
