"""Variant Studio — Streamlit UI for generating and refining interface variants."""

import sys
from pathlib import Path

# Add project root to path so 'studio' package is importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

import asyncio
from datetime import datetime

import streamlit as st
import streamlit.components.v1 as components

from studio.domains import DOMAINS, compose_guided_goal, get_domain
from studio.orchestrator import Orchestrator
from studio.state import Attachment, Batch, ExternalContext, RequestDescription, Session, Variant
from studio.utils.exporter import render_source_file
from studio.utils.parsing import component_name
from studio.utils.preview import render_preview_html

st.set_page_config(page_title="Variant Studio", layout="wide")


def _orchestrator() -> Orchestrator:
    if "orchestrator" not in st.session_state:
        st.session_state["orchestrator"] = Orchestrator()
    return st.session_state["orchestrator"]


def _run(action) -> None:
    """Run a synchronous orchestrator operation on a fresh loop and wait for the batch.

    Streamlit reruns the script on every interaction, so each operation gets
    its own event loop and only returns once the active batch has settled.
    """
    orchestrator = _orchestrator()

    async def _drive():
        action(orchestrator)
        await orchestrator.settled()

    asyncio.run(_drive())


# ---------------------------------------------------------------------------
# Sidebar: domain and tier
# ---------------------------------------------------------------------------

domain_name = st.sidebar.selectbox(
    "Studio",
    sorted(DOMAINS),
    index=sorted(DOMAINS).index(get_domain().name),
    format_func=lambda name: DOMAINS[name].title,
)
domain = get_domain(domain_name)

quality = st.sidebar.toggle(
    "High quality",
    value=False,
    help="Use the slower, higher-quality model tier.",
)

st.title(domain.title)
st.markdown(f"**{domain.subtitle}** · {domain.theme_tokens.get('badge', '')}")
st.divider()


# ---------------------------------------------------------------------------
# Request form
# ---------------------------------------------------------------------------


def _render_request_form() -> RequestDescription | None:
    """Collect a RequestDescription. Returns None until the user submits."""
    mode = st.radio("Prompt mode", ["Free text", "Guided"], horizontal=True)

    if mode == "Free text":
        goal = st.text_area(
            "What do you want to build?",
            height=160,
            placeholder=domain.example_prompts[0] if domain.example_prompts else "",
        )
        if domain.example_prompts:
            st.caption("Try: " + " · ".join(domain.example_prompts))
    else:
        purpose = st.text_input("Purpose")
        col1, col2 = st.columns(2)
        theme = col1.selectbox("Theme", ["light", "dark"])
        device_focus = col2.selectbox("Device focus", ["both", "desktop", "mobile"])
        details = st.text_area("Details", height=80)
        inspiration = st.text_input("Inspiration")
        extra = st.text_input("Additional information")
        goal = compose_guided_goal(
            domain.noun, purpose, theme, device_focus, details, inspiration, extra
        ) if purpose.strip() else ""

    with st.expander("Images and context"):
        style_urls = st.text_area("Style inspiration image URLs (one per line)", height=68)
        asset_urls = st.text_area("Image URLs to embed (one per line)", height=68)
        url = st.text_input("Reference page URL")
        search = st.text_input("Web search")
        brand = st.text_input("Brand domain", placeholder="example.com")

    if not st.button("Generate", type="primary"):
        return None

    attachments = tuple(
        Attachment(url=line.strip(), role="style") for line in style_urls.splitlines() if line.strip()
    ) + tuple(
        Attachment(url=line.strip(), role="asset") for line in asset_urls.splitlines() if line.strip()
    )
    context = ExternalContext(url=url.strip(), search_query=search.strip(), brand_domain=brand.strip())
    return RequestDescription(
        goal=goal,
        tier="quality" if quality else "fast",
        attachments=attachments,
        context=None if context.is_empty() else context,
        domain=domain.name,
        instructions=domain.instruction_template,
    )


# ---------------------------------------------------------------------------
# Variant rendering
# ---------------------------------------------------------------------------


def _render_variant(variant: Variant, session: Session) -> None:
    orchestrator = _orchestrator()
    is_selected = variant.id == session.selected_variant_id
    label = f"Variant {variant.slot + 1}" + (" (selected)" if is_selected else "")
    st.markdown(f"#### {label}")

    if variant.status == "failed":
        st.error(f"Generation failed: {variant.error}")
        return
    if variant.status == "pending":
        st.info("Generating...")
        return

    artifact = variant.artifact
    if artifact.has_preview:
        st.caption(f"[Open preview]({artifact.preview_handle})")
    else:
        st.caption("No hosted preview available, showing a local render.")
    components.html(
        render_preview_html(artifact.source, component_name(artifact.source)),
        height=480,
        scrolling=True,
    )
    with st.expander("Code"):
        st.code(artifact.source, language="jsx")

    col1, col2 = st.columns(2)
    if col1.button("Select", key=f"select_{variant.id}", disabled=is_selected):
        orchestrator.select(variant.id)
        st.rerun()
    col2.download_button(
        "Download",
        data=render_source_file(artifact, session.origin, datetime.now()),
        file_name=artifact.file_name,
        mime="text/jsx",
        key=f"download_{variant.id}",
    )


def _render_batch(batch: Batch, session: Session) -> None:
    if batch.phase == "allFailed":
        st.warning("Every variant failed. Retry with the same request or start over.")
        if st.button("Retry", type="primary"):
            _run(lambda o: o.retry())
            st.rerun()
        return

    tabs = st.tabs([f"Variant {v.slot + 1}" for v in batch.variants])
    for tab, variant in zip(tabs, batch.variants):
        with tab:
            _render_variant(variant, session)


def _render_refinement(session: Session) -> None:
    selected = session.selected_variant
    if selected is None:
        st.info("Select a variant to refine or export it.")
        return

    with st.form("refine_form", clear_on_submit=True):
        feedback = st.text_area("What should change?", height=100)
        submitted = st.form_submit_button("Refine", type="primary")
    if submitted:
        if not feedback.strip():
            st.error("Please describe the change you want.")
        else:
            with st.spinner("Generating refined variants..."):
                _run(lambda o: o.refine(feedback))
            st.rerun()

    col1, col2 = st.columns(2)
    if col1.button("Copy link"):
        link = _orchestrator().export_artifact(target="link")
        if link:
            st.code(link)
        else:
            st.warning("This variant has no shareable link.")
    if col2.button("Open deployment"):
        if _orchestrator().export_artifact(target="deployment") is None:
            st.warning("This variant has no deployment.")


def _render_transcript(session: Session) -> None:
    if not session.transcript:
        return
    with st.expander(f"Refinement history ({len(session.transcript)})"):
        for entry in session.transcript:
            st.markdown(f"- {entry.describe()}")


# ---------------------------------------------------------------------------
# Page logic: driven by the orchestrator's session
# ---------------------------------------------------------------------------

orchestrator = _orchestrator()
session = orchestrator.session

if session is None:
    request = _render_request_form()
    if request is not None:
        try:
            with st.spinner("Generating variants..."):
                _run(lambda o: o.start(request))
        except ValueError as exc:
            st.error(str(exc))
            st.stop()
        st.rerun()
else:
    st.caption(f"Tier: {session.tier} · Session {session.id}")
    _render_batch(session.batch, session)
    if session.batch.phase != "allFailed":
        st.divider()
        _render_refinement(session)
    _render_transcript(session)

    st.divider()
    if st.button("New session"):
        orchestrator.reset()
        st.rerun()
