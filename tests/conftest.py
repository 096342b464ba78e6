"""Shared fixtures for the Studio test suite."""

import asyncio

import pytest
from unittest.mock import patch

from studio.state import Artifact, Attachment, RequestDescription


@pytest.fixture
def mock_config(tmp_path):
    """Patch the config singleton with test-friendly values."""
    test_config = {
        "batch_size": 3,
        "max_inflight_batches": 3,
        "tier_models": {
            "fast": {"provider": "google", "model": "gemini-2.5-flash"},
            "quality": {"provider": "anthropic", "model": "claude-sonnet-4-5"},
        },
        "temperature": 0.7,
        "max_output_tokens": 4096,
        "llm_max_retries": 0,
        "default_domain": "experiments",
        "context_char_limit": 12000,
        "firecrawl_api_url": "https://firecrawl.test",
        "preview_base_url": "",
        "export_dir": str(tmp_path / "output"),
    }
    with patch("studio.config._config", test_config):
        yield test_config


@pytest.fixture
def request_description():
    """Minimal valid request on the fast tier."""
    return RequestDescription(goal="Build a CRM dashboard", tier="fast", domain="business")


@pytest.fixture
def image_only_request():
    """Request with no goal text but one style image."""
    return RequestDescription(
        goal="",
        attachments=(Attachment(url="https://img.example.com/mock.png", role="style"),),
    )


@pytest.fixture
def sample_artifact():
    return Artifact(
        source="export default function Dashboard() {\n  return <div>Dashboard</div>;\n}",
        file_name="Dashboard.jsx",
        model="google/gemini-2.5-flash",
    )


class FakeClient:
    """Scripted Generation Client.

    `script` maps `slot` or `(goal, slot)` to the behaviour for that call:
    seconds to sleep before succeeding or an Exception instance to raise.
    A `None` entry makes the call return no artifact.
    `(goal, slot)` entries win over plain `slot` entries.
    """

    def __init__(self, script=None, default_delay=0.0):
        self.script = script or {}
        self.default_delay = default_delay
        self.calls = []  # (request, slot, context) in call order

    def _behaviour(self, request, slot):
        if (request.goal, slot) in self.script:
            return self.script[(request.goal, slot)]
        return self.script.get(slot, self.default_delay)

    async def __call__(self, request, *, slot, context=""):
        self.calls.append((request, slot, context))
        behaviour = self._behaviour(request, slot)
        if behaviour is None:
            return None
        if isinstance(behaviour, Exception):
            raise behaviour
        await asyncio.sleep(behaviour)
        return Artifact(
            source=f"export default function Slot{slot}() {{ return <p>{request.goal[:20]}</p>; }}",
            file_name=f"Slot{slot}.jsx",
            model="fake/model",
        )


@pytest.fixture
def make_client():
    """Factory for scripted Generation Clients."""
    return FakeClient


@pytest.fixture
def no_context():
    """Context resolver that never touches the network."""

    async def _resolve(context):
        return ""

    return _resolve
