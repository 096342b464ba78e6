"""Tests for studio.utils.preview."""

import base64
from urllib.parse import parse_qs, urlparse

from studio.utils.preview import build_preview_handle, render_preview_html

CODE = "export default function Hello() {\n  return <h1>Hi</h1>;\n}"


class TestRenderPreviewHtml:
    def test_renders_named_component(self):
        html = render_preview_html(CODE, "Hello")
        assert "function Hello()" in html
        assert "export default" not in html
        assert "render(<Hello />)" in html
        assert "<title>Hello</title>" in html

    def test_identifier_export_after_arrow_component(self):
        code = "const Dashboard = () => {\n  return <div>Hi</div>;\n};\n\nexport default Dashboard;"
        html = render_preview_html(code, "Dashboard")
        assert "export default" not in html
        assert "const Dashboard = () => {" in html
        assert "render(<Dashboard />)" in html

    def test_inline_arrow_export_bound_to_mounted_name(self):
        html = render_preview_html("export default () => <p>Hi</p>;", "GeneratedComponent")
        assert "export default" not in html
        assert "const GeneratedComponent = () => <p>Hi</p>;" in html
        assert "render(<GeneratedComponent />)" in html


class TestBuildPreviewHandle:
    def test_none_without_base_url(self, mock_config, monkeypatch):
        monkeypatch.delenv("STUDIO_PREVIEW_URL", raising=False)
        assert build_preview_handle(CODE, "Hello", "artifact-1") is None

    def test_encodes_html_into_link(self, mock_config, monkeypatch):
        monkeypatch.delenv("STUDIO_PREVIEW_URL", raising=False)
        mock_config["preview_base_url"] = "https://preview.example.com/"
        handle = build_preview_handle(CODE, "Hello", "artifact-1")

        parsed = urlparse(handle)
        assert parsed.netloc == "preview.example.com"
        assert parsed.path == "/preview"
        query = parse_qs(parsed.query)
        assert query["id"] == ["artifact-1"]
        assert query["type"] == ["react"]
        data = query["data"][0]
        decoded = base64.urlsafe_b64decode(data + "=" * (-len(data) % 4)).decode("utf-8")
        assert decoded == render_preview_html(CODE, "Hello")

    def test_env_overrides_config(self, mock_config, monkeypatch):
        monkeypatch.setenv("STUDIO_PREVIEW_URL", "https://env.example.com")
        handle = build_preview_handle(CODE, "Hello", "artifact-1")
        assert handle.startswith("https://env.example.com/preview?")
