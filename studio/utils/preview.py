"""Preview helpers — standalone HTML and hosted preview links for an artifact."""

import base64
import os
from urllib.parse import quote

from studio.config import get_config
from studio.utils.parsing import strip_default_export

_PREVIEW_TEMPLATE = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8" />
<meta name="viewport" content="width=device-width, initial-scale=1" />
<title>{title}</title>
<script src="https://cdn.tailwindcss.com"></script>
<script crossorigin src="https://unpkg.com/react@18/umd/react.production.min.js"></script>
<script crossorigin src="https://unpkg.com/react-dom@18/umd/react-dom.production.min.js"></script>
<script src="https://unpkg.com/@babel/standalone/babel.min.js"></script>
</head>
<body>
<div id="root"></div>
<script type="text/babel" data-presets="react">
const {{ useState, useEffect, useRef, useMemo, useCallback, useReducer, useContext, createContext }} = React;
{code}
ReactDOM.createRoot(document.getElementById("root")).render(<{name} />);
</script>
</body>
</html>
"""


def render_preview_html(code: str, name: str) -> str:
    """Wrap a default-exported component in a page that renders it in the browser."""
    body = strip_default_export(code, name)
    return _PREVIEW_TEMPLATE.format(title=name, code=body, name=name)


def preview_base_url() -> str:
    return os.environ.get("STUDIO_PREVIEW_URL") or get_config().get("preview_base_url") or ""


def build_preview_handle(code: str, name: str, artifact_id: str) -> str | None:
    """Return a self-contained preview URL, or None when no preview host is configured."""
    base = preview_base_url().rstrip("/")
    if not base:
        return None
    html = render_preview_html(code, name)
    encoded = base64.urlsafe_b64encode(html.encode("utf-8")).decode("ascii").rstrip("=")
    return f"{base}/preview?data={encoded}&id={quote(artifact_id)}&type=react"
