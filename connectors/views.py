"""
HTML pages for the installer: the landing page and the error page.
"""

from __future__ import annotations

from html import escape
from typing import Optional

_STYLE = """
        body {
            font-family: 'Inter', system-ui, sans-serif;
            background: #0b0d11; color: #e4e7ee;
            display: flex; align-items: center; justify-content: center;
            height: 100vh; margin: 0;
        }
        .card {
            text-align: center; padding: 40px;
            background: #12151b; border: 1px solid #1f2330;
            border-radius: 12px; max-width: 480px;
        }
        h2 { margin: 16px 0 8px; }
        p { color: #a0a6b8; font-size: 0.85rem; }
        pre { color: #636a80; font-size: 0.7rem; white-space: pre-wrap; text-align: left; }
        a.button {
            display: inline-block; margin-top: 16px; padding: 10px 18px;
            background: #4a154b; color: #fff; border-radius: 6px; text-decoration: none;
        }
"""


def _page(title: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
    <title>{escape(title)}</title>
    <style>{_STYLE}    </style>
</head>
<body>
    <div class="card">
{body}
    </div>
</body>
</html>"""


def home_html(install_path: str = "/install") -> str:
    """Landing page with an "Add to Slack" button."""
    return _page(
        "Slack app",
        f"""        <h2>Add the app to your workspace</h2>
        <p>You will be asked to approve the requested permissions on Slack.</p>
        <a class="button" href="{escape(install_path)}">Add to Slack</a>""",
    )


def error_html(message: str, detail: Optional[str] = None) -> str:
    """
    Error page shown when an install step fails.
    ``detail`` is diagnostics (e.g. the Slack response body) and is optional.
    """
    detail_block = f"\n        <pre>{escape(detail)}</pre>" if detail else ""
    return _page(
        "Installation failed",
        f"""        <h2 style="color: #ef4444">Installation failed</h2>
        <p>{escape(message)}</p>{detail_block}""",
    )
