"""Best-effort scraping of identifiers and HTML out of free-form tool output.

Stitch returns prose and loosely shaped JSON rather than a stable schema, so
nothing here raises on unexpected structure. Absence is a normal outcome and is
modelled as ``None``.
"""

from __future__ import annotations

import html
import json
import re
from typing import Any, Optional

PROJECT_ID_PATTERN = r"projects/([^\s\"'/]+)"
SCREEN_ID_PATTERN = r"screens/([^\s\"'/]+)"

_MARKUP_ROOT_RE = re.compile(r"<html[\s>]", re.IGNORECASE)
_FENCE_RE = re.compile(r"^\s*```[a-zA-Z0-9_-]*\s*\n(.*?)\n?```\s*$", re.DOTALL)


def extract_identifier(raw_text: Optional[str], pattern: str) -> Optional[str]:
    """Return the first capture group of the first match, or None."""
    if not raw_text:
        return None
    match = re.search(pattern, raw_text)
    if not match:
        return None
    value = match.group(1) if match.groups() else match.group(0)
    return value or None


def _has_markup_root(text: str) -> bool:
    return bool(_MARKUP_ROOT_RE.search(text))


def _walk_strings(node: Any):
    if isinstance(node, str):
        yield node
    elif isinstance(node, dict):
        for value in node.values():
            yield from _walk_strings(value)
    elif isinstance(node, list):
        for value in node:
            yield from _walk_strings(value)


def find_markup(raw_text: Optional[str]) -> Optional[str]:
    """Return an HTML document found in ``raw_text``, or None.

    Plain text containing an ``<html`` root is returned verbatim. A JSON body
    is searched depth-first for the first string value carrying one.
    """
    if not raw_text:
        return None
    stripped = raw_text.lstrip()
    if stripped[:1] in ("{", "["):
        try:
            data = json.loads(raw_text)
        except json.JSONDecodeError:
            data = None
        if data is not None:
            for value in _walk_strings(data):
                if _has_markup_root(value):
                    return value
            return None
    if _has_markup_root(raw_text):
        return raw_text
    return None


def placeholder_fragment(project_id: Optional[str], screen_id: Optional[str] = None) -> str:
    """Displayable stand-in for a design whose source code was not returned."""
    project = html.escape(project_id or "unknown")
    screen = html.escape(screen_id or "pending")
    return (
        "<!-- Stitch Preview -->\n"
        '<div class="p-12 text-center bg-gray-50 border-2 border-dashed rounded-xl">\n'
        '  <h2 class="text-xl font-bold mb-2">Stitch design is ready</h2>\n'
        f'  <p class="text-gray-600">Project: {project}</p>\n'
        f'  <p class="text-gray-600">Screen: {screen}</p>\n'
        '  <p class="mt-4 text-sm text-blue-600 underline">'
        "Open the project in Stitch to export the full source.</p>\n"
        "</div>"
    )


def extract_code_fragment(
    raw_text: Optional[str],
    project_id: Optional[str] = None,
    screen_id: Optional[str] = None,
) -> str:
    """Return the HTML in ``raw_text`` or a placeholder naming the identifiers."""
    markup = find_markup(raw_text)
    if markup is not None:
        return markup
    return placeholder_fragment(project_id, screen_id)


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    match = _FENCE_RE.match(text or "")
    if match:
        return match.group(1).strip()
    return (text or "").strip()


# ── Continuation tokens ──────────────────────────────────────────────────────

def make_continuation_token(project_id: str, screen_id: str) -> str:
    return f"projects/{project_id}/screens/{screen_id}"


def parse_continuation_token(token: Optional[str]) -> Optional[tuple[str, str]]:
    """Return (project_id, screen_id) or None if either part is missing."""
    project_id = extract_identifier(token, PROJECT_ID_PATTERN)
    screen_id = extract_identifier(token, SCREEN_ID_PATTERN)
    if not project_id or not screen_id:
        return None
    return project_id, screen_id
