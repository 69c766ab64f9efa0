"""Extension-specific minifiers.

CSS and JavaScript go through rcssmin/rjsmin. HTML is collapsed with a small
whitespace and comment stripper that hands inline ``<style>`` and
``<script>`` bodies to the same minifiers and leaves ``<pre>``/``<textarea>``
content alone. Whitespace runs between tags shrink to one space but are never
removed, so inline text renders the same.
"""

from __future__ import annotations

import re
from typing import Callable, Dict, List

import rcssmin
import rjsmin

from ..logging import get_logger

logger = get_logger("minify")

_RAW_BLOCK_RE = re.compile(
    r"(<(?P<tag>script|style|pre|textarea)\b[^>]*>)(?P<body>.*?)(</(?P=tag)\s*>)",
    re.IGNORECASE | re.DOTALL,
)
# Conditional comments (<!--[if IE]>) carry markup and are kept.
_COMMENT_RE = re.compile(r"<!--(?!\[if|\s*\[endif|\s*<!\[endif).*?-->", re.DOTALL)
_WHITESPACE_RE = re.compile(r"\s+")
_PLACEHOLDER = "<\x00{0}\x00>"
_PLACEHOLDER_RE = re.compile("<\x00(\\d+)\x00>")


def minify_css(content: str) -> str:
    return rcssmin.cssmin(content)


def minify_js(content: str) -> str:
    return rjsmin.jsmin(content)


def minify_html(content: str) -> str:
    preserved: List[str] = []

    def _stash(match: re.Match[str]) -> str:
        tag = match.group("tag").lower()
        body = match.group("body")
        if tag == "style":
            body = minify_css(body)
        elif tag == "script" and _is_javascript(match.group(1)):
            body = minify_js(body)
        preserved.append(f"{match.group(1)}{body}{match.group(4)}")
        return _PLACEHOLDER.format(len(preserved) - 1)

    result = _RAW_BLOCK_RE.sub(_stash, content)
    result = _COMMENT_RE.sub("", result)
    result = _WHITESPACE_RE.sub(" ", result).strip()
    return _PLACEHOLDER_RE.sub(lambda match: preserved[int(match.group(1))], result)


def _is_javascript(open_tag: str) -> bool:
    match = re.search(r"\btype\s*=\s*[\"']?([^\"'\s>]+)", open_tag, re.IGNORECASE)
    if match is None:
        return True
    return match.group(1).lower() in {"text/javascript", "application/javascript", "module"}


_MINIFIERS: Dict[str, Callable[[str], str]] = {
    ".html": minify_html,
    ".htm": minify_html,
    ".css": minify_css,
    ".js": minify_js,
}


def minify(content: str, extension: str) -> str:
    """Minify ``content`` for ``extension``; return it unchanged on any failure."""
    minifier = _MINIFIERS.get(extension.lower())
    if minifier is None:
        return content
    try:
        result = minifier(content)
    except Exception as exc:  # minification is best-effort and never fails a build
        logger.debug("Minification failed for %s content: %s", extension, exc)
        return content
    if content.strip() and not result.strip():
        logger.debug("Minifier produced empty output for %s content; keeping original", extension)
        return content
    return result


__all__ = ["minify", "minify_css", "minify_html", "minify_js"]
