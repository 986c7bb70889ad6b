"""Text filters applied to extracted prose and code before it is shown downstream."""

from __future__ import annotations

import re

# Twoslash tooling lines: "// @noErrors", "//   ^?", "// ---cut---"
_DIRECTIVE_RE = re.compile(r"^//\s*@\w")
_POINTER_RE = re.compile(r"^//\s*\^")
_CUT_RE = re.compile(r"^//\s*---cut---")

_HTML_BLOCK_RES = [
    re.compile(r"<blockquote[^>]*>.*?</blockquote>", re.DOTALL),
    re.compile(r"<details[^>]*>.*?</details>", re.DOTALL),
    re.compile(r"<div[^>]*>.*?</div>", re.DOTALL),
    re.compile(r"<p[^>]*>.*?</p>", re.DOTALL),
]
_HTML_TAG_RE = re.compile(r"<[^>]+>")
_EXCESS_BLANKS_RE = re.compile(r"\n{3,}")

_LINK_RE = re.compile(r"\[([^\]]*)\]\([^)]*\)")
_BARE_DOCS_URL_RE = re.compile(r"\(/docs/[^)]*\)")


def is_annotation_line(line: str) -> bool:
    """True for twoslash directive, pointer, and cut-marker lines."""
    return bool(
        _DIRECTIVE_RE.match(line)
        or _POINTER_RE.match(line)
        or _CUT_RE.match(line)
    )


def clean_twoslash(code: str) -> str:
    """Strip interactive-annotation lines from a code block, keeping the code."""
    kept = [line for line in code.split("\n") if not is_annotation_line(line)]
    return "\n".join(kept).strip()


def strip_html(content: str) -> str:
    """Strip HTML blocks and stray tags from markdown content."""
    for pattern in _HTML_BLOCK_RES:
        content = pattern.sub("", content)
    content = _HTML_TAG_RE.sub("", content)
    return _EXCESS_BLANKS_RE.sub("\n\n", content)


def strip_links(content: str) -> str:
    """Flatten markdown links to their text.

    ``[text](url)`` becomes ``text``; parenthesized ``(/docs/...)``
    leftovers are removed.
    """
    content = _LINK_RE.sub(r"\1", content)
    return _BARE_DOCS_URL_RE.sub("", content)
