"""Turn free-text model replies into typed browser actions."""

from __future__ import annotations

from ..models import ParsedAction

_CLICK = "click "
_TYPE = "type "
_SCROLL = "scroll "
_NAVIGATE = "navigate "
_DONE = "done"
_DONE_SEPARATORS = " \t.:,;-"
_SCHEMELESS_PREFIXES = ("about:", "data:", "file:")


def parse_action(text: str) -> ParsedAction:
    """Parse the first action line of ``text``.

    Keywords are matched case-sensitively as exact prefixes; anything else is
    returned as an ``unrecognized`` action carrying the offending line.
    """

    line = first_action_line(text)
    if line.startswith(_CLICK):
        selector = line[len(_CLICK) :].strip()
        if selector:
            return ParsedAction.click(selector)
    elif line.startswith(_TYPE):
        # Only the single space after the selector separates it from the text.
        selector, _, content = line[len(_TYPE) :].lstrip().partition(" ")
        if selector:
            return ParsedAction.type_text(selector, content)
    elif line.startswith(_SCROLL):
        direction = line[len(_SCROLL) :].strip()
        if direction:
            return ParsedAction.scroll(direction)
    elif line.startswith(_NAVIGATE):
        url = line[len(_NAVIGATE) :].strip()
        if url:
            return ParsedAction.navigate(normalize_url(url))
    elif line.startswith(_DONE):
        return ParsedAction.done(line[len(_DONE) :].lstrip(_DONE_SEPARATORS).strip())
    return ParsedAction.unrecognized(line)


def first_action_line(text: str) -> str:
    """Return the first non-empty line outside of code fence markers."""

    for raw_line in _strip_code_fence(text).splitlines():
        line = raw_line.strip()
        if line:
            return line
    return ""


def normalize_url(url: str) -> str:
    if "://" in url or url.startswith(_SCHEMELESS_PREFIXES):
        return url
    return f"https://{url}"


def _strip_code_fence(block: str) -> str:
    lines = [line for line in block.splitlines() if not line.strip().startswith("```")]
    return "\n".join(lines)
