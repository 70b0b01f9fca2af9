"""Cleanup helpers shared by the extraction patterns."""

from __future__ import annotations

import re
from typing import Optional

from heatcheck.config import MAX_FIELD_LENGTH
from heatcheck.storage.models import NO_SIGNIFICANT_OBJECTIONS

BULLET_PATTERN = re.compile(r"^(?:[\s*•·>]+|-(?=\s)|\d+[.)]\s+)+")

# An unbulleted ALL-CAPS label line, e.g. "OUTCOME: Closed", starts the next section
SECTION_LABEL = re.compile(r"^[ \t#]*\**[A-Z][A-Z'’ /&]*[A-Z]\**[ \t]*:")

# Values a template writes when it has nothing to say
PLACEHOLDER_VALUES = {
    "n/a",
    "na",
    "none",
    "not specified",
    "not mentioned",
    "unknown",
    "none identified",
    "-",
    "tbd",
}

NO_OBJECTION_PHRASES = (
    "no significant",
    "none identified",
    "no objections",
    "no objection",
    "none raised",
    "none noted",
    "no major",
    "no real objections",
)


def strip_bullet(line: str) -> str:
    """Remove leading bullet markers and markdown bold from a line."""
    line = BULLET_PATTERN.sub("", line.strip())
    return line.strip().strip("*").strip()


def clean_value(raw: Optional[str], max_length: int = MAX_FIELD_LENGTH) -> Optional[str]:
    """Trim a captured value. Empty or placeholder captures become None."""
    if raw is None:
        return None
    value = strip_bullet(raw)
    if not value or value.lower().rstrip(".") in PLACEHOLDER_VALUES:
        return None
    return value[:max_length].rstrip()


def first_block_line(block: Optional[str]) -> Optional[str]:
    """First non-empty line of a block, bullet markers removed."""
    if not block:
        return None
    for line in block.split("\n"):
        if SECTION_LABEL.match(line):
            return None
        stripped = strip_bullet(line)
        if not stripped:
            continue
        # Ran straight into the next section heading
        if stripped.endswith(":"):
            return None
        return stripped
    return None


def indicates_no_objection(text: str) -> bool:
    lower = text.lower()
    if lower.strip().rstrip(".") == "none":
        return True
    return any(phrase in lower for phrase in NO_OBJECTION_PHRASES)


def clean_objection(raw: Optional[str], max_length: int = MAX_FIELD_LENGTH) -> Optional[str]:
    """Like clean_value, but "no objection" phrasing maps to one fixed value."""
    if raw is not None and strip_bullet(raw) and indicates_no_objection(raw):
        return NO_SIGNIFICANT_OBJECTIONS
    return clean_value(raw, max_length)


def parse_score(raw: Optional[str]) -> Optional[int]:
    """Parse a captured heat score. Anything that isn't an integer is None."""
    if raw is None:
        return None
    text = raw.strip().strip("*").rstrip(".,;)")
    try:
        return int(text)
    except ValueError:
        return None
