"""Label patterns for every generation of the call-analysis template.

Each table is tried top to bottom and the first pattern whose normalized
capture is not None wins. Newer, more explicit labels come first; the
loosest legacy layouts come last. Adding a template generation means adding
rows here, not touching the extractor.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Optional

from heatcheck.extraction.normalize import (
    clean_objection,
    clean_value,
    first_block_line,
    parse_score,
)

# Optional markdown decoration around the label separator: "**NEED:** x"
_SEP = r"[ \t]*\**[ \t]*:[ \t]*\**[ \t]*"
_LINE_PREFIX = r"^[ \t#*>]*"
_FLAGS = re.IGNORECASE | re.MULTILINE


@dataclass(frozen=True)
class FieldPattern:
    name: str
    regex: re.Pattern
    normalize: Callable[[str], Optional[object]]


def _inline(label: str) -> re.Pattern:
    """Label and value on the same line."""
    return re.compile(rf"\b{label}{_SEP}([^\n]*)", _FLAGS)


def _heading(label: str, loose: bool = False) -> re.Pattern:
    """Section heading with the value on the lines beneath it.

    Short headings must stand alone on their line so ordinary prose starting
    with the same word is not mistaken for a section.
    """
    tail = r"[^\n]*" if loose else r"[ \t*]*:?[ \t*]*"
    return re.compile(rf"{_LINE_PREFIX}{label}\b{tail}$((?:\n[^\n]*){{1,6}})", _FLAGS)


def _section(label: str) -> re.Pattern:
    """Heading line ending in a colon, e.g. "NEXT STEPS (agreed):", value on the lines beneath."""
    return re.compile(rf"{_LINE_PREFIX}{label}[^:\n]*:[ \t*]*$((?:\n[^\n]*){{1,6}})", _FLAGS)


def _score(label: str, separator: str = _SEP) -> re.Pattern:
    return re.compile(rf"{label}{separator}\**([^\s/*]+)", _FLAGS)


def _block(normalize: Callable[[Optional[str]], Optional[str]]):
    def normalize_block(raw: str) -> Optional[str]:
        return normalize(first_block_line(raw))

    return normalize_block


_PROSPECT = r"(?:PROSPECT['’]?S?[ \t]+)?"

HEAT_SCORE_PATTERNS = (
    FieldPattern("heatcheck", _score(r"\bHEAT[ \t]*CHECK(?:[ \t]+SCORE)?"), parse_score),
    FieldPattern(
        "heatcheck_dash",
        _score(r"\bHEAT[ \t]*CHECK(?:[ \t]+SCORE)?", r"[ \t]+-[ \t]*"),
        parse_score,
    ),
    FieldPattern("heat_score", _score(r"\bHEAT[ \t]+SCORE"), parse_score),
    FieldPattern("bare_score", _score(rf"{_LINE_PREFIX}SCORE"), parse_score),
    FieldPattern(
        "heatcheck_loose",
        _score(r"\bHEAT[ \t]*CHECK(?:[ \t]+SCORE)?", r"[ \t]*[:\-]?[ \t]*"),
        parse_score,
    ),
)

NEED_PATTERNS = (
    FieldPattern("top_need_pain_point", _inline(r"TOP[ \t]+NEED[ \t]*/[ \t]*PAIN[ \t]+POINT"), clean_value),
    FieldPattern("top_need", _inline(r"TOP[ \t]+NEED"), clean_value),
    FieldPattern("pain_point", _inline(r"PAIN[ \t]+POINTS?"), clean_value),
    FieldPattern("needs_inline", _inline(rf"{_PROSPECT}NEEDS?"), clean_value),
    FieldPattern(
        "needs_and_pain_points_block",
        _heading(rf"{_PROSPECT}NEEDS[ \t]+AND[ \t]+PAIN[ \t]+POINTS", loose=True),
        _block(clean_value),
    ),
    FieldPattern("needs_block", _heading(rf"{_PROSPECT}NEEDS?"), _block(clean_value)),
    FieldPattern("pain_points_block", _heading(r"PAIN[ \t]+POINTS?"), _block(clean_value)),
)

OBJECTION_PATTERNS = (
    FieldPattern("main_objection", _inline(r"MAIN[ \t]+OBJECTION"), clean_objection),
    FieldPattern("objections_inline", _inline(r"OBJECTIONS?"), clean_objection),
    FieldPattern(
        "objections_raised_block",
        _heading(r"OBJECTIONS[ \t]+RAISED[ \t]+AND[ \t]+HANDLING", loose=True),
        _block(clean_objection),
    ),
    FieldPattern(
        "objections_and_concerns_block",
        _heading(r"OBJECTIONS?[ \t]+AND[ \t]+CONCERNS", loose=True),
        _block(clean_objection),
    ),
    FieldPattern("objections_block", _heading(r"(?:MAIN[ \t]+)?OBJECTIONS?"), _block(clean_objection)),
)

OUTCOME_PATTERNS = (
    FieldPattern("call_outcome", _inline(r"CALL[ \t]+OUTCOME"), clean_value),
    FieldPattern("outcome", _inline(r"OUTCOME"), clean_value),
    FieldPattern("outcome_heading", _heading(r"(?:CALL[ \t]+)?OUTCOME"), _block(clean_value)),
    FieldPattern("call_outcome_section", _section(r"CALL[ \t]+OUTCOME"), _block(clean_value)),
    FieldPattern("next_steps_section", _section(r"NEXT[ \t]+STEPS"), _block(clean_value)),
    FieldPattern("follow_up_section", _section(r"FOLLOW[ \t-]*UP"), _block(clean_value)),
    FieldPattern("result_inline", _inline(r"(?:RESULTS?|CONCLUSION|STATUS)"), clean_value),
)


def match_first(text: str, patterns: tuple[FieldPattern, ...]) -> tuple[Optional[object], Optional[str]]:
    """Return (value, pattern name) for the first pattern that yields a value."""
    for pattern in patterns:
        match = pattern.regex.search(text)
        if not match:
            continue
        value = pattern.normalize(match.group(1))
        if value is not None:
            return value, pattern.name
    return None, None
