#!/usr/bin/env python3
"""
Markup escaper for game script syntax.

Paradox texts mix prose with script calls, variable references and
formatting codes:

    "[Concept('concept_ideology', '$concept_ideologies$')]: #bold [GetName]#!"

None of that may be touched by the translation backend. escape() wraps the
syntax in XML tags the backend is told to ignore, unescape() restores the
exact original text.

Rules, applied in order:
1. `[...]` script calls (shortest match)  -> <ignore>[...]</ignore>
2. `$` references, alternating open/close -> <ref>...</ref>
3. `#!` end of formatting                 -> <ignore>#!</ignore>
4. `#word ` start of formatting           -> <ignore>#word </ignore>

XML special characters are entity-escaped first since the backend parses the
text as XML.
"""

import html
import re

IGNORE_TAG = "ignore"
REFERENCE_TAG = "ref"

# Tag names the backend must return uninterpreted
IGNORE_TAGS = (IGNORE_TAG, REFERENCE_TAG)

IGNORE_OPEN = f"<{IGNORE_TAG}>"
IGNORE_CLOSE = f"</{IGNORE_TAG}>"
REFERENCE_OPEN = f"<{REFERENCE_TAG}>"
REFERENCE_CLOSE = f"</{REFERENCE_TAG}>"

SCRIPT_CALL_PATTERN = re.compile(r"\[.*?\]")
FORMAT_END_PATTERN = re.compile(r"#!")
FORMAT_START_PATTERN = re.compile(r"#[A-Za-z]+\s")

_MARKER_PATTERN = re.compile(
    "|".join(re.escape(tag) for tag in (IGNORE_OPEN, IGNORE_CLOSE, REFERENCE_OPEN, REFERENCE_CLOSE))
)
_PROTECTED_PATTERN = re.compile(
    rf"{re.escape(IGNORE_OPEN)}.*?{re.escape(IGNORE_CLOSE)}"
    rf"|{re.escape(REFERENCE_OPEN)}.*?{re.escape(REFERENCE_CLOSE)}"
)


def _wrap(match: re.Match) -> str:
    return f"{IGNORE_OPEN}{match.group(0)}{IGNORE_CLOSE}"


def _wrap_references(text: str) -> str:
    """Turn `$` pairs into reference spans; an unpaired last `$` stays literal."""
    count = text.count("$")
    if count < 2:
        return text

    result = []
    seen = 0
    for char in text:
        if char == "$" and seen < count - count % 2:
            result.append(REFERENCE_OPEN if seen % 2 == 0 else REFERENCE_CLOSE)
            seen += 1
        else:
            result.append(char)
    return "".join(result)


def escape(text: str) -> str:
    """
    Protect script syntax before sending text to the backend.

    Args:
        text: Localization text as stored in the file

    Returns:
        XML-safe text with protected spans wrapped in ignore/ref tags
    """
    escaped = html.escape(text, quote=False)
    escaped = SCRIPT_CALL_PATTERN.sub(_wrap, escaped)
    escaped = _wrap_references(escaped)
    escaped = FORMAT_END_PATTERN.sub(_wrap, escaped)
    escaped = FORMAT_START_PATTERN.sub(_wrap, escaped)
    return escaped


def _restore_marker(match: re.Match) -> str:
    marker = match.group(0)
    if marker in (REFERENCE_OPEN, REFERENCE_CLOSE):
        return "$"
    return ""


def unescape(text: str) -> str:
    """Reverse escape(): drop ignore tags, turn ref tags back into `$`."""
    return html.unescape(_MARKER_PATTERN.sub(_restore_marker, text))


def count_translatable_characters(text: str) -> int:
    """Number of characters the backend would actually translate."""
    prose = _PROTECTED_PATTERN.sub("", escape(text))
    return len(html.unescape(prose))
