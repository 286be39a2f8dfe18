#!/usr/bin/env python3
"""
Line codec for Paradox localization files.

A localization file looks like this:

```
l_english:
 # comment
 GREETING:0 "Hello [GetName]"
 FAREWELL: "Goodbye" #deepl:2839273652
 BROKEN: "Untranslatable" #deepl:skipped
```

parse_line() recognizes entry lines and returns None for everything else
(header, comments, blank or malformed lines). Those lines are kept verbatim
by parse_content() so that render_file() only touches entries the sync
engine actually changed.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .model import EntryMark, Line, Localization, LocalizationFile

logger = logging.getLogger(__name__)

BOM = "\ufeff"
ANNOTATION_PREFIX = "#deepl:"
SKIPPED_TOKEN = "skipped"

# 0 means "manual" in existing annotations. A translated entry whose
# checksum happens to be 0 therefore reads back as manual.
MANUAL_CHECKSUM = 0


@dataclass
class LineMatch:
    """Result of parsing one entry line."""
    key: str
    text: str
    version: Optional[str] = None
    annotation: Optional[str] = None  # token after #deepl:
    comment: Optional[str] = None


def _is_clean_tail(rest: str) -> bool:
    """Only whitespace or a comment without quotes follows the quote."""
    rest = rest.strip()
    return not rest or (rest.startswith("#") and '"' not in rest)


def _closing_quote(body: str, start: int) -> Optional[int]:
    """
    Find the quote that closes the text starting at `start`.

    Texts may contain unescaped quotes, even in front of formatting codes
    (`"The "#Y Great#!" War"`), so a quote followed by `#` is not enough.
    Preference order:
    1. the first quote followed by a #deepl: annotation
    2. the last quote followed by nothing or a comment without quotes
    3. the first quote followed by any comment
    """
    candidates = []
    i = start
    while i < len(body):
        char = body[i]
        if char == "\\":
            i += 2
            continue
        if char == '"':
            candidates.append(i)
        i += 1

    for i in candidates:
        if body[i + 1:].lstrip().startswith(ANNOTATION_PREFIX):
            return i
    for i in reversed(candidates):
        if _is_clean_tail(body[i + 1:]):
            return i
    for i in candidates:
        if body[i + 1:].lstrip().startswith("#"):
            return i
    return None


def parse_line(line: str) -> Optional[LineMatch]:
    """
    Parse a single line into an entry.

    Args:
        line: Raw line, with or without its line ending

    Returns:
        LineMatch for entry lines, None for anything else
    """
    body = line.rstrip("\r\n").lstrip()
    if not body or body.startswith("#"):
        return None

    colon = body.find(":")
    if colon <= 0:
        return None
    key = body[:colon].rstrip()
    if not key:
        return None

    # Optional numeric version after the colon
    pos = colon + 1
    version_start = pos
    while pos < len(body) and body[pos] in "0123456789":
        pos += 1
    version = body[version_start:pos] or None

    while pos < len(body) and body[pos].isspace():
        pos += 1
    if pos >= len(body) or body[pos] != '"':
        return None

    start = pos + 1
    i = _closing_quote(body, start)
    if i is None:
        return None

    text = body[start:i]
    tail = body[i + 1:].strip()

    annotation = None
    if tail.startswith(ANNOTATION_PREFIX):
        token_end = len(ANNOTATION_PREFIX)
        while token_end < len(tail) and not tail[token_end].isspace() and tail[token_end] != "#":
            token_end += 1
        annotation = tail[len(ANNOTATION_PREFIX):token_end]
        tail = tail[token_end:].strip()

    return LineMatch(
        key=key,
        text=text,
        version=version,
        annotation=annotation,
        comment=tail or None,
    )


def annotation_mark(token: Optional[str], source: str = "<string>") -> tuple[EntryMark, int]:
    """
    Interpret a #deepl: token.

    Args:
        token: Annotation token (None when the line has no annotation)
        source: File name used in warnings

    Returns:
        (mark, compare_checksum) tuple
    """
    if token is None:
        return EntryMark.MANUAL, MANUAL_CHECKSUM
    if token == SKIPPED_TOKEN:
        return EntryMark.SKIPPED, MANUAL_CHECKSUM
    if token.isdigit():
        value = int(token)
        if value == MANUAL_CHECKSUM:
            return EntryMark.MANUAL, MANUAL_CHECKSUM
        return EntryMark.TRANSLATED, value

    logger.warning("Could not parse existing compare checksum (%s%s) in file: %s",
                   ANNOTATION_PREFIX, token, source)
    return EntryMark.MANUAL, MANUAL_CHECKSUM


def serialize_line(localization: Localization) -> str:
    """
    Render an entry as a line, without line ending.

    Manual and pending entries get no annotation.
    """
    text = localization.text.replace("\r\n", "\\n").replace("\n", "\\n").replace("\r", "")
    line = f' {localization.key}: "{text}"'

    if localization.mark is EntryMark.SKIPPED:
        line += f" {ANNOTATION_PREFIX}{SKIPPED_TOKEN}"
    elif localization.mark is EntryMark.TRANSLATED and localization.compare_checksum != MANUAL_CHECKSUM:
        line += f" {ANNOTATION_PREFIX}{localization.compare_checksum}"

    return line


@dataclass
class ParsedContent:
    """File-level parse result."""
    lines: list[Line]
    localizations: dict[str, Localization]
    newline: str = "\n"
    bom: bool = False


def split_lines(content: str) -> list[str]:
    """Split on \\n only, keeping line endings (\\r stays with its line)."""
    parts = content.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def detect_newline(content: str) -> str:
    first = content.find("\n")
    if first > 0 and content[first - 1] == "\r":
        return "\r\n"
    return "\n"


def _line_ending(raw: str) -> str:
    return raw[len(raw.rstrip("\r\n")):]


def parse_content(content: str, source: str = "<string>") -> ParsedContent:
    """
    Parse a whole file.

    Args:
        content: Decoded file content, possibly starting with a BOM
        source: File name used in warnings

    Returns:
        ParsedContent with the full line layout and the entry map
    """
    bom = content.startswith(BOM)
    if bom:
        content = content[len(BOM):]

    lines: list[Line] = []
    localizations: dict[str, Localization] = {}

    for raw in split_lines(content):
        match = parse_line(raw)
        if match is None:
            lines.append(raw)
            continue

        mark, compare_checksum = annotation_mark(match.annotation, source)
        localization = Localization(
            key=match.key,
            text=match.text,
            mark=mark,
            compare_checksum=compare_checksum,
            raw=raw,
        )
        if match.key in localizations:
            logger.debug("Duplicate key %s in %s, last one wins", match.key, source)
        localizations[match.key] = localization
        lines.append(localization)

    return ParsedContent(
        lines=lines,
        localizations=localizations,
        newline=detect_newline(content),
        bom=bom,
    )


def header_line(language_tag: str, newline: str = "\n") -> str:
    """Header that opens every file, e.g. `l_german:`."""
    return f"{language_tag}:{newline}"


def render_file(file: LocalizationFile) -> str:
    """
    Render a file back to text (without BOM).

    Passthrough lines and unmodified entries are emitted byte-for-byte,
    modified and new entries through serialize_line().
    """
    out: list[str] = []
    for line in file.lines:
        if out and not out[-1].endswith("\n"):
            out[-1] += file.newline

        if isinstance(line, Localization):
            if line.raw is not None and not line.modified:
                out.append(line.raw)
            else:
                ending = _line_ending(line.raw) if line.raw is not None else file.newline
                out.append(serialize_line(line) + ending)
        else:
            out.append(line)

    return "".join(out)
