#!/usr/bin/env python3
"""
In-memory model of a localization tree.

A LocalizationLanguage maps file keys to LocalizationFile objects, and each
file maps entry keys to Localization objects. Files also keep their raw line
layout so that everything the sync process does not own is written back
unchanged.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from .checksum import checksum


class EntryMark(Enum):
    """What the persisted `#deepl:` annotation says about an entry."""
    MANUAL = "manual"          # no annotation, owned by a human
    PENDING = "pending"        # synthesized, not in the target file yet
    SKIPPED = "skipped"        # translation failed, base text kept
    TRANSLATED = "translated"  # machine translated, compare_checksum is valid


class EntryState(Enum):
    """Sync decision derived from a base entry and its target counterpart."""
    MANUAL = "manual"
    NEW = "new"
    SKIPPED = "skipped"
    UP_TO_DATE = "up_to_date"
    STALE = "stale"


@dataclass
class Localization:
    """
    One translatable entry.

    Attributes:
        key: Entry key, unique within its file
        text: Current text (without the surrounding quotes)
        mark: Annotation state
        compare_checksum: Base checksum recorded at the last machine translation
        raw: Original line including its line ending (None for new entries)
        modified: True once the engine changed the entry
    """
    key: str
    text: str
    mark: EntryMark = EntryMark.MANUAL
    compare_checksum: int = 0
    raw: Optional[str] = field(default=None, compare=False, repr=False)
    modified: bool = field(default=False, compare=False)

    @property
    def checksum(self) -> int:
        """Checksum of the current text, always recomputed."""
        return checksum(self.text)

    def mark_translated(self, text: str, base_checksum: int) -> None:
        self.text = text
        self.mark = EntryMark.TRANSLATED
        self.compare_checksum = base_checksum
        self.modified = True

    def mark_skipped(self, base_text: str) -> None:
        self.text = base_text
        self.mark = EntryMark.SKIPPED
        self.compare_checksum = 0
        self.modified = True


Line = Union[str, Localization]


@dataclass
class LocalizationFile:
    """
    A single localization file.

    `lines` holds the file in order: plain strings are passed through as-is
    (with their line ending), Localization objects are re-rendered only when
    modified.
    """
    key: str
    filename: str
    path: Path
    localizations: dict[str, Localization] = field(default_factory=dict)
    lines: list[Line] = field(default_factory=list)
    newline: str = "\n"
    bom: bool = True
    exists: bool = False
    modified: bool = False

    def add(self, localization: Localization, after: Optional[str] = None) -> None:
        """
        Insert a new entry into the file layout.

        Args:
            localization: Entry to insert
            after: Key of the entry it should follow; appended at the end when
                the key is unknown or None
        """
        self.localizations[localization.key] = localization
        position = len(self.lines)
        if after is not None and after in self.localizations:
            anchor = self.localizations[after]
            for i, line in enumerate(self.lines):
                if line is anchor:
                    position = i + 1
                    break
        self.lines.insert(position, localization)
        self.modified = True


@dataclass
class LocalizationLanguage:
    """A language directory and every localization file below it."""
    name: str
    locale: str
    directory: Path
    files: dict[str, LocalizationFile] = field(default_factory=dict)

    @property
    def tag(self) -> str:
        """Language tag used in headers and filenames, e.g. l_english."""
        return f"l_{self.name}"

    def entry_count(self) -> int:
        return sum(len(f.localizations) for f in self.files.values())
