#!/usr/bin/env python3
"""
Incremental synchronization engine.

For every configured target language, walks the base language file by file
and entry by entry, decides what each target entry needs, translates only
new and stale entries, and writes back the files it changed.

Processing is strictly sequential; the backend's rate limit is respected
with a fixed delay between calls and a longer cooldown when the backend
reports it is rate limited.
"""

import logging
import threading
import time
from dataclasses import asdict, dataclass, field, fields
from typing import Optional

from .backend import TranslationBackend
from .config import TranslationConfiguration
from .errors import AuthError, BackendError, RateLimitedError, SyncCancelled
from .markup import IGNORE_TAGS, count_translatable_characters, escape, unescape
from .model import (
    EntryMark,
    EntryState,
    Localization,
    LocalizationFile,
    LocalizationLanguage,
)
from .repository import LanguageRepository

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_DELAY = 0.5
COOLDOWN_FACTOR = 10


def classify(base: Localization, target: Localization) -> EntryState:
    """
    Decide what a target entry needs.

    Only entries without an annotation belong to humans. A `#deepl:skipped`
    entry still belongs to the engine: once its text no longer matches the
    base text (base changed, or someone edited the fallback in place) it is
    retranslated and the edit is overwritten. Removing the annotation is how
    a translator takes ownership.

    Args:
        base: Entry of the base language
        target: Counterpart in the target language (synthesized if missing)

    Returns:
        EntryState for the pair
    """
    if target.mark is EntryMark.MANUAL:
        return EntryState.MANUAL
    if target.mark is EntryMark.PENDING:
        return EntryState.NEW
    if target.mark is EntryMark.SKIPPED:
        # The fallback text is the base text it was skipped with
        if target.checksum == base.checksum:
            return EntryState.SKIPPED
        return EntryState.STALE
    if target.compare_checksum == base.checksum:
        return EntryState.UP_TO_DATE
    return EntryState.STALE


@dataclass
class Counters:
    """Per-entry outcome counts."""
    manual: int = 0
    up_to_date: int = 0
    translated: int = 0
    skipped: int = 0
    errored: int = 0
    rate_limited: int = 0
    pending: int = 0
    characters: int = 0

    def add(self, other: "Counters") -> None:
        for f in fields(Counters):
            setattr(self, f.name, getattr(self, f.name) + getattr(other, f.name))

    def counts(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(Counters)}


@dataclass
class FileSummary(Counters):
    filename: str = ""


@dataclass
class LanguageSummary:
    language: str
    files: list[FileSummary] = field(default_factory=list)
    ignored_files: list[str] = field(default_factory=list)

    @property
    def totals(self) -> Counters:
        totals = Counters()
        for file_summary in self.files:
            totals.add(file_summary)
        return totals

    def to_dict(self) -> dict:
        return {
            "language": self.language,
            "totals": self.totals.counts(),
            "files": [asdict(f) for f in self.files],
            "ignored_files": list(self.ignored_files),
        }


@dataclass
class RunSummary:
    base_language: str
    dry_run: bool = False
    languages: list[LanguageSummary] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "base_language": self.base_language,
            "dry_run": self.dry_run,
            "languages": [language.to_dict() for language in self.languages],
        }


class SyncEngine:
    """
    Keeps target languages in sync with the base language.

    The backend is passed in explicitly; the engine never reaches for global
    state. Setting `cancel_event` (or calling cancel()) stops the run after
    flushing the file being processed.
    """

    def __init__(
        self,
        repository: LanguageRepository,
        backend: Optional[TranslationBackend],
        config: TranslationConfiguration,
        request_delay: float = DEFAULT_REQUEST_DELAY,
        cooldown: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
        dry_run: bool = False,
    ):
        """
        Args:
            repository: Where languages are loaded from and written to
            backend: Translation capability (may be None for dry runs)
            config: Languages and ignore list
            request_delay: Minimum seconds between two backend calls
            cooldown: Pause after a rate-limit response, at least
                COOLDOWN_FACTOR x request_delay
            cancel_event: Event that requests cooperative cancellation
            dry_run: Classify only, never call the backend or write files
        """
        self.repository = repository
        self.backend = backend
        self.config = config
        self.request_delay = request_delay
        minimum_cooldown = request_delay * COOLDOWN_FACTOR
        self.cooldown = max(cooldown if cooldown is not None else minimum_cooldown, minimum_cooldown)
        self.cancel_event = cancel_event or threading.Event()
        self.dry_run = dry_run
        self._last_call: Optional[float] = None

    def cancel(self) -> None:
        self.cancel_event.set()

    def run(self) -> RunSummary:
        """
        Sync every configured target language.

        Returns:
            RunSummary with per-language and per-file counters
        """
        base = self.repository.load(self.config.base_language)
        summary = RunSummary(base_language=base.name, dry_run=self.dry_run)

        for target_language in self.config.target_languages:
            target = self.repository.load_or_create(target_language.name, create=not self.dry_run)
            summary.languages.append(
                self.sync_language(base, target, target_language.glossary)
            )

        return summary

    def sync(
        self,
        base: LocalizationLanguage,
        target: LocalizationLanguage,
        glossary: Optional[str] = None,
    ) -> LocalizationLanguage:
        """Sync one target language and return it."""
        self.sync_language(base, target, glossary)
        return target

    def sync_language(
        self,
        base: LocalizationLanguage,
        target: LocalizationLanguage,
        glossary: Optional[str] = None,
    ) -> LanguageSummary:
        logger.info("Syncing %s (%s) -> %s (%s)", base.name, base.locale, target.name, target.locale)
        summary = LanguageSummary(language=target.name)

        for key in sorted(base.files):
            base_file = base.files[key]
            if self.config.is_ignored(base_file.filename):
                logger.info("Ignoring %s", base_file.filename)
                summary.ignored_files.append(base_file.filename)
                continue

            target_file = target.files.get(key)
            if target_file is None:
                target_file = self.repository.target_file_for(base_file, base, target)

            summary.files.append(
                self.sync_file(base_file, target_file, base, target, glossary)
            )
            if target_file.exists or target_file.modified:
                target.files[key] = target_file

        totals = summary.totals
        logger.info(
            "%s done: %d translated, %d up to date, %d manual, %d skipped, %d errors, %d rate limited",
            target.name, totals.translated, totals.up_to_date, totals.manual,
            totals.skipped, totals.errored, totals.rate_limited,
        )
        return summary

    def sync_file(
        self,
        base_file: LocalizationFile,
        target_file: LocalizationFile,
        base: LocalizationLanguage,
        target: LocalizationLanguage,
        glossary: Optional[str] = None,
    ) -> FileSummary:
        """
        Sync one file and persist it when anything changed.

        Raises:
            SyncCancelled: after flushing the entries translated so far
            AuthError: the backend rejected the credentials
            FileWriteError: the file could not be written
        """
        summary = FileSummary(filename=target_file.filename)

        try:
            self._sync_entries(base_file, target_file, base, target, glossary, summary)
        except SyncCancelled:
            if target_file.modified and not self.dry_run:
                logger.warning("Cancelled, flushing %s", target_file.path)
                self.repository.write_file(target_file)
            raise

        if target_file.modified and not self.dry_run:
            self.repository.write_file(target_file)

        logger.info(
            "%s: %d translated, %d up to date, %d manual, %d skipped, %d errors",
            target_file.filename, summary.translated, summary.up_to_date,
            summary.manual, summary.skipped, summary.errored,
        )
        return summary

    def _sync_entries(
        self,
        base_file: LocalizationFile,
        target_file: LocalizationFile,
        base: LocalizationLanguage,
        target: LocalizationLanguage,
        glossary: Optional[str],
        summary: FileSummary,
    ) -> None:
        previous_key = None

        for base_entry in base_file.localizations.values():
            if self.cancel_event.is_set():
                raise SyncCancelled(f"Cancelled while syncing {target_file.filename}")

            target_entry = target_file.localizations.get(base_entry.key)
            if target_entry is None:
                target_entry = Localization(
                    key=base_entry.key,
                    text=base_entry.text,
                    mark=EntryMark.PENDING,
                )

            state = classify(base_entry, target_entry)
            if state is EntryState.MANUAL:
                summary.manual += 1
            elif state is EntryState.UP_TO_DATE:
                summary.up_to_date += 1
            elif state is EntryState.SKIPPED:
                summary.skipped += 1
            else:
                logger.debug("%s %s is %s", target_file.filename, base_entry.key, state.value)
                self._translate_entry(base_entry, target_entry, base, target, glossary, summary)
                if target_entry.modified and base_entry.key not in target_file.localizations:
                    target_file.add(target_entry, after=previous_key)
                elif target_entry.modified:
                    target_file.modified = True

            if base_entry.key in target_file.localizations:
                previous_key = base_entry.key

    def _translate_entry(
        self,
        base_entry: Localization,
        target_entry: Localization,
        base: LocalizationLanguage,
        target: LocalizationLanguage,
        glossary: Optional[str],
        summary: FileSummary,
    ) -> None:
        characters = count_translatable_characters(base_entry.text)
        if self.dry_run:
            summary.pending += 1
            summary.characters += characters
            return

        self._throttle()
        try:
            translations = self.backend.translate(
                [escape(base_entry.text)],
                base.locale,
                target.locale,
                IGNORE_TAGS,
                glossary,
            )
            if not translations:
                raise BackendError("Backend returned no translation")
        except RateLimitedError:
            summary.rate_limited += 1
            logger.warning("Rate limited at %s, cooling down for %.1fs", base_entry.key, self.cooldown)
            self._wait(self.cooldown)
            return
        except AuthError:
            raise
        except BackendError as e:
            summary.errored += 1
            logger.warning("Could not translate %s, keeping base text: %s", base_entry.key, e)
            target_entry.mark_skipped(base_entry.text)
            return

        target_entry.mark_translated(unescape(translations[0].text), base_entry.checksum)
        summary.translated += 1
        summary.characters += characters

    def _throttle(self) -> None:
        """Keep at least request_delay seconds between backend calls."""
        if self._last_call is not None:
            remaining = self.request_delay - (time.monotonic() - self._last_call)
            if remaining > 0:
                self._wait(remaining)
        self._last_call = time.monotonic()

    def _wait(self, seconds: float) -> None:
        if self.cancel_event.wait(max(seconds, 0)):
            raise SyncCancelled("Cancelled while waiting for the backend")
