#!/usr/bin/env python3
"""Statistics about a language: files, keys and billable characters."""

import logging

from .markup import count_translatable_characters
from .model import LocalizationLanguage

logger = logging.getLogger(__name__)


def collect_statistics(language: LocalizationLanguage) -> dict:
    """
    Count what a full translation of a language would cost.

    Protected markup (script calls, references, formatting codes) is not
    counted since the backend does not translate it.

    Returns:
        Dictionary with language, files, keys, characters and empty_files
    """
    keys = 0
    characters = 0
    empty_files = []

    for key in sorted(language.files):
        localization_file = language.files[key]
        if not localization_file.localizations:
            empty_files.append(localization_file.filename)
        keys += len(localization_file.localizations)
        for localization in localization_file.localizations.values():
            characters += count_translatable_characters(localization.text)

    logger.info("%s: %d files, %d keys, %d characters",
                language.name, len(language.files), keys, characters)

    return {
        "language": language.name,
        "locale": language.locale,
        "files": len(language.files),
        "keys": keys,
        "characters": characters,
        "empty_files": empty_files,
    }
