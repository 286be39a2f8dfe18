"""
pdxsync - incremental DeepL translation of Paradox localization files

Keeps every target language directory in sync with the base language:
new and changed entries are machine translated, entries without a
`#deepl:` annotation are left to humans.

Quick start:
    pdx-deepl --token $API_TOKEN --config translation-config.json \
        --localization mod/localization sync
"""

__version__ = "1.0.0"

from .backend import DeeplBackend, Translation, TranslationBackend, Usage
from .config import TargetLanguage, TranslationConfiguration
from .engine import SyncEngine, classify
from .errors import PdxSyncError
from .markup import escape, unescape
from .model import EntryMark, EntryState, Localization, LocalizationFile, LocalizationLanguage
from .repository import LanguageRepository

__all__ = [
    "DeeplBackend",
    "Translation",
    "TranslationBackend",
    "Usage",
    "TargetLanguage",
    "TranslationConfiguration",
    "SyncEngine",
    "classify",
    "PdxSyncError",
    "escape",
    "unescape",
    "EntryMark",
    "EntryState",
    "Localization",
    "LocalizationFile",
    "LocalizationLanguage",
    "LanguageRepository",
]
