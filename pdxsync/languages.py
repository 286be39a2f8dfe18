#!/usr/bin/env python3
"""
Paradox language names and the backend locales they translate to.

Directory and tag names (`l_english`, `localization/german/`) use the game's
own language names; the backend expects locale codes.
"""

from .errors import UnknownLocaleError

LOCALES = {
    'english': 'EN-US',       # target variant; source requests use "EN"
    'french': 'FR',
    'german': 'DE',
    'spanish': 'ES',
    'russian': 'RU',
    'polish': 'PL',
    'braz_por': 'PT-BR',
    'japanese': 'JA',
    'korean': 'KO',
    'simp_chinese': 'ZH',
    'turkish': 'TR',
}


def resolve_locale(language: str) -> str:
    """
    Resolve a Paradox language name to its backend locale.

    Raises:
        UnknownLocaleError: when the language is not supported
    """
    try:
        return LOCALES[language]
    except KeyError:
        raise UnknownLocaleError(language) from None


def source_locale(locale: str) -> str:
    """Source languages are requested without region, e.g. PT-BR -> PT."""
    return locale.split('-', 1)[0]
