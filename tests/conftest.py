#!/usr/bin/env python3
"""Shared fixtures: a fake translation backend and localization trees on disk."""

import json

import pytest

from pdxsync.backend import Translation, TranslationBackend, Usage
from pdxsync.codec import BOM
from pdxsync.config import TranslationConfiguration
from pdxsync.engine import SyncEngine
from pdxsync.repository import LanguageRepository


class FakeBackend(TranslationBackend):
    """
    Records every call and answers with `<target locale>:<text>` unless a
    response or failure is registered for the exact (escaped) text.
    """

    def __init__(self, responses=None, failures=None, on_translate=None):
        self.responses = dict(responses or {})
        self.failures = dict(failures or {})
        self.on_translate = on_translate
        self.calls = []

    def translate(self, texts, source_locale, target_locale, ignore_tags=(), glossary_id=None):
        self.calls.append({
            "texts": list(texts),
            "source_locale": source_locale,
            "target_locale": target_locale,
            "ignore_tags": list(ignore_tags),
            "glossary_id": glossary_id,
        })
        if self.on_translate is not None:
            self.on_translate(len(self.calls))

        text = texts[0]
        if text in self.failures:
            raise self.failures[text]
        if text in self.responses:
            return [Translation(self.responses[text], "EN")]
        return [Translation(f"{target_locale}:{text}", "EN")]

    def usage(self):
        return Usage(character_count=0, character_limit=500000)

    @property
    def translated_texts(self):
        return [call["texts"][0] for call in self.calls]


def write_localization(path, content, bom=True):
    """Write a localization file the way the game ships them."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(((BOM if bom else "") + content).encode("utf-8"))
    return path


def read_localization(path):
    return path.read_bytes().decode("utf-8")


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def loc_root(tmp_path):
    """Localization root with an (empty) english directory."""
    root = tmp_path / "localization"
    (root / "english").mkdir(parents=True)
    return root


@pytest.fixture
def repository(loc_root):
    return LanguageRepository(loc_root)


@pytest.fixture
def config():
    return TranslationConfiguration.from_dict({
        "base-language": "english",
        "target-languages": [{"name": "german", "glossary": ""}],
        "ignore-files": [],
    })


@pytest.fixture
def make_engine(repository, config):
    """Engine factory without throttling delays."""
    def factory(backend, **kwargs):
        kwargs.setdefault("request_delay", 0)
        kwargs.setdefault("cooldown", 0)
        return SyncEngine(repository, backend, kwargs.pop("config", config), **kwargs)
    return factory


@pytest.fixture
def config_file(tmp_path):
    """Write a configuration file and return its path."""
    def factory(data):
        path = tmp_path / "translation-config.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return path
    return factory
