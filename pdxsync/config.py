#!/usr/bin/env python3
"""
Translation configuration.

```json
{
  "base-language": "english",
  "target-languages": [
    {"name": "german", "glossary": "def3a26b-3e84-45b3-84ae-0c0aaf3525f7"},
    {"name": "french", "glossary": ""}
  ],
  "ignore-files": ["credits_l_english.yml"]
}
```
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .errors import ConfigError, ConfigNotFoundError, NoTargetLanguagesError

DEFAULT_CONFIG_FILE = "translation-config.json"


@dataclass
class TargetLanguage:
    """A language to translate into, with its optional glossary."""
    name: str
    glossary: Optional[str] = None

    @classmethod
    def from_dict(cls, data) -> "TargetLanguage":
        # Plain strings are accepted for languages without glossary
        if isinstance(data, str):
            return cls(name=data)
        if not isinstance(data, dict) or not data.get("name"):
            raise ConfigError(f"Invalid target language entry: {data!r}")
        return cls(name=data["name"], glossary=data.get("glossary") or None)


@dataclass
class TranslationConfiguration:
    """Which languages to sync and which files to leave alone."""
    base_language: str
    target_languages: list[TargetLanguage]
    ignore_files: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "base-language": self.base_language,
            "target-languages": [
                {"name": t.name, "glossary": t.glossary or ""} for t in self.target_languages
            ],
            "ignore-files": list(self.ignore_files),
        }

    @classmethod
    def from_dict(cls, data: dict, source: str = "<config>") -> "TranslationConfiguration":
        """
        Build a configuration from parsed JSON.

        Raises:
            ConfigError: required fields are missing or have the wrong type
            NoTargetLanguagesError: target-languages is empty
        """
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration root must be an object: {source}")

        base_language = data.get("base-language")
        if not base_language or not isinstance(base_language, str):
            raise ConfigError(f"Missing base-language in {source}")

        raw_targets = data.get("target-languages") or []
        if not isinstance(raw_targets, list):
            raise ConfigError(f"target-languages must be a list in {source}")
        if not raw_targets:
            raise NoTargetLanguagesError(source)

        ignore_files = data.get("ignore-files") or []
        if not isinstance(ignore_files, list):
            raise ConfigError(f"ignore-files must be a list in {source}")

        return cls(
            base_language=base_language,
            target_languages=[TargetLanguage.from_dict(t) for t in raw_targets],
            ignore_files=[str(f) for f in ignore_files],
        )

    @classmethod
    def load(cls, path) -> "TranslationConfiguration":
        """
        Load configuration from a JSON file.

        Raises:
            ConfigNotFoundError: the file does not exist
            ConfigError: the file is not valid JSON or misses fields
            NoTargetLanguagesError: no target language configured
        """
        config_path = Path(path)
        if not config_path.is_file():
            raise ConfigNotFoundError(config_path)

        try:
            data = json.loads(config_path.read_text(encoding="utf-8-sig"))
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {config_path}: {e}") from e

        return cls.from_dict(data, str(config_path))

    def is_ignored(self, filename: str) -> bool:
        """True when a file (bare name or path relative to the language) is ignored."""
        return filename in self.ignore_files or Path(filename).name in self.ignore_files
