#!/usr/bin/env python3
"""
Language repository: loads and writes whole language trees.

Layout on disk:

```
<root>/<language>/**/<file key>l_<language>.yml
```

The file key is the filename with the `l_<language>.yml` suffix removed, so
`events/intro_l_english.yml` and `events/intro_l_german.yml` share the key
`events/intro_`.
"""

import logging
from pathlib import Path, PurePosixPath

from .codec import BOM, header_line, parse_content, render_file
from .errors import DirectoryNotFoundError, FileWriteError, LanguageTagError, PdxSyncError
from .languages import resolve_locale
from .model import LocalizationFile, LocalizationLanguage

logger = logging.getLogger(__name__)

# Stands in for directory components named after the language in file keys
LANGUAGE_PLACEHOLDER = "{language}"


def language_suffix(language: str) -> str:
    return f"l_{language}.yml"


def file_key(filename: str, language: str) -> str:
    """
    Derive the language-independent key of a localization file.

    Args:
        filename: Path relative to the language directory (posix separators)
        language: Language name the file belongs to

    Raises:
        LanguageTagError: when the filename lacks the l_<language>.yml suffix
    """
    suffix = language_suffix(language)
    path = PurePosixPath(filename)
    if not path.name.endswith(suffix):
        raise LanguageTagError(filename, suffix)

    parts = [LANGUAGE_PLACEHOLDER if part == language else part for part in path.parts[:-1]]
    parts.append(path.name[:-len(suffix)])
    return "/".join(parts)


class LanguageRepository:
    """Reads and writes the localization tree below a root directory."""

    def __init__(self, root_dir):
        self.root = Path(root_dir)

    def language_directory(self, name: str) -> Path:
        return self.root / name

    def load(self, name: str) -> LocalizationLanguage:
        """
        Load every localization file of a language.

        Args:
            name: Paradox language name, e.g. "english"

        Returns:
            LocalizationLanguage with all files indexed by file key

        Raises:
            DirectoryNotFoundError: language directory is missing
            UnknownLocaleError: language has no backend locale
            LanguageTagError: a file lacks the language suffix
        """
        directory = self.language_directory(name)
        if not directory.is_dir():
            raise DirectoryNotFoundError(directory)

        language = LocalizationLanguage(
            name=name,
            locale=resolve_locale(name),
            directory=directory,
        )

        for path in sorted(p for p in directory.rglob("*") if p.is_file()):
            localization_file = self.read_file(path, language)
            language.files[localization_file.key] = localization_file

        logger.info("Loaded %s: %d files, %d keys",
                    name, len(language.files), language.entry_count())
        return language

    def load_or_create(self, name: str, create: bool = True) -> LocalizationLanguage:
        """
        Load a language, creating its directory first when it does not exist.

        With create=False a missing language is returned empty and nothing
        is touched on disk.
        """
        directory = self.language_directory(name)
        if not directory.is_dir():
            locale = resolve_locale(name)
            if not create:
                return LocalizationLanguage(name=name, locale=locale, directory=directory)
            logger.info("Creating language directory %s", directory)
            directory.mkdir(parents=True, exist_ok=True)
        return self.load(name)

    def read_file(self, path: Path, language: LocalizationLanguage) -> LocalizationFile:
        """Parse one file of a language."""
        filename = path.relative_to(language.directory).as_posix()
        key = file_key(filename, language.name)

        try:
            content = path.read_bytes().decode("utf-8")
        except UnicodeDecodeError as e:
            raise PdxSyncError(f"Localization file is not valid UTF-8: {path}: {e}") from e

        parsed = parse_content(content, filename)
        if not parsed.localizations:
            logger.debug("Nothing found for localization file %s", path)

        return LocalizationFile(
            key=key,
            filename=filename,
            path=path,
            localizations=parsed.localizations,
            lines=parsed.lines,
            newline=parsed.newline,
            bom=parsed.bom,
            exists=True,
        )

    def target_file_for(
        self,
        base_file: LocalizationFile,
        base: LocalizationLanguage,
        target: LocalizationLanguage,
    ) -> LocalizationFile:
        """
        Create an empty target counterpart of a base file.

        The language name is substituted in the filename tag and in directory
        components; the file starts with the target header line.
        """
        path = PurePosixPath(base_file.filename)
        parts = [target.name if part == base.name else part for part in path.parts[:-1]]
        stem = path.name[:-len(language_suffix(base.name))]
        parts.append(stem + language_suffix(target.name))
        filename = "/".join(parts)

        return LocalizationFile(
            key=base_file.key,
            filename=filename,
            path=target.directory / filename,
            lines=[header_line(target.tag, base_file.newline)],
            newline=base_file.newline,
            bom=True,
            exists=False,
        )

    def write_file(self, localization_file: LocalizationFile) -> None:
        """
        Persist a file, creating missing directories.

        Raises:
            FileWriteError: the file could not be written
        """
        content = render_file(localization_file)
        if localization_file.bom:
            content = BOM + content

        try:
            localization_file.path.parent.mkdir(parents=True, exist_ok=True)
            localization_file.path.write_bytes(content.encode("utf-8"))
        except OSError as e:
            raise FileWriteError(localization_file.path, e) from e

        localization_file.exists = True
        localization_file.modified = False
        logger.debug("Wrote %s", localization_file.path)

    def write(self, language: LocalizationLanguage) -> None:
        """Persist every file of a language."""
        for localization_file in language.files.values():
            self.write_file(localization_file)
