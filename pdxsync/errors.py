#!/usr/bin/env python3
"""
Exception types raised by pdxsync.

Everything derives from PdxSyncError so the CLI can report any failure the
same way. Backend errors are split so the engine can tell a recoverable
rate limit from an unusable token.
"""

from typing import Optional


class PdxSyncError(Exception):
    """Base class for all pdxsync errors."""


class ConfigError(PdxSyncError):
    """Translation configuration is malformed."""


class ConfigNotFoundError(ConfigError):
    """Translation configuration file does not exist."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Translation configuration not found: {path}")


class NoTargetLanguagesError(ConfigError):
    """Configuration lists no target language."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"No target languages configured in {path}")


class DirectoryNotFoundError(PdxSyncError):
    """Language directory is missing."""

    def __init__(self, directory):
        self.directory = directory
        super().__init__(f"Language directory could not be found: {directory}")


class UnknownLocaleError(PdxSyncError):
    """Language name has no backend locale."""

    def __init__(self, language: str):
        self.language = language
        super().__init__(f"Language locale not supported: {language}")


class LanguageTagError(PdxSyncError):
    """Filename does not carry the expected l_<language>.yml suffix."""

    def __init__(self, filename: str, tag: str):
        self.filename = filename
        self.tag = tag
        super().__init__(f"Language tag ({tag}) in filename could not be found: {filename}")


class FileWriteError(PdxSyncError):
    """A localization file could not be written."""

    def __init__(self, path, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Could not write localization file {path}: {cause}")


class SyncCancelled(PdxSyncError):
    """Synchronization was interrupted; the current file has been flushed."""


class BackendError(PdxSyncError):
    """Translation backend request failed."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class AuthError(BackendError):
    """Backend rejected the API token."""


class RateLimitedError(BackendError):
    """Backend asked us to slow down."""
