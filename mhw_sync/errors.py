from __future__ import annotations


class SyncError(Exception):
    pass


class FetchError(SyncError):
    pass


class ParseError(SyncError):
    pass


class ExtractionError(SyncError):
    pass


class ConfigError(SyncError):
    pass
