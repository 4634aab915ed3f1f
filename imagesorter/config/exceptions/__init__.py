"""
imagesorter - Canonical exception hierarchy.

Every fatal condition of a run is one of these. The CLI catches
ImagesorterError at the top and terminates; nothing below it retries.
Invalid interactive selections are not exceptions (the group is skipped).
"""


class ImagesorterError(Exception):
    """Base exception imagesorter."""


class ScanError(ImagesorterError):
    """Directory listing or file hashing failed during the walk."""


class IndexStoreError(ImagesorterError):
    """Fingerprint store failure (schema, insert, query, commit)."""


class DeletionError(ImagesorterError):
    """A losing copy could not be verified or removed."""


class ConfigError(ImagesorterError):
    """Invalid configuration."""
