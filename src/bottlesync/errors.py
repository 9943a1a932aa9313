"""Exception types raised across bottlesync."""

from __future__ import annotations


class BottleSyncError(Exception):
    pass


class ConfigError(BottleSyncError):
    """Required configuration is missing or invalid."""


class PlatformError(BottleSyncError):
    """Host facts (OS version, kernel name) could not be determined."""


class ReceiptError(BottleSyncError):
    """An install receipt is missing or unparsable."""


class ArchiveError(BottleSyncError):
    """Packing a build directory into a tarball failed."""


class BlobStoreError(BottleSyncError):
    """The blob store rejected a head or put request."""
