"""Sync modules for uploading local builds to the bottle bucket."""

from bottlesync.sync.orchestrator import BottleSync, list_packages, list_rubies
from bottlesync.sync.store import BlobStore, MemoryBlobStore, S3BlobStore

__all__ = [
    "BlobStore",
    "BottleSync",
    "MemoryBlobStore",
    "S3BlobStore",
    "list_packages",
    "list_rubies",
]
