"""Enumerate local builds and upload the ones missing from the bucket."""

from __future__ import annotations

import logging
from pathlib import Path

from bottlesync.archiver import Archiver
from bottlesync.config import Settings
from bottlesync.eligibility import check_eligibility, load_receipt
from bottlesync.errors import ArchiveError, BlobStoreError, ReceiptError
from bottlesync.host import PlatformInfo
from bottlesync.models import ItemOutcome, PackageRef, RubyRef, SyncReport
from bottlesync.naming import package_key, ruby_key
from bottlesync.sync.store import PUBLIC_READ, BlobStore

logger = logging.getLogger(__name__)


def _subdirectories(root: Path) -> list[Path]:
    if not root.is_dir():
        logger.warning("Directory %s does not exist; nothing to sync.", root)
        return []
    return sorted(child for child in root.iterdir() if child.is_dir())


def list_packages(cellar: Path) -> list[PackageRef]:
    refs: list[PackageRef] = []
    for formula_dir in _subdirectories(cellar):
        try:
            version_dirs = sorted(child for child in formula_dir.iterdir() if child.is_dir())
        except OSError as exc:
            logger.error("Skipping formula %s: %s", formula_dir.name, exc)
            continue
        for version_dir in version_dirs:
            refs.append(PackageRef(name=formula_dir.name, version=version_dir.name))
    return refs


def list_rubies(rubies_root: Path) -> list[RubyRef]:
    return [
        RubyRef(version=child.name)
        for child in _subdirectories(rubies_root)
        if not child.is_symlink()
    ]


class BottleSync:
    def __init__(
        self,
        settings: Settings,
        store: BlobStore,
        platform: PlatformInfo,
        archiver: Archiver,
        report: SyncReport | None = None,
    ) -> None:
        self.settings = settings
        self.store = store
        self.platform = platform
        self.archiver = archiver
        self.report = report or SyncReport()

    def _upload(self, key: str, source_dir: Path, entry: str) -> ItemOutcome:
        try:
            body = self.archiver.archive(source_dir, entry)
            self.store.put(key, body, acl=PUBLIC_READ)
        except (ArchiveError, BlobStoreError) as exc:
            logger.error("Failed to sync %s: %s", key, exc)
            return self.report.record(key, ItemOutcome.ERRORED)
        logger.info("Uploaded %s (%d bytes).", key, len(body))
        return self.report.record(key, ItemOutcome.UPLOADED)

    def _already_uploaded(self, key: str) -> bool | None:
        try:
            return self.store.exists(key)
        except BlobStoreError as exc:
            logger.error("Cannot check %s: %s", key, exc)
            self.report.record(key, ItemOutcome.ERRORED)
            return None

    def sync_package(self, ref: PackageRef) -> ItemOutcome:
        key = package_key(ref, self.platform.os_version, self.settings.homebrew_root)
        exists = self._already_uploaded(key)
        if exists is None:
            return ItemOutcome.ERRORED
        if exists:
            logger.info("Skipping %s: already present at %s.", ref.entry, key)
            return self.report.record(key, ItemOutcome.SKIPPED_EXISTS)

        try:
            receipt = load_receipt(self.settings.cellar / ref.name / ref.version)
        except ReceiptError as exc:
            logger.error("Failed to sync %s: %s", ref.entry, exc)
            return self.report.record(key, ItemOutcome.ERRORED)

        eligibility = check_eligibility(receipt, name=ref.name)
        if not eligibility.archive:
            logger.info("Skipping %s: %s.", ref.entry, eligibility.reason)
            return self.report.record(key, ItemOutcome.SKIPPED_INELIGIBLE)

        return self._upload(key, self.settings.cellar, ref.entry)

    def sync_ruby(self, ref: RubyRef) -> ItemOutcome:
        key = ruby_key(
            ref,
            self.platform.os_version,
            self.settings.homebrew_root,
            self.platform.platform,
        )
        exists = self._already_uploaded(key)
        if exists is None:
            return ItemOutcome.ERRORED
        if exists:
            logger.info("Skipping ruby %s: already present at %s.", ref.version, key)
            return self.report.record(key, ItemOutcome.SKIPPED_EXISTS)
        return self._upload(key, self.settings.rubies_root, ref.entry)

    def sync_packages(self) -> SyncReport:
        for ref in list_packages(self.settings.cellar):
            self.sync_package(ref)
        return self.report

    def sync_rubies(self) -> SyncReport:
        for ref in list_rubies(self.settings.rubies_root):
            self.sync_ruby(ref)
        return self.report

    def sync_all(self) -> SyncReport:
        self.sync_packages()
        self.sync_rubies()
        return self.report

    def sync_one(self, token: str) -> SyncReport:
        """Sync a single ``name/version`` package or bare Ruby version."""
        if "/" in token:
            self.sync_package(PackageRef.parse(token))
        else:
            version = token.strip()
            if not version:
                raise ValueError("Ruby version must not be empty")
            self.sync_ruby(RubyRef(version=version))
        return self.report
