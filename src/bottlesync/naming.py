"""Remote key layout for uploaded bottles and Rubies.

Keys are namespaced by the OS version and by where Homebrew lives on the
machine that built the artifact:

    homebrew/<segment><os>/<name>-<version>.tar.bz2
    rubies/<platform>/<segment><os>/<version>.tar.bz2

``<segment>`` is empty for ``/usr/local``, ``default/`` for the Boxen
default root, and the URL-safe base64 of the root path otherwise, so
machines with different prefixes never share a key.
"""

from __future__ import annotations

import base64
import posixpath
from pathlib import Path

from bottlesync.models import (
    ARCHIVE_EXTENSION,
    PACKAGE_NAMESPACE,
    RUBY_NAMESPACE,
    PackageRef,
    RubyRef,
)

CANONICAL_HOMEBREW_ROOT = "/usr/local"
DEFAULT_HOMEBREW_ROOT = "/opt/boxen/homebrew"
DEFAULT_SEGMENT = "default/"


def _normalize_root(homebrew_root: str | Path) -> str:
    normalized = posixpath.abspath(Path(homebrew_root).expanduser().as_posix())
    # abspath keeps a leading "//" on POSIX
    return "/" + normalized.lstrip("/")


def location_segment(homebrew_root: str | Path) -> str:
    root = _normalize_root(homebrew_root)
    if root == CANONICAL_HOMEBREW_ROOT:
        return ""
    if root == DEFAULT_HOMEBREW_ROOT:
        return DEFAULT_SEGMENT
    encoded = base64.urlsafe_b64encode(root.encode("utf-8")).decode("ascii")
    return f"{encoded}/"


def package_key(ref: PackageRef, os_version: str, homebrew_root: str | Path) -> str:
    segment = location_segment(homebrew_root)
    return (
        f"{PACKAGE_NAMESPACE}/{segment}{os_version}/"
        f"{ref.name}-{ref.version}.{ARCHIVE_EXTENSION}"
    )


def ruby_key(
    ref: RubyRef,
    os_version: str,
    homebrew_root: str | Path,
    platform: str,
) -> str:
    segment = location_segment(homebrew_root)
    return f"{RUBY_NAMESPACE}/{platform}/{segment}{os_version}/{ref.version}.{ARCHIVE_EXTENSION}"


def resolve_key(
    kind: str,
    ref: PackageRef | RubyRef,
    os_version: str,
    homebrew_root: str | Path,
    platform: str = "Darwin",
) -> str:
    if kind == "package" and isinstance(ref, PackageRef):
        return package_key(ref, os_version, homebrew_root)
    if kind == "ruby" and isinstance(ref, RubyRef):
        return ruby_key(ref, os_version, homebrew_root, platform)
    raise ValueError(f"Unsupported key kind {kind!r} for {type(ref).__name__}")
