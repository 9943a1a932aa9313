"""Host facts folded into remote keys."""

from __future__ import annotations

import subprocess
from functools import cached_property

from bottlesync.errors import PlatformError


def _run(command: list[str]) -> str:
    try:
        completed = subprocess.run(
            command,
            check=False,
            capture_output=True,
            text=True,
        )
    except OSError as exc:
        raise PlatformError(f"Cannot run {command[0]}: {exc}") from exc
    if completed.returncode != 0:
        raise PlatformError(
            f"{' '.join(command)} exited with status {completed.returncode}: "
            f"{completed.stderr.strip()}"
        )
    value = completed.stdout.strip()
    if not value:
        raise PlatformError(f"{' '.join(command)} produced no output")
    return value


def major_minor(version: str) -> str:
    parts = version.strip().split(".")
    if len(parts) < 2 or not all(part.isdigit() for part in parts[:2]):
        raise PlatformError(f"Unrecognized OS version: {version!r}")
    return ".".join(parts[:2])


class PlatformInfo:
    """OS version and kernel name, each looked up at most once.

    Explicit values bypass the subprocess lookups, which lets tests and
    non-macOS hosts pin the key namespace.
    """

    def __init__(self, os_version: str | None = None, platform: str | None = None) -> None:
        self._os_version_override = os_version
        self._platform_override = platform

    @cached_property
    def os_version(self) -> str:
        raw = self._os_version_override or _run(["sw_vers", "-productVersion"])
        return major_minor(raw)

    @cached_property
    def platform(self) -> str:
        return self._platform_override or _run(["uname", "-s"])
