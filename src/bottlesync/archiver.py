"""Tarball packing for cellar and Ruby build directories."""

from __future__ import annotations

import logging
import subprocess
import tempfile
from pathlib import Path
from typing import Protocol

from bottlesync.errors import ArchiveError

logger = logging.getLogger(__name__)


class Archiver(Protocol):
    def archive(self, source_dir: Path, entry: str) -> bytes: ...


class TarArchiver:
    """Packs ``<source_dir>/<entry>`` with the system ``tar``.

    The tarball is written to a scoped temporary file and read back into
    memory; the file is removed before ``archive`` returns or raises.
    """

    def __init__(self, tar_executable: str = "tar", compression_flag: str = "j") -> None:
        self.tar_executable = tar_executable
        self.compression_flag = compression_flag

    def _command(self, source_dir: Path, entry: str, output_path: str) -> list[str]:
        return [
            self.tar_executable,
            f"-c{self.compression_flag}f",
            output_path,
            "-C",
            source_dir.as_posix(),
            entry,
        ]

    def archive(self, source_dir: Path, entry: str) -> bytes:
        if not (source_dir / entry).is_dir():
            raise ArchiveError(f"Nothing to archive at {(source_dir / entry).as_posix()}")
        with tempfile.NamedTemporaryFile(prefix="bottlesync-", suffix=".tar.bz2") as handle:
            command = self._command(source_dir, entry, handle.name)
            logger.debug("Running %s", " ".join(command))
            try:
                completed = subprocess.run(
                    command,
                    check=False,
                    capture_output=True,
                    text=True,
                    errors="replace",
                )
            except OSError as exc:
                raise ArchiveError(f"Cannot run {self.tar_executable}: {exc}") from exc
            if completed.returncode != 0:
                raise ArchiveError(
                    f"{self.tar_executable} exited with status {completed.returncode} "
                    f"while packing {entry}: {completed.stderr.strip()}"
                )
            try:
                return Path(handle.name).read_bytes()
            except OSError as exc:
                raise ArchiveError(f"Cannot read tarball for {entry}: {exc}") from exc
