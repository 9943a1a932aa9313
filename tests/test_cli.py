from __future__ import annotations

import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stderr
from pathlib import Path
from unittest import mock

from bottlesync.cli import build_parser, run
from bottlesync.host import PlatformInfo


class FakeArchiver:
    calls: list[tuple[Path, str]] = []

    def archive(self, source_dir: Path, entry: str) -> bytes:
        FakeArchiver.calls.append((source_dir, entry))
        return b"tarball"


class CLITests(unittest.TestCase):
    def setUp(self) -> None:
        FakeArchiver.calls = []

    def test_build_parser_defaults(self) -> None:
        args = build_parser().parse_args([])
        self.assertIsNone(args.target)
        self.assertEqual(args.log_level, "INFO")
        self.assertFalse(args.help)
        self.assertFalse(args.dry_run)
        self.assertEqual(build_parser().parse_args(["wget/1.16"]).target, "wget/1.16")

    def test_help_goes_to_stderr_and_exits_one(self) -> None:
        for flag in ("-h", "--help"):
            with self.subTest(flag=flag):
                stderr = io.StringIO()
                with redirect_stderr(stderr):
                    code = run([flag])
                self.assertEqual(code, 1)
                self.assertIn("usage: bottlesync", stderr.getvalue())
                self.assertIn("BOXEN_S3_ACCESS_KEY", stderr.getvalue())

    def test_missing_credentials_abort_before_any_work(self) -> None:
        stderr = io.StringIO()
        with mock.patch.dict(os.environ, {}, clear=True):
            with mock.patch("bottlesync.cli.BottleSync") as orchestrator:
                with redirect_stderr(stderr):
                    code = run([], platform=PlatformInfo(os_version="10.9", platform="Darwin"))
        self.assertEqual(code, 1)
        orchestrator.assert_not_called()
        self.assertIn("BOXEN_S3_SECRET_KEY", stderr.getvalue())

    def _env(self, root: Path) -> dict[str, str]:
        return {
            "BOXEN_S3_ACCESS_KEY": "AKIA",
            "BOXEN_S3_SECRET_KEY": "secret",
            "BOXEN_HOMEBREW_ROOT": root.as_posix(),
            "BOXEN_RUBIES_ROOT": (root / "rubies").as_posix(),
        }

    def test_single_package_dry_run_syncs_only_that_package(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            for name, version in (("emacs", "24.3-boxen2"), ("wget", "1.16")):
                build_dir = root / "Cellar" / name / version
                build_dir.mkdir(parents=True)
                (build_dir / "INSTALL_RECEIPT.json").write_text(
                    json.dumps({"built_as_bottle": True}), encoding="utf-8"
                )
            (root / "rubies" / "1.9.3-p448").mkdir(parents=True)

            with mock.patch.dict(os.environ, self._env(root), clear=True):
                with mock.patch("bottlesync.cli.TarArchiver", FakeArchiver):
                    code = run(
                        ["--dry-run", "emacs/24.3-boxen2"],
                        platform=PlatformInfo(os_version="10.9", platform="Darwin"),
                    )

            self.assertEqual(code, 0)
            self.assertEqual(FakeArchiver.calls, [(root / "Cellar", "emacs/24.3-boxen2")])

    def test_full_sync_exits_nonzero_when_an_item_errors(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            (root / "Cellar" / "broken" / "1.0").mkdir(parents=True)
            (root / "rubies" / "1.9.3-p448").mkdir(parents=True)

            with mock.patch.dict(os.environ, self._env(root), clear=True):
                with mock.patch("bottlesync.cli.TarArchiver", FakeArchiver):
                    with self.assertLogs("bottlesync", level="INFO"):
                        code = run(
                            ["--dry-run"],
                            platform=PlatformInfo(os_version="10.9", platform="Darwin"),
                        )

            self.assertEqual(code, 1)
            self.assertEqual(FakeArchiver.calls, [(root / "rubies", "1.9.3-p448")])

    def test_empty_target_is_a_usage_error_not_a_full_sync(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            (root / "rubies" / "1.9.3-p448").mkdir(parents=True)
            stderr = io.StringIO()

            with mock.patch.dict(os.environ, self._env(root), clear=True):
                with mock.patch("bottlesync.cli.TarArchiver", FakeArchiver):
                    with redirect_stderr(stderr):
                        code = run(
                            ["--dry-run", ""],
                            platform=PlatformInfo(os_version="10.9", platform="Darwin"),
                        )

            self.assertEqual(code, 1)
            self.assertEqual(FakeArchiver.calls, [])
            self.assertIn("must not be empty", stderr.getvalue())

    def test_uses_s3_store_unless_dry_run(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            with mock.patch.dict(os.environ, self._env(root), clear=True):
                with mock.patch("bottlesync.cli.S3BlobStore") as store_cls:
                    code = run([], platform=PlatformInfo(os_version="10.9", platform="Darwin"))

            self.assertEqual(code, 0)
            store_cls.assert_called_once_with(
                bucket="boxen-downloads",
                region="us-east-1",
                access_key="AKIA",
                secret_key="secret",
            )

    def test_platform_failure_is_fatal(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            failing = PlatformInfo(os_version="Sonoma", platform="Darwin")
            with mock.patch.dict(os.environ, self._env(root), clear=True):
                with mock.patch("bottlesync.cli.BottleSync") as orchestrator:
                    with self.assertLogs("bottlesync.cli", level="ERROR"):
                        code = run([], platform=failing)

            self.assertEqual(code, 1)
            orchestrator.assert_not_called()


if __name__ == "__main__":
    unittest.main()
