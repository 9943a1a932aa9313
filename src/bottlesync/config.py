"""Configuration handling for bottlesync runs."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from bottlesync.errors import ConfigError
from bottlesync.naming import DEFAULT_HOMEBREW_ROOT

DEFAULT_BUCKET = "boxen-downloads"
DEFAULT_REGION = "us-east-1"
DEFAULT_RUBIES_ROOT = "/opt/rubies"

ACCESS_KEY_VAR = "BOXEN_S3_ACCESS_KEY"
SECRET_KEY_VAR = "BOXEN_S3_SECRET_KEY"
BUCKET_VAR = "BOXEN_S3_BUCKET"
REGION_VAR = "BOXEN_S3_REGION"
HOMEBREW_ROOT_VAR = "BOXEN_HOMEBREW_ROOT"
RUBIES_ROOT_VAR = "BOXEN_RUBIES_ROOT"


@dataclass(frozen=True)
class Settings:
    access_key: str
    secret_key: str
    bucket: str
    region: str
    homebrew_root: Path
    rubies_root: Path
    cellar_dir: Path | None = None

    @property
    def cellar(self) -> Path:
        if self.cellar_dir is not None:
            return self.cellar_dir
        return self.homebrew_root / "Cellar"


def resolve_root(raw: str) -> Path:
    return Path(raw).expanduser()


def build_settings(environ: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ
    missing = [name for name in (ACCESS_KEY_VAR, SECRET_KEY_VAR) if not env.get(name)]
    if missing:
        raise ConfigError(f"Missing required environment variable(s): {', '.join(missing)}")
    bucket = env.get(BUCKET_VAR, DEFAULT_BUCKET)
    if not bucket:
        raise ConfigError(f"{BUCKET_VAR} is set but empty")
    return Settings(
        access_key=env[ACCESS_KEY_VAR],
        secret_key=env[SECRET_KEY_VAR],
        bucket=bucket,
        region=env.get(REGION_VAR) or DEFAULT_REGION,
        homebrew_root=resolve_root(env.get(HOMEBREW_ROOT_VAR) or DEFAULT_HOMEBREW_ROOT),
        rubies_root=resolve_root(env.get(RUBIES_ROOT_VAR) or DEFAULT_RUBIES_ROOT),
    )
