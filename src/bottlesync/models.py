"""Typed models shared by the naming, eligibility, and sync layers."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum

ARCHIVE_EXTENSION = "tar.bz2"
PACKAGE_NAMESPACE = "homebrew"
RUBY_NAMESPACE = "rubies"


@dataclass(frozen=True)
class PackageRef:
    name: str
    version: str

    @property
    def entry(self) -> str:
        return f"{self.name}/{self.version}"

    @classmethod
    def parse(cls, token: str) -> "PackageRef":
        name, _, version = token.strip("/").partition("/")
        if not name or not version or "/" in version:
            raise ValueError(f"Expected <name>/<version>, got: {token!r}")
        return cls(name=name, version=version)


@dataclass(frozen=True)
class RubyRef:
    version: str

    @property
    def entry(self) -> str:
        return self.version


@dataclass(frozen=True)
class InstallReceipt:
    poured_from_bottle: bool = False
    built_as_bottle: bool = False


@dataclass(frozen=True)
class Eligibility:
    archive: bool
    reason: str | None = None


class ItemOutcome(str, Enum):
    SKIPPED_EXISTS = "skipped_exists"
    SKIPPED_INELIGIBLE = "skipped_ineligible"
    UPLOADED = "uploaded"
    ERRORED = "errored"


@dataclass
class SyncReport:
    outcomes: dict[str, ItemOutcome] = field(default_factory=dict)

    def record(self, key: str, outcome: ItemOutcome) -> ItemOutcome:
        self.outcomes[key] = outcome
        return outcome

    def counts(self) -> dict[str, int]:
        tally = Counter(outcome.value for outcome in self.outcomes.values())
        return {outcome.value: tally.get(outcome.value, 0) for outcome in ItemOutcome}

    @property
    def failed(self) -> bool:
        return any(outcome is ItemOutcome.ERRORED for outcome in self.outcomes.values())
