"""Install receipt parsing and the archive/skip decision for cellar builds."""

from __future__ import annotations

import json
from pathlib import Path

from bottlesync.errors import ReceiptError
from bottlesync.models import Eligibility, InstallReceipt

RECEIPT_FILENAME = "INSTALL_RECEIPT.json"

POURED_FROM_BOTTLE_REASON = "already poured from a bottle"


def _flag(payload: dict[str, object], key: str) -> bool:
    return payload.get(key) is True


def parse_receipt(text: str | bytes, source: str = RECEIPT_FILENAME) -> InstallReceipt:
    try:
        payload = json.loads(text)
    except ValueError as exc:
        # JSONDecodeError, or UnicodeDecodeError for non-UTF-8 bytes
        raise ReceiptError(f"Malformed install receipt {source}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ReceiptError(f"Install receipt {source} is not a JSON object")
    return InstallReceipt(
        poured_from_bottle=_flag(payload, "poured_from_bottle"),
        built_as_bottle=_flag(payload, "built_as_bottle"),
    )


def load_receipt(build_dir: Path) -> InstallReceipt:
    receipt_path = build_dir / RECEIPT_FILENAME
    try:
        raw = receipt_path.read_bytes()
    except OSError as exc:
        raise ReceiptError(f"Cannot read install receipt {receipt_path}: {exc}") from exc
    return parse_receipt(raw, source=receipt_path.as_posix())


def rebuild_hint(name: str) -> str:
    return (
        "not built as a bottle; reinstall with "
        f"`brew reinstall --build-bottle {name}` "
        "or set HOMEBREW_BUILD_BOTTLE=1 and rebuild"
    )


def check_eligibility(receipt: InstallReceipt, name: str = "<formula>") -> Eligibility:
    """Decide whether a cellar build should be archived.

    Bottles poured from a prebuilt archive are never re-uploaded, and builds
    made without ``--build-bottle`` are not relocatable, so both are skipped
    with an operator-facing reason.
    """
    if receipt.poured_from_bottle:
        return Eligibility(archive=False, reason=POURED_FROM_BOTTLE_REASON)
    if not receipt.built_as_bottle:
        return Eligibility(archive=False, reason=rebuild_hint(name))
    return Eligibility(archive=True)
