"""Compact JSON codec for daily schedule snapshots.

Snapshots are stored and transported with single-letter keys and a short
status code. Decoding is the exact inverse of encoding: optional fields that
were absent or empty in the source stay absent after a round trip, and
status codes the codec does not know pass through unchanged.

Snapshot shape::

    {
        "date": "2024-01-15",                      # optional
        "staff_schedules": [
            {"staff_id", "staff_name", "slots": [
                {"block", "value", "client_id", "status",
                 "reason", "source", "location"}
            ]}
        ],
        "exceptions": [
            {"id", "type", "entity_id", "mode", "all_day",
             "time_window": {"start", "end"}}
        ],
        "approvals": [{"id", "type", "related_id", "status"}],
    }
"""

import json
from dataclasses import dataclass
from typing import Optional

from schededit.domain.models import SourceTag, Staff, StaffSchedule

FORMAT_VERSION = 1

STATUS_CODES = {
    "assigned": "a",
    "unfilled": "u",
    "cancelled": "c",
}
STATUS_NAMES = {code: name for name, code in STATUS_CODES.items()}

# (long key, short key) pairs; required keys first
SLOT_KEYS = [
    ("block", "b"),
    ("value", "v"),
    ("client_id", "c"),
    ("status", "s"),
    ("reason", "r"),
    ("source", "o"),
    ("location", "t"),
]
SLOT_REQUIRED = ("block", "value")

EXCEPTION_KEYS = [
    ("id", "i"),
    ("type", "t"),
    ("entity_id", "e"),
    ("mode", "m"),
]
APPROVAL_KEYS = [
    ("id", "i"),
    ("type", "t"),
    ("related_id", "r"),
    ("status", "s"),
]


class SnapshotFormatError(ValueError):
    """Raised when a snapshot or compressed payload is malformed."""


@dataclass
class CompressionStats:
    """Size comparison between a snapshot and its compressed form."""

    original_size: int
    compressed_size: int

    @property
    def ratio(self) -> float:
        if self.original_size == 0:
            return 0.0
        return self.compressed_size / self.original_size


def _require(data: dict, key: str, where: str):
    try:
        return data[key]
    except (KeyError, TypeError):
        raise SnapshotFormatError(f"Missing required key '{key}' in {where}") from None


def _compress_slot(slot: dict) -> dict:
    compressed = {}
    for long_key, short_key in SLOT_KEYS:
        if long_key in SLOT_REQUIRED:
            compressed[short_key] = _require(slot, long_key, "slot")
            continue
        value = slot.get(long_key)
        if not value:
            continue
        if long_key == "status":
            value = STATUS_CODES.get(value, value)
        compressed[short_key] = value
    return compressed


def _decompress_slot(data: dict) -> dict:
    slot = {}
    for long_key, short_key in SLOT_KEYS:
        if long_key in SLOT_REQUIRED:
            slot[long_key] = _require(data, short_key, "compressed slot")
            continue
        if short_key not in data:
            continue
        value = data[short_key]
        if long_key == "status":
            value = STATUS_NAMES.get(value, value)
        slot[long_key] = value
    return slot


def _compress_exception(exception: dict) -> dict:
    compressed = {
        short_key: _require(exception, long_key, "exception")
        for long_key, short_key in EXCEPTION_KEYS
    }
    if exception.get("all_day"):
        compressed["a"] = True
    window = exception.get("time_window")
    if window:
        compressed["w"] = {
            "s": _require(window, "start", "exception time window"),
            "e": _require(window, "end", "exception time window"),
        }
    return compressed


def _decompress_exception(data: dict) -> dict:
    exception = {
        long_key: _require(data, short_key, "compressed exception")
        for long_key, short_key in EXCEPTION_KEYS
    }
    if "a" in data:
        exception["all_day"] = data["a"]
    if "w" in data:
        window = data["w"]
        exception["time_window"] = {
            "start": _require(window, "s", "compressed time window"),
            "end": _require(window, "e", "compressed time window"),
        }
    return exception


def compress_snapshot(snapshot: dict) -> str:
    """Encode a snapshot as compact JSON.

    Args:
        snapshot: Snapshot dict in the long-key shape.

    Returns:
        Compact JSON string.

    Raises:
        SnapshotFormatError: If a required field is missing.
    """
    compressed: dict = {"v": FORMAT_VERSION}
    if snapshot.get("date"):
        compressed["d"] = snapshot["date"]

    if "staff_schedules" in snapshot:
        staff_schedules = []
        for staff_schedule in snapshot["staff_schedules"]:
            entry = {"i": _require(staff_schedule, "staff_id", "staff schedule")}
            if staff_schedule.get("staff_name"):
                entry["n"] = staff_schedule["staff_name"]
            entry["l"] = [_compress_slot(slot) for slot in staff_schedule.get("slots", [])]
            staff_schedules.append(entry)
        compressed["s"] = staff_schedules

    if "exceptions" in snapshot:
        compressed["e"] = [_compress_exception(e) for e in snapshot["exceptions"]]

    if "approvals" in snapshot:
        compressed["a"] = [
            {short_key: _require(a, long_key, "approval") for long_key, short_key in APPROVAL_KEYS}
            for a in snapshot["approvals"]
        ]

    return json.dumps(compressed, separators=(",", ":"))


def decompress_snapshot(payload: str) -> dict:
    """Decode compact JSON produced by :func:`compress_snapshot`.

    Raises:
        SnapshotFormatError: If the payload is not valid JSON, has an
            unsupported version or misses a required key.
    """
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise SnapshotFormatError(f"Invalid snapshot JSON: {e}") from e
    if not isinstance(data, dict):
        raise SnapshotFormatError("Snapshot payload must be a JSON object")

    version = _require(data, "v", "snapshot")
    if version != FORMAT_VERSION:
        raise SnapshotFormatError(f"Unsupported snapshot version: {version}")

    snapshot: dict = {}
    if "d" in data:
        snapshot["date"] = data["d"]

    if "s" in data:
        staff_schedules = []
        for entry in data["s"]:
            staff_schedule = {"staff_id": _require(entry, "i", "compressed staff schedule")}
            if "n" in entry:
                staff_schedule["staff_name"] = entry["n"]
            staff_schedule["slots"] = [_decompress_slot(slot) for slot in entry.get("l", [])]
            staff_schedules.append(staff_schedule)
        snapshot["staff_schedules"] = staff_schedules

    if "e" in data:
        snapshot["exceptions"] = [_decompress_exception(e) for e in data["e"]]

    if "a" in data:
        snapshot["approvals"] = [
            {long_key: _require(a, short_key, "compressed approval") for long_key, short_key in APPROVAL_KEYS}
            for a in data["a"]
        ]

    return snapshot


def estimate_compression_ratio(snapshot: dict) -> CompressionStats:
    """Compare the plain JSON size of a snapshot with its compressed size."""
    return CompressionStats(
        original_size=len(json.dumps(snapshot)),
        compressed_size=len(compress_snapshot(snapshot)),
    )


def _slot_status(source: SourceTag) -> str:
    if source == SourceTag.CANCEL:
        return "cancelled"
    if source == SourceTag.UNFILLED:
        return "unfilled"
    return "assigned"


def snapshot_from_schedule(
    schedule: list[StaffSchedule],
    staff_list: list[Staff],
    snapshot_date: Optional[str] = None,
) -> dict:
    """Build a snapshot dict from a day schedule.

    Args:
        schedule: Day schedule to capture.
        staff_list: Roster used for staff names.
        snapshot_date: ISO date of the schedule, if known.
    """
    staff_names = {s.id: s.name for s in staff_list}
    snapshot: dict = {}
    if snapshot_date:
        snapshot["date"] = snapshot_date

    staff_schedules = []
    for staff_schedule in schedule:
        slots = []
        for slot in staff_schedule.slots:
            entry = {
                "block": slot.block,
                "value": slot.value,
                "status": _slot_status(slot.source),
                "source": slot.source.value,
            }
            if slot.client_id:
                entry["client_id"] = slot.client_id
            if slot.reason:
                entry["reason"] = slot.reason
            slots.append(entry)

        entry = {"staff_id": staff_schedule.staff_id}
        if staff_schedule.staff_id in staff_names:
            entry["staff_name"] = staff_names[staff_schedule.staff_id]
        entry["slots"] = slots
        staff_schedules.append(entry)

    snapshot["staff_schedules"] = staff_schedules
    snapshot["exceptions"] = []
    snapshot["approvals"] = []
    return snapshot
