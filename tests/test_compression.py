"""Tests for the compact snapshot codec."""

import json

import pytest

from schededit.codec.compression import (
    FORMAT_VERSION,
    SnapshotFormatError,
    compress_snapshot,
    decompress_snapshot,
    estimate_compression_ratio,
    snapshot_from_schedule,
)
from schededit.domain.edits import CancelEdit
from schededit.editing.applier import apply_cancel_edit


@pytest.fixture
def snapshot():
    """A populated snapshot covering every section."""
    return {
        "date": "2024-01-15",
        "staff_schedules": [
            {
                "staff_id": "s1",
                "staff_name": "Alice",
                "slots": [
                    {
                        "block": "AM",
                        "value": "LN",
                        "client_id": "c1",
                        "status": "assigned",
                        "reason": "Template",
                        "source": "TEMPLATE",
                        "location": "Clinic",
                    },
                    {"block": "PM", "value": "OPEN", "status": "cancelled"},
                ],
            }
        ],
        "exceptions": [
            {
                "id": "e1",
                "type": "staff_out",
                "entity_id": "s2",
                "mode": "partial",
                "all_day": True,
                "time_window": {"start": "9:00", "end": "12:00"},
            }
        ],
        "approvals": [{"id": "a1", "type": "sub", "related_id": "e1", "status": "approved"}],
    }


class TestCompressSnapshot:
    """Tests for compress_snapshot / decompress_snapshot."""

    def test_round_trip(self, snapshot):
        """Decompression restores a populated snapshot exactly."""
        assert decompress_snapshot(compress_snapshot(snapshot)) == snapshot

    def test_short_keys_and_status_codes(self, snapshot):
        """Slots use single-letter keys and status codes."""
        data = json.loads(compress_snapshot(snapshot))
        assert data["v"] == FORMAT_VERSION
        assert data["d"] == "2024-01-15"
        slot = data["s"][0]["l"][0]
        assert slot == {
            "b": "AM",
            "v": "LN",
            "c": "c1",
            "s": "a",
            "r": "Template",
            "o": "TEMPLATE",
            "t": "Clinic",
        }
        assert data["s"][0]["l"][1] == {"b": "PM", "v": "OPEN", "s": "c"}

    def test_compact_json(self, snapshot):
        """Output has no insignificant whitespace."""
        assert " " not in compress_snapshot({"staff_schedules": []})

    def test_empty_optional_fields_stay_absent(self):
        """Falsy optional slot fields are dropped and not restored."""
        snapshot = {
            "staff_schedules": [
                {
                    "staff_id": "s1",
                    "slots": [{"block": "AM", "value": "LN", "client_id": "", "reason": None}],
                }
            ]
        }
        restored = decompress_snapshot(compress_snapshot(snapshot))
        assert restored == {
            "staff_schedules": [
                {"staff_id": "s1", "slots": [{"block": "AM", "value": "LN"}]}
            ]
        }

    def test_missing_date_stays_missing(self):
        """No date key is invented."""
        assert "date" not in decompress_snapshot(compress_snapshot({"staff_schedules": []}))

    def test_unknown_status_passes_through(self):
        """Status values outside the code table are kept verbatim."""
        snapshot = {
            "staff_schedules": [
                {"staff_id": "s1", "slots": [{"block": "AM", "value": "X", "status": "pending"}]}
            ]
        }
        payload = compress_snapshot(snapshot)
        assert json.loads(payload)["s"][0]["l"][0]["s"] == "pending"
        assert decompress_snapshot(payload) == snapshot

    def test_missing_required_key(self):
        """Slots need a block and value."""
        with pytest.raises(SnapshotFormatError):
            compress_snapshot({"staff_schedules": [{"staff_id": "s1", "slots": [{"value": "X"}]}]})

    def test_unsupported_version(self):
        """Payloads from another format version are rejected."""
        with pytest.raises(SnapshotFormatError, match="version"):
            decompress_snapshot('{"v":2}')

    def test_invalid_json(self):
        """Malformed JSON raises a format error, which is a ValueError."""
        with pytest.raises(ValueError):
            decompress_snapshot("{not json")

    def test_non_object_payload(self):
        """The payload must be a JSON object."""
        with pytest.raises(SnapshotFormatError):
            decompress_snapshot("[1, 2]")

    def test_compression_ratio(self, snapshot):
        """The compressed form is smaller."""
        stats = estimate_compression_ratio(snapshot)
        assert stats.compressed_size < stats.original_size
        assert 0 < stats.ratio < 1


class TestSnapshotFromSchedule:
    """Tests for building snapshots from domain schedules."""

    def test_builds_slots(self, schedule, staff_list):
        """Each staff day becomes a named entry with its slots."""
        snapshot = snapshot_from_schedule(schedule, staff_list, "2024-01-15")
        assert snapshot["date"] == "2024-01-15"
        first = snapshot["staff_schedules"][0]
        assert first["staff_id"] == "s1"
        assert first["staff_name"] == "Alice"
        assert first["slots"] == [
            {
                "block": "AM",
                "value": "LN",
                "status": "assigned",
                "source": "TEMPLATE",
                "client_id": "c1",
            }
        ]

    def test_cancelled_slots(self, schedule, staff_list, client_list):
        """Cancelled slots are captured with the cancelled status."""
        cancelled = apply_cancel_edit(schedule, CancelEdit("c2"), client_list).schedule
        snapshot = snapshot_from_schedule(cancelled, staff_list)
        slot = snapshot["staff_schedules"][1]["slots"][0]
        assert slot["status"] == "cancelled"
        assert "client_id" not in slot
        assert "date" not in snapshot

    def test_round_trips_through_codec(self, schedule, staff_list):
        """Snapshots built from schedules survive compression."""
        snapshot = snapshot_from_schedule(schedule, staff_list, "2024-01-15")
        assert decompress_snapshot(compress_snapshot(snapshot)) == snapshot
