"""Compact storage codec for daily schedule snapshots."""

from schededit.codec.compression import (
    CompressionStats,
    SnapshotFormatError,
    compress_snapshot,
    decompress_snapshot,
    estimate_compression_ratio,
    snapshot_from_schedule,
)

__all__ = [
    "CompressionStats",
    "SnapshotFormatError",
    "compress_snapshot",
    "decompress_snapshot",
    "estimate_compression_ratio",
    "snapshot_from_schedule",
]
