"""YUY2 to RGB32 conversion and frame-quality bookkeeping types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from functools import lru_cache
from typing import Optional, Tuple

from uvccam.config import (
    BYTES_PER_PIXEL_RGB32,
    BYTES_PER_PIXEL_YUY2,
    ERROR_STATS_WINDOW,
    MIN_PACKETS_FOR_STATS,
)

# Frame validation limits
MIN_MJPEG_FRAME_SIZE = 1024  # smaller MJPEG frames are corrupt
MIN_YUY2_FRAME_PERCENT = 90  # smaller YUY2 frames are incomplete
MAX_CONSECUTIVE_BAD_FRAMES = 10
FRAME_VALIDATION_REPORT_INTERVAL = 30  # seconds


def _table(coefficient: int, offset: int) -> Tuple[int, ...]:
    return tuple(coefficient * (i - offset) for i in range(256))


@dataclass(frozen=True)
class YuvRgbTables:
    """Pre-computed BT.601 contributions of Y, U and V, before the final shift."""

    y_table: Tuple[int, ...] = field(default_factory=lambda: _table(298, 16))
    u_b_table: Tuple[int, ...] = field(default_factory=lambda: _table(516, 128))
    u_g_table: Tuple[int, ...] = field(default_factory=lambda: _table(-100, 128))
    v_r_table: Tuple[int, ...] = field(default_factory=lambda: _table(409, 128))
    v_g_table: Tuple[int, ...] = field(default_factory=lambda: _table(-208, 128))


@lru_cache(maxsize=None)
def lookup_tables() -> YuvRgbTables:
    """Return the shared lookup tables, building them on first use."""
    return YuvRgbTables()


def _clamp_table() -> Tuple[int, ...]:
    return tuple(range(256))


def convert_yuy2_to_rgb32(src: bytes, width: int, height: int) -> bytes:
    """Convert a YUY2 frame to 32-bit pixels in B, G, R, A byte order.

    Alpha is always 255. ``width`` must be even and ``src`` must hold at
    least ``width * height * 2`` bytes.
    """
    if width < 0 or height < 0:
        raise ValueError("frame dimensions must not be negative")
    if width % 2:
        raise ValueError("YUY2 frame width must be even")
    size = width * height * BYTES_PER_PIXEL_YUY2
    data = bytes(src)
    if len(data) < size:
        raise ValueError(f"YUY2 frame needs {size} bytes, got {len(data)}")

    tables = lookup_tables()
    y_table = tables.y_table
    u_b, u_g = tables.u_b_table, tables.u_g_table
    v_r, v_g = tables.v_r_table, tables.v_g_table

    def channel(value: int) -> int:
        value >>= 8
        return 0 if value < 0 else 255 if value > 255 else value

    out = bytearray(width * height * BYTES_PER_PIXEL_RGB32)
    pos = 0
    it = iter(data[:size])
    for y0, u, y1, v in zip(it, it, it, it):
        blue = u_b[u] + 128
        green = u_g[u] + v_g[v] + 128
        red = v_r[v] + 128
        for luma in (y_table[y0], y_table[y1]):
            out[pos] = channel(luma + blue)
            out[pos + 1] = channel(luma + green)
            out[pos + 2] = channel(luma + red)
            out[pos + 3] = 255
            pos += 4
    return bytes(out)


class FrameValidationResult(IntEnum):
    """Outcome of checking a received frame."""

    VALID = 0
    INCOMPLETE = 1
    CORRUPTED_NO_SOI = 2
    CORRUPTED_NO_EOI = 3
    CORRUPTED_TRUNCATED = 4
    CORRUPTED_INVALID_HEADER = 5


@dataclass
class FrameValidationStats:
    """Counts of validated frames by outcome; times are in microseconds."""

    frames_validated: int = 0
    frames_valid: int = 0
    frames_incomplete: int = 0
    frames_no_soi: int = 0
    frames_no_eoi: int = 0
    frames_repeated: int = 0
    last_valid_frame_time: int = 0
    last_stats_report_time: int = 0


@dataclass
class ResolutionFallbackConfig:
    """When to drop to a lower resolution because of packet loss."""

    error_threshold_percent: float = 10.0
    evaluation_interval: int = ERROR_STATS_WINDOW
    min_packets_for_eval: int = MIN_PACKETS_FOR_STATS
    auto_recovery_enabled: bool = False
    recovery_delay: int = 0


@dataclass
class CameraControlInfo:
    """Range and state of one Processing Unit control."""

    selector: int
    name: str
    min_value: int = 0
    max_value: int = 0
    default_value: int = 0
    current_value: int = 0
    resolution: int = 1
    info_caps: int = 0
    parameter_id: int = -1
    has_auto: bool = False
    auto_parameter_id: Optional[int] = None