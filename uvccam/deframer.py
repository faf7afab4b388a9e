"""Reassembly of UVC payload packets into complete video frames."""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Optional

from uvccam.config import (
    MAX_QUEUED_FRAMES,
    STATS_REPORT_INTERVAL,
    UVC_HEADER_FLAG_EOF,
    UVC_HEADER_FLAG_ERROR,
    UVC_HEADER_FLAG_FID,
    UVC_HEADER_FLAG_PTS,
    UVC_HEADER_FLAG_SCR,
    UVC_MIN_HEADER_SIZE,
)

logger = logging.getLogger(__name__)

UVC_HEADER_FLAG_EOH = 0x80

# Upper bound for one assembled frame (enough for 1080p YUY2).
FRAME_BUFFER_LIMIT = 4 * 1024 * 1024

# Y U Y V for two black pixels, used to pad short uncompressed frames.
_YUY2_PAD_PATTERN = bytes((0x00, 0x80, 0x00, 0x80))


class InvalidPacketError(ValueError):
    """A packet is too short or its header length is out of range."""


def _monotonic_us() -> int:
    return time.monotonic_ns() // 1000


@dataclass(frozen=True)
class PayloadHeader:
    """The header at the start of every UVC payload packet."""

    length: int
    flags: int
    pts: Optional[int] = None
    scr: Optional[int] = None

    @classmethod
    def parse(cls, data: bytes) -> "PayloadHeader":
        """Decode the header of ``data``; raise InvalidPacketError if it is malformed."""
        data = bytes(data)
        if len(data) < UVC_MIN_HEADER_SIZE:
            raise InvalidPacketError(f"packet of {len(data)} bytes has no header")
        length, flags = data[0], data[1]
        if length < UVC_MIN_HEADER_SIZE or length > len(data):
            raise InvalidPacketError(
                f"header length {length} is invalid for a {len(data)}-byte packet"
            )
        pts = None
        offset = UVC_MIN_HEADER_SIZE
        if flags & UVC_HEADER_FLAG_PTS:
            if length >= offset + 4:
                pts = int.from_bytes(data[offset:offset + 4], "little")
            offset += 4
        scr = None
        if flags & UVC_HEADER_FLAG_SCR and length >= offset + 6:
            scr = int.from_bytes(data[offset:offset + 6], "little")
        return cls(length, flags, pts, scr)

    @property
    def fid(self) -> int:
        return self.flags & UVC_HEADER_FLAG_FID

    @property
    def eof(self) -> bool:
        return bool(self.flags & UVC_HEADER_FLAG_EOF)

    @property
    def has_pts(self) -> bool:
        return bool(self.flags & UVC_HEADER_FLAG_PTS)

    @property
    def has_scr(self) -> bool:
        return bool(self.flags & UVC_HEADER_FLAG_SCR)

    @property
    def error(self) -> bool:
        return bool(self.flags & UVC_HEADER_FLAG_ERROR)

    @property
    def end_of_header(self) -> bool:
        return bool(self.flags & UVC_HEADER_FLAG_EOH)

    @property
    def expected_length(self) -> int:
        """Header length implied by the PTS and SCR flags."""
        return UVC_MIN_HEADER_SIZE + (4 if self.has_pts else 0) + (6 if self.has_scr else 0)


@dataclass
class DeframerStats:
    """Snapshot of frame assembly counters; times are in microseconds."""

    frames_completed: int = 0
    frames_incomplete: int = 0
    fid_changes: int = 0
    queue_overflows: int = 0
    last_report_time: int = 0
    expected_frame_size: int = 0

    def completion_rate(self) -> float:
        """Percentage of complete frames; 100 when nothing was seen."""
        total = self.frames_completed + self.frames_incomplete
        if total == 0:
            return 100.0
        return 100.0 * self.frames_completed / total

    def incomplete_rate(self) -> float:
        """Percentage of incomplete frames; 0 when nothing was seen."""
        total = self.frames_completed + self.frames_incomplete
        if total == 0:
            return 0.0
        return 100.0 * self.frames_incomplete / total


class UVCDeframer:
    """Collects UVC payload packets and queues each finished frame.

    With an expected frame size set (uncompressed YUY2) a frame ends when
    that many bytes have arrived or on end-of-frame, short frames being
    padded with black. Without one (MJPEG) a frame ends on end-of-frame or
    when the frame ID toggles.
    """

    def __init__(
        self,
        max_queued_frames: int = MAX_QUEUED_FRAMES,
        clock: Callable[[], int] = _monotonic_us,
    ) -> None:
        self.max_queued_frames = max_queued_frames
        self._clock = clock
        self._frames: Deque[bytes] = deque()
        self._cond = threading.Condition()
        self._buffer = bytearray()
        self._slot_reserved = False
        self._fid = 0
        self._expected_frame_size = 0
        self._frame_count = 0
        self._frames_completed = 0
        self._frames_incomplete = 0
        self._fid_changes = 0
        self._queue_overflows = 0
        self._packets_this_frame = 0
        self._total_bytes_this_frame = 0
        self._last_diag_report = 0

    def set_expected_frame_size(self, size: int) -> None:
        """Set the uncompressed frame size; 0 selects end-of-frame detection."""
        if size < 0:
            raise ValueError("frame size must not be negative")
        self._expected_frame_size = size
        logger.info("expected frame size set to %d", size)

    def stats(self) -> DeframerStats:
        return DeframerStats(
            frames_completed=self._frames_completed,
            frames_incomplete=self._frames_incomplete,
            fid_changes=self._fid_changes,
            queue_overflows=self._queue_overflows,
            last_report_time=self._last_diag_report,
            expected_frame_size=self._expected_frame_size,
        )

    def reset_stats(self) -> None:
        self._frames_completed = 0
        self._frames_incomplete = 0
        self._fid_changes = 0
        self._queue_overflows = 0
        self._last_diag_report = self._clock()

    def flush(self) -> None:
        """Drop queued frames and any partly assembled frame."""
        with self._cond:
            self._frames.clear()
        self._buffer.clear()
        self._fid = 0
        self._packets_this_frame = 0
        logger.info(
            "flush complete (completed=%d, incomplete=%d)",
            self._frames_completed,
            self._frames_incomplete,
        )

    def read_frame(self, timeout: Optional[int] = None) -> bytes:
        """Take the oldest finished frame.

        ``timeout`` is in microseconds; ``None`` waits forever. Raises
        TimeoutError if no frame arrives in time.
        """
        seconds = None if timeout is None else max(timeout, 0) / 1_000_000
        with self._cond:
            if not self._cond.wait_for(lambda: bool(self._frames), seconds):
                raise TimeoutError("no frame available")
            return self._frames.popleft()

    def _queue_frame(self, data: bytes) -> None:
        with self._cond:
            self._frames.append(data)
            self._cond.notify()
        self._slot_reserved = False

    def _queue_length(self) -> int:
        with self._cond:
            return len(self._frames)

    def write(self, packet: bytes) -> int:
        """Feed one USB payload packet; return the number of bytes consumed."""
        data = bytes(packet)
        self._packets_this_frame += 1

        header = PayloadHeader.parse(data)
        payload = data[header.length:]
        if not payload:
            return len(data)

        if header.error:
            logger.warning("UVC error bit set in payload header")
        if header.length != header.expected_length:
            logger.debug(
                "header length %d does not match flags (expected %d)",
                header.length,
                header.expected_length,
            )

        expected = self._expected_frame_size
        fid_changed = header.fid != self._fid

        if fid_changed:
            self._fid_changes += 1
            self._fid = header.fid
            if expected == 0 and self._buffer:
                queued = self._queue_length()
                if queued >= self.max_queued_frames:
                    self._queue_overflows += 1
                    logger.warning("frame queue overflow #%d", self._queue_overflows)
                if not self._slot_reserved and queued < self.max_queued_frames:
                    self._slot_reserved = True
                if self._slot_reserved:
                    self._frame_count += 1
                    self._frames_completed += 1
                    self._queue_frame(bytes(self._buffer))
            self._buffer.clear()
            self._packets_this_frame = 1
            self._total_bytes_this_frame = 0

        if not self._slot_reserved:
            if self._queue_length() < self.max_queued_frames:
                self._slot_reserved = True
            else:
                self._queue_overflows += 1
                return len(data)

        self._total_bytes_this_frame += len(payload)

        if expected > 0:
            space_left = max(expected - len(self._buffer), 0)
            if len(payload) > space_left:
                payload = payload[:space_left]

        if payload:
            if len(self._buffer) + len(payload) <= FRAME_BUFFER_LIMIT:
                self._buffer += payload
            else:
                logger.error(
                    "frame buffer overflow: %d + %d > %d",
                    len(self._buffer),
                    len(payload),
                    FRAME_BUFFER_LIMIT,
                )

        complete = False
        if expected > 0:
            if header.eof:
                missing = expected - len(self._buffer)
                if missing > 0:
                    repeats = missing // len(_YUY2_PAD_PATTERN) + 1
                    self._buffer += (_YUY2_PAD_PATTERN * repeats)[:missing]
                complete = True
            elif len(self._buffer) >= expected:
                complete = True
        elif header.eof and not fid_changed:
            complete = True

        if complete:
            self._frame_count += 1
            self._frames_completed += 1
            frame = bytes(self._buffer)
            if expected > 0 and len(frame) < expected:
                self._frames_incomplete += 1
                logger.warning(
                    "incomplete frame #%d: got %d, expected %d",
                    self._frames_incomplete,
                    len(frame),
                    expected,
                )
            self._queue_frame(frame)
            self._buffer.clear()
            self._packets_this_frame = 0

        now = self._clock()
        if now - self._last_diag_report > STATS_REPORT_INTERVAL:
            stats = self.stats()
            if stats.frames_completed or stats.frames_incomplete:
                logger.info(
                    "completed=%d incomplete=%d (%.1f%%) FID=%d overflow=%d",
                    stats.frames_completed,
                    stats.frames_incomplete,
                    stats.incomplete_rate(),
                    stats.fid_changes,
                    stats.queue_overflows,
                )
            self._last_diag_report = now

        return len(data)