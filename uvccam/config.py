"""Central configuration constants for the webcam driver.

All durations are expressed in microseconds.
"""

from __future__ import annotations

from dataclasses import dataclass

# USB transfer configuration
USB_BUFFER_SIZE = 131072  # 128 KiB receive buffer
USB_MAX_PACKET_SIZE = 1024  # max isochronous packet
USB_MAX_TRANSFERS = 16  # concurrent transfers

USB_MAX_RETRIES = 3
USB_INITIAL_DELAY = 100_000  # 100 ms
USB_MAX_DELAY = 1_000_000  # 1 s
USB_BACKOFF_MULTIPLIER = 2.0

# Frame buffer configuration
FRAME_POOL_CAPACITY = 12
MAX_QUEUED_FRAMES = 8
MAX_FRAME_SIZE = 4_147_200  # 1080p YUY2

DEFAULT_WIDTH = 640
DEFAULT_HEIGHT = 480

# Timing configuration
DEFAULT_FRAME_INTERVAL = 33_333  # 30 fps
MIN_FRAME_TIMEOUT = 10_000  # 10 ms
MAX_FRAME_TIMEOUT = 500_000  # 500 ms
DEFAULT_FRAME_TIMEOUT = 100_000  # 100 ms

STATS_REPORT_INTERVAL = 30_000_000  # 30 s
ERROR_STATS_WINDOW = 5_000_000  # 5 s

# Error handling configuration
PACKET_LOSS_WARNING = 0.05
PACKET_LOSS_ACTION = 0.10
MIN_PACKETS_FOR_STATS = 100

MAX_CONSECUTIVE_ERRORS = 20
MAX_RECOVERY_ATTEMPTS = 5

# Logging throttle
LOG_THROTTLE_INTERVAL = 1000  # log every N transfers
LOG_TIME_INTERVAL = 5_000_000  # or every 5 s
MAX_INITIAL_LOGS = 5

# Video formats
BYTES_PER_PIXEL_YUY2 = 2
BYTES_PER_PIXEL_RGB32 = 4

# UVC payload header flags
UVC_HEADER_FLAG_FID = 0x01
UVC_HEADER_FLAG_EOF = 0x02
UVC_HEADER_FLAG_PTS = 0x04
UVC_HEADER_FLAG_SCR = 0x08
UVC_HEADER_FLAG_ERROR = 0x40

# UVC payload header sizes
UVC_MIN_HEADER_SIZE = 2
UVC_HEADER_WITH_PTS = 6
UVC_HEADER_WITH_SCR = 8
UVC_HEADER_FULL = 12


@dataclass(frozen=True)
class Resolution:
    """A frame size in pixels."""

    width: int
    height: int

    def yuy2_size(self) -> int:
        """Bytes needed for one YUY2 frame of this size."""
        return calculate_yuy2_size(self.width, self.height)

    def rgb32_size(self) -> int:
        """Bytes needed for one RGB32 frame of this size."""
        return calculate_rgb32_size(self.width, self.height)


RESOLUTION_160X120 = Resolution(160, 120)
RESOLUTION_320X240 = Resolution(320, 240)
RESOLUTION_640X480 = Resolution(640, 480)
RESOLUTION_1280X720 = Resolution(1280, 720)
RESOLUTION_1920X1080 = Resolution(1920, 1080)


def calculate_yuy2_size(width: int, height: int) -> int:
    """Return the YUY2 frame size in bytes for the given dimensions."""
    return width * height * BYTES_PER_PIXEL_YUY2


def calculate_rgb32_size(width: int, height: int) -> int:
    """Return the RGB32 frame size in bytes for the given dimensions."""
    return width * height * BYTES_PER_PIXEL_RGB32


def fps_to_interval(fps: float) -> int:
    """Frame interval in microseconds; the default interval for fps <= 0."""
    if fps <= 0.0:
        return DEFAULT_FRAME_INTERVAL
    return int(1_000_000.0 / fps)


def interval_to_fps(interval: int) -> float:
    """Frames per second for an interval in microseconds; 30 for interval <= 0."""
    if interval <= 0:
        return 30.0
    return 1_000_000.0 / interval