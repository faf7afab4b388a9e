# uvccam

Pure-Python building blocks for handling a USB Video Class (UVC) camera
stream. The package has no third-party dependencies.

## Modules

- `uvccam.deframer`
  - `UVCDeframer` takes payload packets, each starting with its UVC payload
    header, and assembles them into whole frames.
  - `write(packet)` feeds one packet. It raises `InvalidPacketError` (a
    `ValueError`) when the header is malformed.
  - `read_frame(timeout)` returns the oldest finished frame as `bytes`.
    `timeout` is in microseconds, and `None` waits forever. It raises
    `TimeoutError` when no frame arrives in time.
  - `set_expected_frame_size(size)` chooses how frames end:
    - With a non-zero size (YUY2), a frame ends once that many bytes have
      arrived, or at end-of-frame. A short frame is padded with black
      (`00 80 00 80`).
    - With size 0 (MJPEG), a frame ends at end-of-frame, or when the frame ID
      toggles.
  - At most `max_queued_frames` frames are queued (8 by default). When the
    queue is full, further data is dropped and counted as an overflow.
  - `flush()` drops queued frames and any partly assembled frame.
  - `stats()` returns a `DeframerStats` with `completion_rate()` and
    `incomplete_rate()`. `reset_stats()` clears the counters.
  - `PayloadHeader.parse(data)` decodes a single packet header, including the
    FID, EOF, PTS, SCR, error and end-of-header fields.
- `uvccam.descriptors`
  - Parsers for class-specific descriptors. Each is a frozen dataclass with a
    `parse(data)` class method, and `parse` raises `ValueError` on short or
    mismatched input.
  - UVC: `VideoInterfaceHeader`, `VideoInputTerminal`, and
    `VideoFormatDescriptor` (uncompressed or MJPEG).
  - USB Audio Class 1.0: `AudioControlHeader`, `AudioInputTerminal`,
    `AudioOutputTerminal`, `AudioFeatureUnit`, `AudioStreamingGeneral` and
    `AudioFormatTypeI`.
  - `iter_descriptors(data)` splits a concatenated descriptor block into its
    descriptors.
  - `get_sample_rate(data)` decodes a 3-byte sample frequency.
- `uvccam.colorspace`
  - `convert_yuy2_to_rgb32(src, width, height)` performs BT.601 conversion
    through the precomputed tables from `lookup_tables()`. The output bytes
    are in B, G, R, A order, and alpha is always 255.
  - It also defines `FrameValidationResult`, `FrameValidationStats`,
    `ResolutionFallbackConfig` and `CameraControlInfo`.
- `uvccam.config`
  - Stream defaults and UVC header flag constants.
  - `Resolution` and the common resolutions, such as `RESOLUTION_640X480`.
  - Helpers: `calculate_yuy2_size`, `calculate_rgb32_size`,
    `fps_to_interval` and `interval_to_fps`.
- `uvccam.utils`
  - Thread-safe helpers: `AtomicFlag`, `AtomicCounter` and `RingBufferIndex`.
  - Context managers: `ScopedLock` and `ScopedSemaphore`.
  - `ScopedBuffer` and the `Result` type.
  - Timing and clamping helpers: `clamp`, `clamp_byte`, `fps_to_microseconds`
    and others.

## Example

```python
from uvccam.colorspace import convert_yuy2_to_rgb32
from uvccam.config import calculate_yuy2_size
from uvccam.deframer import UVCDeframer

width, height = 320, 240
deframer = UVCDeframer()
deframer.set_expected_frame_size(calculate_yuy2_size(width, height))

for packet in packets:          # bytes received from the streaming endpoint
    deframer.write(packet)

try:
    frame = deframer.read_frame(timeout=100_000)   # 100 ms
except TimeoutError:
    frame = None

if frame is not None:
    rgb32 = convert_yuy2_to_rgb32(frame, width, height)
```

## What it does not do

This package does not talk to USB hardware. It does not:

- enumerate or open cameras;
- negotiate formats (probe/commit);
- start isochronous transfers;
- read or set camera controls;
- capture audio.

Feeding it packets is up to the caller. MJPEG frames are assembled but not
decoded.

## Installing and testing

```
pip install .
pip install ".[test]"
pytest
```