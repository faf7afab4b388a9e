"""USB Audio Class 1.0 and USB Video Class descriptor parsing.

All multi-byte fields are little-endian, as on the USB wire.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import ClassVar, Iterator, Optional, Tuple

# USB Audio device class code
USB_AUDIO_DEVICE_CLASS = 0x01

# USB Audio interface subclass codes
USB_AUDIO_INTERFACE_AUDIOCONTROL = 0x01
USB_AUDIO_INTERFACE_AUDIOSTREAMING = 0x02

# Audio Control interface descriptor subtypes
USB_AUDIO_AC_HEADER = 0x01
USB_AUDIO_AC_INPUT_TERMINAL = 0x02
USB_AUDIO_AC_OUTPUT_TERMINAL = 0x03
USB_AUDIO_AC_FEATURE_UNIT = 0x06

# Audio Streaming interface descriptor subtypes
USB_AUDIO_AS_GENERAL = 0x01
USB_AUDIO_AS_FORMAT_TYPE = 0x02

# Audio terminal types
USB_AUDIO_TERMINAL_USB_STREAMING = 0x0101
USB_AUDIO_TERMINAL_MICROPHONE = 0x0201

# Audio data format type I
USB_AUDIO_FORMAT_TYPE_I = 0x01
USB_AUDIO_FORMAT_PCM = 0x0001

# Feature unit control selectors
USB_AUDIO_FU_MUTE_CONTROL = 0x01
USB_AUDIO_FU_VOLUME_CONTROL = 0x02

# Audio class-specific request codes
USB_AUDIO_RC_SET_CUR = 0x01
USB_AUDIO_RC_GET_CUR = 0x81
USB_AUDIO_RC_GET_MIN = 0x82
USB_AUDIO_RC_GET_MAX = 0x83
USB_AUDIO_RC_GET_RES = 0x84

# Endpoint control selectors
USB_AUDIO_EP_SAMPLING_FREQ_CONTROL = 0x01

# Video control selectors
VC_CONTROL_UNDEFINED = 0x0
VC_VIDEO_POWER_MODE_CONTROL = 0x1
VC_REQUEST_ERROR_CODE_CONTROL = 0x2

# Video class descriptor subtypes used below
VC_HEADER = 0x01
VC_INPUT_TERMINAL = 0x02
VS_FORMAT_UNCOMPRESSED = 0x04
VS_FORMAT_MJPEG = 0x06

_GUID_SIZE = 16


def get_sample_rate(data: bytes) -> int:
    """Decode a 3-byte little-endian sample frequency."""
    if len(data) < 3:
        raise ValueError("a sample frequency needs 3 bytes")
    return data[0] | (data[1] << 8) | (data[2] << 16)


def iter_descriptors(data: bytes) -> Iterator[bytes]:
    """Yield each descriptor in a concatenated descriptor block.

    Raises ValueError on a length byte below 2 or one that runs past the end.
    """
    data = bytes(data)
    offset = 0
    while offset < len(data):
        length = data[offset]
        if length < 2:
            raise ValueError(f"invalid descriptor length {length} at offset {offset}")
        end = offset + length
        if end > len(data):
            raise ValueError(f"descriptor at offset {offset} is truncated")
        yield data[offset:end]
        offset = end


@dataclass(frozen=True)
class ClassDescriptor:
    """The three-byte header shared by all class-specific descriptors."""

    length: int
    descriptor_type: int
    descriptor_subtype: int

    MIN_SIZE: ClassVar[int] = 3
    SUBTYPES: ClassVar[Tuple[int, ...]] = ()

    @classmethod
    def _checked(cls, data: bytes) -> bytes:
        data = bytes(data)
        if len(data) < cls.MIN_SIZE:
            raise ValueError(
                f"{cls.__name__} needs at least {cls.MIN_SIZE} bytes, got {len(data)}"
            )
        if cls.SUBTYPES and data[2] not in cls.SUBTYPES:
            raise ValueError(
                f"{cls.__name__} cannot have descriptor subtype {data[2]:#04x}"
            )
        return data

    @staticmethod
    def _slice(data: bytes, start: int, count: int, what: str) -> bytes:
        if start + count > len(data):
            raise ValueError(f"{what} is truncated")
        return data[start:start + count]

    @classmethod
    def parse(cls, data: bytes) -> "ClassDescriptor":
        data = cls._checked(data)
        return cls(data[0], data[1], data[2])


@dataclass(frozen=True)
class AudioControlHeader(ClassDescriptor):
    """Audio Control interface header."""

    bcd_adc: int
    total_length: int
    in_collection: int
    interface_numbers: bytes

    MIN_SIZE: ClassVar[int] = 8
    SUBTYPES: ClassVar[Tuple[int, ...]] = (USB_AUDIO_AC_HEADER,)

    @classmethod
    def parse(cls, data: bytes) -> "AudioControlHeader":
        data = cls._checked(data)
        length, dtype, subtype, bcd, total, count = struct.unpack_from("<BBBHHB", data)
        numbers = cls._slice(data, 8, count, "interface number list")
        return cls(length, dtype, subtype, bcd, total, count, numbers)


@dataclass(frozen=True)
class AudioInputTerminal(ClassDescriptor):
    """Audio input terminal, such as a microphone."""

    terminal_id: int
    terminal_type: int
    associated_terminal: int
    num_channels: int
    channel_config: int
    channel_names: int
    terminal: int

    MIN_SIZE: ClassVar[int] = 12
    SUBTYPES: ClassVar[Tuple[int, ...]] = (USB_AUDIO_AC_INPUT_TERMINAL,)

    @classmethod
    def parse(cls, data: bytes) -> "AudioInputTerminal":
        data = cls._checked(data)
        return cls(*struct.unpack_from("<BBBBHBBHBB", data))


@dataclass(frozen=True)
class AudioOutputTerminal(ClassDescriptor):
    """Audio output terminal."""

    terminal_id: int
    terminal_type: int
    associated_terminal: int
    source_id: int
    terminal: int

    MIN_SIZE: ClassVar[int] = 9
    SUBTYPES: ClassVar[Tuple[int, ...]] = (USB_AUDIO_AC_OUTPUT_TERMINAL,)

    @classmethod
    def parse(cls, data: bytes) -> "AudioOutputTerminal":
        data = cls._checked(data)
        return cls(*struct.unpack_from("<BBBBHBBB", data))


@dataclass(frozen=True)
class AudioFeatureUnit(ClassDescriptor):
    """Audio feature unit; ``controls`` holds the raw control bitmaps."""

    unit_id: int
    source_id: int
    control_size: int
    controls: bytes

    MIN_SIZE: ClassVar[int] = 6
    SUBTYPES: ClassVar[Tuple[int, ...]] = (USB_AUDIO_AC_FEATURE_UNIT,)

    @classmethod
    def parse(cls, data: bytes) -> "AudioFeatureUnit":
        data = cls._checked(data)
        length, dtype, subtype, unit_id, source_id, control_size = struct.unpack_from(
            "<BBBBBB", data
        )
        controls = cls._slice(data, 6, max(length - 6, 0), "feature unit controls")
        return cls(length, dtype, subtype, unit_id, source_id, control_size, controls)


@dataclass(frozen=True)
class AudioStreamingGeneral(ClassDescriptor):
    """Audio Streaming interface general descriptor."""

    terminal_link: int
    delay: int
    format_tag: int

    MIN_SIZE: ClassVar[int] = 7
    SUBTYPES: ClassVar[Tuple[int, ...]] = (USB_AUDIO_AS_GENERAL,)

    @classmethod
    def parse(cls, data: bytes) -> "AudioStreamingGeneral":
        data = cls._checked(data)
        return cls(*struct.unpack_from("<BBBBBH", data))


@dataclass(frozen=True)
class AudioFormatTypeI(ClassDescriptor):
    """Type I format descriptor.

    With ``sample_freq_type`` 0 the rates are a continuous (lower, upper)
    range; otherwise they are that many discrete rates.
    """

    format_type: int
    num_channels: int
    sub_frame_size: int
    bit_resolution: int
    sample_freq_type: int
    sample_frequencies: Tuple[int, ...]

    MIN_SIZE: ClassVar[int] = 8
    SUBTYPES: ClassVar[Tuple[int, ...]] = (USB_AUDIO_AS_FORMAT_TYPE,)

    @classmethod
    def parse(cls, data: bytes) -> "AudioFormatTypeI":
        data = cls._checked(data)
        fields = struct.unpack_from("<BBBBBBBB", data)
        freq_type = fields[7]
        count = freq_type if freq_type else 2
        raw = cls._slice(data, 8, count * 3, "sample frequency list")
        rates = tuple(get_sample_rate(raw[i:i + 3]) for i in range(0, len(raw), 3))
        return cls(*fields, rates)


@dataclass(frozen=True)
class VideoFormatDescriptor(ClassDescriptor):
    """Uncompressed or MJPEG video streaming format descriptor.

    ``guid`` and ``bytes_per_pixel`` are set for uncompressed formats only,
    ``flags`` for MJPEG formats only.
    """

    format_index: int
    num_frame_descriptors: int
    guid: Optional[bytes]
    bytes_per_pixel: Optional[int]
    flags: Optional[int]
    default_frame_index: int
    aspect_ratio_x: int
    aspect_ratio_y: int
    interlace_flags: int
    copy_protect: int

    MIN_SIZE: ClassVar[int] = 5
    SUBTYPES: ClassVar[Tuple[int, ...]] = (VS_FORMAT_UNCOMPRESSED, VS_FORMAT_MJPEG)

    @classmethod
    def parse(cls, data: bytes) -> "VideoFormatDescriptor":
        data = cls._checked(data)
        header = struct.unpack_from("<BBBBB", data)
        if data[2] == VS_FORMAT_UNCOMPRESSED:
            guid = cls._slice(data, 5, _GUID_SIZE, "uncompressed format")
            rest = cls._slice(data, 5 + _GUID_SIZE, 6, "uncompressed format")
            bpp, default_index, ax, ay, interlace, protect = rest
            return cls(*header, guid, bpp, None, default_index, ax, ay, interlace, protect)
        rest = cls._slice(data, 5, 6, "MJPEG format")
        flags, default_index, ax, ay, interlace, protect = rest
        return cls(*header, None, None, flags, default_index, ax, ay, interlace, protect)


@dataclass(frozen=True)
class VideoInterfaceHeader(ClassDescriptor):
    """Video Control interface header."""

    version: int
    total_length: int
    clock_frequency: int
    num_interface_numbers: int
    interface_numbers: bytes

    MIN_SIZE: ClassVar[int] = 12
    SUBTYPES: ClassVar[Tuple[int, ...]] = (VC_HEADER,)

    @classmethod
    def parse(cls, data: bytes) -> "VideoInterfaceHeader":
        data = cls._checked(data)
        length, dtype, subtype, version, total, clock, count = struct.unpack_from(
            "<BBBHHIB", data
        )
        numbers = cls._slice(data, 12, count, "interface number list")
        return cls(length, dtype, subtype, version, total, clock, count, numbers)


@dataclass(frozen=True)
class VideoInputTerminal(ClassDescriptor):
    """Video Control input terminal."""

    terminal_id: int
    terminal_type: int
    associated_terminal: int
    terminal: int

    MIN_SIZE: ClassVar[int] = 8
    SUBTYPES: ClassVar[Tuple[int, ...]] = (VC_INPUT_TERMINAL,)

    @classmethod
    def parse(cls, data: bytes) -> "VideoInputTerminal":
        data = cls._checked(data)
        return cls(*struct.unpack_from("<BBBBHBB", data))