import struct

import pytest

from uvccam.descriptors import (
    USB_AUDIO_AC_FEATURE_UNIT,
    USB_AUDIO_AC_HEADER,
    USB_AUDIO_AC_INPUT_TERMINAL,
    USB_AUDIO_AC_OUTPUT_TERMINAL,
    USB_AUDIO_AS_FORMAT_TYPE,
    USB_AUDIO_AS_GENERAL,
    USB_AUDIO_FORMAT_PCM,
    USB_AUDIO_FORMAT_TYPE_I,
    USB_AUDIO_TERMINAL_MICROPHONE,
    USB_AUDIO_TERMINAL_USB_STREAMING,
    VC_HEADER,
    VC_INPUT_TERMINAL,
    VS_FORMAT_MJPEG,
    VS_FORMAT_UNCOMPRESSED,
    AudioControlHeader,
    AudioFeatureUnit,
    AudioFormatTypeI,
    AudioInputTerminal,
    AudioOutputTerminal,
    AudioStreamingGeneral,
    ClassDescriptor,
    VideoFormatDescriptor,
    VideoInputTerminal,
    VideoInterfaceHeader,
    get_sample_rate,
    iter_descriptors,
)

CS_INTERFACE = 0x24


def _rate(value):
    return bytes([value & 0xFF, (value >> 8) & 0xFF, (value >> 16) & 0xFF])


def test_class_descriptor_header():
    desc = ClassDescriptor.parse(bytes([9, CS_INTERFACE, 5]))
    assert (desc.length, desc.descriptor_type, desc.descriptor_subtype) == (9, CS_INTERFACE, 5)


def test_class_descriptor_too_short():
    with pytest.raises(ValueError):
        ClassDescriptor.parse(bytes([9, CS_INTERFACE]))


def test_audio_control_header():
    data = struct.pack("<BBBHHB", 10, CS_INTERFACE, USB_AUDIO_AC_HEADER, 0x0100, 40, 2) + bytes([1, 2])
    desc = AudioControlHeader.parse(data)
    assert desc.bcd_adc == 0x0100
    assert desc.total_length == 40
    assert desc.in_collection == 2
    assert desc.interface_numbers == bytes([1, 2])


def test_audio_control_header_truncated_list():
    data = struct.pack("<BBBHHB", 10, CS_INTERFACE, USB_AUDIO_AC_HEADER, 0x0100, 40, 3) + bytes([1])
    with pytest.raises(ValueError):
        AudioControlHeader.parse(data)


def test_wrong_subtype_rejected():
    data = struct.pack("<BBBHHB", 8, CS_INTERFACE, USB_AUDIO_AC_FEATURE_UNIT, 0x0100, 40, 0)
    with pytest.raises(ValueError):
        AudioControlHeader.parse(data)


def test_audio_input_terminal():
    data = struct.pack(
        "<BBBBHBBHBB", 12, CS_INTERFACE, USB_AUDIO_AC_INPUT_TERMINAL, 1,
        USB_AUDIO_TERMINAL_MICROPHONE, 0, 2, 3, 0, 0,
    )
    desc = AudioInputTerminal.parse(data)
    assert desc.terminal_id == 1
    assert desc.terminal_type == USB_AUDIO_TERMINAL_MICROPHONE
    assert desc.num_channels == 2
    assert desc.channel_config == 3


def test_audio_input_terminal_wire_bytes():
    data = bytes([12, CS_INTERFACE, USB_AUDIO_AC_INPUT_TERMINAL, 1, 0x01, 0x02, 0, 1, 0, 0, 0, 0])
    assert AudioInputTerminal.parse(data).terminal_type == USB_AUDIO_TERMINAL_MICROPHONE


def test_audio_output_terminal():
    data = struct.pack(
        "<BBBBHBBB", 9, CS_INTERFACE, USB_AUDIO_AC_OUTPUT_TERMINAL, 3,
        USB_AUDIO_TERMINAL_USB_STREAMING, 0, 2, 0,
    )
    desc = AudioOutputTerminal.parse(data)
    assert desc.terminal_id == 3
    assert desc.terminal_type == USB_AUDIO_TERMINAL_USB_STREAMING
    assert desc.source_id == 2


def test_audio_feature_unit_controls():
    controls = bytes([0x03, 0x00, 0x00])
    data = bytes([9, CS_INTERFACE, USB_AUDIO_AC_FEATURE_UNIT, 2, 1, 1]) + controls
    desc = AudioFeatureUnit.parse(data)
    assert desc.unit_id == 2
    assert desc.source_id == 1
    assert desc.control_size == 1
    assert desc.controls == controls


def test_audio_streaming_general():
    data = struct.pack("<BBBBBH", 7, CS_INTERFACE, USB_AUDIO_AS_GENERAL, 3, 1, USB_AUDIO_FORMAT_PCM)
    desc = AudioStreamingGeneral.parse(data)
    assert desc.terminal_link == 3
    assert desc.delay == 1
    assert desc.format_tag == USB_AUDIO_FORMAT_PCM


def test_format_type_i_discrete_rates():
    data = bytes([14, CS_INTERFACE, USB_AUDIO_AS_FORMAT_TYPE, USB_AUDIO_FORMAT_TYPE_I, 2, 2, 16, 2])
    data += _rate(44100) + _rate(48000)
    desc = AudioFormatTypeI.parse(data)
    assert desc.num_channels == 2
    assert desc.bit_resolution == 16
    assert desc.sample_frequencies == (44100, 48000)


def test_format_type_i_continuous_range():
    data = bytes([14, CS_INTERFACE, USB_AUDIO_AS_FORMAT_TYPE, USB_AUDIO_FORMAT_TYPE_I, 1, 2, 16, 0])
    data += _rate(8000) + _rate(48000)
    assert AudioFormatTypeI.parse(data).sample_frequencies == (8000, 48000)


def test_format_type_i_truncated_rates():
    data = bytes([14, CS_INTERFACE, USB_AUDIO_AS_FORMAT_TYPE, USB_AUDIO_FORMAT_TYPE_I, 1, 2, 16, 2])
    data += _rate(44100)
    with pytest.raises(ValueError):
        AudioFormatTypeI.parse(data)


def test_get_sample_rate_wire_bytes():
    assert get_sample_rate(bytes([0x44, 0xAC, 0x00])) == 44100
    assert get_sample_rate(bytes([0x80, 0xBB, 0x00])) == 48000


def test_get_sample_rate_short():
    with pytest.raises(ValueError):
        get_sample_rate(bytes([1, 2]))


def test_video_format_uncompressed():
    guid = bytes(range(16))
    data = bytes([27, CS_INTERFACE, VS_FORMAT_UNCOMPRESSED, 1, 5]) + guid + bytes([16, 1, 4, 3, 0, 0])
    desc = VideoFormatDescriptor.parse(data)
    assert desc.format_index == 1
    assert desc.num_frame_descriptors == 5
    assert desc.guid == guid
    assert desc.bytes_per_pixel == 16
    assert desc.flags is None
    assert (desc.aspect_ratio_x, desc.aspect_ratio_y) == (4, 3)


def test_video_format_mjpeg():
    data = bytes([11, CS_INTERFACE, VS_FORMAT_MJPEG, 2, 7, 1, 3, 16, 9, 0, 0])
    desc = VideoFormatDescriptor.parse(data)
    assert desc.format_index == 2
    assert desc.flags == 1
    assert desc.guid is None
    assert desc.default_frame_index == 3
    assert (desc.aspect_ratio_x, desc.aspect_ratio_y) == (16, 9)


def test_video_format_unknown_subtype():
    with pytest.raises(ValueError):
        VideoFormatDescriptor.parse(bytes([11, CS_INTERFACE, 0x10, 2, 7, 1, 3, 16, 9, 0, 0]))


def test_video_format_truncated():
    with pytest.raises(ValueError):
        VideoFormatDescriptor.parse(bytes([27, CS_INTERFACE, VS_FORMAT_UNCOMPRESSED, 1, 5]) + bytes(10))


def test_video_interface_header():
    data = struct.pack("<BBBHHIB", 14, CS_INTERFACE, VC_HEADER, 0x0150, 80, 30000000, 2) + bytes([1, 2])
    desc = VideoInterfaceHeader.parse(data)
    assert desc.version == 0x0150
    assert desc.total_length == 80
    assert desc.clock_frequency == 30000000
    assert desc.interface_numbers == bytes([1, 2])


def test_video_input_terminal():
    data = struct.pack("<BBBBHBB", 8, CS_INTERFACE, VC_INPUT_TERMINAL, 1, 0x0201, 0, 0)
    desc = VideoInputTerminal.parse(data)
    assert desc.terminal_id == 1
    assert desc.terminal_type == 0x0201


def test_iter_descriptors_splits_block():
    first = bytes([3, CS_INTERFACE, 1])
    second = bytes([5, CS_INTERFACE, 2, 9, 9])
    assert list(iter_descriptors(first + second)) == [first, second]


def test_iter_descriptors_empty():
    assert list(iter_descriptors(b"")) == []


def test_iter_descriptors_zero_length():
    with pytest.raises(ValueError):
        list(iter_descriptors(bytes([3, CS_INTERFACE, 1, 0, 0])))


def test_iter_descriptors_truncated():
    with pytest.raises(ValueError):
        list(iter_descriptors(bytes([3, CS_INTERFACE, 1, 6, CS_INTERFACE])))