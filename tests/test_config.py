import pytest

from uvccam import config
from uvccam.config import (
    Resolution,
    calculate_rgb32_size,
    calculate_yuy2_size,
    fps_to_interval,
    interval_to_fps,
)


def test_vga_yuy2_size():
    assert config.RESOLUTION_640X480.yuy2_size() == 614400


def test_vga_rgb32_size():
    assert config.RESOLUTION_640X480.rgb32_size() == 1228800


@pytest.mark.parametrize(
    "resolution, expected",
    [
        (config.RESOLUTION_640X480, 614400),
        (config.RESOLUTION_320X240, 153600),
        (config.RESOLUTION_1280X720, 1843200),
        (config.RESOLUTION_1920X1080, 4147200),
        (config.RESOLUTION_160X120, 38400),
    ],
)
def test_resolution_yuy2_sizes(resolution, expected):
    assert resolution.yuy2_size() == expected
    assert calculate_yuy2_size(resolution.width, resolution.height) == expected


def test_largest_resolution_fits_max_frame_size():
    assert config.RESOLUTION_1920X1080.yuy2_size() == config.MAX_FRAME_SIZE


def test_rgb32_is_double_yuy2():
    res = Resolution(321, 77)
    assert res.rgb32_size() == 2 * res.yuy2_size()
    assert calculate_rgb32_size(321, 77) == res.rgb32_size()


def test_fps_to_interval_30():
    interval = fps_to_interval(30.0)
    assert 33000 <= interval <= 34000
    assert interval == 33333


def test_fps_to_interval_nonpositive_returns_default():
    assert fps_to_interval(0.0) == config.DEFAULT_FRAME_INTERVAL == 33333
    assert fps_to_interval(-5.0) == 33333


def test_interval_to_fps():
    fps = interval_to_fps(33333)
    assert 29.0 <= fps <= 31.0


def test_interval_to_fps_nonpositive_returns_30():
    assert interval_to_fps(0) == 30.0
    assert interval_to_fps(-10) == 30.0


def test_resolution_is_frozen():
    res = Resolution(10, 20)
    with pytest.raises(AttributeError):
        res.width = 30
    assert res.width == 10
    assert res.yuy2_size() == 400