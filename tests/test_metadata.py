import pytest

from xgify.metadata import GifInfo, derive_metadata, format_size, is_gif, round_half_up


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        (b"GIF89a\x01\x00", True),
        (b"GIF87a", True),
        (bytearray(b"GIF89a..."), True),
        (b"GIF8", False),
        (b"\x89PNG\r\n\x1a\n", False),
        (b"", False),
        ("GIF89a", False),
        (None, False),
    ],
)
def test_is_gif(data, expected):
    assert is_gif(data) is expected


def test_format_size():
    assert format_size(0) == "0 B"
    assert format_size(38) == "38 B"
    assert format_size(512) == "512 B"
    assert format_size(2048) == "2 KB"
    assert format_size(2560) == "2.5 KB"
    assert format_size(3 * 1024 * 1024) == "3 MB"
    with pytest.raises(ValueError):
        format_size(-1)


def test_derive_metadata_from_stacked_info():
    info = GifInfo(delay_ms=50, pages=10, height=1000, width=100)
    meta = derive_metadata(info, 2048)
    assert meta.delay == 5
    assert meta.frames == 10
    assert meta.height == 100
    assert meta.width == 100
    assert meta.duration == 50
    assert meta.fps == 20
    assert meta.size == 2048
    assert meta.pretty_size == "2 KB"


def test_derive_metadata_zero_delay_has_zero_fps():
    meta = derive_metadata(GifInfo(delay_ms=0, pages=2, height=20, width=10), 10)
    assert meta.fps == 0
    assert meta.duration == 0


def test_read_gif_info_reads_animated_gif():
    pytest.importorskip("pyvips")
    from tests.helpers.gifs import make_gif
    from xgify.metadata import read_gif_info

    info = read_gif_info(make_gif(width=40, height=30, frames=4, delay=7))
    assert info.pages == 4
    assert info.width == 40
    assert info.height == 120
    assert info.delay_ms == 70


def test_pipeline_metadata_is_fresh_per_call(gif_bytes):
    pytest.importorskip("pyvips")
    from xgify.pipeline import XGify
    from tests.helpers.gifs import make_gif

    gif = XGify(gif_bytes, gifsicle_path="gifsicle")
    first = gif.metadata()
    assert (first.width, first.height, first.frames, first.delay) == (100, 100, 10, 5)
    assert first.size == len(gif_bytes)

    gif.file_buffer = make_gif(width=20, height=10, frames=3, delay=2)
    second = gif.metadata()
    assert (second.width, second.height, second.frames, second.delay) == (20, 10, 3, 2)


@pytest.mark.parametrize(("delay_ms", "fps"), [(80, 13), (400, 3), (50, 20), (30, 33)])
def test_fps_rounds_half_up(delay_ms, fps):
    # delay 8 -> 12.5 fps, delay 40 -> 2.5 fps
    meta = derive_metadata(GifInfo(delay_ms=delay_ms, pages=2, height=20, width=10), 10)
    assert meta.fps == fps


@pytest.mark.parametrize(("value", "expected"), [(0.5, 1), (1.5, 2), (2.5, 3), (4.49, 4), (7.0, 7)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected
