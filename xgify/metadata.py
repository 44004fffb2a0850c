"""GIF sniffing and metadata.

`read_gif_info` reads raw values with pyvips; `GifMetadata` holds the derived
numbers the pipeline works with (per-frame height, delay in hundredths of a
second, fps, size).
"""

from __future__ import annotations

import contextlib
import math
from dataclasses import dataclass
from typing import Any

from xgify.logger import get_logger

_logger = get_logger("metadata")

_GIF_SIGNATURES = (b"GIF87a", b"GIF89a")
# libvips reports delays in milliseconds; gifsicle works in hundredths of a second.
_MS_PER_DELAY_UNIT = 10


_pyvips: Any | None = None


def _get_pyvips_module() -> Any:
    global _pyvips
    if _pyvips is None:
        import pyvips  # type: ignore

        _pyvips = pyvips
    return _pyvips


def is_gif(data: object) -> bool:
    """Return True when `data` is a byte buffer starting with a GIF signature."""
    if not isinstance(data, (bytes, bytearray)):
        return False
    return bytes(data[:6]) in _GIF_SIGNATURES


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values, not to the even neighbour."""
    return math.floor(value + 0.5)


def format_size(size_bytes: int) -> str:
    if size_bytes == 0:
        return "0 B"
    if size_bytes < 0:
        raise ValueError("size_bytes must be non-negative")
    size_name = ("B", "KB", "MB", "GB", "TB")
    i = min(math.floor(math.log(size_bytes, 1024)), len(size_name) - 1)
    p = math.pow(1024, i)
    s = round(size_bytes / p, 2)
    return f"{s:g} {size_name[i]}"


@dataclass(frozen=True)
class GifInfo:
    """Raw values as libvips reports them for an animated load."""

    delay_ms: int
    pages: int
    height: int
    width: int


@dataclass(frozen=True)
class GifMetadata:
    delay: float
    frames: int
    height: int
    width: int
    duration: float
    fps: int
    size: int
    pretty_size: str


def _first_delay_ms(image: Any) -> int:
    if image.get_typeof("delay") != 0:
        delays = image.get("delay")
        if delays:
            return int(delays[0])
    # Older libvips only exposes a single delay in hundredths of a second.
    if image.get_typeof("gif-delay") != 0:
        return int(image.get("gif-delay")) * _MS_PER_DELAY_UNIT
    return 0


def read_gif_info(data: bytes) -> GifInfo:
    """Load every page of `data` and return its raw dimensions and timing.

    `height` is the height of all frames stacked vertically.
    """
    pyvips = _get_pyvips_module()
    with contextlib.suppress(Exception):
        pyvips.cache_set_max(0)

    image = pyvips.Image.new_from_buffer(bytes(data), "", n=-1)
    pages = int(image.get("n-pages")) if image.get_typeof("n-pages") != 0 else 1
    info = GifInfo(
        delay_ms=_first_delay_ms(image),
        pages=pages,
        height=int(image.height),
        width=int(image.width),
    )
    _logger.debug("gif info: %s", info)
    return info


def derive_metadata(info: GifInfo, size: int) -> GifMetadata:
    delay = info.delay_ms / _MS_PER_DELAY_UNIT
    frames = info.pages
    # libvips requires every page to have the same height.
    height = info.height // frames
    fps = round_half_up(1 / (delay / 100)) if delay else 0
    return GifMetadata(
        delay=delay,
        frames=frames,
        height=height,
        width=info.width,
        duration=frames * delay,
        fps=fps,
        size=size,
        pretty_size=format_size(size),
    )
