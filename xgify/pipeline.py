"""Chainable GIF transformations driven by gifsicle.

`XGify` owns one GIF buffer. Each operation builds a gifsicle argument list,
runs it through `exec_buffer` and replaces the buffer with the result.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Literal, Union

from xgify.errors import InvalidFormatError, OperationError, XGifyError
from xgify.buffer_exec import INPUT, OUTPUT, Argument, exec_buffer
from xgify.logger import get_logger
from xgify.metadata import GifMetadata, derive_metadata, format_size, is_gif, read_gif_info, round_half_up
from xgify.settings import SettingsManager

_logger = get_logger("pipeline")

NO_WARNINGS = "--no-warnings"
OUTPUT_FLAG = "-o"
UNOPTIMIZE = "-U"
MERGE = "--merge"

MIN_COLORS = 2
MAX_COLORS = 256
ROTATE_DEGREES = (90, 180, 270)

_FALLBACK_MESSAGE = "An error occurred while processing the gif."

RotateDegrees = Literal[90, 180, 270]


@dataclass(frozen=True)
class FrameDimensions:
    width: int
    height: int


@dataclass(frozen=True)
class CropBox:
    x1: int
    y1: int
    x2: int
    y2: int

    def to_arg(self) -> str:
        return f"{self.x1},{self.y1}-{self.x2},{self.y2}"


CropSpec = Union[CropBox, Mapping[str, int], Callable[[FrameDimensions], Union[CropBox, Mapping[str, int]]]]
CutRange = Sequence[float]
CutSpec = Union[CutRange, Callable[[int], CutRange]]


def _as_crop_box(value: CropBox | Mapping[str, int]) -> CropBox:
    if isinstance(value, CropBox):
        return value
    return CropBox(x1=value["x1"], y1=value["y1"], x2=value["x2"], y2=value["y2"])


def _error_message(err: BaseException) -> str:
    stderr = getattr(err, "stderr", "")
    return stderr or str(err) or _FALLBACK_MESSAGE


class XGify:
    """Stateful GIF editor.

    Not safe for concurrent use: every operation reads and then replaces
    `file_buffer`, so calls on one instance must be sequenced.
    """

    def __init__(
        self,
        gif_buffer: bytes,
        *,
        gifsicle_path: str | None = None,
        settings: SettingsManager | None = None,
    ):
        if not is_gif(gif_buffer):
            raise InvalidFormatError("Invalid gif buffer provided.")
        self.file_buffer: bytes = bytes(gif_buffer)
        # At most one persistent configuration; colors() overwrites it.
        self.static_args: list[Argument] = []
        self._settings = settings or SettingsManager()
        self._bin = gifsicle_path or self._settings.gifsicle_path

    @property
    def size(self) -> int:
        """Size of the gif buffer in bytes."""
        return len(self.file_buffer)

    @property
    def pretty_size(self) -> str:
        """Size of the gif buffer in human readable form."""
        return format_size(self.size)

    def metadata(self) -> GifMetadata:
        """Measure the current buffer. Never cached."""
        return derive_metadata(read_gif_info(self.file_buffer), self.size)

    def stretch_to_fit(self) -> XGify:
        """Resize to a square whose side is the current frame height."""
        height = self.metadata().height
        self.process(["--resize", f"{height}x{height}"])
        return self

    def center_square_crop(self) -> XGify:
        def _center(dimensions: FrameDimensions) -> CropBox:
            size = min(dimensions.width, dimensions.height)
            x1 = (dimensions.width - size) // 2
            y1 = (dimensions.height - size) // 2
            return CropBox(x1=x1, y1=y1, x2=x1 + size, y2=y1 + size)

        return self.crop(_center)

    def lossy(self, lossy_factor: int) -> XGify:
        """Lossy compression, 0 is the best quality (gifsicle accepts 0-200)."""
        self.process([f"--lossy={lossy_factor}"])
        return self

    def colors(self, colors_factor: int) -> XGify:
        """Reduce the palette to 2-256 colors for this and every later operation."""
        colors = max(MIN_COLORS, min(MAX_COLORS, colors_factor))
        self.static_args = ["--colors", colors]
        self.process([])
        return self

    def crop(self, cropping: CropSpec) -> XGify:
        """Crop to a box, or to the box returned by `cropping(FrameDimensions)`."""
        if callable(cropping):
            meta = self.metadata()
            box = _as_crop_box(cropping(FrameDimensions(width=meta.width, height=meta.height)))
        else:
            box = _as_crop_box(cropping)
        self.process([], ["--crop", box.to_arg()])
        return self

    def scale(self, scale_factor: float) -> XGify:
        """Scale both dimensions, e.g. 0.5 halves them."""
        self.process(["--scale", scale_factor])
        return self

    def cut(self, cut: CutSpec) -> XGify:
        """Delete frames `start..end`, given directly or by `cut(total_frames)`."""
        frame_range = cut(self.metadata().frames) if callable(cut) else cut
        start, end = (math.floor(n) for n in frame_range)
        self.process(["--delete", f"#{start}-{end}", "--done"], [UNOPTIMIZE])
        return self

    def frame_rate(self, delay_factor: float) -> XGify:
        """Multiply every frame delay by `delay_factor`, keeping only stepped frames.

        A factor of 2 doubles the delay and keeps every second frame.
        """
        if delay_factor <= 0:
            raise ValueError("delay_factor must be positive")
        meta = self.metadata()
        new_delay = round_half_up(meta.delay * delay_factor)

        args: list[Argument] = []
        x = 0.0
        while x <= meta.frames:
            args.extend(["--delay", new_delay, f"#{round_half_up(x)}"])
            x += delay_factor

        self.process(args, [UNOPTIMIZE])
        return self

    def rotate(self, degrees: RotateDegrees) -> XGify:
        if degrees not in ROTATE_DEGREES:
            raise ValueError(f"degrees must be one of {ROTATE_DEGREES}, got {degrees!r}")
        self.process([], [f"--rotate-{degrees}"])
        return self

    def combine(self, *gif_buffers: bytes) -> XGify:
        """Merge other GIFs after this one.

        Best effort: a failure is logged and the current buffer is kept.
        """
        args: list[Argument] = [NO_WARNINGS, MERGE, INPUT, self._settings.optimize_flag, OUTPUT_FLAG, OUTPUT]
        try:
            self.file_buffer = exec_buffer(
                [self.file_buffer, *gif_buffers],
                self._bin,
                args,
                temp_dir=self._settings.temp_dir,
                extension="gif",
            )
        except XGifyError as e:
            _logger.warning("combining failed: %s", e, exc_info=True)
        return self

    def process(
        self,
        args: list[Argument],
        args_before_input: list[Argument] | None = None,
        *,
        save_to_buffer: bool = True,
    ) -> bytes:
        """Run gifsicle on the current buffer.

        The command is `--no-warnings <args_before_input> INPUT <args>
        <static_args> -O3 -o OUTPUT`. Returns the new buffer whether or not
        it was saved.
        """
        full_args: list[Argument] = [
            NO_WARNINGS,
            *(args_before_input or []),
            INPUT,
            *args,
            *self.static_args,
            self._settings.optimize_flag,
            OUTPUT_FLAG,
            OUTPUT,
        ]
        try:
            new_buffer = exec_buffer(
                [self.file_buffer],
                self._bin,
                full_args,
                temp_dir=self._settings.temp_dir,
                extension="gif",
            )
        except XGifyError as e:
            _logger.debug("gifsicle failed: %s", e)
            raise OperationError(_error_message(e)) from e

        if save_to_buffer:
            self.file_buffer = new_buffer
        return new_buffer
