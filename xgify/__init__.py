"""xgify - edit animated GIFs in memory with gifsicle.

Usage:
    from xgify import CropBox, XGify

    gif = XGify(data)
    gif.crop(CropBox(0, 0, 64, 64)).scale(0.5).rotate(90)
    result = gif.file_buffer

`exec_buffer` is the lower-level primitive: run any file-based tool on
buffers with `INPUT`/`OUTPUT` path placeholders.

The Qt background worker lives in `xgify.worker` and is not imported here.
"""

from xgify.errors import (
    CleanupError,
    ExecutionError,
    InvalidFormatError,
    OperationError,
    OutputReadError,
    ValidationError,
    WriteError,
    XGifyError,
)
from xgify.buffer_exec import INPUT, OUTPUT, Placeholder, exec_buffer
from xgify.metadata import GifMetadata, is_gif
from xgify.pipeline import CropBox, FrameDimensions, XGify

__all__ = [
    "INPUT",
    "OUTPUT",
    "CleanupError",
    "CropBox",
    "ExecutionError",
    "FrameDimensions",
    "GifMetadata",
    "InvalidFormatError",
    "OperationError",
    "OutputReadError",
    "Placeholder",
    "ValidationError",
    "WriteError",
    "XGify",
    "XGifyError",
    "exec_buffer",
    "is_gif",
]
