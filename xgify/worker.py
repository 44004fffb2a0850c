"""Run an XGify edit chain on a background thread.

Each step is `(method_name, args)`, e.g. `("scale", (0.5,))`. Steps run in
order against one `XGify` instance; the worker stops at the first failure
or between steps once `cancel()` was requested.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from PySide6.QtCore import QObject, QThread, Signal

from xgify.logger import get_logger
from xgify.pipeline import XGify

_logger = get_logger("worker")

Step = tuple[str, Sequence[Any]]

STEP_NAMES = frozenset(
    {
        "stretch_to_fit",
        "center_square_crop",
        "lossy",
        "colors",
        "crop",
        "scale",
        "cut",
        "frame_rate",
        "rotate",
        "combine",
    }
)


class TransformWorker(QThread):
    """Worker thread that applies a list of steps to one gif."""

    progress = Signal(int, int)  # completed, total
    completed = Signal(object)  # resulting gif bytes
    canceled = Signal()
    error = Signal(str)

    def __init__(self, gif: XGify, steps: Sequence[Step]):
        super().__init__()
        unknown = [name for name, _ in steps if name not in STEP_NAMES]
        if unknown:
            raise ValueError(f"unknown steps: {', '.join(unknown)}")
        self.gif = gif
        self.steps = list(steps)
        self._cancel_requested = False

    def run(self) -> None:
        total = len(self.steps)
        for done, (name, args) in enumerate(self.steps, start=1):
            if self._cancel_requested:
                self.canceled.emit()
                return
            try:
                getattr(self.gif, name)(*args)
            except Exception as ex:
                _logger.error("step %s failed: %s", name, ex)
                self.error.emit(f"{name}: {ex}")
                return
            self.progress.emit(done, total)

        self.completed.emit(self.gif.file_buffer)

    def cancel(self) -> None:
        self._cancel_requested = True


class TransformController(QObject):
    """Owns at most one TransformWorker at a time."""

    progress = Signal(int, int)
    completed = Signal(object)
    canceled = Signal()
    error = Signal(str)

    def __init__(self):
        super().__init__()
        self._worker: TransformWorker | None = None

    def start(self, gif: XGify, steps: Sequence[Step]) -> TransformWorker:
        """Cancel any running chain, then start `steps` on `gif`."""
        self.cancel()

        worker = TransformWorker(gif, steps)
        worker.progress.connect(self.progress.emit)
        worker.completed.connect(self.completed.emit)
        worker.completed.connect(self._on_worker_completed)
        worker.canceled.connect(self.canceled.emit)
        worker.error.connect(self.error.emit)

        self._worker = worker
        worker.start()
        return worker

    def cancel(self) -> None:
        if self._worker is not None and self._worker.isRunning():
            self._worker.cancel()
            # A step blocked on gifsicle cannot be interrupted; wait for it.
            self._worker.wait()
        self._worker = None

    def _on_worker_completed(self) -> None:
        self._worker = None
