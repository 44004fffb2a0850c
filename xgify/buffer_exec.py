"""Run a file-only command line tool against in-memory buffers.

Every input buffer is written to a temporary path, the `INPUT`/`OUTPUT`
placeholders in the argument list are replaced with those paths, the binary
is run, and the output file is read back. All temporary files are removed
before `exec_buffer` returns or raises.

Usage:
    from xgify.buffer_exec import INPUT, OUTPUT, exec_buffer

    data = exec_buffer([gif_bytes], "gifsicle", ["--scale", 0.5, INPUT, "-o", OUTPUT])
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from pathlib import Path

from xgify.errors import (
    CleanupError,
    ExecutionError,
    OutputReadError,
    ValidationError,
    WriteError,
)
from xgify.logger import get_logger
from xgify.path_utils import temporary_file

_logger = get_logger("buffer_exec")

# Upper bound on threads used to write or delete temporary files.
_MAX_IO_WORKERS = 8


class Placeholder(Enum):
    """Marks where a generated path goes in an argument list.

    Members are compared by identity, so no literal argument (a str such as
    "input") can ever be mistaken for one.
    """

    INPUT = "input"
    OUTPUT = "output"


INPUT = Placeholder.INPUT
OUTPUT = Placeholder.OUTPUT

Argument = str | int | float | Placeholder


def _is_buffer(value: object) -> bool:
    return isinstance(value, (bytes, bytearray))


def _validate(inputs: object, bin: object, args: object) -> None:
    if not isinstance(inputs, list) or not all(_is_buffer(b) for b in inputs):
        raise ValidationError("Inputs are required and must be buffers")
    if not isinstance(bin, (str, os.PathLike)) or not os.fspath(bin):
        raise ValidationError("Binary is required")
    if not isinstance(args, list):
        raise ValidationError("Arguments are required")


def substitute_args(args: Sequence[Argument], input_paths: list[str], output_path: str) -> list[str]:
    """Replace placeholders with paths and stringify everything else.

    `INPUT` expands to the single input path, or in place to every input path
    when there are several.
    """
    result: list[str] = []
    for arg in args:
        if arg is INPUT:
            result.extend(input_paths)
        elif arg is OUTPUT:
            result.append(output_path)
        else:
            result.append(str(arg))
    return result


def _write(path: str, data: bytes) -> None:
    try:
        Path(path).write_bytes(data)
    except OSError as e:
        raise WriteError(path, e) from e


def _write_inputs(inputs: list[bytes], input_paths: list[str]) -> None:
    if not inputs:
        return
    if len(set(input_paths)) < len(input_paths):
        # Shared override path: write in order so the last input wins.
        for path, data in zip(input_paths, inputs):
            _write(path, data)
        return
    workers = min(_MAX_IO_WORKERS, len(inputs))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(_write, path, data) for path, data in zip(input_paths, inputs)]
        # Raise the first failure in input order once every write has settled.
        for future in futures:
            future.result()


def _run(bin: str, argv: list[str]) -> None:
    _logger.debug("exec: %s %s", bin, " ".join(argv))
    try:
        completed = subprocess.run([bin, *argv], capture_output=True, check=False)
    except OSError as e:
        raise ExecutionError(f"failed to spawn {bin}: {e}") from e

    if completed.returncode != 0:
        stderr = (completed.stderr or b"").decode("utf-8", errors="replace").strip()
        message = stderr or f"{bin} exited with status {completed.returncode}"
        raise ExecutionError(message, returncode=completed.returncode, stderr=stderr)


def _read_output(path: str) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise OutputReadError(path, e) from e


def _remove(path: str) -> OSError | None:
    try:
        Path(path).unlink(missing_ok=True)
    except OSError as e:
        return e
    return None


def cleanup_paths(paths: list[str]) -> None:
    """Delete every path in parallel; raise one CleanupError listing all failures.

    Absent paths are not failures. Each path is attempted once.
    """
    unique = list(dict.fromkeys(paths))
    workers = min(_MAX_IO_WORKERS, len(unique)) or 1
    with ThreadPoolExecutor(max_workers=workers) as pool:
        outcomes = list(pool.map(_remove, unique))
    failures = [(path, err) for path, err in zip(unique, outcomes) if err is not None]
    if failures:
        raise CleanupError(failures)


def exec_buffer(
    inputs: list[bytes],
    bin: str,
    args: list[Argument],
    input_path: str | None = None,
    output_path: str | None = None,
    *,
    temp_dir: str | Path | None = None,
    extension: str | None = None,
) -> bytes:
    """Run `bin` on `inputs` round-tripped through temporary files.

    Args:
        inputs: Buffers to materialize, one temporary file each.
        bin: Executable name or path.
        args: Literal arguments and `INPUT`/`OUTPUT` placeholders.
        input_path: Use this path for every input instead of generated ones.
            With several inputs each write replaces the previous one.
        output_path: Use this path for the output instead of a generated one.
        temp_dir: Directory for generated paths (system temp dir by default).
        extension: Suffix for generated paths, e.g. "gif".

    Returns:
        The contents of the output file.

    Raises:
        ValidationError: Malformed arguments; no I/O was attempted.
        WriteError: An input could not be written.
        ExecutionError: The binary failed to start or exited non-zero.
        OutputReadError: The output file is missing or unreadable.
        CleanupError: Temporary files could not be removed after an
            otherwise successful run.
    """
    _validate(inputs, bin, args)
    bin = os.fspath(bin)

    input_paths = [input_path or temporary_file(extension, temp_dir) for _ in inputs]
    output_file = output_path or temporary_file(extension, temp_dir)
    argv = substitute_args(args, input_paths, output_file)

    try:
        _write_inputs(inputs, input_paths)
        _run(bin, argv)
        result = _read_output(output_file)
    except BaseException:
        try:
            cleanup_paths([*input_paths, output_file])
        except CleanupError as cleanup_error:
            # Runs on interrupts too; a cleanup failure never replaces the run failure.
            _logger.warning("cleanup after failed run: %s", cleanup_error)
        raise

    cleanup_paths([*input_paths, output_file])
    return result
