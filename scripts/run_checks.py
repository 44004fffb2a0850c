#!/usr/bin/env python3
"""Run repository checks: ruff, pyright, and optional tests.

Exits non-zero when a check fails so CI and local tooling can observe status.
`--no-gifsicle` skips the end-to-end tests that drive a real gifsicle binary.
"""

from __future__ import annotations

import argparse
import subprocess
import sys


def run(cmd: list[str]) -> int:
    print("=>", " ".join(cmd))
    res = subprocess.run(cmd, check=False)
    return res.returncode


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--no-tests", action="store_true", help="Skip running pytest")
    parser.add_argument("--no-gifsicle", action="store_true", help="Skip tests that need gifsicle")
    args = parser.parse_args()

    rc = run([sys.executable, "-m", "ruff", "check", "xgify", "tests"])
    if rc != 0:
        print("ruff failed")
        return rc

    rc = run([sys.executable, "-m", "pyright"])
    if rc != 0:
        print("pyright failed")
        return rc

    if not args.no_tests:
        cmd = [sys.executable, "-m", "pytest", "-q"]
        if args.no_gifsicle:
            cmd += ["--ignore", "tests/test_pipeline_gifsicle.py"]
        rc = run(cmd)
        if rc != 0:
            print("pytest failed")
            return rc

    print("All checks passed")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
