"""Subprocess and external command utilities."""

from __future__ import annotations

import shlex
import subprocess
import sys


def format_command(cmd: list[str]) -> str:
    """Shell-quoted, human readable form of a command."""
    return " ".join(shlex.quote(c) for c in cmd)


def run_subprocess(cmd: list[str], *, log: bool = False, quiet: bool = True, timeout: int | None = None) -> tuple[int, str]:
    """Run a command and wait for it, returning (exit_code, pretty_cmd).

    Args:
        cmd: Command and arguments list
        log: Whether to echo the command to stderr before running it
        quiet: Send the command's stdout and stderr to the null device
        timeout: Optional timeout in seconds

    Returns:
        Tuple of (return_code, pretty_cmd). The return code is -1 when the
        command could not be started or timed out.
    """
    pretty = format_command(cmd)
    if log:
        print(f"[apngasm] {pretty}", file=sys.stderr, flush=True)

    sink = subprocess.DEVNULL if quiet else None
    try:
        result = subprocess.run(cmd, stdout=sink, stderr=sink, timeout=timeout)
        return result.returncode, pretty
    except subprocess.TimeoutExpired:
        return -1, f"{pretty} (timed out after {timeout} seconds)"
    except OSError as e:
        return -1, f"{pretty} ({e})"
