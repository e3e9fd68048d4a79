"""
Frame delay helpers for apngwriter.

APNG Assembler takes delays as a numerator/denominator pair of seconds, both
on its command line and in the per-frame delay control files it picks up
next to a frame ("frame_000000012.txt" beside "frame_000000012.png").
"""

from __future__ import annotations

import math
from pathlib import Path

MAX_TERMS = 32

# APNG stores delay numerator and denominator as unsigned 16-bit values
MAX_DELAY_PART = 65535


def rational_approximation(value: float, tol: float = 1 / 50, limit: int = MAX_DELAY_PART) -> tuple[int, int]:
    """Best rational approximation of `value` within an absolute tolerance.

    Expands `value` as a continued fraction and stops at the first convergent
    num/den with |value - num/den| <= tol. When the next convergent would
    need a numerator or denominator above `limit`, the previous one is kept.

    Examples:
        2.0 -> (2, 1)
        0.1 -> (1, 10)
        1/3 -> (1, 3)

    Args:
        value: Non-negative, finite number to approximate.
        tol: Absolute tolerance, must be positive.
        limit: Largest numerator or denominator allowed.

    Returns:
        Tuple[int, int]: (numerator, denominator) with denominator >= 1.

    Raises:
        ValueError: For negative, non-finite or too large values, or a non-positive tolerance.
    """
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"Delay must be a finite, non-negative number, got {value}")
    if tol <= 0:
        raise ValueError(f"Tolerance must be positive, got {tol}")
    if value > limit:
        raise ValueError(f"Delay must be at most {limit} seconds, got {value}")

    a = math.floor(value)
    num_prev, num = 1, a
    den_prev, den = 0, 1
    frac = value - a
    for _ in range(MAX_TERMS):
        if abs(value - num / den) <= tol or frac < 1e-12:
            break
        x = 1.0 / frac
        a = math.floor(x)
        frac = x - a
        next_num, next_den = a * num + num_prev, a * den + den_prev
        if next_num > limit or next_den > limit:
            break
        num_prev, num = num, next_num
        den_prev, den = den, next_den

    g = math.gcd(num, den)
    return num // g, den // g


def delay_file_for(frame_file: Path, ext: str = ".txt") -> Path:
    """Path of the delay control file belonging to a frame file."""
    return frame_file.with_suffix(ext)


def write_delay_file(frame_file: Path, seconds: float, tol: float = 1 / 50, ext: str = ".txt") -> Path:
    """Write the "delay=num/den" control file next to a frame.

    Args:
        frame_file: Frame the delay applies to.
        seconds: Delay in seconds.
        tol: Tolerance of the rational approximation.
        ext: Extension of the control file.

    Returns:
        Path: The written control file.

    Raises:
        OSError: When the file cannot be written.
    """
    num, den = rational_approximation(seconds, tol)
    path = delay_file_for(frame_file, ext)
    with path.open("w", encoding="utf-8") as f:
        f.write(f"delay={num}/{den}")
    return path
