"""
Path and file system utilities for apngwriter.

This module handles frame discovery for the command line:
- Natural ordering of numbered frame files
- Filtering by supported image extensions
"""

from __future__ import annotations

import re
from pathlib import Path

from ..config import SUPPORTED_FRAME_EXTS


def natural_key(s: str) -> list[object]:
    """Convert string to list of mixed integers and strings for natural sorting."""
    return [int(c) if c.isdigit() else c.lower() for c in re.split(r"(\d+)", s)]


def find_frames(folder: Path, exts: set[str] | None = None) -> list[Path]:
    """List the frame files in `folder`, naturally sorted by filename.

    "frame_2.png" sorts before "frame_10.png". Hidden files and files with
    other extensions are ignored; subfolders are not scanned.

    Args:
        folder: Directory holding the frames.
        exts: Accepted lowercase extensions including the dot.

    Returns:
        List of frame paths in playback order.
    """
    valid_exts = exts or SUPPORTED_FRAME_EXTS
    frames = [
        p for p in folder.iterdir()
        if p.is_file() and not p.name.startswith(".") and p.suffix.lower() in valid_exts
    ]
    frames.sort(key=lambda p: natural_key(p.name))
    return frames
