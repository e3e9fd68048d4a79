"""
Core data types for apngwriter.

Small value objects shared by the writer, the frame encoder and the
assembler bootstrap.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, Field


class AssemblerProgramInfo(BaseModel):
    """Where the APNG Assembler for one platform lives and where to fetch it."""

    folder: Path
    name: str
    url: str
    zip_filename: str

    class Config:
        frozen = True

    @property
    def full_path(self) -> Path:
        """Expected location of the executable."""
        return self.folder / self.name

    @property
    def zip_path(self) -> Path:
        """Location the downloaded archive is saved to before extraction."""
        return self.folder / self.zip_filename


class FrameOptions(BaseModel):
    """PNG encoding options for a single frame."""

    compression: Annotated[int | None, Field(ge=0, le=9)] = None
    bilevel: bool = False

    class Config:
        frozen = True


def is_infinite_loops(num_loops: float) -> bool:
    """True when the loop count means "repeat forever"."""
    return math.isinf(num_loops)
