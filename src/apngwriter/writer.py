"""
Animated PNG writer.

AnimatedPNGWriter collects still frames in a temporary folder and, on
finish(), hands them to APNG Assembler to build one animated PNG (APNG). APNG
animates in most web browsers like a GIF, but supports 24-bit color and
usually gives smaller files.

Typical use:

    w = AnimatedPNGWriter("animated_line.png")
    w.frames_per_second = 20
    w.num_loops = 5
    w.loop_repeat_delay = 1
    for frame in frames:
        w.add_frame(frame)
    w.finish()

Every frame must have the same number of rows and columns as the first one.
"""

from __future__ import annotations

import math
import shutil
import tempfile
from pathlib import Path
from typing import Optional

import numpy as np

from .config import AppConfig, app_config
from .core.errors import (
    AlreadyFinishedError,
    AssemblerFailure,
    ClosedSequenceError,
    DimensionMismatch,
    EmptySequenceError,
    StorageError,
    ToolUnavailable,
)
from .core.types import FrameOptions, is_infinite_loops
from .output.logger import SimpleLogger
from .processing.delay import MAX_DELAY_PART, rational_approximation, write_delay_file
from .processing.frame import frame_dimensions, frame_filename, write_frame
from .tools.assembler import ensure_assembler
from .utils.subprocess import run_subprocess

# Frame delays go on the command line; 1/fps must not collapse to 0/1.
FRAME_DELAY_TOLERANCE = 1e-4


class AnimatedPNGWriter:
    """Creates animated PNG files from a sequence of still frames.

    Args:
        output_file: Path of the APNG file to create.
        assembler: Path of the APNG Assembler executable. When omitted, the
            program is looked up (and downloaded if missing) for this platform.
        config: Settings; defaults to the environment-derived configuration.
        logger: Logger for warnings.
        verbose: Echo the assembler command before running it.

    Raises:
        ToolUnavailable: The assembler could not be located or fetched.
        StorageError: The temporary folder could not be created.
    """

    def __init__(
        self,
        output_file: Path | str,
        assembler: Optional[Path | str] = None,
        config: Optional[AppConfig] = None,
        logger: Optional[SimpleLogger] = None,
        verbose: bool = False,
    ) -> None:
        self._config = config or app_config
        self._logger = logger or SimpleLogger()
        self.verbose = verbose

        if assembler is None:
            self._assembler = ensure_assembler(logger=self._logger)
        else:
            self._assembler = Path(assembler)
            if not self._assembler.is_file():
                raise ToolUnavailable(f"APNG Assembler not found at {self._assembler}")

        writer_cfg = self._config.writer
        self.output_file = Path(output_file)
        self._frames_per_second = float(writer_cfg.default_frames_per_second)
        self._num_loops: float = math.inf
        self._loop_repeat_delay = float(writer_cfg.default_loop_repeat_delay)
        self.skip_first_frame = False

        self._width: Optional[int] = None
        self._height: Optional[int] = None
        self._num_frames = 0
        self._first_frame_file: Optional[Path] = None
        self._last_frame_file: Optional[Path] = None
        self._finished = False
        self._discarded = False

        try:
            self._temporary_folder: Optional[Path] = Path(tempfile.mkdtemp(prefix=writer_cfg.temp_prefix))
        except OSError as e:
            raise StorageError(f"Could not create temporary folder: {e}") from e

    def __repr__(self) -> str:
        state = "discarded" if self._discarded else "finished" if self._finished else "open"
        return f"<AnimatedPNGWriter {self.output_file} frames={self._num_frames} {state}>"

    # ------------------------------
    # Settable properties
    # ------------------------------

    @property
    def frames_per_second(self) -> float:
        """Number of frames per second (default 10, at most 50)."""
        return self._frames_per_second

    @frames_per_second.setter
    def frames_per_second(self, fps: float) -> None:
        if not fps > 0:
            raise ValueError(f"frames_per_second must be positive, got {fps}")
        if 1.0 / fps > MAX_DELAY_PART:
            raise ValueError(f"frames_per_second must be at least 1/{MAX_DELAY_PART}, got {fps}")
        self._frames_per_second = min(float(fps), self._config.writer.max_frames_per_second)

    @property
    def num_loops(self) -> float:
        """Number of times to play the animation; math.inf repeats forever."""
        return self._num_loops

    @num_loops.setter
    def num_loops(self, loops: float) -> None:
        if is_infinite_loops(loops) and loops > 0:
            self._num_loops = math.inf
            return
        if not math.isfinite(loops) or loops != int(loops) or loops < 1:
            raise ValueError(f"num_loops must be a positive integer or math.inf, got {loops}")
        self._num_loops = int(loops)

    @property
    def loop_repeat_delay(self) -> float:
        """Seconds to wait after the last frame before starting the next loop."""
        return self._loop_repeat_delay

    @loop_repeat_delay.setter
    def loop_repeat_delay(self, seconds: float) -> None:
        if not math.isfinite(seconds) or seconds < 0:
            raise ValueError(f"loop_repeat_delay must be a non-negative number, got {seconds}")
        if seconds > MAX_DELAY_PART:
            raise ValueError(f"loop_repeat_delay must be at most {MAX_DELAY_PART} seconds, got {seconds}")
        self._loop_repeat_delay = float(seconds)

    # ------------------------------
    # Read-only status
    # ------------------------------

    @property
    def width(self) -> Optional[int]:
        """Number of columns in each frame, set by the first frame."""
        return self._width

    @property
    def height(self) -> Optional[int]:
        """Number of rows in each frame, set by the first frame."""
        return self._height

    @property
    def num_frames(self) -> int:
        return self._num_frames

    @property
    def first_frame_file(self) -> Optional[Path]:
        return self._first_frame_file

    @property
    def last_frame_file(self) -> Optional[Path]:
        return self._last_frame_file

    @property
    def finished(self) -> bool:
        """True once the writer is closed: the APNG file was created or the frames were discarded."""
        return self._finished

    @property
    def discarded(self) -> bool:
        """True when discard() closed the writer without creating the APNG file."""
        return self._discarded

    @property
    def temporary_folder(self) -> Optional[Path]:
        """Folder holding the individual frame files, None once removed."""
        return self._temporary_folder

    @property
    def assembler(self) -> Path:
        return self._assembler

    # ------------------------------
    # Frames
    # ------------------------------

    def add_frame(
        self,
        image: np.ndarray,
        palette: Optional[np.ndarray] = None,
        *,
        alpha: Optional[np.ndarray] = None,
        compression: Optional[int] = None,
        bilevel: bool = False,
    ) -> None:
        """Add an image as the next frame.

        Args:
            image: Grayscale (H x W) or RGB/RGBA (H x W x 3/4) image, or an
                H x W array of 0-based palette indices when `palette` is given.
            palette: N x 3 colormap of an indexed image.
            alpha: Optional H x W transparency plane.
            compression: PNG zlib compression level, 0-9.
            bilevel: Write the frame as a 1-bit image.

        Raises:
            ClosedSequenceError: finish() has already created the output file.
            DimensionMismatch: The frame size differs from the first frame.
            ValueError: The image, palette or options are not supported.
            StorageError: The frame file could not be written.
        """
        if self._finished:
            raise ClosedSequenceError("Cannot add frames after output file creation is finished.")

        image = np.asarray(image)
        w, h = frame_dimensions(image)
        if self._width is not None and (w != self._width or h != self._height):
            raise DimensionMismatch(
                f"All frames must have the same number of rows and columns: "
                f"expected {self._width}x{self._height}, got {w}x{h}"
            )

        options = FrameOptions(compression=compression, bilevel=bilevel)
        writer_cfg = self._config.writer
        filename = frame_filename(
            self._num_frames + 1,
            digits=writer_cfg.frame_name_digits,
            ext=self._config.file_extensions.frame_ext,
        )
        path = write_frame(self._temporary_folder / filename, image, palette, alpha, options)

        if self._width is None:
            self._width, self._height = w, h
        self._num_frames += 1
        if self._num_frames == 1:
            self._first_frame_file = path
        self._last_frame_file = path

    # ------------------------------
    # Assembly
    # ------------------------------

    def frame_delay(self) -> tuple[int, int]:
        """Delay between frames as (numerator, denominator) seconds."""
        return rational_approximation(1.0 / self._frames_per_second, FRAME_DELAY_TOLERANCE)

    def build_command(self) -> list[str]:
        """Command line that assembles the frames into the output file.

        APNG Assembler finds frame_000000002.png and later frames itself by
        incrementing the number of the first frame file.
        """
        if self._first_frame_file is None:
            raise EmptySequenceError("No frames have been added.")
        num, den = self.frame_delay()
        cmd = [
            str(self._assembler),
            str(self.output_file),
            str(self._first_frame_file),
            str(num),
            str(den),
        ]
        if not is_infinite_loops(self._num_loops):
            cmd.append(f"-l{int(self._num_loops)}")
        if self.skip_first_frame:
            cmd.append("-f")
        return cmd

    def finish(self) -> None:
        """Assemble the frames into the final APNG file.

        After a successful call no more frames can be added and the temporary
        folder is removed. When the assembler fails, the writer stays open and
        the frames are kept so the call can be retried.

        Raises:
            AlreadyFinishedError: finish() already succeeded.
            EmptySequenceError: No frames were added.
            AssemblerFailure: APNG Assembler exited with a non-zero status.
        """
        if self._discarded:
            raise AlreadyFinishedError("The frames were discarded; no output file can be created.")
        if self._finished:
            raise AlreadyFinishedError("finish has already been called.")
        if self._last_frame_file is None:
            raise EmptySequenceError("Cannot create an animated PNG without frames.")

        writer_cfg = self._config.writer
        try:
            write_delay_file(
                self._last_frame_file,
                self._loop_repeat_delay,
                writer_cfg.delay_tolerance,
                self._config.file_extensions.delay_ext,
            )
        except OSError as e:
            self._logger.warning(f"Could not create delay control file for final frame: {e}")

        cmd = self.build_command()
        code, pretty = run_subprocess(cmd, log=self.verbose, timeout=self._config.assembler.timeout_sec)
        if code != 0:
            raise AssemblerFailure(
                f"APNG assembler failed to combine the frames (exit status {code}).",
                returncode=code,
                command=pretty,
            )

        self._finished = True
        self._cleanup()

    def discard(self) -> None:
        """Drop all frames without creating the output file."""
        if not self._finished:
            self._discarded = True
        self._finished = True
        self._cleanup()

    def _cleanup(self) -> None:
        """Remove the temporary folder; failures are only reported."""
        folder = self._temporary_folder
        if folder is None or not folder.exists():
            return
        try:
            shutil.rmtree(folder)
        except OSError as e:
            self._logger.warning(f"Could not remove temporary folder: {folder} ({e})")
        else:
            self._temporary_folder = None
