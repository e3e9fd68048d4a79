#!/usr/bin/env python3
"""
apngwriter: Assemble a folder of still frames into an animated PNG.

Frames are read in natural filename order ("frame_2.png" before
"frame_10.png"), added to an AnimatedPNGWriter and assembled with APNG
Assembler, which is downloaded on first use.
"""

from __future__ import annotations

import argparse
import math
import sys
from collections.abc import Sequence
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ..config import DEFAULT_FRAMES_PER_SECOND, DEFAULT_LOOP_REPEAT_DELAY, app_config
from ..core.errors import APNGWriterError, DimensionMismatch, ToolUnavailable
from ..output.logger import SimpleLogger
from ..processing.frame import read_frame
from ..tools.assembler import check_tools, ensure_assembler
from ..utils.path import find_frames
from ..writer import AnimatedPNGWriter


def non_negative_int(value: str) -> int:
    """argparse type for counts where 0 has a meaning of its own."""
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from None
    if n < 0:
        raise argparse.ArgumentTypeError(f"must be 0 or greater, got {n}")
    return n


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    p = argparse.ArgumentParser(
        prog="apngwriter",
        description="Assemble a folder of still frames into an animated PNG (APNG).",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    p.add_argument("frames_dir", type=Path, nargs="?", help="Folder holding the frames")
    p.add_argument("-o", "--output", type=Path, help="Output APNG file. Defaults to '<frames_dir>.png'")
    p.add_argument("-r", "--fps", type=float, default=DEFAULT_FRAMES_PER_SECOND, help="Frames per second (max 50)")
    p.add_argument("-l", "--loops", type=non_negative_int, default=0, help="Number of loops, 0 repeats forever")
    p.add_argument(
        "-d", "--loop-delay", type=float, default=DEFAULT_LOOP_REPEAT_DELAY, help="Seconds before the animation repeats"
    )
    p.add_argument("--skip-first-frame", action="store_true", help="Use the first frame only as the static image")
    p.add_argument("-z", "--compression", type=int, choices=range(10), metavar="0-9", help="PNG compression level of the frames")
    p.add_argument("--assembler", type=Path, help="Path of an existing APNG Assembler executable")
    p.add_argument("--log-file", type=Path, help="Append log lines to this file")
    p.add_argument("-v", "--verbose", action="store_true", help="Print the assembler command")
    p.add_argument("-q", "--quiet", action="store_true", help="Only print warnings and errors")
    p.add_argument("--check-tools", action="store_true", help="Verify APNG Assembler is installed and exit")
    return p.parse_args(argv)


def print_summary(writer: AnimatedPNGWriter, console: Console) -> None:
    """Print a table describing the created file."""
    table = Table(title="Animated PNG")
    table.add_column("Setting")
    table.add_column("Value")
    table.add_row("Output", str(writer.output_file))
    table.add_row("Frames", str(writer.num_frames))
    table.add_row("Size", f"{writer.width}x{writer.height}")
    table.add_row("Frames per second", f"{writer.frames_per_second:g}")
    table.add_row("Loops", "forever" if math.isinf(writer.num_loops) else str(writer.num_loops))
    table.add_row("Loop delay", f"{writer.loop_repeat_delay:g}s")
    console.print(table)


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point. Returns 0 on success, 1 on failure, 2 on bad input or missing tools."""
    args = parse_args(argv)
    logger = SimpleLogger(args.log_file, quiet=args.quiet)

    if args.check_tools:
        ok, problems = check_tools()
        if ok:
            logger.success("APNG Assembler found.")
            return 0
        for problem in problems:
            logger.error(problem)
        return 2

    if args.frames_dir is None or not args.frames_dir.is_dir():
        logger.error(f"Frames folder not found: {args.frames_dir}")
        return 2

    frames = find_frames(args.frames_dir, app_config.file_extensions.supported_frame_exts)
    if not frames:
        logger.error(f"No frames found in {args.frames_dir}")
        return 2

    frames_dir = args.frames_dir.resolve()
    output = args.output or frames_dir.with_name(frames_dir.name + ".png")
    if output.resolve() in {f.resolve() for f in frames}:
        logger.error(f"Output file {output} would overwrite one of the frames")
        return 2

    try:
        assembler = args.assembler or ensure_assembler(logger=logger)
        writer = AnimatedPNGWriter(output, assembler=assembler, logger=logger, verbose=args.verbose)
    except ToolUnavailable as e:
        logger.error(str(e))
        return 2
    except APNGWriterError as e:
        logger.error(str(e))
        return 1

    try:
        writer.frames_per_second = args.fps
        writer.num_loops = math.inf if args.loops == 0 else args.loops
        writer.loop_repeat_delay = args.loop_delay
        writer.skip_first_frame = args.skip_first_frame

        logger.section(f"Assembling {len(frames)} frames")
        for i, frame_path in enumerate(frames, start=1):
            image = read_frame(frame_path)
            if image is None:
                raise ValueError(f"Could not read frame {frame_path}")
            writer.add_frame(image, compression=args.compression)
            logger.info(f"[{i}/{len(frames)}] {frame_path.name}")

        writer.finish()
    except DimensionMismatch as e:
        logger.error(f"{frame_path.name}: {e}")
        writer.discard()
        return 1
    except (APNGWriterError, ValueError) as e:
        logger.error(str(e))
        writer.discard()
        return 1

    logger.success(f"Wrote {writer.output_file}")
    if not args.quiet:
        print_summary(writer, Console())
    return 0


if __name__ == "__main__":
    sys.exit(main())
