"""
Console and file logging for apngwriter.
"""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, TextIO


class SimpleLogger:
    """Timestamped logger that writes to the console and, optionally, a file.

    Args:
        log_file: Append-only log file. Its parent folder is created.
        quiet: Suppress [INFO] and [SUCCESS] lines on the console.
    """

    def __init__(self, log_file: Optional[Path] = None, quiet: bool = False):
        self.log_file = log_file
        self.quiet = quiet

        if self.log_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.log_file, 'a', encoding='utf-8') as f:
                f.write(f"\n{'='*60}\n")
                f.write(f"Session started: {datetime.now().isoformat()}\n")
                f.write(f"{'='*60}\n")

    def log(self, message: str, prefix: str = "", error: bool = False, console: bool = True) -> None:
        """Log a message to console and file.

        Args:
            message: The message to log
            prefix: Optional prefix like [INFO], [ERROR], etc.
            error: Whether to write to stderr instead of stdout
            console: Whether to echo the line on the console at all
        """
        timestamp = datetime.now().strftime("%H:%M:%S")
        formatted = f"[{timestamp}] {prefix} {message}" if prefix else f"[{timestamp}] {message}"

        if console:
            output: TextIO = sys.stderr if error else sys.stdout
            print(formatted, file=output, flush=True)

        if self.log_file:
            try:
                with open(self.log_file, 'a', encoding='utf-8') as f:
                    f.write(formatted + '\n')
            except OSError:
                pass  # Don't fail on logging errors

    def section(self, title: str) -> None:
        """Print a section header."""
        self.log("=" * 60, console=not self.quiet)
        self.log(title.center(60), console=not self.quiet)
        self.log("=" * 60, console=not self.quiet)

    def success(self, message: str) -> None:
        """Log a success message."""
        self.log(message, prefix="[SUCCESS]", console=not self.quiet)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.log(message, prefix="[ERROR]", error=True)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.log(message, prefix="[WARNING]")

    def info(self, message: str) -> None:
        """Log an info message."""
        self.log(message, prefix="[INFO]", console=not self.quiet)
