"""
APNG Assembler discovery and bootstrap for apngwriter.

The animated PNG encoding itself is done by the external "APNG Assembler"
program (http://apngasm.sourceforge.net). This module works out where the
program is expected for the running platform and downloads it once if it is
missing.

Known limitation: the bootstrap is guarded only by an existence check. Two
processes (or threads) bootstrapping for the first time at the same moment
both download and extract into the same folder.
"""

from __future__ import annotations

import os
import platform
import stat
import urllib.request
import zipfile
from pathlib import Path

from ..config import AppConfig, app_config
from ..core.errors import ToolUnavailable, UnsupportedPlatform
from ..core.types import AssemblerProgramInfo
from ..output.logger import SimpleLogger

# platform.system() -> (subfolder, executable, archive suffix)
PLATFORM_VARIANTS: dict[str, tuple[str, str, str]] = {
    "Windows": ("win", "apngasm64.exe", "bin-win64"),
    "Darwin": ("mac", "apngasm", "bin-macos"),
    "Linux": ("linux", "apngasm", "bin-linux"),
}

DEFAULT_INSTALL_DIR = Path(__file__).resolve().parent.parent / "bin"


def program_info(
    system: str | None = None,
    install_dir: Path | None = None,
    config: AppConfig | None = None,
) -> AssemblerProgramInfo:
    """Describe the APNG Assembler build for a platform.

    Args:
        system: Platform name as returned by platform.system(). Defaults to the running platform.
        install_dir: Root folder for the per-platform program folders.
        config: Configuration to read the version, download root and install folder from.

    Returns:
        AssemblerProgramInfo: Folder, executable name, download URL and archive name.

    Raises:
        UnsupportedPlatform: When no build exists for the platform.
    """
    cfg = (config or app_config).assembler
    system = system or platform.system()
    if system not in PLATFORM_VARIANTS:
        raise UnsupportedPlatform(f"Unrecognized computer type: {system!r}")

    subfolder, name, suffix = PLATFORM_VARIANTS[system]
    root = install_dir or cfg.install_dir or DEFAULT_INSTALL_DIR
    zip_filename = f"apngasm-{cfg.version}-{suffix}.zip"
    return AssemblerProgramInfo(
        folder=Path(root) / subfolder,
        name=name,
        url=f"{cfg.base_url}/{cfg.version}/{zip_filename}/download",
        zip_filename=zip_filename,
    )


def ensure_assembler(
    info: AssemblerProgramInfo | None = None,
    logger: SimpleLogger | None = None,
) -> Path:
    """Return the APNG Assembler executable, downloading it if it is missing.

    Args:
        info: Program description. Defaults to program_info() for this platform.
        logger: Logger for download progress messages.

    Returns:
        Path: Full path of the executable.

    Raises:
        UnsupportedPlatform: When no build exists for the platform.
        ToolUnavailable: When the folder cannot be created or the download/extraction fails.
    """
    info = info or program_info()
    if info.full_path.is_file():
        return info.full_path

    logger = logger or SimpleLogger()
    try:
        info.folder.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ToolUnavailable(f"Could not create folder for APNG Assembler program: {info.folder}") from e

    logger.info(f"Downloading APNG Assembler program from {info.url} ...")
    try:
        urllib.request.urlretrieve(info.url, info.zip_path)
        with zipfile.ZipFile(info.zip_path) as zf:
            zf.extractall(info.folder)
    except (OSError, zipfile.BadZipFile) as e:
        raise ToolUnavailable(f"Could not fetch APNG Assembler program: {e}") from e
    finally:
        if info.zip_path.exists():
            info.zip_path.unlink()

    if not info.full_path.is_file():
        raise ToolUnavailable(f"Archive {info.zip_filename} did not contain {info.name}")

    # zip archives do not carry the executable bit
    if os.name == "posix":
        mode = info.full_path.stat().st_mode
        info.full_path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    logger.success("APNG Assembler download complete.")
    return info.full_path


def check_tools(info: AssemblerProgramInfo | None = None) -> tuple[bool, list[str]]:
    """Check availability of the APNG Assembler without downloading it.

    Args:
        info: Program description. Defaults to program_info() for this platform.

    Returns:
        Tuple[bool, List[str]]: (all_ok, problems). If `all_ok` is False, problems lists the issues.
    """
    problems: list[str] = []
    try:
        info = info or program_info()
    except UnsupportedPlatform as e:
        return False, [str(e)]
    if not info.full_path.is_file():
        problems.append(f"APNG Assembler not found at {info.full_path}")
    elif os.name == "posix" and not os.access(info.full_path, os.X_OK):
        problems.append(f"APNG Assembler at {info.full_path} is not executable")
    return (len(problems) == 0, problems)
