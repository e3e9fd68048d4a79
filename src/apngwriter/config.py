"""
Consolidated configuration system for apngwriter.

This module provides the Pydantic-based settings used by the writer, the
assembler bootstrap and the command line, with environment variable support
and validation.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

# =============================================================================
# WRITER SETTINGS
# =============================================================================

class WriterSettings(BaseModel):
    """Defaults and limits for animated PNG writers."""

    default_frames_per_second: Annotated[float, Field(
        gt=0,
        description="Frame rate used when none is set on the writer"
    )] = 10

    max_frames_per_second: Annotated[float, Field(
        gt=0,
        description="Upper bound frame rates are clamped to"
    )] = 50

    default_loop_repeat_delay: Annotated[float, Field(
        ge=0.0,
        description="Seconds to wait after the last frame before looping"
    )] = 2.0

    delay_tolerance: Annotated[float, Field(
        gt=0.0,
        le=1.0,
        description="Tolerance of the rational approximation of delays"
    )] = 1 / 50

    frame_name_digits: Annotated[int, Field(
        ge=1,
        le=12,
        description="Zero-padding width of temporary frame filenames"
    )] = 9

    temp_prefix: Annotated[str, Field(
        min_length=1,
        description="Prefix of per-writer temporary folders"
    )] = "apngwriter_"


# =============================================================================
# ASSEMBLER SETTINGS
# =============================================================================

class AssemblerSettings(BaseModel):
    """Location and download source of the APNG Assembler program."""

    version: Annotated[str, Field(
        description="apngasm release fetched when the program is missing"
    )] = "2.91"

    base_url: Annotated[str, Field(
        description="Download root; archives live under {base_url}/{version}/"
    )] = "https://sourceforge.net/projects/apngasm/files"

    install_dir: Annotated[Path | None, Field(
        description="Folder holding the per-platform program folders (defaults to the package's bin/ folder)"
    )] = None

    timeout_sec: Annotated[int | None, Field(
        gt=0,
        description="Optional timeout for one assembler run"
    )] = None

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v):
        """Normalize the download root so URLs can be joined with '/'."""
        return v.rstrip("/")


# =============================================================================
# FILE EXTENSIONS
# =============================================================================

class FileExtensions(BaseModel):
    """Frame file extensions accepted by the command line."""

    supported_frame_exts: Annotated[set[str], Field(
        description="Input frame extensions picked up when scanning a folder"
    )] = {".png", ".jpg", ".jpeg", ".tif", ".tiff", ".bmp"}

    frame_ext: Annotated[str, Field(
        description="Extension of temporary frame files"
    )] = ".png"

    delay_ext: Annotated[str, Field(
        description="Extension of the delay control file"
    )] = ".txt"


# =============================================================================
# MAIN APPLICATION CONFIGURATION
# =============================================================================

class AppConfig(BaseSettings):
    """
    Main application configuration with environment variable support.

    All settings can be overridden via environment variables with APNGWRITER_ prefix.
    Example: APNGWRITER_ASSEMBLER__INSTALL_DIR=/opt/apngasm
    """

    writer: WriterSettings = WriterSettings()
    assembler: AssemblerSettings = AssemblerSettings()
    file_extensions: FileExtensions = FileExtensions()

    class Config:
        env_prefix = "APNGWRITER_"
        env_nested_delimiter = "__"
        case_sensitive = False


# =============================================================================
# DEFAULT INSTANCE
# =============================================================================

app_config = AppConfig()

DEFAULT_FRAMES_PER_SECOND = app_config.writer.default_frames_per_second
DEFAULT_LOOP_REPEAT_DELAY = app_config.writer.default_loop_repeat_delay
SUPPORTED_FRAME_EXTS = app_config.file_extensions.supported_frame_exts


def create_config_from_env() -> AppConfig:
    """Create a new configuration instance from environment variables."""
    return AppConfig()
