"""
Frame encoding for apngwriter.

This module turns in-memory images into the PNG frame files APNG Assembler
reads:
- Grayscale, RGB and RGBA arrays (RGB channel order)
- Indexed images with a colormap
- Optional alpha planes and PNG encoding options
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple

import cv2
import numpy as np

from ..core.errors import StorageError
from ..core.types import FrameOptions

FRAME_PREFIX = "frame_"


def frame_filename(index: int, digits: int = 9, ext: str = ".png") -> str:
    """Temporary filename of the 1-based frame `index`, e.g. frame_000000001.png."""
    return f"{FRAME_PREFIX}{index:0{digits}d}{ext}"


def frame_dimensions(image: np.ndarray) -> Tuple[int, int]:
    """Return (width, height) of an image array."""
    if image.ndim < 2:
        raise ValueError(f"Frame must be at least 2-dimensional, got shape {image.shape}")
    h, w = image.shape[:2]
    return w, h


def _to_integer_depth(image: np.ndarray) -> np.ndarray:
    """Convert float [0, 1] and bool images to uint8; keep uint8/uint16 as they are."""
    if image.dtype == np.bool_:
        return image.astype(np.uint8) * 255
    if np.issubdtype(image.dtype, np.floating):
        return np.round(np.clip(image, 0.0, 1.0) * 255).astype(np.uint8)
    if image.dtype in (np.uint8, np.uint16):
        return image
    if np.issubdtype(image.dtype, np.integer):
        return np.clip(image, 0, 255).astype(np.uint8)
    raise ValueError(f"Unsupported frame dtype: {image.dtype}")


def _apply_palette(indices: np.ndarray, palette: np.ndarray) -> np.ndarray:
    """Expand an indexed image into an RGB image using a colormap."""
    palette = np.asarray(palette)
    if palette.ndim != 2 or palette.shape[1] != 3 or palette.shape[0] == 0:
        raise ValueError(f"Palette must be an N x 3 colormap, got shape {palette.shape}")
    if indices.ndim != 2:
        raise ValueError(f"Indexed frame must be 2-dimensional, got shape {indices.shape}")
    if not np.issubdtype(indices.dtype, np.integer):
        raise ValueError(f"Indexed frame must hold integer indices, got {indices.dtype}")
    if indices.size and (indices.min() < 0 or indices.max() >= palette.shape[0]):
        raise ValueError(f"Frame indices must be in [0, {palette.shape[0] - 1}]")
    return _to_integer_depth(palette)[indices]


def to_bgr(
    image: np.ndarray,
    palette: Optional[np.ndarray] = None,
    alpha: Optional[np.ndarray] = None,
) -> np.ndarray:
    """Convert an RGB(A), grayscale or indexed image to an array cv2.imwrite accepts.

    Args:
        image: H x W, H x W x 3 or H x W x 4 array in RGB(A) order, or H x W indices.
        palette: N x 3 colormap when `image` holds indices.
        alpha: Optional H x W transparency plane, merged as the 4th channel.

    Returns:
        np.ndarray: Grayscale, BGR or BGRA array of dtype uint8 or uint16.

    Raises:
        ValueError: For unsupported shapes, dtypes, palettes or alpha planes.
    """
    image = np.asarray(image)
    if palette is not None:
        rgb = _apply_palette(image, palette)
    else:
        rgb = _to_integer_depth(image)

    if rgb.ndim == 3 and rgb.shape[2] == 1:
        rgb = rgb[:, :, 0]
    rgb = np.ascontiguousarray(rgb)

    if rgb.ndim == 2:
        out = rgb
    elif rgb.ndim == 3 and rgb.shape[2] == 3:
        out = cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)
    elif rgb.ndim == 3 and rgb.shape[2] == 4:
        out = cv2.cvtColor(rgb, cv2.COLOR_RGBA2BGRA)
    else:
        raise ValueError(f"Unsupported frame shape: {image.shape}")

    if alpha is None:
        return out

    a = _to_integer_depth(np.asarray(alpha))
    if a.shape != out.shape[:2]:
        raise ValueError(f"Alpha plane shape {a.shape} does not match frame shape {out.shape[:2]}")
    if a.dtype != out.dtype:
        a = (a.astype(np.uint16) * 257) if out.dtype == np.uint16 else (a // 257).astype(np.uint8)
    if out.ndim == 2:
        out = cv2.cvtColor(out, cv2.COLOR_GRAY2BGR)
    elif out.shape[2] == 4:
        out = out[:, :, :3]
    return np.dstack([out, a])


def imwrite_params(options: FrameOptions) -> list[int]:
    """OpenCV imwrite parameter list for PNG frame options."""
    params: list[int] = []
    if options.compression is not None:
        params += [cv2.IMWRITE_PNG_COMPRESSION, options.compression]
    if options.bilevel:
        params += [cv2.IMWRITE_PNG_BILEVEL, 1]
    return params


def to_bilevel_source(data: np.ndarray) -> np.ndarray:
    """Reduce a converted frame to the 8-bit single-channel data 1-bit PNGs are written from.

    Color frames become grayscale, an alpha channel is dropped and 16-bit
    samples keep their high byte.
    """
    if data.ndim == 3 and data.shape[2] == 4:
        data = cv2.cvtColor(data, cv2.COLOR_BGRA2GRAY)
    elif data.ndim == 3:
        data = cv2.cvtColor(data, cv2.COLOR_BGR2GRAY)
    if data.dtype == np.uint16:
        data = (data >> 8).astype(np.uint8)
    return data


def write_frame(
    path: Path,
    image: np.ndarray,
    palette: Optional[np.ndarray] = None,
    alpha: Optional[np.ndarray] = None,
    options: Optional[FrameOptions] = None,
) -> Path:
    """Encode one frame as a PNG file.

    Args:
        path: Destination .png path.
        image: Frame pixels, see to_bgr().
        palette: Colormap for indexed frames.
        alpha: Optional transparency plane.
        options: PNG encoding options.

    Returns:
        Path: The written file.

    Raises:
        ValueError: For images that cannot be converted.
        StorageError: When OpenCV fails to write the file.
    """
    options = options or FrameOptions()
    data = to_bgr(image, palette, alpha)
    if options.bilevel:
        data = to_bilevel_source(data)
    params = imwrite_params(options)
    try:
        ok = cv2.imwrite(str(path), data, params)
    except cv2.error as e:
        raise StorageError(f"Could not write frame {path.name}: {e}") from e
    if not ok:
        raise StorageError(f"Could not write frame {path.name}")
    return path


def read_frame(path: Path) -> Optional[np.ndarray]:
    """Load an image file as an RGB(A) or grayscale array, or None if unreadable."""
    img = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if img is None:
        return None
    if img.ndim == 3 and img.shape[2] == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)
    if img.ndim == 3 and img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    return img
