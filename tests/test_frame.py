from pathlib import Path

import cv2
import numpy as np
import pytest

from apngwriter.core.errors import StorageError
from apngwriter.core.types import FrameOptions
from apngwriter.processing.frame import frame_dimensions, frame_filename, read_frame, to_bgr, write_frame


def test_frame_filename_zero_padded():
    assert frame_filename(1) == "frame_000000001.png"
    assert frame_filename(123456789) == "frame_123456789.png"
    assert frame_filename(7, digits=3) == "frame_007.png"


def test_frame_dimensions_is_width_height():
    assert frame_dimensions(np.zeros((10, 20))) == (20, 10)
    assert frame_dimensions(np.zeros((10, 20, 3))) == (20, 10)
    with pytest.raises(ValueError):
        frame_dimensions(np.zeros(5))


def test_to_bgr_float_and_bool_become_uint8():
    out = to_bgr(np.array([[0.0, 0.5, 1.0, 2.0]]))
    assert out.dtype == np.uint8
    assert out.tolist() == [[0, 128, 255, 255]]

    out = to_bgr(np.array([[True, False]]))
    assert out.tolist() == [[255, 0]]


def test_to_bgr_keeps_uint16():
    img = np.full((3, 3), 60000, dtype=np.uint16)
    assert to_bgr(img).dtype == np.uint16


def test_to_bgr_rgba_channel_order():
    rgba = np.zeros((2, 2, 4), dtype=np.uint8)
    rgba[..., 0] = 10
    rgba[..., 1] = 20
    rgba[..., 2] = 30
    rgba[..., 3] = 40
    assert to_bgr(rgba)[0, 0].tolist() == [30, 20, 10, 40]


def test_to_bgr_merges_alpha_plane():
    img = np.full((2, 3), 7, dtype=np.uint8)
    alpha = np.full((2, 3), 200, dtype=np.uint8)
    out = to_bgr(img, alpha=alpha)
    assert out.shape == (2, 3, 4)
    assert out[0, 0].tolist() == [7, 7, 7, 200]

    with pytest.raises(ValueError):
        to_bgr(img, alpha=np.zeros((3, 3), dtype=np.uint8))


def test_to_bgr_palette_checks():
    palette = np.array([[255, 0, 0], [0, 0, 255]], dtype=np.uint8)
    out = to_bgr(np.array([[0, 1]]), palette)
    assert out[0, 0].tolist() == [0, 0, 255]
    assert out[0, 1].tolist() == [255, 0, 0]

    with pytest.raises(ValueError):
        to_bgr(np.array([[0, 2]]), palette)
    with pytest.raises(ValueError):
        to_bgr(np.array([[0.0, 1.0]]), palette)
    with pytest.raises(ValueError):
        to_bgr(np.array([[0, 1]]), np.zeros((2, 4)))


def test_to_bgr_rejects_unsupported_shape():
    with pytest.raises(ValueError):
        to_bgr(np.zeros((4, 4, 2), dtype=np.uint8))


def test_write_and_read_frame(tmp_path: Path):
    rgb = np.zeros((5, 7, 3), dtype=np.uint8)
    rgb[..., 2] = 255
    path = write_frame(tmp_path / "frame_000000001.png", rgb, options=FrameOptions(compression=9))
    assert path.exists()
    back = read_frame(path)
    assert back.shape == (5, 7, 3)
    assert back[0, 0].tolist() == [0, 0, 255]


def test_write_bilevel_frame(tmp_path: Path):
    img = np.zeros((8, 8), dtype=np.uint8)
    img[:, 4:] = 255
    path = write_frame(tmp_path / "bw.png", img, options=FrameOptions(bilevel=True))
    back = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    assert back[0, 0] == 0
    assert back[0, 7] == 255


def test_write_bilevel_color_frame(tmp_path: Path):
    rgb = np.zeros((6, 8, 3), dtype=np.uint8)
    rgb[:, 4:] = 255
    path = write_frame(tmp_path / "bw.png", rgb, options=FrameOptions(bilevel=True))
    back = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    assert back.shape == (6, 8)
    assert back.dtype == np.uint8
    assert back[0, 0] == 0
    assert back[0, 7] == 255


def test_write_bilevel_frame_with_alpha(tmp_path: Path):
    rgba = np.zeros((6, 8, 4), dtype=np.uint8)
    rgba[:, 4:, :3] = 255
    rgba[..., 3] = 200
    path = write_frame(tmp_path / "bw.png", rgba, options=FrameOptions(bilevel=True))
    assert cv2.imread(str(path), cv2.IMREAD_UNCHANGED).shape == (6, 8)

    gray = np.zeros((6, 8), dtype=np.uint8)
    path = write_frame(tmp_path / "bw2.png", gray, alpha=np.ones((6, 8)), options=FrameOptions(bilevel=True))
    assert cv2.imread(str(path), cv2.IMREAD_UNCHANGED).shape == (6, 8)


def test_write_bilevel_16bit_frame(tmp_path: Path):
    img = np.zeros((6, 8), dtype=np.uint16)
    img[:, 4:] = 40000
    path = write_frame(tmp_path / "bw.png", img, options=FrameOptions(bilevel=True))
    back = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    # 1-bit output, not a 16-bit copy of the input
    assert back.dtype == np.uint8
    assert back[0, 0] == 0
    assert back[0, 7] == 255


def test_frame_options_validation():
    with pytest.raises(ValueError):
        FrameOptions(compression=12)


def test_write_frame_storage_error(tmp_path: Path):
    with pytest.raises(StorageError):
        write_frame(tmp_path / "missing" / "frame.png", np.zeros((2, 2), dtype=np.uint8))


def test_read_frame_unreadable(tmp_path: Path):
    bad = tmp_path / "bad.png"
    bad.write_text("not an image")
    assert read_frame(bad) is None
