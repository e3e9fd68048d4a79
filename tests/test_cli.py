from pathlib import Path

import cv2
import numpy as np
import pytest

import apngwriter.cli.main as cli_main
import apngwriter.writer as writer_module
from apngwriter.cli.main import main
from apngwriter.utils.path import find_frames, natural_key


@pytest.fixture
def assembler(tmp_path: Path) -> Path:
    path = tmp_path / "apngasm"
    path.write_text("#!/bin/sh\nexit 0\n")
    return path


@pytest.fixture
def calls(monkeypatch) -> list:
    recorded: list = []

    def fake_run(cmd, **kwargs):
        recorded.append(cmd)
        Path(cmd[1]).write_bytes(b"\x89PNG")
        return 0, " ".join(cmd)

    monkeypatch.setattr(writer_module, "run_subprocess", fake_run)
    return recorded


def make_frames(folder: Path, sizes: list[tuple[int, int]]) -> None:
    folder.mkdir()
    for i, (w, h) in enumerate(sizes, start=1):
        img = np.full((h, w, 3), i * 20, dtype=np.uint8)
        assert cv2.imwrite(str(folder / f"shot_{i}.png"), img)


def test_natural_ordering(tmp_path: Path):
    for name in ["f_10.png", "f_2.png", "f_1.png", "notes.md", ".hidden.png"]:
        (tmp_path / name).write_bytes(b"")
    assert [p.name for p in find_frames(tmp_path)] == ["f_1.png", "f_2.png", "f_10.png"]
    assert natural_key("f_2.png") < natural_key("f_10.png")


def test_cli_assembles_folder(tmp_path: Path, assembler: Path, calls: list):
    frames = tmp_path / "frames"
    make_frames(frames, [(8, 6)] * 11)
    out = tmp_path / "anim.png"

    code = main([str(frames), "-o", str(out), "--assembler", str(assembler), "--fps", "25", "--loops", "2", "-q"])

    assert code == 0
    assert out.exists()
    cmd = calls[0]
    assert cmd[1] == str(out)
    assert cmd[2].endswith("frame_000000001.png")
    assert cmd[3:] == ["1", "25", "-l2"]


def test_cli_default_output_next_to_folder(tmp_path: Path, assembler: Path, calls: list):
    frames = tmp_path / "frames"
    make_frames(frames, [(4, 4)] * 2)
    assert main([str(frames), "--assembler", str(assembler), "-q"]) == 0
    assert Path(calls[0][1]) == tmp_path / "frames.png"


def test_cli_size_mismatch(tmp_path: Path, assembler: Path, calls: list, capsys):
    frames = tmp_path / "frames"
    make_frames(frames, [(8, 6), (8, 6), (9, 6)])
    code = main([str(frames), "-o", str(tmp_path / "anim.png"), "--assembler", str(assembler), "-q"])
    assert code == 1
    assert calls == []
    assert "shot_3.png" in capsys.readouterr().err


def test_cli_no_frames(tmp_path: Path, assembler: Path):
    empty = tmp_path / "empty"
    empty.mkdir()
    assert main([str(empty), "--assembler", str(assembler)]) == 2
    assert main([str(tmp_path / "missing"), "--assembler", str(assembler)]) == 2


def test_cli_assembler_failure(tmp_path: Path, assembler: Path, monkeypatch, capsys):
    monkeypatch.setattr(writer_module, "run_subprocess", lambda cmd, **kw: (1, "apngasm"))
    frames = tmp_path / "frames"
    make_frames(frames, [(4, 4)] * 2)
    assert main([str(frames), "--assembler", str(assembler), "-q"]) == 1
    assert "APNG assembler failed" in capsys.readouterr().err


def test_cli_check_tools(monkeypatch):
    monkeypatch.setattr(cli_main, "check_tools", lambda: (True, []))
    assert main(["--check-tools"]) == 0
    monkeypatch.setattr(cli_main, "check_tools", lambda: (False, ["APNG Assembler not found"]))
    assert main(["--check-tools"]) == 2


def test_cli_default_output_keeps_dotted_folder_name(tmp_path: Path, assembler: Path, calls: list):
    frames = tmp_path / "shots.v2"
    make_frames(frames, [(4, 4)] * 2)
    assert main([str(frames), "--assembler", str(assembler), "-q"]) == 0
    assert Path(calls[0][1]) == tmp_path / "shots.v2.png"


@pytest.mark.parametrize("loops", ["-1", "two"])
def test_cli_rejects_bad_loop_count(tmp_path: Path, assembler: Path, calls: list, loops: str, capsys):
    frames = tmp_path / "frames"
    make_frames(frames, [(4, 4)] * 2)
    with pytest.raises(SystemExit) as excinfo:
        main([str(frames), "--assembler", str(assembler), "--loops", loops])
    assert excinfo.value.code == 2
    assert "--loops" in capsys.readouterr().err
    assert calls == []
