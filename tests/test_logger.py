from pathlib import Path

from apngwriter.output.logger import SimpleLogger


def test_logger_writes_console_and_file(tmp_path: Path, capsys):
    log_file = tmp_path / "logs" / "apngwriter.log"
    logger = SimpleLogger(log_file)

    logger.info("adding frames")
    logger.warning("could not remove folder")
    logger.error("assembler failed")

    captured = capsys.readouterr()
    assert "[INFO] adding frames" in captured.out
    assert "[WARNING] could not remove folder" in captured.out
    assert "[ERROR] assembler failed" in captured.err

    content = log_file.read_text()
    assert "Session started:" in content
    assert "[INFO] adding frames" in content
    assert "[ERROR] assembler failed" in content


def test_quiet_logger_keeps_warnings(tmp_path: Path, capsys):
    log_file = tmp_path / "quiet.log"
    logger = SimpleLogger(log_file, quiet=True)

    logger.info("hidden")
    logger.success("hidden too")
    logger.warning("shown")

    captured = capsys.readouterr()
    assert "hidden" not in captured.out
    assert "[WARNING] shown" in captured.out
    # The log file still records everything
    assert "[INFO] hidden" in log_file.read_text()
