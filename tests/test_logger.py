# tests/test_logger.py
from loguru import logger

from chess_coach.logger import setup_logger


def test_setup_logger_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "coach.log"
    setup_logger(level="INFO", log_file=str(log_file))
    logger.info("plan generated")
    logger.debug("too detailed")
    logger.remove()
    content = log_file.read_text()
    assert "plan generated" in content
    assert "too detailed" not in content


def test_setup_logger_reads_env(tmp_path, monkeypatch):
    log_file = tmp_path / "env.log"
    monkeypatch.setenv("CHESS_COACH_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("CHESS_COACH_LOG_FILE", str(log_file))
    setup_logger()
    logger.debug("debug enabled")
    logger.remove()
    assert "debug enabled" in log_file.read_text()
