import logging
from pathlib import Path

from shoot_studio.foundation.logging_utils import close_logger, setup_operational_logger, write_text_log


def test_writes_unicode_text_with_utf8_encoding(tmp_path: Path):
    unicode_text = "Prompt with arrow → and accents é."
    log_path = tmp_path / "nested" / "prompt.txt"

    write_text_log(str(log_path), unicode_text)

    assert log_path.read_text(encoding="utf-8") == unicode_text


def test_operational_logger_writes_debug_to_file(tmp_path: Path):
    logger, log_file = setup_operational_logger(str(tmp_path), "sess")
    try:
        logger.debug("debug detail %d", 7)
        assert logger.propagate is False
        assert logger.level == logging.DEBUG
    finally:
        close_logger(logger)

    text = Path(log_file).read_text(encoding="utf-8")
    assert Path(log_file).name == "sess_oplog.log"
    assert "| DEBUG | debug detail 7" in text
    assert "Operational logging initialized for session sess" in text


def test_operational_logger_reconfigures_without_duplicate_handlers(tmp_path: Path):
    first, _ = setup_operational_logger(str(tmp_path), "again")
    second, _ = setup_operational_logger(str(tmp_path), "again")
    try:
        assert first is second
        assert len(second.handlers) == 2
    finally:
        close_logger(second)
