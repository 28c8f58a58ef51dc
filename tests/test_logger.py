import pytest

from matchbook.errors import FatalError
from matchbook.logger import Logger


def test_log_substitutes_and_escapes(tmp_path):
    path = tmp_path / "out.log"
    with Logger(path) as logger:
        logger.log("%:% %() % 100%% done\n", "file.py", 12, "run", 1.5)
        logger.push_value(-7)
        logger.push_value(True)
        logger.push_value(1e20)
    assert path.read_text(encoding="utf-8") == "file.py:12 run() 1.5 100% done\n-71" + "1e+20"


def test_log_argument_errors(tmp_path):
    path = tmp_path / "errors.log"
    with Logger(path) as logger:
        with pytest.raises(FatalError, match="missing arguments"):
            logger.log("value:% and %", 1)
        with pytest.raises(FatalError, match="extra arguments"):
            logger.log("no placeholders", 1)
        logger.log("plain text\n")
    assert path.read_text(encoding="utf-8") == "plain text\n"


def test_close_is_idempotent(tmp_path):
    path = tmp_path / "twice.log"
    logger = Logger(path)
    logger.push_value("abc")
    logger.close()
    logger.close()
    assert path.read_text(encoding="utf-8") == "abc"


def test_unopenable_file_raises(tmp_path):
    with pytest.raises(FatalError, match="Could not open log file"):
        Logger(tmp_path / "missing-dir" / "x.log")