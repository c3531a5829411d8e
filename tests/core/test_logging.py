from loguru import logger

from superevents.core.config import LoggingSettings
from superevents.core.logging import setup_logging


def test_setup_logging_writes_file(tmp_path):
    log_dir = tmp_path / "logs"

    setup_logging(debug_mode=True, log_dir=str(log_dir))
    logger.debug("hello from test")
    logger.complete()

    files = list(log_dir.glob("superevents_*.log"))
    assert len(files) == 1
    assert "hello from test" in files[0].read_text(encoding="utf-8")

    logger.remove()


def test_setup_logging_console_only(tmp_path):
    setup_logging(debug_mode=False)

    assert list(tmp_path.iterdir()) == []
    logger.remove()


def test_setup_logging_from_settings(tmp_path):
    """LoggingSettings map directly onto setup_logging arguments."""
    settings = LoggingSettings(debug_mode=False, log_dir=str(tmp_path / "app_logs"), rotation="1 MB", retention="2 days")

    setup_logging(**settings.model_dump())
    logger.debug("hidden from console")
    logger.info("configured from settings")

    files = list((tmp_path / "app_logs").glob("superevents_*.log"))
    assert len(files) == 1
    text = files[0].read_text(encoding="utf-8")
    assert "configured from settings" in text
    assert "hidden from console" in text

    logger.remove()
