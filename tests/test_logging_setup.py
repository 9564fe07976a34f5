import logging

from fluxq.logging_setup import LOG_FORMAT, setup_logging


def test_setup_logging_installs_single_console_handler() -> None:
    logger = setup_logging("debug")
    setup_logging("info")
    try:
        ours = [h for h in logger.handlers if getattr(h, "_fluxq_console", False)]
        assert len(ours) == 1
        assert ours[0].formatter._fmt == LOG_FORMAT
        assert logger.level == logging.INFO
    finally:
        for h in ours:
            logger.removeHandler(h)
        logger.setLevel(logging.NOTSET)


def test_package_installs_null_handler() -> None:
    import fluxq

    handlers = logging.getLogger(fluxq.__name__).handlers
    assert any(isinstance(h, logging.NullHandler) for h in handlers)
