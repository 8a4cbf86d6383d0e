# tests/test_logging.py
import logging
import pytest
import logging_setup  # top-level module

LOGGER_NAME = logging_setup.LOGGER_NAME


def _attach_caplog(caplog):
    """Attach caplog.handler to our named logger (propagate=False means root won't see it)."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.addHandler(caplog.handler)
    return logger


def test_logger_includes_context_messages(caplog):
    logging_setup.setup_logging(verbosity=1)  # INFO
    log = logging_setup.get_logger(artifact="documents", resource="course_101")

    logger = _attach_caplog(caplog)
    try:
        with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
            log.info("export started")
    finally:
        logger.removeHandler(caplog.handler)

    assert any(r.message == "export started" for r in caplog.records)
    assert any(getattr(r, "resource", None) == "course_101" for r in caplog.records)
    assert any(getattr(r, "artifact", None) == "documents" for r in caplog.records)


def test_default_context_filter_unit():
    """
    Test the filter in isolation. caplog doesn't run filters on its own, so
    we construct a LogRecord and apply the filter directly.
    """
    f = logging_setup.DefaultContextFilter()
    record = logging.LogRecord(
        name=LOGGER_NAME,
        level=logging.INFO,
        pathname=__file__,
        lineno=0,
        msg="no extras",
        args=(),
        exc_info=None,
    )
    ok = f.filter(record)
    assert ok is True
    assert getattr(record, "resource") == "-"
    assert getattr(record, "artifact") == "-"


def test_reserved_extra_keys_are_prefixed(caplog):
    logging_setup.setup_logging(verbosity=2)
    log = logging_setup.get_logger(artifact="user", resource="user_7")

    logger = _attach_caplog(caplog)
    try:
        with caplog.at_level(logging.DEBUG, logger=LOGGER_NAME):
            log.debug("debugging here", extra={"name": "clash", "artifact": "ignored"})
    finally:
        logger.removeHandler(caplog.handler)

    rec = [r for r in caplog.records if r.message == "debugging here"][0]
    assert rec.levelno == logging.DEBUG
    assert rec.meta_name == "clash"
    assert rec.artifact == "user"  # adapter default is not clobbered


@pytest.mark.parametrize("verbosity,level", [(0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG)])
def test_verbosity_levels(verbosity, level):
    logging_setup.setup_logging(verbosity=verbosity)
    assert logging.getLogger(LOGGER_NAME).level == level
