import io
import logging

from apkbuild.data.config import LoggingConfig
from apkbuild.utils.logging import apply_logging_config, create_stream_handler


def _logger_with_stream() -> tuple[logging.Logger, io.StringIO]:
    stream = io.StringIO()
    logger = logging.getLogger("apkbuild.tests.logging")
    logger.handlers[:] = [create_stream_handler(stream)]
    logger.propagate = False
    logger.setLevel(logging.DEBUG)
    return logger, stream


def test_package_and_step_are_formatted() -> None:
    logger, stream = _logger_with_stream()
    adapter = logging.LoggerAdapter(logger, dict(package="foo", step=2))

    adapter.info("resolved %s", "fetch")

    assert stream.getvalue() == "INFO (foo#2) apkbuild.tests.logging: resolved fetch\n"


def test_package_only() -> None:
    logger, stream = _logger_with_stream()

    logging.LoggerAdapter(logger, dict(package="foo")).debug("planning")

    assert stream.getvalue() == "DEBUG (foo) apkbuild.tests.logging: planning\n"


def test_no_context() -> None:
    logger, stream = _logger_with_stream()

    logger.warning("plain")

    assert stream.getvalue() == "WARNING apkbuild.tests.logging: plain\n"


def test_apply_logging_config() -> None:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    try:
        apply_logging_config(LoggingConfig(debug=True), io.StringIO())
        assert root.level == logging.DEBUG
        apply_logging_config(LoggingConfig(), io.StringIO())
        assert root.level == logging.INFO
    finally:
        root.handlers[:] = handlers
        root.setLevel(level)
