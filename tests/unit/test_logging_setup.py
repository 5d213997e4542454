import logging

from influx_sink.obs.logging import configure_logging


def test_configure_logging_aligns_uvicorn_loggers() -> None:
    configure_logging("DEBUG")

    assert logging.getLogger("uvicorn").level == logging.DEBUG
    assert logging.getLogger("uvicorn.access").level == logging.DEBUG
