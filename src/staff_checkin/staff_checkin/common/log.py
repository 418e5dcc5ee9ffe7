"""Application logging setup."""

from __future__ import annotations

import logging
import os

from flask import Flask

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
HANDLER_NAME = "staff_checkin"


def setup_logging(app: Flask) -> logging.Logger:
    """Configure file + console handlers for the package loggers.

    ``app.logger`` is named after ``main`` inside this package, so it
    propagates into the package logger configured here.
    """

    log_level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    log_file = app.config.get("LOG_FILE")

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = []

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_file:
        log_dir = os.path.dirname(os.path.abspath(log_file))
        os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    package_logger = logging.getLogger(__package__.rsplit(".", 1)[0])
    package_logger.setLevel(log_level)

    # create_app() may run many times in one process (tests).
    for old in [h for h in package_logger.handlers if h.get_name() == HANDLER_NAME]:
        package_logger.removeHandler(old)
        old.close()
    for handler in handlers:
        handler.set_name(HANDLER_NAME)
        handler.setLevel(log_level)
        package_logger.addHandler(handler)

    app.logger.setLevel(log_level)
    logging.getLogger("werkzeug").setLevel(log_level)
    return app.logger
