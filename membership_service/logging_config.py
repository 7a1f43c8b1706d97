"""
Logging Configuration Module

Thread-safe logging setup for the portal: a queue-based root handler so that
request threads never interleave log lines, plus quieting of chatty
third-party loggers.
"""

import logging
import logging.handlers
import sys
from queue import Queue
from typing import Optional


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"


class ThreadSafeLoggingConfig:
    """Thread-safe logging configuration with queue-based logging."""

    def __init__(self):
        self._log_listener: Optional[logging.handlers.QueueListener] = None
        self._log_queue: Optional[Queue] = None

    def setup_logging(self, debug: bool = False) -> None:
        """
        Configure the root logger.

        Request threads write records to a queue through a QueueHandler; a
        QueueListener drains the queue to stdout in order.

        Args:
            debug: Whether to enable debug logging
        """
        if self._log_listener:
            self.stop()

        self._log_queue = Queue()
        queue_handler = logging.handlers.QueueHandler(self._log_queue)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))

        self._log_listener = logging.handlers.QueueListener(
            self._log_queue, console_handler, respect_handler_level=True
        )
        self._log_listener.start()

        root_logger = logging.getLogger()
        root_logger.handlers.clear()
        root_logger.addHandler(queue_handler)
        root_logger.setLevel(logging.DEBUG if debug else logging.INFO)

        if not debug:
            self._silence_noisy_libraries()

    def _silence_noisy_libraries(self) -> None:
        """Silence noisy third-party libraries."""
        noisy_loggers = [
            "urllib3",
            "requests",
            "werkzeug",
        ]

        for name in noisy_loggers:
            logger = logging.getLogger(name)
            # werkzeug access logs are still useful at WARNING
            logger.setLevel(logging.WARNING)

    def stop(self) -> None:
        """Stop the logging listener and cleanup."""
        if self._log_listener:
            self._log_listener.stop()
            self._log_listener = None
        if self._log_queue:
            self._log_queue = None


def setup_logging(config: ThreadSafeLoggingConfig, debug: bool = False) -> ThreadSafeLoggingConfig:
    """
    Setup thread-safe logging configuration.

    Args:
        config: Logging configuration owned by the entry point
        debug: Whether to enable debug logging

    Returns:
        The same configuration, now started
    """
    config.setup_logging(debug)
    return config


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the specified name.

    Args:
        name: Logger name

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)
