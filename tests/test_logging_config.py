"""
Tests for the queue-based logging setup.
"""
import logging
import logging.handlers

from membership_service.logging_config import ThreadSafeLoggingConfig, get_logger, setup_logging


class TestThreadSafeLoggingConfig:

    def setup_method(self):
        root = logging.getLogger()
        self.saved_handlers = list(root.handlers)
        self.saved_level = root.level
        self.config = ThreadSafeLoggingConfig()

    def teardown_method(self):
        self.config.stop()
        root = logging.getLogger()
        root.handlers[:] = self.saved_handlers
        root.setLevel(self.saved_level)
        for name in ("urllib3", "requests", "werkzeug"):
            logging.getLogger(name).setLevel(logging.NOTSET)

    def test_root_logger_uses_queue_handler(self):
        setup_logging(self.config)
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.handlers.QueueHandler)
        assert root.level == logging.INFO
        assert logging.getLogger("werkzeug").level == logging.WARNING

    def test_debug_level(self):
        setup_logging(self.config, debug=True)
        assert logging.getLogger().level == logging.DEBUG

    def test_setup_twice_replaces_listener(self):
        self.config.setup_logging()
        first = self.config._log_listener
        self.config.setup_logging()
        assert self.config._log_listener is not first
        assert len(logging.getLogger().handlers) == 1

    def test_stop_is_idempotent(self):
        self.config.setup_logging()
        self.config.stop()
        self.config.stop()
        assert self.config._log_listener is None

    def test_get_logger(self):
        assert get_logger("portal.test").name == "portal.test"
