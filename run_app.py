#!/usr/bin/env python3
"""
Runner script for the membership portal API.
"""

import argparse
import logging

from config_manager import ConfigManager
from membership_service.logging_config import ThreadSafeLoggingConfig, setup_logging
from portal.main import create_app

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run the membership portal API server")
    parser.add_argument("--config", default="web_app_config.json",
                        help="Path to the JSON config file")
    parser.add_argument("--host", help="Override the configured host")
    parser.add_argument("--port", type=int, help="Override the configured port")
    parser.add_argument("--debug", action="store_true", help="Enable debug mode")
    args = parser.parse_args(argv)

    config_manager = ConfigManager(args.config)
    app_config = config_manager.get_app_config()
    debug = args.debug or app_config.debug

    logging_config = setup_logging(ThreadSafeLoggingConfig(), debug=debug)
    try:
        app = create_app(config_manager)
        host = args.host or app_config.host
        port = args.port or app_config.port
        logger.info(f"Starting server on {host}:{port}")
        app.run(host=host, port=port, debug=debug, use_reloader=False)
    finally:
        logging_config.stop()


if __name__ == "__main__":
    main()
