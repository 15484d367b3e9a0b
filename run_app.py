#!/usr/bin/env python3
"""
Simple runner script for the Flask application.
This script ensures the correct Python path is set and runs the app.
"""

import sys
from pathlib import Path

# Add the current directory to Python path
current_dir = Path(__file__).parent
sys.path.insert(0, str(current_dir))

from app.main import create_app
from calc_recommender.logging_config import setup_logging, stop_logging, get_logger
from config_manager import get_app_config

if __name__ == "__main__":
    app_config = get_app_config()
    setup_logging(debug=app_config.debug)
    logger = get_logger(__name__)
    logger.info("Starting recommendation service from %s", current_dir)

    app = create_app()
    try:
        app.run(
            host=app_config.host,
            port=app_config.port,
            debug=app_config.debug
        )
    finally:
        stop_logging()
