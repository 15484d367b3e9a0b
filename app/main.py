"""
Flask application exposing the calculator recommendation engine.
"""
import logging
from pathlib import Path
from typing import Optional

from flask import Flask, jsonify

from calc_recommender.patterns import HistoryPatternRecognizer
from calc_recommender.recommendations import RecommendationService
from calc_recommender.stores import load_stores
from config_manager import ConfigManager

from app.recommendations.factory import create_recommendations_module

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).parent.parent


def build_default_service(config_manager: Optional[ConfigManager] = None) -> RecommendationService:
    """
    Wire a RecommendationService to in-memory stores seeded from the data file.

    Args:
        config_manager: Configuration source, a fresh ConfigManager by default

    Returns:
        Ready-to-use RecommendationService
    """
    config_manager = config_manager or ConfigManager()
    rec_config = config_manager.get_recommendation_config()
    data_file = Path(config_manager.get_data_config().data_file)
    if not data_file.is_absolute():
        data_file = BASE_DIR / data_file

    history_store, preset_store, preferences_store = load_stores(data_file)
    recognizer = HistoryPatternRecognizer(
        history_store,
        history_limit=rec_config.history_limit,
        slow_execution_ms=rec_config.slow_execution_ms,
    )
    return RecommendationService(
        history_reader=history_store,
        pattern_recognizer=recognizer,
        preset_reader=preset_store,
        preferences_reader=preferences_store,
        config=rec_config,
    )


def create_app(service: Optional[RecommendationService] = None) -> Flask:
    """
    Create the Flask app.

    Args:
        service: RecommendationService to expose; built from configuration when omitted

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)
    if service is None:
        service = build_default_service()

    recommendations_module = create_recommendations_module(service)
    app.register_blueprint(recommendations_module["blueprint"])
    app.extensions["recommendation_service"] = recommendations_module["service"]

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({"status": "ok"})

    logger.info("Recommendation app created")
    return app
