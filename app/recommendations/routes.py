"""
Recommendation routes for API endpoints.
"""
import logging

from flask import Blueprint, jsonify, request
from pydantic import ValidationError

from calc_recommender.models import RecommendationRequest, RecommendationType
from calc_recommender.recommendations import RecommendationService

logger = logging.getLogger(__name__)


def _serialize(recommendations) -> dict:
    items = [r.model_dump(mode="json") for r in recommendations]
    return {"recommendations": items, "count": len(items)}


def _invalid_request(exc: ValidationError):
    details = exc.errors(include_url=False, include_context=False)
    logger.info("Rejected recommendation request with %d validation errors", len(details))
    return jsonify({"error": "invalid-request", "details": details}), 400


def create_recommendation_routes(service: RecommendationService) -> Blueprint:
    """Create recommendations routes blueprint."""
    bp = Blueprint('recommendations', __name__, url_prefix='/api/recommendations')

    @bp.route('/', methods=['POST'])
    async def generate():
        """Generate recommendations for the JSON request body."""
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return jsonify({"error": "invalid-json"}), 400
        try:
            rec_request = RecommendationRequest.model_validate(payload)
        except ValidationError as exc:
            return _invalid_request(exc)

        recommendations = await service.generate_recommendations(rec_request)
        return jsonify(_serialize(recommendations))

    @bp.route('/cache', methods=['GET'])
    def cache_stats():
        """Current cache size and keys."""
        return jsonify(service.get_cache_stats())

    @bp.route('/clear-cache', methods=['POST'])
    def clear_cache():
        """Drop all cached recommendation lists."""
        service.clear_cache()
        return jsonify({"status": "ok", "message": "Cache cleared"})

    @bp.route('/<rec_type>', methods=['GET'])
    async def by_type(rec_type: str):
        """
        Recommendations of a single type.

        Query parameters:
            - user_id: Requesting user
            - calculator_type: Restrict history to one calculator
            - limit: Maximum recommendations to return
            - min_confidence: Confidence threshold for this request
        """
        if not RecommendationType.is_valid(rec_type):
            return jsonify({
                "error": "unknown-type",
                "allowed": sorted(RecommendationType.get_allowed_types()),
            }), 404

        fields = {
            key: request.args[key]
            for key in ("user_id", "calculator_type", "limit", "min_confidence")
            if request.args.get(key)
        }
        try:
            rec_request = RecommendationRequest.model_validate(fields)
        except ValidationError as exc:
            return _invalid_request(exc)

        recommendations = await service.get_recommendations_by_type(
            RecommendationType(rec_type), rec_request
        )
        return jsonify(_serialize(recommendations))

    return bp
