"""
Factory for creating the recommendations module.
"""
from calc_recommender.recommendations import RecommendationService
from .routes import create_recommendation_routes


def create_recommendations_module(service: RecommendationService) -> dict:
    """
    Create the recommendations module with all its components.

    Args:
        service: Configured RecommendationService instance

    Returns:
        Dictionary containing:
            - service: RecommendationService instance
            - blueprint: Flask blueprint for routes
    """
    blueprint = create_recommendation_routes(service)

    return {
        "service": service,
        "blueprint": blueprint
    }
