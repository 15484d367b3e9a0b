"""
Recommendations module exposing the recommendation engine over HTTP.
"""

from .routes import create_recommendation_routes
from .factory import create_recommendations_module

__all__ = ['create_recommendation_routes', 'create_recommendations_module']
