"""Flask web app serving the recommendation engine."""
