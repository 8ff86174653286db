"""
API route handlers.
"""

from movies_api.api.routers import movies, ratings, system

__all__ = ["movies", "ratings", "system"]
