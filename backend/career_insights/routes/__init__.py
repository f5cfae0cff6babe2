from .cover_letter_routes import router as cover_letter_routes
from .insight_routes import router as insight_routes

__all__ = [
    "cover_letter_routes",
    "insight_routes",
]
