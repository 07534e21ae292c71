"""FastAPI routers acting as controllers in the MVC architecture."""

from . import analysis, health

__all__ = ["analysis", "health"]
