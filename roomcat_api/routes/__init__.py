"""API Routes"""

from . import catalog, export, health

__all__ = ["catalog", "export", "health"]
