"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.convert import router as convert_router

__all__ = [
    "convert_router",
]
