"""
API v1 routes package.
"""

from .dashboard_routes import router as dashboard_router
from .chat_routes import router as chat_router

__all__ = [
    "dashboard_router",
    "chat_router"
]
