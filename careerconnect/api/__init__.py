"""
API module - FastAPI routers and endpoint definitions.

Usage:
    from careerconnect.api import api_router
    app.include_router(api_router, prefix="/api")
"""

from careerconnect.api.routes import api_router

__all__ = ["api_router"]
