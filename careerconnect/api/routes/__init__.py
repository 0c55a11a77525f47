"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from careerconnect.api.routes.user_routes import router as user_router
from careerconnect.api.routes.job_routes import router as job_router
from careerconnect.api.routes.message_routes import router as message_router
from careerconnect.api.routes.match_routes import router as match_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(user_router)
api_router.include_router(job_router)
api_router.include_router(message_router)
api_router.include_router(match_router)
