"""
CareerConnect - Main Application

FastAPI backend with:
- MongoDB for users, jobs and messages
- JWT bearer authentication with role gates
- Direct messaging between users
- Keyword job matching

Run: uvicorn careerconnect.main:app --reload
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from pymongo import MongoClient

from careerconnect import __version__
from careerconnect.api import api_router
from careerconnect.core.auth import create_password_context
from careerconnect.core.config import Settings, get_settings
from careerconnect.core.errors import register_exception_handlers
from careerconnect.core.logging import RequestIdMiddleware, configure_logging
from careerconnect.db.mongodb import (
    create_mongo_client,
    get_database,
    init_mongo_indexes,
    ping_mongo,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Create indexes on startup, close the Mongo client on shutdown.

    Startup fails if the indexes cannot be built: the unique users.email
    index is what rejects duplicate registrations.
    """
    logger.info("careerconnect.starting", version=__version__, database=app.state.settings.mongodb_db)
    try:
        init_mongo_indexes(app.state.mongo_db)
    except Exception as e:
        logger.error("careerconnect.index_init_failed", error=str(e))
        raise

    yield

    logger.info("careerconnect.shutdown")
    if app.state.owns_mongo_client:
        app.state.mongo_client.close()


def create_app(settings: Optional[Settings] = None, mongo_client: Optional[MongoClient] = None) -> FastAPI:
    """
    Build the application from an explicit Settings instance.

    mongo_client lets callers supply their own client (tests pass an
    in-memory one); otherwise one is created from settings.mongodb_uri.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, json_logs=not settings.debug)

    app = FastAPI(
        title="CareerConnect",
        description="""
        Job board API.

        ## Features
        - **Users**: Registration, login, profile and company info
        - **Jobs**: Search, filter, post, update and apply
        - **Messages**: Direct conversations between users
        - **Matches**: Keyword job matching
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.pwd_context = create_password_context(settings.bcrypt_rounds)
    app.state.owns_mongo_client = mongo_client is None
    app.state.mongo_client = create_mongo_client(settings) if mongo_client is None else mongo_client
    app.state.mongo_db = get_database(app.state.mongo_client, settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app)

    # Include API routes
    app.include_router(api_router, prefix="/api")

    @app.get("/api/health", tags=["Health"])
    def health_check(request: Request):
        """Health check with database connectivity."""
        connected = ping_mongo(request.app.state.mongo_client)
        return {"status": "ok", "mongodb": "connected" if connected else "disconnected"}

    return app


app = create_app()
