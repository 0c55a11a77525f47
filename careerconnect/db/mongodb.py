"""
MongoDB Connection Utility

MongoDB stores every CareerConnect entity:
- users: credentials, role, profile and company info
- jobs: postings with their owner and applicant references
- messages: direct messages between two users

The client is created once by create_app() from the Settings it is given
and kept on app.state; routes reach the database through get_db().
"""
import structlog
from fastapi import Request
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database

from careerconnect.core.config import Settings

logger = structlog.get_logger()


# Collection name constants (avoid typos)
COLLECTIONS = {
    "users": "users",
    "jobs": "jobs",
    "messages": "messages",
}


def create_mongo_client(settings: Settings) -> MongoClient:
    """
    Build a MongoClient (connection pooling handled internally by pymongo).
    tz_aware=True makes stored datetimes come back as UTC-aware values.
    """
    return MongoClient(settings.mongodb_uri, tz_aware=True)


def get_database(client: MongoClient, settings: Settings) -> Database:
    """Get the configured application database from a client."""
    return client[settings.mongodb_db]


def get_db(request: Request) -> Database:
    """
    Dependency for FastAPI route injection.
    Usage:
        @router.get("/jobs")
        def list_jobs(db: Database = Depends(get_db)):
            ...
    """
    return request.app.state.mongo_db


def ping_mongo(client: MongoClient) -> bool:
    """
    Check if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        # ping command checks connection
        client.admin.command("ping")
        return True
    except Exception as e:
        logger.warning("mongodb.ping_failed", error=str(e))
        return False


def init_mongo_indexes(db: Database) -> None:
    """
    Create indexes for uniqueness and query performance.
    Call this once during app startup.
    """
    # Email is the login key; uniqueness is enforced here, not in code
    db[COLLECTIONS["users"]].create_index("email", unique=True)

    # Filter fields used by the job list endpoint
    db[COLLECTIONS["jobs"]].create_index([
        ("location", ASCENDING),
        ("job_type", ASCENDING),
        ("experience_level", ASCENDING),
    ])
    db[COLLECTIONS["jobs"]].create_index([("created_at", DESCENDING)])
    db[COLLECTIONS["jobs"]].create_index("posted_by")

    # Conversation lookups
    db[COLLECTIONS["messages"]].create_index([
        ("sender_id", ASCENDING),
        ("receiver_id", ASCENDING),
    ])
    db[COLLECTIONS["messages"]].create_index([("created_at", DESCENDING)])

    logger.info("mongodb.indexes_created", database=db.name)
