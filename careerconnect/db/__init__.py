"""
Database module - MongoDB connection helpers.
"""
from careerconnect.db.mongodb import (
    COLLECTIONS,
    create_mongo_client,
    get_database,
    get_db,
    init_mongo_indexes,
    ping_mongo,
)

__all__ = [
    "COLLECTIONS",
    "create_mongo_client",
    "get_database",
    "get_db",
    "init_mongo_indexes",
    "ping_mongo",
]
