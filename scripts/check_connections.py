#!/usr/bin/env python3
"""
Connection Check Script

Run this to verify MongoDB is reachable with the current settings and,
optionally, create the indexes the API relies on.

Usage:
    python scripts/check_connections.py
    python scripts/check_connections.py --init-indexes
"""
import argparse

from careerconnect.core.config import get_settings
from careerconnect.db.mongodb import (
    COLLECTIONS,
    create_mongo_client,
    get_database,
    init_mongo_indexes,
    ping_mongo,
)


def main():
    parser = argparse.ArgumentParser(description="Check CareerConnect's MongoDB connection")
    parser.add_argument("--init-indexes", action="store_true", help="create collection indexes")
    args = parser.parse_args()

    settings = get_settings()
    print("=" * 50)
    print("CAREERCONNECT - CONNECTION CHECK")
    print("=" * 50)

    print("\n[1] MongoDB")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")

    client = create_mongo_client(settings)
    try:
        if not ping_mongo(client):
            print("    ❌ MongoDB: FAILED")
            raise SystemExit(1)
        print("    ✅ MongoDB: CONNECTED")

        db = get_database(client, settings)
        print("\n[2] Collections")
        for name in COLLECTIONS.values():
            print(f"    {name}: {db[name].estimated_document_count()} documents")

        if args.init_indexes:
            print("\n[3] Indexes")
            init_mongo_indexes(db)
            print("    ✅ Indexes created")
    finally:
        client.close()

    print("\n" + "=" * 50)
    print("Connection check complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
