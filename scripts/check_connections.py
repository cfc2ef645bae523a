#!/usr/bin/env python3
"""
Connection Check Script

Run this to verify the database, MongoDB and AI connections are working.
Usage: python scripts/check_connections.py
"""
import sys
sys.path.insert(0, '.')

from hunter.db.postgres import test_postgres_connection
from hunter.db.mongodb import test_mongo_connection
from hunter.services.ai_client import get_ai_client
from hunter.core.config import get_settings


def main():
    settings = get_settings()
    print("=" * 50)
    print("HUNTER AI - CONNECTION CHECK")
    print("=" * 50)

    # SQL database
    print("\n[1] Checking database...")
    print(f"    URL: {settings.database_url.split('@')[-1]}")
    if test_postgres_connection():
        print("    ✅ Database: CONNECTED")
    else:
        print("    ❌ Database: FAILED")

    # MongoDB
    print("\n[2] Checking MongoDB...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    if test_mongo_connection():
        print("    ✅ MongoDB: CONNECTED")
    else:
        print("    ❌ MongoDB: FAILED")

    # AI endpoint (only if an API key is set)
    print("\n[3] Checking AI endpoint...")
    if settings.ai_api_key:
        print(f"    Base URL: {settings.ai_base_url}")
        print(f"    Model: {settings.ai_model}")
        if get_ai_client().test_connection():
            print("    ✅ AI: CONNECTED")
        else:
            print("    ❌ AI: FAILED")
    else:
        print("    ⚠️  AI: API key not configured (skipped)")

    print("\n" + "=" * 50)
    print("Connection check complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
