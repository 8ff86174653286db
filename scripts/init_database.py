#!/usr/bin/env python
"""
Database initialization script for the Movies API.

Creates the movies and ratings tables in the database named by DATABASE_URL
(or --database-url) and verifies the schema.

Usage:
    # Create missing tables
    python scripts/init_database.py

    # Drop and recreate all tables
    python scripts/init_database.py --reset
"""

import argparse
import os
import sys

from movies_api.database import init_database, verify_schema
from movies_api.database.connection import DEFAULT_DATABASE_URL
from movies_api.utils.logging_config import setup_logging


def main():
    """Main entry point for database initialization."""
    parser = argparse.ArgumentParser(description="Initialize the Movies API database")
    parser.add_argument(
        '--reset',
        action='store_true',
        help='Drop and recreate database tables (WARNING: deletes all data)'
    )
    parser.add_argument(
        '--database-url',
        type=str,
        default=os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL,
        help=f'SQLAlchemy database URL (default: $DATABASE_URL or {DEFAULT_DATABASE_URL})'
    )
    args = parser.parse_args()

    setup_logging(level="INFO")
    db_manager = init_database(database_url=args.database_url, reset=args.reset)
    if not verify_schema(db_manager):
        sys.exit(1)


if __name__ == "__main__":
    main()
