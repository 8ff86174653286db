"""
Database module for the movies service.

This module provides database models, connection management, and CRUD operations
using SQLAlchemy ORM over SQLite or PostgreSQL.
"""

from movies_api.database.models import Base, Movie, Rating, RATING_VALUES
from movies_api.database.types import BoxOffice, Revenue
from movies_api.database.connection import DatabaseManager, get_db_manager, reset_db_manager
from movies_api.database.init_db import init_database, verify_schema
from movies_api.database import crud

__all__ = [
    # Models
    'Base',
    'Movie',
    'Rating',
    'RATING_VALUES',
    'BoxOffice',
    'Revenue',
    # Connection
    'DatabaseManager',
    'get_db_manager',
    'reset_db_manager',
    # Initialization
    'init_database',
    'verify_schema',
    # CRUD module
    'crud',
]
