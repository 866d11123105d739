# legal_diary/db/__init__.py

"""
Database Module

Contains SQLAlchemy models and database configuration.
"""

from legal_diary.db.database import Base, engine, SessionLocal, get_db, init_db
from legal_diary.db import models

__all__ = [
    'Base',
    'engine',
    'SessionLocal',
    'get_db',
    'init_db',
    'models',
]
