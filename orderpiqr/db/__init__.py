"""
==============================================================================
Database Package
==============================================================================

SQLAlchemy database infrastructure and ORM models.

Architecture:
------------
├── database.py   - DatabaseManager class, session factory
├── models.py     - ScanSession ORM model
└── init_db.py    - DatabaseInitializer for setup

Usage:
------
    from orderpiqr.db import DatabaseManager, ScanSession

    with DatabaseManager().session_scope() as session:
        sessions = session.query(ScanSession).all()

==============================================================================
"""

from .database import DatabaseManager, Base, get_db
from .models import ScanSession, SessionStatus
from .init_db import DatabaseInitializer, init_db

__all__ = [
    # Database management
    "DatabaseManager",
    "Base",
    "get_db",
    # Models
    "ScanSession",
    "SessionStatus",
    # Initialization
    "DatabaseInitializer",
    "init_db",
]
