"""
==============================================================================
Database Initialization Module
==============================================================================

Database setup utilities.

Initialization Flow:
-------------------
1. Import ORM models so they register with the metadata
2. Create all tables
3. Verify the connection and log the result

Usage:
------
    from orderpiqr.db import init_db

    init_db()

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Optional

from orderpiqr.db.database import DatabaseManager
from orderpiqr.db import models  # noqa: F401  registers tables on Base


# Module logger
logger = logging.getLogger(__name__)


class DatabaseInitializer:
    """
    Database initialization manager.

    Example:
        >>> initializer = DatabaseInitializer()
        >>> initializer.initialize()
    """

    def __init__(self, db_manager: Optional[DatabaseManager] = None) -> None:
        self._db_manager = db_manager or DatabaseManager()

    def create_tables(self) -> None:
        """Create all tables from the ORM models."""
        self._db_manager.create_tables()

    def initialize(self) -> bool:
        """
        Run the full initialization.

        Returns:
            True if the database is reachable after setup
        """
        logger.info("Initializing database...")
        self.create_tables()

        connected = self._db_manager.verify_connection()
        if connected:
            logger.info("✅ Database initialized")
        else:
            logger.error("❌ Database initialization failed")
        return connected


def init_db() -> bool:
    """Initialize the database with the default DatabaseManager."""
    return DatabaseInitializer().initialize()
