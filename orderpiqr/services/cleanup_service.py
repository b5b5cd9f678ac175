"""
==============================================================================
Cleanup Service Module
==============================================================================

Cleanup service for background maintenance tasks.

This module implements:
- CleanupService: Class for cleanup operations
- CleanupTaskManager: Background task manager

Background Task:
---------------
The CleanupTaskManager runs a background asyncio task that periodically
deletes scan sessions nobody has touched for session_timeout_hours.

==============================================================================
"""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session

from orderpiqr.config import Settings, get_settings
from orderpiqr.db.database import DatabaseManager
from orderpiqr.db.models import ScanSession, SessionStatus
from orderpiqr.services.scan_session_service import utcnow


# Module logger
logger = logging.getLogger(__name__)


class CleanupService:
    """
    Service for cleanup operations on scan sessions.

    Example:
        >>> cleanup = CleanupService(db_session)
        >>> deleted = cleanup.cleanup_idle()
    """

    def __init__(self, db: Session, settings: Optional[Settings] = None) -> None:
        self._db = db
        self._settings = settings or get_settings()

    def cleanup_idle(self, hours: Optional[int] = None) -> int:
        """
        Delete sessions not updated for the given number of hours.

        Args:
            hours: Age threshold in hours (uses settings if None)

        Returns:
            Number of sessions deleted
        """
        if hours is None:
            hours = self._settings.session_timeout_hours

        threshold = utcnow() - timedelta(hours=hours)

        idle = self._db.query(ScanSession).filter(
            ScanSession.updated_at < threshold
        ).all()

        count = len(idle)

        for session in idle:
            self._db.delete(session)

        self._db.commit()

        if count > 0:
            logger.info(f"🗑️ Cleaned up {count} sessions idle for more than {hours} hours")

        return count

    def cleanup_completed(self) -> int:
        """
        Delete all sessions whose pick list is finished.

        Returns:
            Number of sessions deleted
        """
        completed = self._db.query(ScanSession).filter(
            ScanSession.status == SessionStatus.COMPLETED
        ).all()

        count = len(completed)

        for session in completed:
            self._db.delete(session)

        self._db.commit()

        if count > 0:
            logger.info(f"🗑️ Cleaned up {count} completed sessions")

        return count

    def get_stats(self) -> dict:
        """Get cleanup statistics."""
        threshold = utcnow() - timedelta(hours=self._settings.session_timeout_hours)

        return {
            "total_sessions": self._db.query(ScanSession).count(),
            "completed_sessions": self._db.query(ScanSession).filter(
                ScanSession.status == SessionStatus.COMPLETED
            ).count(),
            "idle_sessions": self._db.query(ScanSession).filter(
                ScanSession.updated_at < threshold
            ).count(),
            "settings": {
                "session_timeout_hours": self._settings.session_timeout_hours,
                "cleanup_interval_minutes": self._settings.cleanup_interval_minutes
            }
        }


class CleanupTaskManager:
    """
    Manager for background cleanup task.

    Example:
        >>> manager = CleanupTaskManager()
        >>> manager.start()  # Start background task
        >>> manager.stop()   # Stop on shutdown
    """

    _instance: Optional[CleanupTaskManager] = None

    def __new__(cls) -> CleanupTaskManager:
        """Singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self) -> None:
        if getattr(self, '_initialized', False):
            return

        self._settings = get_settings()
        self._task: Optional[asyncio.Task] = None
        self._running = False
        self._initialized = True

    def run_once(self) -> int:
        """Run one cleanup pass with its own database session."""
        with DatabaseManager().session_scope() as session:
            return CleanupService(session, self._settings).cleanup_idle()

    async def _cleanup_loop(self) -> None:
        """Background cleanup loop."""
        logger.info("🔄 Cleanup background task started")

        while self._running:
            try:
                await asyncio.sleep(self._settings.cleanup_interval_minutes * 60)

                if not self._settings.auto_cleanup_enabled:
                    continue

                logger.debug("Running scheduled cleanup...")
                deleted = self.run_once()

                if deleted:
                    logger.info(f"✅ Cleanup: deleted {deleted} idle sessions")

            except asyncio.CancelledError:
                logger.info("🛑 Cleanup task cancelled")
                break
            except Exception as e:
                logger.error(f"Cleanup task error: {e}")

    def start(self) -> asyncio.Task:
        """
        Start the background cleanup task.

        Must be called from a running event loop.

        Returns:
            The asyncio Task object
        """
        if self._task is None or self._task.done():
            self._running = True
            self._task = asyncio.create_task(self._cleanup_loop())
            logger.info("✅ Cleanup task started")
        return self._task

    def stop(self) -> None:
        """Stop the background cleanup task."""
        self._running = False
        if self._task and not self._task.done():
            self._task.cancel()
            logger.info("🛑 Cleanup task stopped")
