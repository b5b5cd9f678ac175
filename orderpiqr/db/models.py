"""
==============================================================================
SQLAlchemy ORM Models Module
==============================================================================

ORM models for persisted scan sessions.

This module defines:
- SessionStatus: Enum for scan session states
- ScanSession: One operator's pick list progress

Database Schema:
---------------

    ┌─────────────────────────────────────────────────────────────────┐
    │                         scan_sessions                            │
    ├─────────────────────────────────────────────────────────────────┤
    │ id (UUID, PK)                                                   │
    │ label (VARCHAR, NULLABLE)                                       │
    │ status (ENUM: idle, picking, completed)                         │
    │ pick_list_text (TEXT, NULLABLE)                                 │
    │ last_picked_index (INTEGER, DEFAULT -1)                         │
    │ instruction_text (TEXT, NOT NULL)                               │
    │ scan_count / pick_count / mismatch_count (INTEGER, DEFAULT 0)   │
    │ created_at / updated_at (DATETIME)                              │
    │ started_at / last_scan_at / completed_at (DATETIME, NULLABLE)   │
    └─────────────────────────────────────────────────────────────────┘

Only pick_list_text, last_picked_index and instruction_text are needed to
resume picking; the parsed lines are rebuilt from pick_list_text.

State Machine:
-------------
              pick list scan              last pick
    ┌──────┐ ───────────────▶ ┌─────────┐ ─────────▶ ┌───────────┐
    │ IDLE │                  │ PICKING │            │ COMPLETED │
    └──────┘ ◀─────────────── └─────────┘ ◀───────── └───────────┘
                  reset()                   undo()

    A new pick list scan moves any state to PICKING (or COMPLETED for an
    empty list).

=============================================================================
"""

from __future__ import annotations

import enum
import uuid

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    Integer,
    String,
    Text,
    func,
)

from orderpiqr.db.database import Base


# =============================================================================
# ENUMS
# =============================================================================

class SessionStatus(str, enum.Enum):
    """
    Scan session status enumeration.

    - IDLE: No pick list loaded
    - PICKING: Pick list loaded, lines left to pick
    - COMPLETED: Every line picked
    """

    IDLE = "idle"
    PICKING = "picking"
    COMPLETED = "completed"

    def __str__(self) -> str:
        """Return the enum value as string."""
        return self.value


# =============================================================================
# SCAN SESSION MODEL
# =============================================================================

class ScanSession(Base):
    """
    Persisted scan session.

    Attributes:
        id: Unique identifier (UUID)
        label: Optional operator or device label
        status: Current session status
        pick_list_text: Raw scanned pick list (None until one is scanned)
        last_picked_index: Index of the last picked line (-1 = none)
        instruction_text: Last instruction shown to the operator
        scan_count: Scans received for the current pick list
        pick_count: Successful picks for the current pick list
        mismatch_count: Mismatching scans for the current pick list
        created_at: Session creation timestamp
        updated_at: Last modification timestamp
        started_at: When the current pick list was scanned
        last_scan_at: Time of the most recent scan
        completed_at: When the current pick list was finished
    """

    __tablename__ = "scan_sessions"

    # =========================================================================
    # COLUMNS
    # =========================================================================

    id = Column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        doc="Unique session identifier (UUID)"
    )

    label = Column(
        String(100),
        nullable=True,
        doc="Operator or device label"
    )

    status = Column(
        Enum(SessionStatus),
        default=SessionStatus.IDLE,
        nullable=False,
        index=True,
        doc="Current session status"
    )

    pick_list_text = Column(
        Text,
        nullable=True,
        doc="Raw scanned pick list text"
    )

    last_picked_index = Column(
        Integer,
        default=-1,
        nullable=False,
        doc="Index of the most recently picked line"
    )

    instruction_text = Column(
        Text,
        default="",
        nullable=False,
        doc="Instruction last shown to the operator"
    )

    scan_count = Column(Integer, default=0, nullable=False)

    pick_count = Column(Integer, default=0, nullable=False)

    mismatch_count = Column(Integer, default=0, nullable=False)

    created_at = Column(
        DateTime,
        default=func.now(),
        nullable=False,
        doc="Session creation timestamp"
    )

    updated_at = Column(
        DateTime,
        default=func.now(),
        onupdate=func.now(),
        nullable=False,
        index=True,
        doc="Last modification timestamp"
    )

    started_at = Column(DateTime, nullable=True)

    last_scan_at = Column(DateTime, nullable=True)

    completed_at = Column(DateTime, nullable=True)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def has_pick_list(self) -> bool:
        """Check if a pick list has been scanned."""
        return self.pick_list_text is not None

    def __repr__(self) -> str:
        """Detailed string representation for debugging."""
        return (
            f"ScanSession(id={self.id!r}, "
            f"status={self.status.value if self.status else None!r}, "
            f"last_picked_index={self.last_picked_index})"
        )
