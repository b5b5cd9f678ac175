"""
==============================================================================
Scan Session Service Module
==============================================================================

Service that feeds decoded scans into the pick list engine.

This module implements:
- ScanDispatcher: Decides whether a scan is a pick list or an item
- ScanSessionService: Scan handling and persistence of pick progress
- Projection: Instruction and progress values shown to the operator

Scan Dispatch:
-------------
    scan text ──▶ len(text) > threshold ? ──yes──▶ parse() → new pick list
                                          │
                                          no
                                          ▼
                  no list? ─────────────▶ NO_PICK_LIST   (no change)
                  list complete? ───────▶ LIST_COMPLETE  (no change)
                  pick() true? ─────────▶ advance() → PICKED / COMPLETED
                  otherwise ────────────▶ MISMATCH       (no change)

Persistence:
-----------
A session stores the raw pick list text, the last picked index and the
instruction text. The PickList is rebuilt from those on every scan, so a
restarted service resumes exactly where the operator left off.

==============================================================================
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from orderpiqr.config import Settings, get_settings
from orderpiqr.core import exceptions
from orderpiqr.db.models import ScanSession, SessionStatus
from orderpiqr.picklist import PickList, PickListEngine
from orderpiqr.utils.pick_logger import PickLogger


# Module logger
logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the database defaults."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# =============================================================================
# VALUE TYPES
# =============================================================================

class ScanOutcome(str, enum.Enum):
    """
    Result of one scan.

    - PICK_LIST_LOADED: Scan replaced the session's pick list
    - PICKED: Scan matched the line to pick, moved to the next line
    - COMPLETED: Scan matched the final line
    - MISMATCH: Scan did not match the line to pick
    - NO_PICK_LIST: Item scanned before any pick list
    - LIST_COMPLETE: Item scanned after the list was finished
    """

    PICK_LIST_LOADED = "pick_list_loaded"
    PICKED = "picked"
    COMPLETED = "completed"
    MISMATCH = "mismatch"
    NO_PICK_LIST = "no_pick_list"
    LIST_COMPLETE = "list_complete"

    def __str__(self) -> str:
        return self.value

    @property
    def is_pick(self) -> bool:
        """Check if the scan advanced the pick list."""
        return self in (ScanOutcome.PICKED, ScanOutcome.COMPLETED)


@dataclass(frozen=True)
class Projection:
    """Operator facing view of a session's engine state."""

    instruction_lines: Tuple[str, ...]
    progress_percent: float
    total_items: int
    is_complete: bool


@dataclass
class ScanResult:
    """Outcome of handle_scan together with the updated session."""

    outcome: ScanOutcome
    message: str
    session: ScanSession
    log_file: Optional[str] = None


# =============================================================================
# DISPATCH
# =============================================================================

class ScanDispatcher:
    """
    Length heuristic separating pick list scans from item scans.

    A pick list QR code holds several lines of text; an item or bin label
    is a short code.

    Example:
        >>> dispatcher = ScanDispatcher(threshold=12)
        >>> dispatcher.is_pick_list("SKU-000123")
        False
    """

    def __init__(self, threshold: int) -> None:
        self._threshold = threshold

    @property
    def threshold(self) -> int:
        return self._threshold

    def is_pick_list(self, text: str) -> bool:
        return len(text) > self._threshold


# =============================================================================
# SERVICE
# =============================================================================

class ScanSessionService:
    """
    Service for scan sessions and scan handling.

    Attributes:
        _db: Database session
        _settings: Application settings
        _engine: Pick list engine built with the configured message table
        _dispatcher: Pick list / item scan heuristic
        _pick_logger: Completion log writer

    Example:
        >>> service = ScanSessionService(db_session)
        >>> session = service.create_session("handheld-3")
        >>> result = service.handle_scan(session.id, pick_list_text)
        >>> result.outcome
        <ScanOutcome.PICK_LIST_LOADED: 'pick_list_loaded'>
    """

    def __init__(
        self,
        db: Session,
        settings: Optional[Settings] = None,
        pick_logger: Optional[PickLogger] = None
    ) -> None:
        self._db = db
        self._settings = settings or get_settings()
        self._engine = PickListEngine(self._settings.completion_message)
        self._dispatcher = ScanDispatcher(self._settings.pick_list_length_threshold)
        self._pick_logger = pick_logger

    @property
    def engine(self) -> PickListEngine:
        return self._engine

    @property
    def pick_logger(self) -> PickLogger:
        if self._pick_logger is None:
            self._pick_logger = PickLogger()
        return self._pick_logger

    # =========================================================================
    # CRUD OPERATIONS
    # =========================================================================

    def create_session(self, label: Optional[str] = None) -> ScanSession:
        """
        Create an empty scan session.

        Args:
            label: Optional operator or device label

        Returns:
            New ScanSession waiting for a pick list
        """
        session = ScanSession(
            label=label,
            status=SessionStatus.IDLE,
            last_picked_index=-1,
            instruction_text=self._settings.no_pick_list_message,
        )
        self._db.add(session)
        self._db.commit()
        self._db.refresh(session)

        logger.info(f"✅ Scan session created: {session.id}")
        return session

    def get_session(self, session_id: str) -> ScanSession:
        """
        Get scan session by id.

        Raises:
            AppException: SESSION_NOT_FOUND if not found
        """
        session = self._db.query(ScanSession).filter(
            ScanSession.id == session_id
        ).first()

        if not session:
            raise exceptions.session_not_found(session_id)

        return session

    def list_sessions(
        self,
        status: Optional[SessionStatus] = None,
        offset: int = 0,
        limit: int = 100
    ) -> List[ScanSession]:
        """List scan sessions, most recently active first."""
        query = self._db.query(ScanSession)

        if status is not None:
            query = query.filter(ScanSession.status == status)

        return query.order_by(
            ScanSession.updated_at.desc()
        ).offset(offset).limit(limit).all()

    def count_sessions(self, status: Optional[SessionStatus] = None) -> int:
        query = self._db.query(ScanSession)
        if status is not None:
            query = query.filter(ScanSession.status == status)
        return query.count()

    def delete_session(self, session_id: str) -> bool:
        session = self.get_session(session_id)
        self._db.delete(session)
        self._db.commit()

        logger.info(f"🗑️ Scan session deleted: {session_id}")
        return True

    # =========================================================================
    # ENGINE STATE
    # =========================================================================

    def load_pick_list(self, session: ScanSession) -> Optional[PickList]:
        """Rebuild the session's PickList, None when no list was scanned."""
        if session.pick_list_text is None:
            return None
        return self._engine.restore(session.pick_list_text, session.last_picked_index)

    def project(self, session: ScanSession) -> Projection:
        """Compute the instruction and progress shown for a session."""
        pick_list = self.load_pick_list(session)

        if pick_list is None:
            return Projection(
                instruction_lines=(self._settings.no_pick_list_message,),
                progress_percent=0.0,
                total_items=0,
                is_complete=False,
            )

        return Projection(
            instruction_lines=self._engine.item_to_scan(pick_list),
            progress_percent=self._engine.progress(pick_list),
            total_items=pick_list.total_items,
            is_complete=self._engine.is_complete(pick_list),
        )

    def _store(self, session: ScanSession, pick_list: PickList) -> None:
        """Write engine state back onto the session row."""
        session.last_picked_index = pick_list.last_picked_index
        session.instruction_text = self._engine.instruction_text(pick_list)

        if self._engine.is_complete(pick_list):
            session.status = SessionStatus.COMPLETED
            if session.completed_at is None:
                session.completed_at = utcnow()
        else:
            session.status = SessionStatus.PICKING
            session.completed_at = None

    # =========================================================================
    # SCAN HANDLING
    # =========================================================================

    def handle_scan(self, session_id: str, code: str) -> ScanResult:
        """
        Handle one decoded scan.

        Args:
            session_id: Session the scan belongs to
            code: Decoded scan text, used verbatim

        Returns:
            ScanResult with outcome, operator message and updated session

        Raises:
            AppException: SESSION_NOT_FOUND if not found
        """
        session = self.get_session(session_id)
        now = utcnow()
        log_file = None

        if self._dispatcher.is_pick_list(code):
            outcome = self._load_pick_list(session, code, now)
        else:
            outcome = self._pick_item(session, code)

        session.scan_count = (session.scan_count or 0) + 1
        session.last_scan_at = now

        self._db.commit()
        self._db.refresh(session)

        if outcome == ScanOutcome.COMPLETED:
            pick_list = self.load_pick_list(session)
            log_file = self.pick_logger.generate_log(session, pick_list)
            logger.info(f"✅ Pick list completed in session {session.id}")

        return ScanResult(
            outcome=outcome,
            message=self.outcome_message(outcome, code, session),
            session=session,
            log_file=log_file,
        )

    def _load_pick_list(self, session: ScanSession, code: str, now: datetime) -> ScanOutcome:
        """Replace the session's pick list in full."""
        pick_list = self._engine.parse(code)

        session.pick_list_text = code
        session.scan_count = 0
        session.pick_count = 0
        session.mismatch_count = 0
        session.started_at = now
        session.completed_at = None
        self._store(session, pick_list)

        logger.info(
            f"📋 Pick list loaded in session {session.id}: "
            f"{pick_list.total_items} lines"
        )
        return ScanOutcome.PICK_LIST_LOADED

    def _pick_item(self, session: ScanSession, code: str) -> ScanOutcome:
        """Check an item scan against the line to pick and commit a match."""
        pick_list = self.load_pick_list(session)

        if pick_list is None:
            logger.info(f"Item scan before pick list in session {session.id}")
            return ScanOutcome.NO_PICK_LIST

        if self._engine.is_complete(pick_list):
            return ScanOutcome.LIST_COMPLETE

        if not self._engine.pick(pick_list, code):
            session.mismatch_count = (session.mismatch_count or 0) + 1
            logger.info(
                f"✗ Mismatch in session {session.id}: {code!r} "
                f"(line {pick_list.last_picked_index + 2})"
            )
            return ScanOutcome.MISMATCH

        self._engine.advance(pick_list)
        session.pick_count = (session.pick_count or 0) + 1
        self._store(session, pick_list)

        logger.info(
            f"✓ Picked in session {session.id}: {code!r} "
            f"(line {pick_list.last_picked_index + 1}/{pick_list.total_items})"
        )

        if self._engine.is_complete(pick_list):
            return ScanOutcome.COMPLETED
        return ScanOutcome.PICKED

    def outcome_message(self, outcome: ScanOutcome, code: str, session: ScanSession) -> str:
        """Short operator message for a scan outcome."""
        if outcome == ScanOutcome.PICK_LIST_LOADED:
            total = self.project(session).total_items
            return f"Pick list loaded: {total} line{'s' if total != 1 else ''}"
        if outcome == ScanOutcome.PICKED:
            return f"Picked {code}"
        if outcome == ScanOutcome.COMPLETED:
            return "Pick list complete"
        if outcome == ScanOutcome.MISMATCH:
            return f"{code} does not match the item to pick"
        if outcome == ScanOutcome.NO_PICK_LIST:
            return self._settings.no_pick_list_message
        return "Pick list already complete"

    # =========================================================================
    # CORRECTIONS
    # =========================================================================

    def undo_pick(self, session_id: str) -> ScanSession:
        """
        Step back one line, undoing the last committed pick.

        Raises:
            AppException: SESSION_NOT_FOUND, NOTHING_TO_UNDO
        """
        session = self.get_session(session_id)
        pick_list = self.load_pick_list(session)

        if pick_list is None or not self._engine.retreat(pick_list):
            raise exceptions.nothing_to_undo(session_id)

        session.pick_count = max(0, (session.pick_count or 0) - 1)
        self._store(session, pick_list)
        self._db.commit()
        self._db.refresh(session)

        logger.info(f"↩️ Undo in session {session.id}: back to line {pick_list.last_picked_index + 2}")
        return session

    def reset_session(self, session_id: str) -> ScanSession:
        """Drop the session's pick list and counters."""
        session = self.get_session(session_id)

        session.pick_list_text = None
        session.last_picked_index = -1
        session.instruction_text = self._settings.no_pick_list_message
        session.status = SessionStatus.IDLE
        session.scan_count = 0
        session.pick_count = 0
        session.mismatch_count = 0
        session.started_at = None
        session.completed_at = None

        self._db.commit()
        self._db.refresh(session)

        logger.info(f"🔄 Scan session reset: {session.id}")
        return session
