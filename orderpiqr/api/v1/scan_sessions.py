"""
==============================================================================
Scan Session Endpoints
==============================================================================

Session management and scan submission.

==============================================================================
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from orderpiqr.db.database import get_db
from orderpiqr.db.models import SessionStatus
from orderpiqr.services.scan_session_service import ScanSessionService
from orderpiqr.services.cleanup_service import CleanupService
from orderpiqr.schemas.scan_session import (
    ScanSessionCreate,
    ScanRequest,
    ScanSessionDetail,
    ScanSessionResponse,
    ScanSessionListResponse,
    ScanResultResponse,
)
from orderpiqr.schemas.common import MessageResponse


router = APIRouter(prefix="/sessions", tags=["Scan Sessions"])


class ScanSessionController:
    """Controller for scan session operations."""

    def __init__(self, db: Session):
        self._service = ScanSessionService(db)

    def _detail(self, session) -> ScanSessionDetail:
        return ScanSessionDetail.from_model(session, self._service.project(session))

    def create(self, data: ScanSessionCreate) -> ScanSessionResponse:
        """Create scan session."""
        session = self._service.create_session(data.label)
        return ScanSessionResponse(session=self._detail(session))

    def list_all(
        self,
        status: Optional[SessionStatus],
        offset: int,
        limit: int
    ) -> ScanSessionListResponse:
        """List scan sessions."""
        sessions = self._service.list_sessions(status=status, offset=offset, limit=limit)
        return ScanSessionListResponse(
            sessions=[self._detail(s) for s in sessions],
            total=self._service.count_sessions(status=status)
        )

    def get(self, session_id: str) -> ScanSessionResponse:
        """Get scan session state."""
        session = self._service.get_session(session_id)
        return ScanSessionResponse(session=self._detail(session))

    def delete(self, session_id: str) -> MessageResponse:
        """Delete scan session."""
        self._service.delete_session(session_id)
        return MessageResponse(message=f"Scan session '{session_id}' deleted")

    def scan(self, session_id: str, data: ScanRequest) -> ScanResultResponse:
        """Submit one decoded scan."""
        result = self._service.handle_scan(session_id, data.code)
        return ScanResultResponse(
            outcome=result.outcome,
            message=result.message,
            session=self._detail(result.session)
        )

    def undo(self, session_id: str) -> ScanSessionResponse:
        """Undo the last pick."""
        session = self._service.undo_pick(session_id)
        return ScanSessionResponse(session=self._detail(session))

    def reset(self, session_id: str) -> ScanSessionResponse:
        """Drop the pick list."""
        session = self._service.reset_session(session_id)
        return ScanSessionResponse(session=self._detail(session))


# ==== CLEANUP ====

@router.delete("/cleanup/completed")
async def cleanup_completed(db: Session = Depends(get_db)):
    """Delete all sessions with a finished pick list."""
    service = CleanupService(db)
    count = service.cleanup_completed()
    return {"success": True, "message": f"Deleted {count} completed sessions", "deleted_count": count}


@router.delete("/cleanup/idle")
async def cleanup_idle(
    hours: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db)
):
    """Delete sessions idle for longer than the given hours."""
    service = CleanupService(db)
    count = service.cleanup_idle(hours)
    return {"success": True, "message": f"Deleted {count} idle sessions", "deleted_count": count}


@router.get("/cleanup/stats")
async def get_cleanup_stats(db: Session = Depends(get_db)):
    """Get cleanup statistics."""
    service = CleanupService(db)
    return {"success": True, "stats": service.get_stats()}


# ==== CRUD ====

@router.post("", response_model=ScanSessionResponse)
async def create_scan_session(
    data: Optional[ScanSessionCreate] = None,
    db: Session = Depends(get_db)
):
    """Create a new scan session waiting for a pick list."""
    controller = ScanSessionController(db)
    return controller.create(data or ScanSessionCreate())


@router.get("", response_model=ScanSessionListResponse)
async def list_scan_sessions(
    status: Optional[SessionStatus] = Query(None),
    offset: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """List scan sessions, most recently active first."""
    controller = ScanSessionController(db)
    return controller.list_all(status, offset, limit)


@router.get("/{session_id}", response_model=ScanSessionResponse)
async def get_scan_session(
    session_id: str,
    db: Session = Depends(get_db)
):
    """Get the instruction and progress of a scan session."""
    controller = ScanSessionController(db)
    return controller.get(session_id)


@router.delete("/{session_id}", response_model=MessageResponse)
async def delete_scan_session(
    session_id: str,
    db: Session = Depends(get_db)
):
    """Delete a scan session."""
    controller = ScanSessionController(db)
    return controller.delete(session_id)


# ==== SCANNING ====

@router.post("/{session_id}/scans", response_model=ScanResultResponse)
async def submit_scan(
    session_id: str,
    data: ScanRequest,
    db: Session = Depends(get_db)
):
    """
    Submit one decoded scan.

    Text longer than the configured threshold loads a new pick list;
    shorter text is checked against the line to pick. A mismatch or an
    item scanned before any pick list is reported in the outcome, not
    as an error.
    """
    controller = ScanSessionController(db)
    return controller.scan(session_id, data)


@router.post("/{session_id}/undo", response_model=ScanSessionResponse)
async def undo_pick(
    session_id: str,
    db: Session = Depends(get_db)
):
    """Step back one line."""
    controller = ScanSessionController(db)
    return controller.undo(session_id)


@router.post("/{session_id}/reset", response_model=ScanSessionResponse)
async def reset_scan_session(
    session_id: str,
    db: Session = Depends(get_db)
):
    """Drop the pick list and counters."""
    controller = ScanSessionController(db)
    return controller.reset(session_id)
