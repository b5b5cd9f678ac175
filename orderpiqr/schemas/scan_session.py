"""
==============================================================================
Scan Session Schemas Module
==============================================================================

Request and response schemas for scan sessions and scan events.

The session detail is the state projection a scanning client renders:
the instruction text and the progress percentage.

==============================================================================
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from orderpiqr.db.models import SessionStatus
from orderpiqr.services.scan_session_service import Projection, ScanOutcome


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class ScanSessionCreate(BaseModel):
    """Scan session creation."""
    label: Optional[str] = Field(default=None, max_length=100)

    @field_validator("label")
    @classmethod
    def strip_label(cls, v: Optional[str]) -> Optional[str]:
        if v:
            v = v.strip()
            return v if v else None
        return None


class ScanRequest(BaseModel):
    """
    One decoded scan.

    The code is kept verbatim: pick list text is persisted exactly as
    scanned and item codes are matched exactly.
    """
    code: str = Field(..., min_length=1, max_length=8192)


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class ScanSessionDetail(BaseModel):
    """Scan session state projection."""
    id: str
    label: Optional[str]
    status: SessionStatus
    has_pick_list: bool
    instruction_text: str
    instruction_lines: List[str]
    progress_percent: float
    last_picked_index: int
    total_items: int
    is_complete: bool
    scan_count: int
    pick_count: int
    mismatch_count: int
    created_at: datetime
    updated_at: datetime
    last_scan_at: Optional[datetime]
    completed_at: Optional[datetime]

    @classmethod
    def from_model(cls, session, projection: Projection):
        return cls(
            id=session.id,
            label=session.label,
            status=session.status,
            has_pick_list=session.has_pick_list,
            instruction_text=session.instruction_text,
            instruction_lines=list(projection.instruction_lines),
            progress_percent=round(projection.progress_percent, 1),
            last_picked_index=session.last_picked_index,
            total_items=projection.total_items,
            is_complete=projection.is_complete,
            scan_count=session.scan_count,
            pick_count=session.pick_count,
            mismatch_count=session.mismatch_count,
            created_at=session.created_at,
            updated_at=session.updated_at,
            last_scan_at=session.last_scan_at,
            completed_at=session.completed_at
        )


class ScanSessionResponse(BaseModel):
    """Single scan session response."""
    success: bool = Field(default=True)
    session: ScanSessionDetail


class ScanSessionListResponse(BaseModel):
    """List of scan sessions response."""
    success: bool = Field(default=True)
    sessions: List[ScanSessionDetail]
    total: int


class ScanResultResponse(BaseModel):
    """Result of one scan event."""
    success: bool = Field(default=True)
    outcome: ScanOutcome
    message: str
    session: ScanSessionDetail
