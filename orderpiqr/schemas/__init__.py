"""
==============================================================================
Schemas Package - Pydantic Models
==============================================================================

Request and response schemas using Pydantic for validation.

This package provides:
- Common: Shared response schemas
- ScanSession: Scan session and scan event schemas

==============================================================================
"""

from .common import MessageResponse
from .scan_session import (
    ScanSessionCreate,
    ScanRequest,
    ScanSessionDetail,
    ScanSessionResponse,
    ScanSessionListResponse,
    ScanResultResponse,
)

__all__ = [
    # Common
    "MessageResponse",
    # Scan Session
    "ScanSessionCreate",
    "ScanRequest",
    "ScanSessionDetail",
    "ScanSessionResponse",
    "ScanSessionListResponse",
    "ScanResultResponse",
]
