"""
==============================================================================
Services Package - Business Logic Layer
==============================================================================

Service classes implementing business logic.

This package provides:
- ScanSessionService: Scan handling and pick progress persistence
- CleanupService: Background cleanup operations

Architecture Pattern: Service Layer
----------------------------------

    ┌─────────────────┐
    │ API / WebSocket │
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │    Service      │  ← Scan dispatch, persistence
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │ PickListEngine  │  ← Parsing and pick sequencing
    └─────────────────┘

Usage:
------
    from orderpiqr.services import ScanSessionService

    service = ScanSessionService(db_session)
    result = service.handle_scan(session_id, "SKU1")

==============================================================================
"""

from .scan_session_service import (
    Projection,
    ScanDispatcher,
    ScanOutcome,
    ScanResult,
    ScanSessionService,
)
from .cleanup_service import CleanupService, CleanupTaskManager

__all__ = [
    "Projection",
    "ScanDispatcher",
    "ScanOutcome",
    "ScanResult",
    "ScanSessionService",
    "CleanupService",
    "CleanupTaskManager",
]
