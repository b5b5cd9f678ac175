"""
==============================================================================
WebSocket Package
==============================================================================

Real-time WebSocket handlers for scanning clients.

Handlers:
---------
- scanner: Scan submission with live session state updates

==============================================================================
"""

from .scanner import router as scanner_router

__all__ = ["scanner_router"]
