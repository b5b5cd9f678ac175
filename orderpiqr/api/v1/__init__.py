"""
==============================================================================
API v1 Endpoints
==============================================================================

Version 1 of the REST API.

Routers:
--------
- health: Health check endpoints
- scan_sessions: Scan sessions and scan submission

==============================================================================
"""

from . import health, scan_sessions

__all__ = ["health", "scan_sessions"]
