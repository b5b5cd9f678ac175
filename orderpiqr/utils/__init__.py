"""
==============================================================================
Utilities Package
==============================================================================

Utility classes and functions for the application.

Modules:
--------
- pick_logger: Pick list completion log file generation

==============================================================================
"""

from .pick_logger import PickLogger

__all__ = [
    "PickLogger",
]
