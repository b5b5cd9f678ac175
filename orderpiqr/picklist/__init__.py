"""
==============================================================================
Pick List Package
==============================================================================

Pick list parsing and pick sequencing.

Classes:
--------
- PickList: Parsed pick list with its pick position
- PickListEngine: Parse, query and advance pick lists

==============================================================================
"""

from .engine import COMPLETION_MESSAGE, PickList, PickListEngine

__all__ = ["COMPLETION_MESSAGE", "PickList", "PickListEngine"]
