"""
==============================================================================
Core Package
==============================================================================

Core infrastructure for the application.

This package provides:
- Custom exception handling with consistent error responses
- Exception factory functions for common error scenarios

Usage:
------
    from orderpiqr.core import AppException
    from orderpiqr.core import exceptions

    raise exceptions.session_not_found(session_id)

==============================================================================
"""

from .exceptions import (
    AppException,
    register_exception_handlers,
)

__all__ = [
    "AppException",
    "register_exception_handlers",
]
