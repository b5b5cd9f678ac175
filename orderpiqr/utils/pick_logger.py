"""
==============================================================================
Pick Logger Module
==============================================================================

Log file generator for finished pick lists.

This module implements:
- PickLogger: Class for generating formatted completion logs

Log File Contents:
-----------------
- Session metadata (id, label, timestamps)
- Every pick list line with its acceptable codes
- Scan statistics

File Format:
-----------
pick_{session_id}_{YYYY-MM-DD}_{HH-MM-SS}-{microseconds}.log

==============================================================================
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from orderpiqr.config import get_settings
from orderpiqr.db.models import ScanSession
from orderpiqr.picklist import PickList


# Module logger
logger = logging.getLogger(__name__)


class PickLogger:
    """
    Generator for pick list completion log files.

    Example:
        >>> pick_logger = PickLogger()
        >>> log_path = pick_logger.generate_log(session, pick_list)
        >>> print(log_path)
        'storage/logs/pick_0b6f..._2025-01-15_10-30-45-120431.log'
    """

    def __init__(self, log_dir: Optional[Path] = None) -> None:
        """
        Initialize the pick logger.

        Args:
            log_dir: Custom log directory (uses settings if None)
        """
        self._log_dir = Path(log_dir) if log_dir else get_settings().log_path
        self._log_dir.mkdir(parents=True, exist_ok=True)

    @property
    def log_dir(self) -> Path:
        return self._log_dir

    def generate_log(self, session: ScanSession, pick_list: PickList) -> str:
        """
        Generate log file for a finished pick list.

        Args:
            session: Scan session the list was picked in
            pick_list: The finished pick list

        Returns:
            Path to generated log file
        """
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d_%H-%M-%S-%f")
        filename = f"pick_{session.id}_{timestamp}.log"
        filepath = self._log_dir / filename

        content = self._format_log(session, pick_list)
        filepath.write_text(content, encoding="utf-8")

        logger.info(f"✅ Generated log file: {filepath}")
        return str(filepath)

    def _format_log(self, session: ScanSession, pick_list: PickList) -> str:
        """Format the log file content."""
        lines = []
        separator = "=" * 80

        # Header
        lines.extend([
            separator,
            "PICK LIST COMPLETION LOG",
            separator,
            "",
            f"Session:         {session.id}",
            f"Label:           {session.label or '-'}",
            f"Status:          {session.status.value.upper()}",
            "",
            f"Started At:      {self._format_datetime(session.started_at)}",
            f"Completed At:    {self._format_datetime(session.completed_at)}",
        ])

        if session.completed_at and session.started_at:
            duration = session.completed_at - session.started_at
            lines.append(f"Duration:        {self._format_duration(duration.total_seconds())}")

        lines.append("")

        # Lines section
        lines.extend([separator, "LINES", separator, ""])

        for index, tokens in enumerate(pick_list.items, start=1):
            mark = "[✓]" if index - 1 <= pick_list.last_picked_index else "[ ]"
            lines.append(f"{mark} {index:>3}. {' '.join(tokens) if tokens else '(empty line)'}")

        lines.append("")

        # Summary section
        lines.extend([separator, "SUMMARY", separator, ""])

        lines.extend([
            f"Total Lines:       {pick_list.total_items}",
            f"Picked Lines:      {pick_list.last_picked_index + 1}",
            f"Scans:             {session.scan_count}",
            f"Mismatches:        {session.mismatch_count}",
            "",
        ])

        lines.append(separator)
        lines.append(f"Generated: {self._format_datetime(datetime.now(timezone.utc))}")
        lines.append(separator)

        return "\n".join(lines)

    @staticmethod
    def _format_datetime(dt: Optional[datetime]) -> str:
        """Format datetime for display."""
        if dt is None:
            return "N/A"
        return dt.strftime("%Y-%m-%d %H:%M:%S")

    @staticmethod
    def _format_duration(seconds: float) -> str:
        """Format duration in human-readable form."""
        if seconds < 0:
            return "N/A"

        hours = int(seconds // 3600)
        minutes = int((seconds % 3600) // 60)
        secs = int(seconds % 60)

        parts = []
        if hours > 0:
            parts.append(f"{hours} hour{'s' if hours != 1 else ''}")
        if minutes > 0:
            parts.append(f"{minutes} minute{'s' if minutes != 1 else ''}")
        if secs > 0 or not parts:
            parts.append(f"{secs} second{'s' if secs != 1 else ''}")

        return " ".join(parts)
