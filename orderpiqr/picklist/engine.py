"""
==============================================================================
Pick List Engine Module
==============================================================================

Parses a scanned pick list and sequences the picks through it.

A pick list is a block of text (usually encoded in a QR code) with one
line per item to retrieve. Each line is split into whitespace separated
tokens; every token on a line is an acceptable scan for that line, so an
item code and a bin location may both appear on the same line.

Picking Protocol:
-----------------
    1. parse(text)                  -> PickList (last_picked_index = -1)
    2. item_to_scan(pick_list)      -> tokens of the next line
    3. pick(pick_list, code)        -> True if code is one of those tokens
    4. advance(pick_list)           -> caller commits the pick
    5. repeat from 2 until the completion message is returned

    index:  -1 ──advance──▶ 0 ──advance──▶ ... ──advance──▶ n-1 (complete)

Line Separators:
---------------
Lines are separated by a real CRLF or by the literal two character
sequences backslash-r and backslash-n. A lone LF or CR character is NOT
a separator.

==============================================================================
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple


# Module logger
logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

COMPLETION_MESSAGE: Tuple[str, ...] = (
    "Einde van pickbon.",
    "Je bent klaar.",
    "Pak de volgende pickbon.",
)

# CRLF, literal "\r", literal "\n"
LINE_SEPARATOR = re.compile(r"\r\n|\\r|\\n")

TOKEN_SEPARATOR = re.compile(r"[ \t]")


# =============================================================================
# DATA MODEL
# =============================================================================

@dataclass
class PickList:
    """
    One active pick list.

    Attributes:
        source_text: Raw scanned text, kept verbatim for persistence
        items: One token tuple per pick list line
        last_picked_index: Index of the most recently picked line (-1 = none)
    """

    source_text: str
    items: Tuple[Tuple[str, ...], ...] = field(default_factory=tuple)
    last_picked_index: int = -1

    @property
    def total_items(self) -> int:
        """Number of lines in the pick list."""
        return len(self.items)

    @property
    def last_index(self) -> int:
        """Index of the final line (-1 for an empty list)."""
        return len(self.items) - 1

    def __repr__(self) -> str:
        return (
            f"PickList(items={len(self.items)}, "
            f"last_picked_index={self.last_picked_index})"
        )


# =============================================================================
# ENGINE
# =============================================================================

class PickListEngine:
    """
    Parser and sequencer for pick lists.

    The engine holds no per-list state; every operation takes the PickList
    it works on. All operations are total: they never raise, also not for
    an empty list.

    Attributes:
        completion_message: Lines returned once every item is picked

    Example:
        >>> engine = PickListEngine()
        >>> pick_list = engine.parse(r"SKU1 LOC1\\nSKU2")
        >>> engine.pick(pick_list, "LOC1")
        True
        >>> engine.advance(pick_list)
        >>> engine.item_to_scan(pick_list)
        ('SKU2',)
    """

    def __init__(self, completion_message: Optional[Sequence[str]] = None) -> None:
        self._completion_message = tuple(completion_message or COMPLETION_MESSAGE)

    @property
    def completion_message(self) -> Tuple[str, ...]:
        return self._completion_message

    # =========================================================================
    # PARSING
    # =========================================================================

    @staticmethod
    def split_lines(text: str) -> list:
        """Split text into lines, dropping the empty ones."""
        return [line for line in LINE_SEPARATOR.split(text) if line]

    @staticmethod
    def split_tokens(line: str) -> Tuple[str, ...]:
        """Split one line on spaces and tabs, dropping empty tokens."""
        return tuple(token for token in TOKEN_SEPARATOR.split(line) if token)

    def parse(self, text: str) -> PickList:
        """
        Parse scanned text into a new PickList.

        A line holding only whitespace is kept and yields an empty token
        tuple; only lines that are empty before token splitting are dropped.

        Args:
            text: Raw scanned text

        Returns:
            PickList positioned before the first line
        """
        items = tuple(self.split_tokens(line) for line in self.split_lines(text))
        logger.debug(f"Parsed pick list: {len(items)} lines")
        return PickList(source_text=text, items=items)

    def restore(self, source_text: str, last_picked_index: int) -> PickList:
        """
        Rebuild a persisted PickList.

        Parsing is deterministic, so the restored items equal the original
        ones. The index is clamped to [-1, last_index].

        Args:
            source_text: Persisted raw pick list text
            last_picked_index: Persisted index

        Returns:
            PickList with the restored position
        """
        pick_list = self.parse(source_text)
        pick_list.last_picked_index = max(-1, min(last_picked_index, pick_list.last_index))
        return pick_list

    # =========================================================================
    # QUERIES
    # =========================================================================

    def item_to_scan(self, pick_list: PickList) -> Tuple[str, ...]:
        """
        Tokens of the next line to pick.

        Returns the completion message once the list is exhausted
        (including the empty list).
        """
        index = pick_list.last_picked_index + 1
        if index > pick_list.last_index:
            return self._completion_message
        return pick_list.items[index]

    def is_complete(self, pick_list: PickList) -> bool:
        return pick_list.last_picked_index >= pick_list.last_index

    def pick(self, pick_list: PickList, scan_code: str) -> bool:
        """
        Check a scan against the line to pick.

        Pure predicate: the index is not moved, call advance() to commit.
        A complete list never matches, so a scan that happens to equal a
        completion message line is not a pick.

        Args:
            pick_list: List to check against
            scan_code: Decoded scan text

        Returns:
            True if scan_code is one of the current line's tokens
        """
        if self.is_complete(pick_list):
            return False
        return scan_code in self.item_to_scan(pick_list)

    def progress(self, pick_list: PickList) -> float:
        """Percentage of picked lines, clamped to [0, 100]; 0 for an empty list."""
        if not pick_list.items:
            return 0.0
        percent = (pick_list.last_picked_index + 1) / len(pick_list.items) * 100
        return max(0.0, min(100.0, percent))

    def instruction_text(self, pick_list: PickList) -> str:
        """Display text for the operator: the next line's tokens, one per row."""
        return "\n".join(self.item_to_scan(pick_list))

    # =========================================================================
    # COMMANDS
    # =========================================================================

    def advance(self, pick_list: PickList) -> None:
        """Commit a successful pick by moving to the next line."""
        if self.is_complete(pick_list):
            return
        pick_list.last_picked_index += 1

    def retreat(self, pick_list: PickList) -> bool:
        """
        Undo the last committed pick.

        Returns:
            False when nothing has been picked yet
        """
        if pick_list.last_picked_index < 0:
            return False
        pick_list.last_picked_index -= 1
        return True
