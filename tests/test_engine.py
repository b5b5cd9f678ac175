"""
==============================================================================
Pick List Engine Tests
==============================================================================

Tests for parsing, pick matching and sequencing.

==============================================================================
"""

import pytest

from orderpiqr.picklist import COMPLETION_MESSAGE, PickList, PickListEngine


class TestParse:
    """Tests for pick list parsing."""

    def test_empty_text(self, pick_engine: PickListEngine):
        """Empty text gives an empty list that is already finished."""
        pick_list = pick_engine.parse("")
        assert pick_list.items == ()
        assert pick_list.last_picked_index == -1
        assert pick_engine.item_to_scan(pick_list) == COMPLETION_MESSAGE

    def test_blank_lines_dropped(self, pick_engine: PickListEngine):
        """Blank lines are removed before indexing."""
        pick_list = pick_engine.parse(r"A B\nC\n\nD")
        assert pick_list.items == (("A", "B"), ("C",), ("D",))

    def test_crlf_separator(self, pick_engine: PickListEngine):
        """A real CRLF separates lines."""
        pick_list = pick_engine.parse("A\r\nB\r\n\r\nC")
        assert pick_list.items == (("A",), ("B",), ("C",))

    def test_literal_backslash_r_separator(self, pick_engine: PickListEngine):
        """The literal two character sequence backslash-r separates lines."""
        pick_list = pick_engine.parse(r"A\rB")
        assert pick_list.items == (("A",), ("B",))

    def test_lone_newline_is_not_a_separator(self, pick_engine: PickListEngine):
        """A real LF on its own does not split lines."""
        pick_list = pick_engine.parse("A B\nC")
        assert pick_list.items == (("A", "B\nC"),)

    def test_tabs_and_repeated_spaces(self, pick_engine: PickListEngine):
        """Tokens split on spaces and tabs, empty tokens discarded."""
        pick_list = pick_engine.parse("  SKU1\t\tLOC1   BIN7 ")
        assert pick_list.items == (("SKU1", "LOC1", "BIN7"),)

    def test_whitespace_only_line_kept(self, pick_engine: PickListEngine):
        """A line of only whitespace stays as a line without tokens."""
        pick_list = pick_engine.parse("A\r\n \t \r\nB")
        assert pick_list.items == (("A",), (), ("B",))

    def test_source_text_preserved(self, pick_engine: PickListEngine, warehouse_list: str):
        """The raw text is kept verbatim."""
        assert pick_engine.parse(warehouse_list).source_text == warehouse_list

    def test_parse_is_deterministic(self, pick_engine: PickListEngine, warehouse_list: str):
        """Parsing the same text twice gives equal items."""
        assert pick_engine.parse(warehouse_list).items == pick_engine.parse(warehouse_list).items


class TestItemToScan:
    """Tests for the next item query."""

    def test_first_line(self, pick_engine: PickListEngine, two_line_list: str):
        """A fresh list asks for its first line."""
        pick_list = pick_engine.parse(two_line_list)
        assert pick_engine.item_to_scan(pick_list) == ("SKU1", "LOC1")

    def test_instruction_text_joins_lines(self, pick_engine: PickListEngine, two_line_list: str):
        """The display text puts every token on its own row."""
        pick_list = pick_engine.parse(two_line_list)
        assert pick_engine.instruction_text(pick_list) == "SKU1\nLOC1"

    def test_completion_message(self, pick_engine: PickListEngine):
        """The exhausted list shows the fixed three line message."""
        pick_list = pick_engine.parse("ONLY")
        pick_list.last_picked_index = 0
        assert pick_engine.item_to_scan(pick_list) == (
            "Einde van pickbon.",
            "Je bent klaar.",
            "Pak de volgende pickbon.",
        )

    def test_custom_completion_message(self):
        """The message table is configurable."""
        engine = PickListEngine(["Done."])
        assert engine.item_to_scan(engine.parse("")) == ("Done.",)


class TestPick:
    """Tests for pick matching and advancing."""

    def test_any_token_matches(self, pick_engine: PickListEngine, two_line_list: str):
        """Every token on the line is an acceptable scan."""
        pick_list = pick_engine.parse(two_line_list)
        assert pick_engine.pick(pick_list, "SKU1") is True
        assert pick_engine.pick(pick_list, "LOC1") is True

    def test_exact_match_only(self, pick_engine: PickListEngine, two_line_list: str):
        """Partial or differently cased codes do not match."""
        pick_list = pick_engine.parse(two_line_list)
        assert pick_engine.pick(pick_list, "SKU") is False
        assert pick_engine.pick(pick_list, "sku1") is False
        assert pick_engine.pick(pick_list, "SKU2") is False

    def test_pick_does_not_advance(self, pick_engine: PickListEngine, two_line_list: str):
        """pick is a predicate; repeated calls give the same answer."""
        pick_list = pick_engine.parse(two_line_list)
        results = [pick_engine.pick(pick_list, "SKU1") for _ in range(3)]
        assert results == [True, True, True]
        assert pick_list.last_picked_index == -1

    def test_scenario(self, pick_engine: PickListEngine, two_line_list: str):
        """Pick, mismatch, pick until the list is finished."""
        pick_list = pick_engine.parse(two_line_list)

        assert pick_engine.pick(pick_list, "SKU1") is True
        pick_engine.advance(pick_list)
        assert pick_list.last_picked_index == 0
        assert pick_engine.item_to_scan(pick_list) == ("SKU2",)

        assert pick_engine.pick(pick_list, "WRONG") is False
        assert pick_list.last_picked_index == 0

        assert pick_engine.pick(pick_list, "SKU2") is True
        pick_engine.advance(pick_list)
        assert pick_list.last_picked_index == 1
        assert pick_engine.item_to_scan(pick_list) == COMPLETION_MESSAGE

    def test_n_picks_complete_the_list(self, pick_engine: PickListEngine, warehouse_list: str):
        """n successful pick/advance cycles move from -1 to n-1."""
        pick_list = pick_engine.parse(warehouse_list)

        for line in pick_list.items:
            assert not pick_engine.is_complete(pick_list)
            assert pick_engine.pick(pick_list, line[-1])
            pick_engine.advance(pick_list)

        assert pick_list.last_picked_index == len(pick_list.items) - 1
        assert pick_engine.is_complete(pick_list)
        assert pick_engine.item_to_scan(pick_list) == COMPLETION_MESSAGE

    @pytest.mark.parametrize("sentinel", COMPLETION_MESSAGE)
    def test_complete_list_rejects_sentinel_text(self, pick_engine: PickListEngine, sentinel: str):
        """A finished list never reports a pick, also not for message text."""
        pick_list = pick_engine.parse("ONLY")
        pick_engine.advance(pick_list)
        assert pick_engine.pick(pick_list, sentinel) is False

    def test_empty_list_never_picks(self, pick_engine: PickListEngine):
        """An empty list is total: no pick, no error."""
        pick_list = pick_engine.parse("")
        assert pick_engine.pick(pick_list, "anything") is False
        pick_engine.advance(pick_list)
        assert pick_list.last_picked_index == -1

    def test_tokenless_line_never_matches(self, pick_engine: PickListEngine):
        """A whitespace-only line has nothing to match."""
        pick_list = pick_engine.parse("A\r\n  \r\nB")
        pick_engine.advance(pick_list)
        assert pick_engine.item_to_scan(pick_list) == ()
        assert pick_engine.pick(pick_list, "B") is False

    def test_retreat(self, pick_engine: PickListEngine, two_line_list: str):
        """Retreat undoes one pick and refuses at the start."""
        pick_list = pick_engine.parse(two_line_list)
        assert pick_engine.retreat(pick_list) is False

        pick_engine.advance(pick_list)
        assert pick_engine.retreat(pick_list) is True
        assert pick_list.last_picked_index == -1


class TestProgress:
    """Tests for the progress percentage."""

    def test_unstarted_list(self, pick_engine: PickListEngine, two_line_list: str):
        assert pick_engine.progress(pick_engine.parse(two_line_list)) == 0

    def test_empty_list(self, pick_engine: PickListEngine):
        assert pick_engine.progress(pick_engine.parse("")) == 0

    def test_progress_after_picks(self, pick_engine: PickListEngine, two_line_list: str):
        """50 after the first of two lines, 100 after the second."""
        pick_list = pick_engine.parse(two_line_list)
        pick_engine.advance(pick_list)
        assert pick_engine.progress(pick_list) == 50
        pick_engine.advance(pick_list)
        assert pick_engine.progress(pick_list) == 100

    def test_progress_is_clamped(self, pick_engine: PickListEngine, two_line_list: str):
        """An out of range index set directly still reports 0..100."""
        pick_list = pick_engine.parse(two_line_list)
        pick_list.last_picked_index = 10
        assert pick_engine.progress(pick_list) == 100
        pick_list.last_picked_index = -7
        assert pick_engine.progress(pick_list) == 0


class TestRestore:
    """Tests for rebuilding persisted pick lists."""

    def test_restored_list_behaves_identically(self, pick_engine: PickListEngine, warehouse_list: str):
        """Same items, same next item and same pick answers after restore."""
        original = pick_engine.parse(warehouse_list)
        pick_engine.advance(original)

        restored = pick_engine.restore(original.source_text, original.last_picked_index)

        assert restored.items == original.items
        assert restored.last_picked_index == original.last_picked_index
        assert pick_engine.item_to_scan(restored) == pick_engine.item_to_scan(original)
        for code in ("8712345000017", "8712345000024", "B-02-01", "nope"):
            assert pick_engine.pick(restored, code) == pick_engine.pick(original, code)

    def test_restore_clamps_index(self, pick_engine: PickListEngine, two_line_list: str):
        """Out of range persisted indices are clamped to [-1, n-1]."""
        assert pick_engine.restore(two_line_list, 99).last_picked_index == 1
        assert pick_engine.restore(two_line_list, -5).last_picked_index == -1

    def test_pick_list_repr(self):
        """repr shows size and position, not the raw text."""
        assert repr(PickList(source_text="x", items=(("x",),))) == "PickList(items=1, last_picked_index=-1)"
