"""Tests for core filter and sort logic."""

from datetime import datetime, timezone

import pytest

from jotter.core.entries import Entry
from jotter.core.filter import Filter, cycle_tag_filter, filter_entries, get_all_tags
from jotter.core.sorter import SortDirection, Sorter, SortKey, sort_entries


def ids(entries):
    return [e.id for e in entries]


class TestFilter:
    def test_empty_filter_matches_everything(self, sample_entries):
        assert Filter().is_empty()
        assert ids(filter_entries(sample_entries, Filter())) == [1, 2, 3, 4, 5, 6]
        assert ids(filter_entries(sample_entries, None)) == [1, 2, 3, 4, 5, 6]

    def test_tags_match_any_selected(self, sample_entries):
        result = filter_entries(sample_entries, Filter(tags={"meetings", "home"}))
        assert ids(result) == [2, 3]

    def test_text_matches_title_or_content_ignoring_case(self, sample_entries):
        assert ids(filter_entries(sample_entries, Filter(text="RETRO"))) == [5]
        assert ids(filter_entries(sample_entries, Filter(text="content of book"))) == [6]

    def test_tags_and_text_combined(self, sample_entries):
        result = filter_entries(sample_entries, Filter(tags={"work"}, text="notes"))
        assert ids(result) == [3]

    def test_whitespace_text_is_empty(self):
        assert Filter(text="   ").is_empty()

    def test_tags_become_frozenset(self):
        assert isinstance(Filter(tags=["a", "b"]).tags, frozenset)


class TestTags:
    def test_all_tags_sorted_unique(self, sample_entries):
        assert get_all_tags(sample_entries) == ["home", "meetings", "outdoors", "work"]

    def test_cycle_from_no_filter_picks_first(self):
        assert cycle_tag_filter(None, ["a", "b"]) == Filter(tags={"a"})

    def test_cycle_advances_single_tag(self):
        assert cycle_tag_filter(Filter(tags={"a"}), ["a", "b", "c"]) == Filter(tags={"b"})

    def test_cycle_wraps_to_first(self):
        assert cycle_tag_filter(Filter(tags={"c"}), ["a", "b", "c"]) == Filter(tags={"a"})

    def test_cycle_replaces_complex_filter(self):
        assert cycle_tag_filter(Filter(tags={"b", "c"}), ["a", "b", "c"]) == Filter(tags={"a"})
        assert cycle_tag_filter(Filter(tags={"b"}, text="x"), ["a", "b"]) == Filter(tags={"a"})

    def test_cycle_unknown_tag_restarts(self):
        assert cycle_tag_filter(Filter(tags={"gone"}), ["a", "b"]) == Filter(tags={"a"})

    def test_cycle_without_tags_keeps_filter(self):
        current = Filter(text="x")
        assert cycle_tag_filter(current, []) is current


class TestSorter:
    def test_default_is_date_descending(self, sample_entries):
        assert Sorter() == Sorter(SortKey.DATE, SortDirection.DESCENDING)
        assert ids(sort_entries(sample_entries, Sorter())) == [6, 5, 4, 3, 2, 1]

    def test_title_ascending_ignores_case(self, sample_entries):
        sorter = Sorter(SortKey.TITLE, SortDirection.ASCENDING)
        entries = sample_entries + [Entry(7, sample_entries[0].date, "apple", "", [])]
        assert ids(sort_entries(entries, sorter)) == [7, 6, 2, 1, 5, 3, 4]

    @pytest.mark.parametrize("direction", list(SortDirection))
    def test_ties_broken_by_id_ascending(self, direction):
        when = datetime(2025, 1, 1, tzinfo=timezone.utc)
        entries = [Entry(i, when, "Same", "", []) for i in (3, 1, 2)]
        for key in SortKey:
            assert ids(sort_entries(entries, Sorter(key, direction))) == [1, 2, 3]

    def test_dict_roundtrip_and_defaults(self):
        sorter = Sorter(SortKey.TITLE, SortDirection.ASCENDING)
        assert Sorter.from_dict(sorter.to_dict()) == sorter
        assert Sorter.from_dict({}) == Sorter()
