"""Functional core - pure journal logic with no I/O."""

from .entries import (
    TRANSFER_DATA_VERSION,
    EntriesDTO,
    Entry,
    EntryDraft,
    normalize_tags,
)
from .filter import Filter, cycle_tag_filter, filter_entries, get_all_tags
from .sorter import SortDirection, Sorter, SortKey, sort_entries

__all__ = [
    # Entries
    "TRANSFER_DATA_VERSION",
    "EntriesDTO",
    "Entry",
    "EntryDraft",
    "normalize_tags",
    # Filter
    "Filter",
    "cycle_tag_filter",
    "filter_entries",
    "get_all_tags",
    # Sorter
    "SortDirection",
    "Sorter",
    "SortKey",
    "sort_entries",
]
