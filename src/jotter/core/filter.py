"""Pure entry filtering logic - no I/O dependencies."""

from dataclasses import dataclass, field
from typing import Iterable

from .entries import Entry


@dataclass(frozen=True)
class Filter:
    """
    Predicate over entries.

    An entry matches when it carries at least one of the selected tags (or no
    tags are selected) and the text appears in its title or content (or the
    text is empty). Text matching ignores case.
    """

    tags: frozenset[str] = field(default_factory=frozenset)
    text: str = ""

    def __post_init__(self):
        object.__setattr__(self, "tags", frozenset(self.tags))

    def is_empty(self) -> bool:
        return not self.tags and not self.text.strip()

    def matches(self, entry: Entry) -> bool:
        if self.tags and not self.tags.intersection(entry.tags):
            return False

        text = self.text.strip().lower()
        if text and text not in entry.title.lower() and text not in entry.content.lower():
            return False

        return True


def filter_entries(entries: Iterable[Entry], active_filter: Filter | None) -> Iterable[Entry]:
    """Lazily yield the entries matching the filter. None means unfiltered."""
    if active_filter is None or active_filter.is_empty():
        return iter(entries)
    return (e for e in entries if active_filter.matches(e))


def get_all_tags(entries: Iterable[Entry]) -> list[str]:
    """Sorted unique tags over all entries."""
    return sorted({tag for entry in entries for tag in entry.tags})


def cycle_tag_filter(current: Filter | None, all_tags: list[str]) -> Filter | None:
    """
    Advance a single-tag filter to the next known tag.

    A filter holding exactly one tag (and no text) moves to the next tag in
    sorted order, wrapping to the first. Any other filter is replaced by a
    filter on the first tag. Without known tags the filter is left as is.
    """
    if not all_tags:
        return current

    first = Filter(tags=frozenset([all_tags[0]]))
    if current is None or len(current.tags) != 1 or current.text.strip():
        return first

    (tag,) = current.tags
    if tag not in all_tags:
        return first

    next_index = (all_tags.index(tag) + 1) % len(all_tags)
    return Filter(tags=frozenset([all_tags[next_index]]))
