"""Journal storage provider interface."""

import logging
from typing import Protocol

from jotter.core.entries import TRANSFER_DATA_VERSION, EntriesDTO, Entry, EntryDraft
from jotter.errors import TransferVersionMismatch, ValidationError

logger = logging.getLogger(__name__)


def validate_draft(draft: EntryDraft | Entry) -> None:
    """Reject drafts the user has to fix before they can be stored."""
    if not draft.title.strip():
        raise ValidationError("Entry title can't be empty")


def take_valid_drafts(drafts: list[EntryDraft]) -> tuple[list[EntryDraft], ValidationError | None]:
    """Drafts before the first invalid one, plus that draft's error (None if all are valid)."""
    for index, draft in enumerate(drafts):
        try:
            validate_draft(draft)
        except ValidationError as e:
            return list(drafts[:index]), e
    return list(drafts), None


def check_transfer_version(dto: EntriesDTO, allow_mismatch: bool = False) -> None:
    """
    Flag a transfer envelope written with another schema version.

    Raises TransferVersionMismatch unless the caller allows the mismatch, in
    which case it is only logged.
    """
    if dto.version == TRANSFER_DATA_VERSION:
        return

    if not allow_mismatch:
        raise TransferVersionMismatch(TRANSFER_DATA_VERSION, dto.version)

    logger.warning(
        f"Importing transfer data version {dto.version} "
        f"(current is {TRANSFER_DATA_VERSION}); fields may need migration"
    )


class DataProvider(Protocol):
    """
    Interface for storing journal entries.

    All operations are async and fallible: ValidationError for input the user
    can correct, DataError for storage failures.
    """

    async def load_all_entries(self) -> list[Entry]:
        """Load every entry. No ordering guarantee."""
        ...

    async def add_entry(self, draft: EntryDraft) -> Entry:
        """Persist a draft as a new entry and return it with its assigned id."""
        ...

    async def update_entry(self, entry: Entry) -> Entry:
        """Replace all fields of the entry with the same id."""
        ...

    async def remove_entry(self, entry_id: int) -> None:
        """Remove an entry. A missing id is a DataError."""
        ...

    async def get_export_object(self, entry_ids: list[int]) -> EntriesDTO:
        """Project the given entries (all of them if empty) to a transfer envelope."""
        ...

    async def import_entries(self, dto: EntriesDTO, allow_version_mismatch: bool = False) -> None:
        """
        Add every draft in the envelope as a new entry.

        Drafts are added one by one and the import stops at the first failure,
        leaving the drafts added so far in place. Providers may override this
        to import in bulk, as long as the same drafts end up stored.
        """
        check_transfer_version(dto, allow_version_mismatch)

        for draft in dto.entries:
            await self.add_entry(draft)
