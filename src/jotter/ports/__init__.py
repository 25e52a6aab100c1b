"""Ports - interfaces/protocols for external dependencies."""

from .data_provider import DataProvider, check_transfer_version, take_valid_drafts, validate_draft

__all__ = [
    "DataProvider",
    "check_transfer_version",
    "take_valid_drafts",
    "validate_draft",
]
