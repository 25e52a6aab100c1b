"""Exceptions shared by the storage providers, the app and the UI."""


class JotterError(Exception):
    """Base class for all Jotter errors."""

    pass


class ValidationError(JotterError):
    """Raised when user input is rejected. The user can correct it and retry."""

    pass


class DataError(JotterError):
    """Raised when the storage layer fails. The original error is kept as __cause__."""

    pass


class TransferVersionMismatch(DataError):
    """Raised when an import envelope was written with another transfer schema version."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Transfer data version mismatch: expected {expected}, got {actual}. "
            "The data may need to be migrated before importing."
        )


class ExternalEditorError(JotterError):
    """Raised when the external editor can't be started or exits with a failure."""

    pass
