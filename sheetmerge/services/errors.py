from __future__ import annotations


class SheetMergeError(RuntimeError):
    """Base class for user-facing sheet merge failures."""


class DecodeError(SheetMergeError):
    """Raised when a single uploaded file cannot be turned into sheet grids."""

    def __init__(self, filename: str, reason: str) -> None:
        super().__init__(f"Could not read {filename}: {reason}")
        self.filename = filename
        self.reason = reason


class EmptyMergeResultError(SheetMergeError):
    """Raised when a merge completes but no data row survives filtering."""

    default_message = (
        "The merged result is empty. Check the header row and data start row of each sheet."
    )

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class MergeFailedError(SheetMergeError):
    """Raised when the merge itself breaks on malformed input."""

    default_message = (
        "Merge failed. Make sure the sheets share a similar structure "
        "and the row numbers are configured correctly."
    )

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
