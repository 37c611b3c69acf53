"""Exceptions raised by woekit."""


class WoeError(ValueError):
    """Base class for WOE fitting and persistence errors."""


class DegenerateLabelError(WoeError):
    """The label column has no positives or no negatives, so WOE is undefined."""


class InvalidLabelError(WoeError):
    """The label column cannot be read as a binary 0/1 measure."""


class DuplicateColumnError(WoeError):
    """An output column name collides with a column already in the dataset."""

    def __init__(self, column: str):
        self.column = column
        super().__init__(f"Output column {column} already exists.")


class ModelSaveError(WoeError):
    """A WoeModel holds a category value that cannot be written to disk."""


class ModelLoadError(WoeError):
    """A saved WoeModel directory is missing files or has malformed metadata."""


__all__ = [
    "WoeError",
    "DegenerateLabelError",
    "InvalidLabelError",
    "DuplicateColumnError",
    "ModelSaveError",
    "ModelLoadError",
]
