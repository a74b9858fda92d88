"""
errors.py

Exception taxonomy for the family import pipeline.

- SchemaValidationError: required columns missing (fatal, raised before any
  row is processed).
- RowConversionError: a single row could not be converted. The pipeline records
  it as a rejection and keeps going; it is never raised out of a run.
- PersistenceError / AuditSinkError: a collaborator failed while writing. Fatal
  for the rest of the run, nothing already written is rolled back.
"""

from __future__ import annotations

from typing import Iterable


class FamilyImportError(Exception):
    """Base class for every error raised by the import pipeline."""


class SchemaValidationError(FamilyImportError, ValueError):

    def __init__(
        self,
        source_name: str,
        missing_columns: Iterable[str],
        available_columns: Iterable[str],
    ) -> None:
        self.source_name = source_name
        self.missing_columns = list(missing_columns)
        self.available_columns = list(available_columns)
        if not self.available_columns and self.missing_columns:
            message = f"{source_name}: no data found in the table."
        else:
            message = (
                f"{source_name}: missing required columns: {', '.join(self.missing_columns)}"
                f" --- Available columns: {', '.join(self.available_columns)}"
            )
        super().__init__(message)


class RowConversionError(FamilyImportError, ValueError):

    def __init__(self, row_id: int, issues: Iterable[str]) -> None:
        self.row_id = row_id
        self.issues = list(issues)
        super().__init__(f"row {row_id}: {', '.join(self.issues)}")


class PersistenceError(FamilyImportError, RuntimeError):
    """A grant could not be written by the family store."""


class AuditSinkError(FamilyImportError, RuntimeError):
    """A rejection record could not be written by the audit sink."""
