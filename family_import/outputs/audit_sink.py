# Docstring for family_import/outputs/audit_sink module
"""
audit_sink.py

Destinations for rejection records (raw benefit row + reason).

Every rejected benefit candidate is written as soon as it is discovered, one
record per call, so the audit file order is the discovery order of the run.

Public API
----------
- AuditSink (protocol): write(record) -> None
- ListAuditSink: in-memory sink (tests, notebooks)
- CsvAuditSink(path, columns=AUDIT_COLUMNS): per-tenant CSV, created fresh per run,
  reason column titled MOTIVO
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Protocol, Sequence

import pandas as pd

from ..config import AUDIT_COLUMNS, AUDIT_HEADER_TITLES, RECONCILIATION_CONFIG


class AuditSink(Protocol):
    def write(self, record: Mapping[str, Any]) -> None:
        ...


class ListAuditSink:
    """Keeps records in a list, in write order."""

    def __init__(self) -> None:
        self.records: list[dict[str, Any]] = []

    def write(self, record: Mapping[str, Any]) -> None:
        self.records.append(dict(record))

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.records)

    def __len__(self) -> int:
        return len(self.records)


class CsvAuditSink:

    """
    Appends one row per write to a CSV file with a fixed header.

    The file is (re)created with the header line when the sink is built, so an
    earlier run for the same tenant never leaks into this one. Columns missing
    from a record are written empty; extra keys are ignored. Header cells use
    `titles` where a record key has one (reason -> MOTIVO).
    """

    def __init__(
        self,
        path: Path | str,
        columns: Sequence[str] = AUDIT_COLUMNS,
        titles: Mapping[str, str] = AUDIT_HEADER_TITLES,
        *,
        delimiter: str = RECONCILIATION_CONFIG.benefit_delimiter,
        encoding: str = RECONCILIATION_CONFIG.encoding,
    ) -> None:
        self.path = Path(path)
        self.columns = list(columns)
        self.header = [titles.get(col, col) for col in self.columns]
        self.delimiter = delimiter
        self.encoding = encoding
        self.count = 0

        self.path.parent.mkdir(parents=True, exist_ok=True)
        pd.DataFrame(columns=self.header).to_csv(
            self.path, sep=self.delimiter, index=False, encoding=self.encoding
        )

    def write(self, record: Mapping[str, Any]) -> None:
        row = {col: record.get(col, "") for col in self.columns}
        pd.DataFrame([row], columns=self.columns).to_csv(
            self.path,
            sep=self.delimiter,
            index=False,
            header=False,
            mode="a",
            encoding=self.encoding,
        )
        self.count += 1

    def read(self) -> pd.DataFrame:
        """Audit file contents as strings (empty cells -> ""), header as written."""
        return pd.read_csv(
            self.path,
            sep=self.delimiter,
            dtype=str,
            keep_default_na=False,
            encoding=self.encoding,
        )
