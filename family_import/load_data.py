# Docstring for family_import/load_data module
"""
load_data.py

Input loader utilities for the benefit registry, school enrollment and single
registry CSV extracts.

This module provides thin, predictable I/O functions to read the extracts into
pandas DataFrames, with minimal transformation. Cleaning and business logic
live in `cleaning/` and `engines/`.

Design goals
------------
- Separation of concerns: keep file I/O distinct from normalization and matching.
- Repeatability: every cell is read as text (dtype=str, blanks kept as "") so
  NIS numbers keep their leading zeros and dates are parsed in one place.
- Laziness: `iter_csv_chunks` yields the file in chunks; the file can only be
  re-read by calling it again.

Public API
----------
- iter_csv_chunks(path, delimiter, chunk_size=..., encoding=...) -> Iterator[pd.DataFrame]
- load_csv(path, delimiter, ...) -> pd.DataFrame
- load_benefits_csv(path=None, use_sample_if_none=True) -> pd.DataFrame
- load_enrollment_csv(path=None, use_sample_if_none=True) -> pd.DataFrame
- load_registry_csv(path) -> pd.DataFrame

Privacy / compliance note
-------------------------
Never commit real extracts to source control. Repository sample files must be
synthetic. Production runs should read files from secure locations.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, Optional

import pandas as pd

from .config import (
    RECONCILIATION_CONFIG,
    SAMPLE_DIR,
)


def _resolve_path(path: Optional[Path], use_sample_if_none: bool, sample_name: str, label: str) -> Path:
    if path is None:
        if not use_sample_if_none:
            raise ValueError("No path provided and use_sample_if_none=False.")
        path = SAMPLE_DIR / sample_name

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"{label} CSV file not found at: {path}")
    return path


def iter_csv_chunks(
    path: Path | str,
    delimiter: str,
    chunk_size: int = RECONCILIATION_CONFIG.read_chunk_size,
    encoding: str = RECONCILIATION_CONFIG.encoding,
) -> Iterator[pd.DataFrame]:
    """
    Yield the CSV file as consecutive DataFrame chunks of raw text cells.

    The row index keeps counting across chunks, so it matches the row position
    in the file.
    """
    reader = pd.read_csv(
        path,
        sep=delimiter,
        dtype=str,
        keep_default_na=False,  # blank cells stay "" (the cleaners decide what missing means)
        encoding=encoding,
        chunksize=chunk_size,
    )
    with reader:
        for chunk in reader:
            chunk.columns = [str(col).strip() for col in chunk.columns]
            yield chunk


def load_csv(
    path: Path | str,
    delimiter: str,
    chunk_size: int = RECONCILIATION_CONFIG.read_chunk_size,
    encoding: str = RECONCILIATION_CONFIG.encoding,
) -> pd.DataFrame:
    """Read a whole CSV extract (through iter_csv_chunks) into one DataFrame."""
    chunks = list(iter_csv_chunks(path, delimiter, chunk_size=chunk_size, encoding=encoding))
    if not chunks:
        return pd.DataFrame()
    return pd.concat(chunks, ignore_index=True)


def load_benefits_csv(
        path: Optional[Path] = None,
        use_sample_if_none: bool = True,
        encoding: str = RECONCILIATION_CONFIG.encoding,
) -> pd.DataFrame:

    """

    Load the benefit registry extract (';' delimited).

    Args:
        path:
            Path to the CSV file. If None and use_sample_if_none is True,
            defaults to SAMPLE_DIR / 'benefits_sample.csv'.
        use_sample_if_none:
            If True and path is None, load from the sample directory.
        encoding:
            File encoding.

    Returns:
        pandas.DataFrame with raw benefit rows (no cleaning/renaming yet).
        Required columns are checked by the pipeline, not here.

    """

    path = _resolve_path(path, use_sample_if_none, "benefits_sample.csv", "Benefit registry")
    return load_csv(path, RECONCILIATION_CONFIG.benefit_delimiter, encoding=encoding)


def load_enrollment_csv(
        path: Optional[Path] = None,
        use_sample_if_none: bool = True,
        encoding: str = RECONCILIATION_CONFIG.encoding,
) -> pd.DataFrame:

    """

    Load the school enrollment extract (',' delimited).

    Args:
        path:
            Path to the CSV file. If None and use_sample_if_none is True,
            defaults to SAMPLE_DIR / 'enrollment_sample.csv'.
        use_sample_if_none:
            If True and path is None, load from the sample directory.
        encoding:
            File encoding.

    Returns:
        pandas.DataFrame with raw enrollment rows.

    """

    path = _resolve_path(path, use_sample_if_none, "enrollment_sample.csv", "Enrollment registry")
    return load_csv(path, RECONCILIATION_CONFIG.enrollment_delimiter, encoding=encoding)


def load_registry_csv(
        path: Path | str,
        encoding: str = RECONCILIATION_CONFIG.encoding,
) -> pd.DataFrame:
    """Load a single registry (CadUnico) person extract (';' delimited)."""
    path = _resolve_path(Path(path), False, "", "Single registry")
    return load_csv(path, RECONCILIATION_CONFIG.registry_delimiter, encoding=encoding)
