# Docstring for family_import/cleaning/clean_enrollment module
"""
clean_enrollment.py

Cleaning and normalization for the school enrollment (Sislame) extract.

The enrollment extract is the reference the benefit candidates are checked
against: a dependent is only granted when a student with the same name is
enrolled under one of the guardian's names (mother, father or designated
responsible).

Core transformations
--------------------
1) Column standardization via `config.ENROLLMENT_COLUMN_MAP` (raw headers carry
   accents, e.g. "Mãe", so the mapping runs before accent stripping).
2) Names trimmed, blanks -> <NA>; birth date parsed with the fixed dd/mm/yyyy
   format (unparseable -> missing).
3) Accent stripping over the whole canonical dataset in one pass.

Public API
----------
- clean_enrollment(raw_df) -> pd.DataFrame
"""

from __future__ import annotations

import warnings

import pandas as pd

from ..config import (
    ENROLLMENT_COLUMN_MAP,
    ENROLLMENT_CORE_COLUMNS,
    RECONCILIATION_CONFIG,
)
from ..core.normalizers import (
    blank_to_na,
    normalize_text_series,
    strip_accents_frame,
    to_date_series,
)


TEXT_COLUMNS = [
    "student_name",
    "mother_name",
    "father_name",
    "responsible_name",
    "enrollment_id",
]


def clean_enrollment(
        raw_df: pd.DataFrame,
        date_format: str = RECONCILIATION_CONFIG.date_format,
) -> pd.DataFrame:
    """
    Clean and normalize the enrollment extract.

    Returns a DataFrame with row_id (position in raw_df) and the canonical
    enrollment columns, accents removed.
    """

    df = raw_df.reset_index(drop=True).rename(columns=ENROLLMENT_COLUMN_MAP)

    for col in ENROLLMENT_CORE_COLUMNS:
        if col not in df.columns:
            df[col] = pd.NA
    df = df[ENROLLMENT_CORE_COLUMNS].copy()
    df.insert(0, "row_id", range(len(df)))

    for col in TEXT_COLUMNS:
        df[col] = blank_to_na(normalize_text_series(df[col]))

    raw_dates = blank_to_na(df["student_birthdate"])
    df["student_birthdate"] = to_date_series(raw_dates, format=date_format)
    unparseable = int((raw_dates.notna() & pd.isna(df["student_birthdate"])).sum())
    if unparseable > 0:
        warnings.warn(
            f"Enrollment registry student_birthdate parsing produced {unparseable} unparseable dates.",
            stacklevel=2,
        )

    return strip_accents_frame(df)
