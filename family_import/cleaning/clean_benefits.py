# Docstring for family_import/cleaning/clean_benefits module
"""
clean_benefits.py

Cleaning and normalization for the benefit registry extract.

This module turns the raw payroll extract (one row per guardian/dependent pair)
into the canonical "benefit candidate" DataFrame used by:

- The deduplicator (`engines.deduplicate`)
- The eligibility filter (`engines.eligibility`)
- The cross-reference and duplicate resolution engines

Core transformations
--------------------
1) Column standardization
   - Rename raw headers to canonical names using `config.BENEFIT_COLUMN_MAP`.
   - Keep only `config.BENEFIT_CORE_COLUMNS`; optional columns missing from the
     extract are added empty.
   - Prepend `row_id` (position in the raw extract) so the untouched raw row
     can be recovered for the audit file and the grant payload.

2) Field normalization
   - NIS (`guardian_nis`, `dependent_nis`): digits-only strings, invalid -> <NA>.
   - Dates (`guardian_birthdate`, `dependent_birthdate`): fixed dd/mm/yyyy
     format; anything else becomes missing (never fails the row).
   - Household size: nullable Int64.
   - Names: blank -> <NA>, whitespace trimmed.

3) Accent stripping
   - Applied to the whole canonical dataset in one pass after conversion.

4) Conversion issues
   - `conversion_issues` lists what made a row unusable (missing NIS, bad
     household size). The pipeline rejects those rows with a reason.

Public API
----------
- clean_benefits(raw_df) -> pd.DataFrame
"""

from __future__ import annotations

import warnings

import pandas as pd

from ..config import (
    BENEFIT_COLUMN_MAP,
    BENEFIT_CORE_COLUMNS,
    RECONCILIATION_CONFIG,
)
from ..core.normalizers import (
    blank_to_na,
    normalize_nis_series,
    normalize_text_series,
    strip_accents_frame,
    to_date_series,
    to_int64_nullable_series,
)
from ..core.validators import (
    build_conversion_issues,
    validate_nis_series,
    validate_optional_int_series,
)


NAME_COLUMNS = ["guardian_name", "dependent_name"]
DATE_COLUMNS = ["guardian_birthdate", "dependent_birthdate"]


def clean_benefits(
        raw_df: pd.DataFrame,
        date_format: str = RECONCILIATION_CONFIG.date_format,
) -> pd.DataFrame:

    """

    Clean and normalize the benefit registry extract.

    Steps:
    1. Rename raw columns to canonical names using BENEFIT_COLUMN_MAP
    2. Keep only BENEFIT_CORE_COLUMNS (adding missing optional ones)
    3. Normalize NIS, dates, household size and names
    4. Strip accents from the whole dataset
    5. Flag rows that cannot be used (conversion_issues)

    Args:
        raw_df:
            DataFrame as loaded from the raw extract (all cells as text).
            Required columns must have been checked already.
        date_format:
            strptime format of the birth date columns.

    Returns:
        A cleaned DataFrame with row_id, canonical columns and conversion_issues.

    """

    # Work on a copy with a positional index (row_id == position in raw_df)
    df = raw_df.reset_index(drop=True).rename(columns=BENEFIT_COLUMN_MAP)

    # Keep only canonical columns; optional ones may be absent from the extract
    for col in BENEFIT_CORE_COLUMNS:
        if col not in df.columns:
            df[col] = pd.NA
    df = df[BENEFIT_CORE_COLUMNS].copy()
    df.insert(0, "row_id", range(len(df)))

    # Names and codes
    for col in NAME_COLUMNS + ["family_code"]:
        df[col] = blank_to_na(normalize_text_series(df[col]))

    # NIS
    df["guardian_nis"] = normalize_nis_series(df["guardian_nis"])
    df["dependent_nis"] = normalize_nis_series(df["dependent_nis"])

    # Dates (unparseable -> missing, counted and reported)
    for col in DATE_COLUMNS:
        raw_dates = blank_to_na(df[col])
        df[col] = to_date_series(raw_dates, format=date_format)
        unparseable = int((raw_dates.notna() & pd.isna(df[col])).sum())
        if unparseable > 0:
            warnings.warn(
                f"Benefit registry {col} parsing produced {unparseable} unparseable dates.",
                stacklevel=2,
            )

    # Household size
    raw_household_size = df["household_size"]
    df["household_size"] = to_int64_nullable_series(blank_to_na(raw_household_size))

    # Accents removed from the whole dataset at once
    df = strip_accents_frame(df)

    # Conversion issues
    guardian_nis_valid = validate_nis_series(df["guardian_nis"])
    dependent_nis_valid = validate_nis_series(df["dependent_nis"])
    household_size_valid = validate_optional_int_series(raw_household_size, df["household_size"])
    df["conversion_issues"] = build_conversion_issues(
        guardian_nis_valid,
        dependent_nis_valid,
        household_size_valid,
    )

    invalid_count = int(df["conversion_issues"].map(bool).sum())
    if invalid_count > 0:
        warnings.warn(
            f"Benefit registry conversion flagged {invalid_count} unusable rows.",
            stacklevel=2,
        )

    return df
