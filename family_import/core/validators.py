# Docstring for family_import/core/validators module
"""
validators.py

Shared validation helpers for the benefit and enrollment extracts.

This module centralizes the schema check (required columns, run once per
dataset before any row is processed) and the per-row conversion checks that
turn unusable benefit rows into audit rejections instead of failing the run.

Public API
----------
- check_required_columns(df, required_cols, source_name) -> None
- validate_nis_series(series) -> pd.Series
- validate_optional_int_series(raw, parsed) -> pd.Series
- build_conversion_issues(guardian_nis_valid, dependent_nis_valid, household_size_valid=None) -> pd.Series
"""

from __future__ import annotations

from typing import Iterable

import pandas as pd

from .errors import SchemaValidationError


def check_required_columns(
    df: pd.DataFrame,
    required_cols: Iterable[str],
    source_name: str,
) -> None:
    """
    Ensure the dataset header (the keys of its first row) has every required column.

    Args:
        df: Raw DataFrame as loaded from the extract.
        required_cols: Raw column names that MUST be present.
        source_name: Label for error messages (e.g. 'Benefit registry').

    Raises:
        SchemaValidationError: if the dataset has no rows or any required
        column is missing.
    """
    required = list(required_cols)
    if df.empty:
        raise SchemaValidationError(source_name, required, [])

    available = [str(col) for col in df.columns]
    missing = [col for col in required if col not in available]
    if missing:
        raise SchemaValidationError(source_name, missing, available)


def validate_nis_series(series: pd.Series) -> pd.Series:
    """A normalized NIS is valid when it is a non-empty digit string."""
    s = series.astype("string")
    valid = s.notna() & s.str.fullmatch(r"\d+").fillna(False)
    return valid.astype("boolean")


def validate_optional_int_series(raw: pd.Series, parsed: pd.Series) -> pd.Series:
    """Blank cells are fine; a filled cell must parse as an integer."""
    raw_str = raw.astype("string").str.strip()
    blank = raw_str.isna() | raw_str.eq("").fillna(False)
    return (blank | parsed.notna()).astype("boolean")


def build_conversion_issues(
    guardian_nis_valid: pd.Series,
    dependent_nis_valid: pd.Series,
    household_size_valid: pd.Series | None = None,
) -> pd.Series:
    """Build per-row conversion issue lists from boolean flags."""
    issues = pd.Series([[] for _ in range(len(guardian_nis_valid))], index=guardian_nis_valid.index)

    invalid_guardian = guardian_nis_valid.eq(False).fillna(False)
    invalid_dependent = dependent_nis_valid.eq(False).fillna(False)

    for idx in invalid_guardian[invalid_guardian].index:
        issues.at[idx].append("guardian_nis_invalid")
    for idx in invalid_dependent[invalid_dependent].index:
        issues.at[idx].append("dependent_nis_invalid")

    if household_size_valid is not None:
        invalid_size = household_size_valid.eq(False).fillna(False)
        for idx in invalid_size[invalid_size].index:
            issues.at[idx].append("household_size_invalid")

    return issues
