# Docstring for family_import/engines/eligibility module
"""
eligibility.py

Minor-age eligibility rule for benefit dependents.

A dependent is eligible while the number of completed years between their
birth date and the FIRST day of the processing month is below
`RECONCILIATION_CONFIG.minor_age_limit` (18). Counting from the start of the
month keeps a whole monthly run consistent: a dependent turning 18 in the
middle of the month is still a minor for that month's import.

The same rule runs twice:
- on the benefit-side birth date, before any cross-referencing;
- on the enrollment-side birth date, after a match is found (the two
  registries can disagree).

Missing or unparseable birth dates never pass the rule.

Public API
----------
- start_of_month(as_of) -> date
- completed_years(dob, as_of) -> int | None
- completed_years_series(dob_series, as_of) -> pd.Series
- is_minor(dob, as_of, age_limit=18) -> bool
- filter_minors(df, as_of, birthdate_col="dependent_birthdate") -> tuple[pd.DataFrame, pd.DataFrame]
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

import pandas as pd

from ..config import RECONCILIATION_CONFIG, REJECTION_REASONS


def start_of_month(as_of: date | datetime) -> date:
    if isinstance(as_of, datetime):
        as_of = as_of.date()
    return as_of.replace(day=1)


def completed_years(dob: Any, as_of: date) -> int | None:
    """Whole years between dob and as_of (None when dob is missing)."""
    if dob is None or pd.isna(dob):
        return None
    if isinstance(dob, datetime):
        dob = dob.date()
    years = as_of.year - dob.year
    # Birthday not reached yet this year
    if (as_of.month, as_of.day) < (dob.month, dob.day):
        years -= 1
    return years


def completed_years_series(dob_series: pd.Series, as_of: date) -> pd.Series:
    """
    Vectorized completed_years. Returns Int64 with <NA> for missing dates.
    """
    dob_dt = pd.to_datetime(dob_series, errors="coerce")
    before_birthday = (dob_dt.dt.month > as_of.month) | (
        dob_dt.dt.month.eq(as_of.month) & (dob_dt.dt.day > as_of.day)
    )
    years = (as_of.year - dob_dt.dt.year) - before_birthday.astype(int)
    return years.where(dob_dt.notna()).astype("Int64")


def is_minor(
    dob: Any,
    as_of: date,
    age_limit: int = RECONCILIATION_CONFIG.minor_age_limit,
) -> bool:
    """Scalar eligibility check counted from the start of the as_of month."""
    years = completed_years(dob, start_of_month(as_of))
    return years is not None and years < age_limit


def filter_minors(
    df: pd.DataFrame,
    as_of: date,
    birthdate_col: str = "dependent_birthdate",
    age_limit: int = RECONCILIATION_CONFIG.minor_age_limit,
) -> tuple[pd.DataFrame, pd.DataFrame]:

    """

    Split candidates into eligible minors and rejected rows.

    Args:
        df:
            Benefit candidates (cleaned).
        as_of:
            Processing date; the rule is evaluated at the first day of its month.
        birthdate_col:
            Column holding the dependent birth date.
        age_limit:
            First age that is no longer eligible.

    Returns:
        (eligible, rejected). `rejected` carries a `reason` column.

    """

    years = completed_years_series(df[birthdate_col], start_of_month(as_of))
    eligible_mask = years.lt(age_limit).fillna(False).astype(bool)

    eligible = df[eligible_mask].copy()
    rejected = df[~eligible_mask].copy()
    rejected["reason"] = REJECTION_REASONS["overage"]
    return eligible, rejected
