# Docstring for family_import/engines/deduplicate module
"""
deduplicate.py

Duplicate handling for the benefit and enrollment candidate datasets.

Two different things are called "duplicates" here:

1) Exact duplicates: rows sharing the dataset identity key
   (benefit: guardian_nis + dependent_nis, enrollment: student_name +
   enrollment_id). The first occurrence is kept.

2) Split dependents (benefit dataset only): the same dependent NIS claimed by
   more than one guardian NIS. Those rows leave the main pool and are handed
   to the duplicate resolution pass as one immutable group per dependent.

Public API
----------
- SplitGroup (dataclass)
- drop_duplicate_rows(df, keys) -> pd.DataFrame
- split_dependents(df) -> tuple[pd.DataFrame, list[SplitGroup]]
- dedupe_benefits(df) -> tuple[pd.DataFrame, list[SplitGroup]]
- dedupe_enrollment(df) -> pd.DataFrame
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import pandas as pd

from ..config import BENEFIT_MATCH_KEYS, ENROLLMENT_MATCH_KEYS


@dataclass(frozen=True)
class SplitGroup:
    """All benefit rows (by row_id, in extract order) claiming one dependent."""

    dependent_nis: str
    row_ids: tuple[int, ...]


def drop_duplicate_rows(df: pd.DataFrame, keys: Iterable[str]) -> pd.DataFrame:
    """Keep the first row for each identity key (only keys present in df are used)."""
    key_cols = [c for c in keys if c in df.columns]
    if not key_cols:
        return df.copy()
    return df.drop_duplicates(subset=key_cols, keep="first").copy()


def split_dependents(df: pd.DataFrame) -> tuple[pd.DataFrame, list[SplitGroup]]:
    """
    Separate dependents attached to more than one distinct guardian.

    Args:
        df: Benefit candidates without exact duplicates.

    Returns:
        (unique, groups): unique keeps every row whose dependent has a single
        guardian; groups holds the split dependents in order of first appearance.
    """
    if df.empty:
        return df.copy(), []

    # Number of distinct guardians claiming each dependent, broadcast back to every row
    guardian_count = df.groupby("dependent_nis", dropna=False)["guardian_nis"].transform("nunique")
    split_mask = guardian_count.gt(1)

    groups = [
        SplitGroup(dependent_nis=str(dependent_nis), row_ids=tuple(int(r) for r in rows["row_id"]))
        for dependent_nis, rows in df[split_mask].groupby("dependent_nis", sort=False)
    ]

    return df[~split_mask].copy(), groups


def dedupe_benefits(df: pd.DataFrame) -> tuple[pd.DataFrame, list[SplitGroup]]:
    """Drop exact duplicates, then route split dependents to their own groups."""
    unique = drop_duplicate_rows(df, BENEFIT_MATCH_KEYS)
    return split_dependents(unique)


def dedupe_enrollment(df: pd.DataFrame) -> pd.DataFrame:
    """Drop exact duplicate enrollment rows (student_name + enrollment_id)."""
    return drop_duplicate_rows(df, ENROLLMENT_MATCH_KEYS)
