# Docstring for family_import/core/normalizers module
"""
normalizers.py

Shared normalization helpers for the benefit and enrollment extracts.

Includes the name matcher used by the cross-reference engines, so the whole
pipeline agrees on what "same person name" means.

Design goals
------------
- Single source of truth for accent stripping, name, NIS, date and numeric
  handling.
- Preserve canonical dtypes: pandas string for text, datetime.date for dates,
  and pandas nullable integers where appropriate.
- Exact matching only: two names match when their normalized forms are equal.
  A single misspelling is a non-match.

Public API
----------
- strip_accents(value) -> str | pd.NA
- strip_accents_frame(df) -> pd.DataFrame
- normalize_name(value) -> str
- normalize_name_series(series) -> pd.Series
- names_match(name_a, name_b) -> bool
- normalize_nis(value) -> str | pd.NA
- normalize_nis_series(series) -> pd.Series
- to_date_series(series, format="%d/%m/%Y") -> pd.Series
- parse_date(value, format="%d/%m/%Y") -> date | None
- to_int64_nullable_series(series) -> pd.Series
- normalize_text_series(series, strip=True, upper=False) -> pd.Series
- blank_to_na(series) -> pd.Series
"""

from __future__ import annotations

import re
import unicodedata
from datetime import date, datetime
from typing import Any

import pandas as pd

from ..config import RECONCILIATION_CONFIG


_WHITESPACE_RE = re.compile(r"\s+")

# Latin letters with no Unicode decomposition (stroke, ligature, ...)
_UNDECOMPOSABLE_LETTERS = str.maketrans(
    {
        "Æ": "Ae", "æ": "ae", "Ø": "O", "ø": "o", "Ð": "D", "ð": "d",
        "Þ": "Th", "þ": "th", "ß": "ss", "Đ": "D", "đ": "d", "Ħ": "H",
        "ħ": "h", "ı": "i", "ĸ": "k", "Ł": "L", "ł": "l", "Ŋ": "N",
        "ŋ": "n", "Œ": "Oe", "œ": "oe", "Ŧ": "T", "ŧ": "t", "ſ": "s",
    }
)


def strip_accents(value: Any) -> Any:
    """Fold a string to plain Latin letters.

    NFKD + drop combining marks, then letters that do not decompose
    (ø, đ, ł, æ, ...) are mapped to their ASCII spelling. Non-string values
    are returned unchanged.
    """
    if not isinstance(value, str):
        return value
    decomposed = unicodedata.normalize("NFKD", value)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.translate(_UNDECOMPOSABLE_LETTERS)


def strip_accents_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Strip accents from every text cell of the dataset in one pass.

    Applied to the whole canonical dataset after per-row conversion, so every
    text column (names, codes, free text) gets the same treatment.
    """
    out = df.copy()
    for col in out.columns:
        if out[col].dtype == object or pd.api.types.is_string_dtype(out[col]):
            converted = out[col].map(strip_accents, na_action="ignore")
            if isinstance(out[col].dtype, pd.StringDtype):
                converted = converted.astype("string")
            out[col] = converted
    return out


def normalize_name(value: Any) -> str:
    """Uppercase, accent-free, single-spaced name. Missing values -> ""."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    text = strip_accents(str(value))
    return _WHITESPACE_RE.sub(" ", text).strip().upper()


def normalize_name_series(series: pd.Series) -> pd.Series:
    """Vectorized name normalization (python str output, "" for missing)."""
    return series.map(normalize_name).astype(object)


def names_match(name_a: Any, name_b: Any) -> bool:
    """True when both names normalize to the same non-empty string."""
    key_a = normalize_name(name_a)
    if not key_a:
        return False
    return key_a == normalize_name(name_b)


def normalize_nis(value: Any) -> Any:
    """Normalize a NIS number to a digits-only string; <NA> when unusable.

    Handles spreadsheet float-like strings ("12345678901.0") and punctuation
    ("123.45678.90-1").
    """
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return pd.NA

    value_str = str(value).strip()
    if re.match(r"^\d+\.0$", value_str):
        value_str = value_str[:-2]

    digits = re.sub(r"\D", "", value_str)
    if not digits:
        return pd.NA
    return digits


def normalize_nis_series(series: pd.Series) -> pd.Series:
    """Vectorized NIS normalization with pandas string dtype."""
    return series.map(normalize_nis).astype("string")


def to_date_series(
    series: pd.Series,
    format: str = RECONCILIATION_CONFIG.date_format,
) -> pd.Series:
    """Parse fixed-format dates to datetime.date; unparseable values become NaT."""
    text = series.astype("string").str.strip()
    return pd.to_datetime(text, errors="coerce", format=format).dt.date


def parse_date(value: Any, format: str = RECONCILIATION_CONFIG.date_format) -> date | None:
    """Scalar counterpart of to_date_series. Returns None when unparseable."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    try:
        return datetime.strptime(str(value).strip(), format).date()
    except ValueError:
        return None


def to_int64_nullable_series(series: pd.Series) -> pd.Series:
    """Coerce to pandas nullable integer (Int64); non-integers become <NA>."""
    numeric = pd.to_numeric(series.astype(object), errors="coerce").astype("float64")
    numeric = numeric.where(numeric.round().eq(numeric))
    return numeric.astype("Int64")


def normalize_text_series(
    series: pd.Series,
    *,
    strip: bool = True,
    upper: bool = False,
) -> pd.Series:
    """Normalize text to pandas string dtype with optional strip/upper."""
    s = series.astype("string")
    if strip:
        s = s.str.strip()
    if upper:
        s = s.str.upper()
    return s


def blank_to_na(series: pd.Series) -> pd.Series:
    """Turn empty/whitespace-only strings into <NA> (CSV cells are read as "")."""
    s = series.astype("string")
    return s.mask(s.str.strip().eq("").fillna(False), pd.NA)
