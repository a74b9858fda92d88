from datetime import date

import pandas as pd

from family_import.engines.eligibility import (
    completed_years,
    completed_years_series,
    filter_minors,
    is_minor,
    start_of_month,
)


AS_OF = date(2024, 6, 20)


def test_start_of_month() -> None:
    assert start_of_month(AS_OF) == date(2024, 6, 1)


def test_completed_years_is_calendar_aware() -> None:
    assert completed_years(date(2009, 3, 10), date(2024, 6, 1)) == 15
    assert completed_years(date(2006, 6, 2), date(2024, 6, 1)) == 17
    assert completed_years(date(2006, 6, 1), date(2024, 6, 1)) == 18
    assert completed_years(None, date(2024, 6, 1)) is None


def test_is_minor_counts_from_start_of_month() -> None:
    # Turns 18 on June 10th: still a minor for the June run
    assert is_minor(date(2006, 6, 10), AS_OF) is True
    # Turned 18 on June 1st
    assert is_minor(date(2006, 6, 1), AS_OF) is False
    assert is_minor(date(2009, 3, 15), AS_OF) is True
    assert is_minor(date(2005, 3, 15), AS_OF) is False
    assert is_minor(None, AS_OF) is False


def test_completed_years_series_matches_scalar() -> None:
    dobs = [date(2009, 3, 10), date(2006, 6, 2), date(2006, 6, 1), None]
    as_of = date(2024, 6, 1)

    result = completed_years_series(pd.Series(dobs, dtype=object), as_of)

    assert result.tolist()[:3] == [completed_years(dob, as_of) for dob in dobs[:3]]
    assert pd.isna(result.iloc[3])


def test_filter_minors_rejects_of_age_and_missing_dates() -> None:
    df = pd.DataFrame(
        {
            "row_id": [0, 1, 2, 3],
            "dependent_birthdate": [date(2009, 3, 15), date(2005, 1, 1), None, date(2006, 6, 10)],
        }
    )

    eligible, rejected = filter_minors(df, AS_OF)

    assert eligible["row_id"].tolist() == [0, 3]
    assert rejected["row_id"].tolist() == [1, 2]
    assert rejected["reason"].unique().tolist() == ["dependent is of age"]
