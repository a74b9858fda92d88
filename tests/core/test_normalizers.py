import pandas as pd
from datetime import date

from family_import.core.normalizers import (
    blank_to_na,
    names_match,
    normalize_name,
    normalize_nis,
    parse_date,
    strip_accents,
    strip_accents_frame,
    to_date_series,
    to_int64_nullable_series,
)


def test_normalize_name_rules() -> None:
    assert normalize_name("  joão   da  Silva ") == "JOAO DA SILVA"
    assert normalize_name("Conceição") == "CONCEICAO"
    assert normalize_name(None) == ""
    assert normalize_name(pd.NA) == ""


def test_names_match_is_exact_after_normalization() -> None:
    assert names_match("Maria Silva", "MARIA  SILVA") is True
    assert names_match("MARIA SILVA", "Maria Silva") is True
    assert names_match("Maria Silva", "Maria Sylva") is False
    assert names_match("Maria Silva", "Maria da Silva") is False


def test_names_match_is_symmetric() -> None:
    pairs = [
        ("José Souza", "JOSE SOUZA"),
        ("Ana", "Ana Maria"),
        ("", "Ana"),
    ]
    for left, right in pairs:
        assert names_match(left, right) == names_match(right, left)


def test_names_match_never_matches_empty_names() -> None:
    assert names_match("", "") is False
    assert names_match(None, None) is False
    assert names_match("   ", "") is False


def test_strip_accents_leaves_non_strings() -> None:
    assert strip_accents("Mãe") == "Mae"
    assert strip_accents(3) == 3
    assert strip_accents(None) is None


def test_strip_accents_folds_letters_without_decomposition() -> None:
    assert strip_accents("Søren Łukasz Đorđević") == "Soren Lukasz Dordevic"
    assert strip_accents("Æsa Straße") == "Aesa Strasse"
    assert names_match("Bjørn Håland", "BJORN HALAND") is True


def test_strip_accents_frame_keeps_string_dtype() -> None:
    df = pd.DataFrame(
        {
            "name": pd.Series(["João", pd.NA], dtype="string"),
            "size": [1, 2],
        }
    )

    result = strip_accents_frame(df)

    assert result["name"].tolist()[0] == "Joao"
    assert pd.isna(result["name"].tolist()[1])
    assert isinstance(result["name"].dtype, pd.StringDtype)
    assert result["size"].tolist() == [1, 2]
    assert df["name"].tolist()[0] == "João"


def test_normalize_nis_variants() -> None:
    assert normalize_nis("12345678901") == "12345678901"
    assert normalize_nis(" 123.456.789-01 ") == "12345678901"
    assert normalize_nis("12345678901.0") == "12345678901"
    assert pd.isna(normalize_nis("abc"))
    assert pd.isna(normalize_nis(""))
    assert pd.isna(normalize_nis(None))


def test_to_date_series_uses_fixed_format() -> None:
    series = pd.Series(["15/03/2009", "2009-03-15", "", "31/02/2010"])

    result = to_date_series(series)

    assert result.iloc[0] == date(2009, 3, 15)
    assert pd.isna(result.iloc[1])
    assert pd.isna(result.iloc[2])
    assert pd.isna(result.iloc[3])


def test_parse_date_scalar() -> None:
    assert parse_date("01/12/2015") == date(2015, 12, 1)
    assert parse_date(" 01/12/2015 ") == date(2015, 12, 1)
    assert parse_date("2015-12-01") is None
    assert parse_date("") is None
    assert parse_date(None) is None
    assert parse_date(date(2015, 12, 1)) == date(2015, 12, 1)


def test_to_int64_nullable_series() -> None:
    series = pd.Series(["3", "x", "2.5", "", "4.0"])

    result = to_int64_nullable_series(series)

    assert str(result.dtype) == "Int64"
    assert result.iloc[0] == 3
    assert pd.isna(result.iloc[1])
    assert pd.isna(result.iloc[2])
    assert pd.isna(result.iloc[3])
    assert result.iloc[4] == 4


def test_blank_to_na() -> None:
    result = blank_to_na(pd.Series(["", "  ", "x", None]))

    assert pd.isna(result.iloc[0])
    assert pd.isna(result.iloc[1])
    assert result.iloc[2] == "x"
    assert pd.isna(result.iloc[3])
