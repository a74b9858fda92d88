import pytest

from family_import.core.models import Dependent, Grant, GrantBook, MatchOutcome


def _grant(nis: str, name: str) -> Grant:
    return Grant(guardian_nis=nis, guardian_name=name, group_name="bolsa-familia", tenant_id="city-1")


def test_grant_book_merges_by_guardian_nis() -> None:
    book = GrantBook()

    book.add(_grant("111", "Maria Silva"), Dependent(nis="900", name="João Silva"))
    book.add(_grant("222", "Ana Souza"), Dependent(nis="901", name="Lia Souza"))
    merged = book.add(_grant("111", "Maria Silva"), Dependent(nis="902", name="Rita Silva"))

    assert len(book) == 2
    assert book.dependent_count == 3
    assert merged.dependent_nis == ["900", "902"]
    assert [grant.guardian_nis for grant in book] == ["111", "222"]


def test_grant_book_refuses_dependent_twice() -> None:
    book = GrantBook()
    book.add(_grant("111", "Maria Silva"), Dependent(nis="900", name="João Silva"))

    with pytest.raises(ValueError, match="already granted"):
        book.add(_grant("222", "José Silva"), Dependent(nis="900", name="João Silva"))

    assert book.get("222") is None


def test_grant_to_record_nests_dependents() -> None:
    grant = _grant("111", "Maria Silva")
    grant.dependents.append(Dependent(nis="900", name="João Silva", enrollment_id="M1"))

    record = grant.to_record()

    assert record["guardian_nis"] == "111"
    assert record["tenant_id"] == "city-1"
    assert record["dependents"][0]["nis"] == "900"
    assert record["dependents"][0]["enrollment_id"] == "M1"


def test_match_outcome_is_accepted() -> None:
    assert MatchOutcome(row_id=0, status="accepted").is_accepted is True
    assert MatchOutcome(row_id=0, status="rejected_no_match", reason="x").is_accepted is False
