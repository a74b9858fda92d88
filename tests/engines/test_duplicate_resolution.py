from datetime import date

import pandas as pd

from family_import.cleaning.clean_benefits import clean_benefits
from family_import.cleaning.clean_enrollment import clean_enrollment
from family_import.engines.cross_reference import EnrollmentIndex
from family_import.engines.deduplicate import dedupe_benefits
from family_import.engines.duplicate_resolution import resolve_priority_group


AS_OF = date(2024, 6, 15)


def _claimants(guardians: list[tuple[str, str]], dependent: str = "JOAO SILVA") -> pd.DataFrame:
    return pd.DataFrame(
        {
            "TITULAR": [name for name, _ in guardians],
            "DTNASCTIT": ["01/01/1985"] * len(guardians),
            "NISTITULAR": [nis for _, nis in guardians],
            "DEPENDENTE": [dependent] * len(guardians),
            "DTNASCDEP": ["10/03/2009"] * len(guardians),
            "NISDEPENDEN": ["90000000001"] * len(guardians),
        }
    )


def _enrollment(rows: list[dict[str, str]]) -> pd.DataFrame:
    defaults = {"Aluno": "JOAO SILVA", "Data Nascimento": "10/03/2009", "Mãe": "", "Pai": "", "Nome Responsável": ""}
    return pd.DataFrame([{**defaults, **row} for row in rows])


def _settle(benefits_raw: pd.DataFrame, enrollment_raw: pd.DataFrame):
    unique, groups = dedupe_benefits(clean_benefits(benefits_raw))
    assert unique.empty
    assert len(groups) == 1
    claimants = clean_benefits(benefits_raw).set_index("row_id", drop=False)
    index = EnrollmentIndex(clean_enrollment(enrollment_raw))
    return resolve_priority_group(groups[0], claimants, index, AS_OF)


def test_mother_wins_over_father() -> None:
    outcomes = _settle(
        _claimants([("MARIA SILVA", "11111111111"), ("JOSE SILVA", "22222222222")]),
        _enrollment([{"Mãe": "MARIA SILVA", "Pai": "JOSE SILVA"}]),
    )

    assert [outcome.row_id for outcome in outcomes] == [0, 1]
    assert outcomes[0].status == "accepted"
    assert outcomes[1].status == "rejected_duplicate_loser"
    assert outcomes[1].cited_guardian == "MARIA SILVA"
    assert "MARIA SILVA" in outcomes[1].reason


def test_mother_role_is_tried_before_earlier_father_entry() -> None:
    outcomes = _settle(
        _claimants([("JOSE SILVA", "22222222222"), ("MARIA SILVA", "11111111111")]),
        _enrollment(
            [
                {"Pai": "JOSE SILVA"},
                {"Mãe": "MARIA SILVA"},
            ]
        ),
    )

    assert outcomes[0].status == "rejected_duplicate_loser"
    assert outcomes[0].cited_guardian == "MARIA SILVA"
    assert outcomes[1].status == "accepted"
    assert outcomes[1].enrollment_position == 1


def test_responsible_wins_before_father() -> None:
    outcomes = _settle(
        _claimants([("JOSE SILVA", "22222222222"), ("TEREZA SILVA", "33333333333")]),
        _enrollment([{"Mãe": "ANA SILVA", "Nome Responsável": "TEREZA SILVA", "Pai": "JOSE SILVA"}]),
    )

    assert [outcome.status for outcome in outcomes] == ["rejected_duplicate_loser", "accepted"]
    assert outcomes[0].cited_guardian == "TEREZA SILVA"


def test_father_wins_when_mother_is_not_a_claimant() -> None:
    outcomes = _settle(
        _claimants([("MARIA SILVA", "11111111111"), ("JOSE SILVA", "22222222222")]),
        _enrollment([{"Mãe": "ANA SILVA", "Pai": "JOSE SILVA"}]),
    )

    assert [outcome.status for outcome in outcomes] == ["rejected_duplicate_loser", "accepted"]
    assert outcomes[0].cited_guardian == "JOSE SILVA"


def test_no_enrollment_entry_rejects_every_claimant() -> None:
    outcomes = _settle(
        _claimants([("MARIA SILVA", "11111111111"), ("JOSE SILVA", "22222222222")]),
        _enrollment([{"Aluno": "LIA SILVA", "Mãe": "MARIA SILVA"}]),
    )

    assert [outcome.status for outcome in outcomes] == ["rejected_no_match", "rejected_no_match"]
    assert all(outcome.reason == "dependent not found in the enrollment registry" for outcome in outcomes)


def test_winner_still_needs_to_be_minor_in_enrollment() -> None:
    outcomes = _settle(
        _claimants([("MARIA SILVA", "11111111111"), ("JOSE SILVA", "22222222222")]),
        _enrollment([{"Mãe": "MARIA SILVA", "Data Nascimento": "01/01/2004"}]),
    )

    assert outcomes[0].status == "rejected_overage"
    assert outcomes[1].status == "rejected_duplicate_loser"


def test_only_first_claimant_with_the_winning_name_is_accepted() -> None:
    outcomes = _settle(
        _claimants([("MARIA SILVA", "11111111111"), ("Maria Silva", "44444444444")]),
        _enrollment([{"Mãe": "MARIA SILVA"}]),
    )

    assert [outcome.status for outcome in outcomes] == ["accepted", "rejected_duplicate_loser"]
