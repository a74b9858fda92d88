from datetime import date

import pandas as pd

from family_import.cleaning.clean_benefits import clean_benefits
from family_import.cleaning.clean_enrollment import clean_enrollment
from family_import.engines.cross_reference import (
    EnrollmentIndex,
    build_dependent,
    build_grant,
    resolve,
)


AS_OF = date(2024, 6, 15)


def _benefit(guardian: str, dependent: str, dob: str = "10/03/2009") -> pd.DataFrame:
    return pd.DataFrame(
        {
            "TITULAR": [guardian],
            "DTNASCTIT": ["01/01/1985"],
            "NISTITULAR": ["11111111111"],
            "DEPENDENTE": [dependent],
            "DTNASCDEP": [dob],
            "NISDEPENDEN": ["90000000001"],
            "QTDE. MEMBROS": ["3"],
        }
    )


def _enrollment(rows: list[dict[str, str]]) -> pd.DataFrame:
    defaults = {
        "Aluno": "",
        "Data Nascimento": "10/03/2009",
        "Mãe": "",
        "Pai": "",
        "Nome Responsável": "",
        "Matricula": "",
    }
    return pd.DataFrame([{**defaults, **row} for row in rows])


def _resolve(benefit_raw: pd.DataFrame, enrollment_raw: pd.DataFrame):
    candidate = clean_benefits(benefit_raw).iloc[0]
    index = EnrollmentIndex(clean_enrollment(enrollment_raw))
    return resolve(candidate, index, AS_OF)


def test_resolve_accepts_mother_match() -> None:
    outcome = _resolve(
        _benefit("MARIA SILVA", "JOAO SILVA"),
        _enrollment([{"Aluno": "JOAO SILVA", "Mãe": "MARIA SILVA"}]),
    )

    assert outcome.status == "accepted"
    assert outcome.enrollment_position == 0
    assert outcome.reason is None


def test_resolve_accepts_father_or_responsible_match() -> None:
    father = _resolve(
        _benefit("JOSE SILVA", "JOAO SILVA"),
        _enrollment([{"Aluno": "JOAO SILVA", "Mãe": "MARIA SILVA", "Pai": "JOSE SILVA"}]),
    )
    responsible = _resolve(
        _benefit("TEREZA SILVA", "JOAO SILVA"),
        _enrollment([{"Aluno": "JOAO SILVA", "Nome Responsável": "Tereza Silva"}]),
    )

    assert father.status == "accepted"
    assert responsible.status == "accepted"


def test_resolve_ignores_accents_and_case() -> None:
    outcome = _resolve(
        _benefit("Maria Conceição", "JOÃO  CONCEIÇÃO"),
        _enrollment([{"Aluno": "Joao Conceicao", "Mãe": "MARIA CONCEICAO"}]),
    )

    assert outcome.status == "accepted"


def test_resolve_wrong_guardian_cites_enrolled_guardian() -> None:
    outcome = _resolve(
        _benefit("MARIA SILVA", "JOAO SILVA"),
        _enrollment([{"Aluno": "JOAO SILVA", "Mãe": "ANA SILVA"}]),
    )

    assert outcome.status == "rejected_wrong_guardian"
    assert "ANA SILVA" in outcome.reason
    assert outcome.cited_guardian == "ANA SILVA"


def test_resolve_wrong_guardian_uses_first_name_only_match() -> None:
    outcome = _resolve(
        _benefit("MARIA SILVA", "JOAO SILVA"),
        _enrollment(
            [
                {"Aluno": "JOAO SILVA", "Mãe": "ANA SILVA", "Pai": "PAULO SILVA"},
                {"Aluno": "JOAO SILVA", "Mãe": "CARLA SILVA"},
            ]
        ),
    )

    assert outcome.enrollment_position == 0
    assert "ANA SILVA, PAULO SILVA" in outcome.reason
    assert "CARLA" not in outcome.reason


def test_resolve_full_match_scans_every_entry() -> None:
    outcome = _resolve(
        _benefit("MARIA SILVA", "JOAO SILVA"),
        _enrollment(
            [
                {"Aluno": "JOAO SILVA", "Mãe": "ANA SILVA"},
                {"Aluno": "JOAO SILVA", "Mãe": "MARIA SILVA"},
            ]
        ),
    )

    assert outcome.status == "accepted"
    assert outcome.enrollment_position == 1


def test_resolve_no_match() -> None:
    outcome = _resolve(
        _benefit("MARIA SILVA", "JOAO SILVA"),
        _enrollment([{"Aluno": "JOAO SOUZA", "Mãe": "MARIA SILVA"}]),
    )

    assert outcome.status == "rejected_no_match"
    assert outcome.reason == "dependent not found in the enrollment registry"


def test_resolve_misspelled_name_is_no_match() -> None:
    outcome = _resolve(
        _benefit("MARIA SILVA", "JOAO SILVA"),
        _enrollment([{"Aluno": "JOAO SYLVA", "Mãe": "MARIA SILVA"}]),
    )

    assert outcome.status == "rejected_no_match"


def test_resolve_rechecks_age_in_enrollment_registry() -> None:
    outcome = _resolve(
        _benefit("MARIA SILVA", "JOAO SILVA", dob="10/03/2009"),
        _enrollment([{"Aluno": "JOAO SILVA", "Mãe": "MARIA SILVA", "Data Nascimento": "10/03/2005"}]),
    )

    assert outcome.status == "rejected_overage"
    assert outcome.reason == "dependent is not a minor in the enrollment registry"


def test_build_grant_and_dependent_keep_raw_names() -> None:
    benefit_raw = _benefit("Maria Conceição", "João Conceição")
    enrollment_raw = _enrollment(
        [{"Aluno": "Joao Conceicao", "Mãe": "Maria Conceição", "Pai": "José Conceição", "Matricula": "M7"}]
    )
    candidate = clean_benefits(benefit_raw).iloc[0]
    index = EnrollmentIndex(clean_enrollment(enrollment_raw))

    grant = build_grant(candidate, benefit_raw.iloc[0], group_name="bolsa-familia", tenant_id="city-1")
    dependent = build_dependent(candidate, benefit_raw.iloc[0], index, 0, enrollment_raw_row=enrollment_raw.iloc[0])

    assert grant.guardian_name == "Maria Conceição"
    assert grant.guardian_nis == "11111111111"
    assert grant.guardian_birthdate == date(1985, 1, 1)
    assert grant.household_size == 3
    assert grant.tenant_id == "city-1"
    assert dependent.name == "João Conceição"
    assert dependent.nis == "90000000001"
    assert dependent.birthdate == date(2009, 3, 10)
    assert dependent.enrollment_id == "M7"
    assert dependent.school_father_name == "José Conceição"
    assert dependent.school_responsible_name is None


def test_enrollment_index_lookups() -> None:
    index = EnrollmentIndex(
        clean_enrollment(
            _enrollment(
                [
                    {"Aluno": "Lia Souza", "Mãe": "Ana Souza"},
                    {"Aluno": "JOAO SILVA", "Pai": "Jose Silva"},
                    {"Aluno": "lia  souza", "Nome Responsável": "Rita Souza"},
                ]
            )
        )
    )

    assert len(index) == 3
    assert index.positions_for("LIA SOUZA") == [0, 2]
    assert index.find_student("Joao Silva") == 1
    assert index.find_with_guardian("Lia Souza", "RITA SOUZA") == 2
    assert index.find_with_guardian("Lia Souza", "") is None
    assert index.guardian_names(1) == ["Jose Silva"]
    assert index.row_id(2) == 2
