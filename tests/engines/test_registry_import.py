from datetime import date

import pandas as pd
import pytest

from family_import.core.errors import SchemaValidationError
from family_import.engines.registry_import import import_responsibles
from family_import.outputs.family_store import InMemoryFamilyStore


def _person(kinship: str, bracket: str, name: str, nis: str, family_code: str = "123") -> dict:
    return {
        "cod_familiar_fam": family_code,
        "cod_parentesco_rf_pessoa": kinship,
        "nom_pessoa": name,
        "dta_nasc_pessoa": "05/09/1980",
        "num_nis_pessoa_atual": nis,
        "nom_completo_mae_pessoa": "Rosa Lima",
        "fx_rfpc": bracket,
    }


def test_import_responsibles_only_imports_family_responsibles() -> None:
    store = InMemoryFamilyStore()
    raw = pd.DataFrame(
        [
            _person("1", "1", "Ana Lima", "11111111111", "F1"),
            _person("3", "1", "Lia Lima", "22222222222", "F1"),
            _person("1", "9", "Rui Dias", "33333333333", "F2"),
            _person("1", "3", "Bia Reis", "44444444444", "F3"),
        ]
    )

    with pytest.warns(UserWarning, match="skipped 2 lines"):
        report = import_responsibles(raw, "city-1", store)

    assert report.created == 2
    assert report.updated == 0
    assert report.wrong == 2
    assert report.finished is True
    assert report.report == [
        "[line: 2] Person Lia Lima is not a family responsible",
        "[line: 3] Family F2 has an invalid fx_rfpc value",
    ]

    family = store.find_by_nis("11111111111", "city-1")
    assert family["group_name"] == "extreme-poverty"
    assert family["family_code"] == "F1"
    assert family["guardian_birthdate"] == date(1980, 9, 5)
    assert family["mother_name"] == "Rosa Lima"
    assert store.find_by_nis("44444444444", "city-1")["group_name"] == "cad"


def test_import_responsibles_updates_on_second_run() -> None:
    store = InMemoryFamilyStore()
    raw = pd.DataFrame([_person("1", "2", "Ana Lima", "11111111111")])

    import_responsibles(raw, "city-1", store)
    report = import_responsibles(raw, "city-1", store)

    assert (report.created, report.updated, report.wrong) == (0, 1, 0)


def test_import_responsibles_requires_registry_columns() -> None:
    raw = pd.DataFrame([_person("1", "2", "Ana Lima", "11111111111")]).drop(columns=["fx_rfpc"])

    with pytest.raises(SchemaValidationError, match="fx_rfpc"):
        import_responsibles(raw, "city-1", InMemoryFamilyStore())


def test_import_responsibles_keys_families_by_responsible_nis() -> None:
    store = InMemoryFamilyStore()
    raw = pd.DataFrame(
        [
            _person("1", "1", "Ana Lima", "11111111111", "F1"),
            _person("1", "1", "Ana Lima", "55555555555", "F1"),
            _person("1", "1", "Rui Dias", "", "F2"),
        ]
    )

    with pytest.warns(UserWarning, match="skipped 1 lines"):
        report = import_responsibles(raw, "city-1", store)

    assert (report.created, report.updated, report.wrong) == (2, 0, 1)
    assert report.report == ["[line: 3] Family F2 has no responsible NIS"]
    assert store.find_by_nis("55555555555", "city-1")["family_code"] == "F1"
