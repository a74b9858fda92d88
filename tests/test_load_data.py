from pathlib import Path

import pandas as pd
import pytest

from family_import.load_data import (
    iter_csv_chunks,
    load_benefits_csv,
    load_csv,
    load_enrollment_csv,
    load_registry_csv,
)


def test_iter_csv_chunks_keeps_text_and_positions(tmp_path: Path) -> None:
    path = tmp_path / "benefits.csv"
    path.write_text("NISTITULAR ;DEPENDENTE\n0123;Joao\n;Lia\n0456;Rui\n", encoding="utf-8")

    chunks = list(iter_csv_chunks(path, ";", chunk_size=2))

    assert [len(chunk) for chunk in chunks] == [2, 1]
    assert list(chunks[0].columns) == ["NISTITULAR", "DEPENDENTE"]
    assert chunks[0]["NISTITULAR"].tolist() == ["0123", ""]
    assert chunks[1].index.tolist() == [2]


def test_load_csv_concatenates_chunks(tmp_path: Path) -> None:
    path = tmp_path / "enrollment.csv"
    path.write_text("Aluno,Mãe\nJoão,Maria\nLia,Ana\nRui,Rita\n", encoding="utf-8")

    df = load_csv(path, ",", chunk_size=1)

    assert df["Aluno"].tolist() == ["João", "Lia", "Rui"]
    assert df.index.tolist() == [0, 1, 2]


def test_loaders_use_dataset_delimiters(tmp_path: Path) -> None:
    benefits = tmp_path / "b.csv"
    enrollment = tmp_path / "e.csv"
    registry = tmp_path / "r.csv"
    benefits.write_text("TITULAR;DEPENDENTE\nMaria;Joao\n", encoding="utf-8")
    enrollment.write_text("Aluno,Mãe\nJoao,Maria\n", encoding="utf-8")
    registry.write_text("nom_pessoa;fx_rfpc\nAna;1\n", encoding="utf-8")

    assert list(load_benefits_csv(benefits).columns) == ["TITULAR", "DEPENDENTE"]
    assert list(load_enrollment_csv(enrollment).columns) == ["Aluno", "Mãe"]
    assert load_registry_csv(registry)["fx_rfpc"].tolist() == ["1"]


def test_loaders_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="Benefit registry"):
        load_benefits_csv(tmp_path / "missing.csv")
    with pytest.raises(ValueError, match="use_sample_if_none=False"):
        load_enrollment_csv(None, use_sample_if_none=False)
