"""
generate_sample_data.py

Seeded generator for synthetic benefit registry and school enrollment inputs.

This script writes two CSV files into data/sample/, using raw headers that
match the column maps in family_import/config.py so the pipeline schema check
passes. The outputs are deterministic given a seed and a reference date, and
include regular families plus edge-case rows (of-age dependent, wrong guardian,
student missing from the enrollment registry, dependent claimed by two
guardians, accented names, repeated lines, unusable NIS).
"""

from __future__ import annotations

import argparse
import random
from datetime import date, datetime, timedelta
from pathlib import Path

import pandas as pd
from faker import Faker

from ..config import (
    AUDIT_COLUMNS,
    BENEFIT_COLUMN_MAP,
    ENROLLMENT_COLUMN_MAP,
    RECONCILIATION_CONFIG,
    SAMPLE_DIR,
)
from .normalizers import normalize_name


DEFAULT_SEED = 20240611
DEFAULT_REFERENCE_DATE = date(2024, 6, 1)
DEFAULT_FAMILY_COUNT = 40

DATE_FORMAT = RECONCILIATION_CONFIG.date_format

# Raw benefit header order: payroll columns as exported + family code
BENEFIT_HEADERS = [col for col in AUDIT_COLUMNS if col != "reason"] + ["CODFAMILIAR"]
ENROLLMENT_HEADERS = list(ENROLLMENT_COLUMN_MAP.keys())

# Fixed people used by the edge cases (never produced by Faker)
EDGE_CASES = {
    "overage": "Lucas Teixeira Prado Neto",
    "enrollment_overage": "Bianca Moura Salgado",
    "wrong_guardian": "Rafael Quintela Bastos",
    "missing_student": "Helena Vasconcelos Paiva",
    "split": "Pedro Arruda Lins",
    "accents": "João Conceição Araújo",
    "invalid_nis": "Marina Castilho Reis",
}


def _birthdate_for_age(rng: random.Random, reference: date, age: int) -> date:
    """Birth date of someone with `age` completed years on the first day of reference's month."""
    anchor = date(reference.year - age - 1, reference.month, 1)
    return anchor + timedelta(days=rng.randint(1, 360))


def _fmt(value: date) -> str:
    return value.strftime(DATE_FORMAT)


class _Ids:
    """Unique NIS / enrollment number source."""

    def __init__(self, rng: random.Random) -> None:
        self.rng = rng
        self.used: set[str] = set()

    def nis(self) -> str:
        value = f"{self.rng.randint(10**10, 10**11 - 1)}"
        while value in self.used:
            value = f"{self.rng.randint(10**10, 10**11 - 1)}"
        self.used.add(value)
        return value

    def enrollment(self) -> str:
        value = f"M{self.rng.randint(100000, 999999)}"
        while value in self.used:
            value = f"M{self.rng.randint(100000, 999999)}"
        self.used.add(value)
        return value


def _benefit_row(
    rng: random.Random,
    reference: date,
    *,
    guardian: dict[str, object],
    dependent_name: str,
    dependent_nis: str,
    dependent_birthdate: date,
    household_size: int,
) -> dict[str, object]:
    age = reference.year - dependent_birthdate.year
    return {
        "UF": "SP",
        "MUNICIPIO": "SAO CARLOS",
        "TITULAR": guardian["name"],
        "DTNASCTIT": _fmt(guardian["birthdate"]),
        "NISTITULAR": guardian["nis"],
        "COMPETFOLHA": reference.strftime("%Y%m"),
        "SITFAM": rng.choice(["LIBERADA", "BLOQUEADA"]),
        "NISDEPENDEN": dependent_nis,
        "DEPENDENTE": dependent_name,
        "IDADE": str(age),
        "DTNASCDEP": _fmt(dependent_birthdate),
        "QTDE. MEMBROS": str(household_size),
        "CODFAMILIAR": guardian["family_code"],
    }


def _enrollment_row(
    ids: _Ids,
    *,
    student_name: str,
    birthdate: date,
    mother: str = "",
    father: str = "",
    responsible: str = "",
) -> dict[str, object]:
    return {
        "Aluno": student_name,
        "Data Nascimento": _fmt(birthdate),
        "Mãe": mother,
        "Pai": father,
        "Nome Responsável": responsible,
        "Matricula": ids.enrollment(),
    }


def _guardian(rng: random.Random, ids: _Ids, reference: date, name: str) -> dict[str, object]:
    return {
        "name": name,
        "nis": ids.nis(),
        "birthdate": _birthdate_for_age(rng, reference, rng.randint(24, 52)),
        "family_code": f"{rng.randint(10**9, 10**10 - 1)}",
    }


def _build_regular_families(
    rng: random.Random,
    faker: Faker,
    ids: _Ids,
    reference: date,
    family_count: int,
) -> tuple[list[dict[str, object]], list[dict[str, object]]]:
    benefits: list[dict[str, object]] = []
    enrollment: list[dict[str, object]] = []
    used_names = {normalize_name(name) for name in EDGE_CASES.values()}

    def _unique(make) -> str:
        name = make()
        while normalize_name(name) in used_names:
            name = make()
        used_names.add(normalize_name(name))
        return name

    for _ in range(family_count):
        mother = _guardian(rng, ids, reference, _unique(faker.name_female))
        father_name = _unique(faker.name_male)
        surname = str(mother["name"]).split()[-1]
        children = rng.randint(1, 3)

        for _ in range(children):
            child_name = _unique(lambda: f"{faker.first_name()} {surname}")
            child_birthdate = _birthdate_for_age(rng, reference, rng.randint(4, 16))
            benefits.append(
                _benefit_row(
                    rng,
                    reference,
                    guardian=mother,
                    dependent_name=child_name,
                    dependent_nis=ids.nis(),
                    dependent_birthdate=child_birthdate,
                    household_size=children + 2,
                )
            )
            # Most students list the mother; some only a designated responsible
            if rng.random() < 0.8:
                enrollment.append(
                    _enrollment_row(
                        ids,
                        student_name=child_name,
                        birthdate=child_birthdate,
                        mother=str(mother["name"]),
                        father=father_name,
                    )
                )
            else:
                enrollment.append(
                    _enrollment_row(
                        ids,
                        student_name=child_name,
                        birthdate=child_birthdate,
                        responsible=str(mother["name"]),
                    )
                )

    return benefits, enrollment


def _build_edge_cases(
    rng: random.Random,
    ids: _Ids,
    reference: date,
) -> tuple[list[dict[str, object]], list[dict[str, object]]]:
    benefits: list[dict[str, object]] = []
    enrollment: list[dict[str, object]] = []

    def _pair(guardian_name: str, age: int) -> tuple[dict[str, object], str, date]:
        guardian = _guardian(rng, ids, reference, guardian_name)
        birthdate = _birthdate_for_age(rng, reference, age)
        return guardian, ids.nis(), birthdate

    # Of age in the benefit registry -> rejected before cross-referencing
    guardian, nis, birthdate = _pair("Sandra Teixeira Prado", 19)
    benefits.append(_benefit_row(rng, reference, guardian=guardian, dependent_name=EDGE_CASES["overage"],
                                 dependent_nis=nis, dependent_birthdate=birthdate, household_size=3))
    enrollment.append(_enrollment_row(ids, student_name=EDGE_CASES["overage"], birthdate=birthdate,
                                      mother="Sandra Teixeira Prado"))

    # Minor in the benefit registry, of age in the enrollment registry
    guardian, nis, birthdate = _pair("Regina Moura Salgado", 12)
    benefits.append(_benefit_row(rng, reference, guardian=guardian, dependent_name=EDGE_CASES["enrollment_overage"],
                                 dependent_nis=nis, dependent_birthdate=birthdate, household_size=2))
    enrollment.append(_enrollment_row(ids, student_name=EDGE_CASES["enrollment_overage"],
                                      birthdate=_birthdate_for_age(rng, reference, 19),
                                      mother="Regina Moura Salgado"))

    # Enrolled under a different mother
    guardian, nis, birthdate = _pair("Claudia Quintela Bastos", 9)
    benefits.append(_benefit_row(rng, reference, guardian=guardian, dependent_name=EDGE_CASES["wrong_guardian"],
                                 dependent_nis=nis, dependent_birthdate=birthdate, household_size=4))
    enrollment.append(_enrollment_row(ids, student_name=EDGE_CASES["wrong_guardian"], birthdate=birthdate,
                                      mother="Patricia Quintela Bastos"))

    # Not enrolled at all
    guardian, nis, birthdate = _pair("Denise Vasconcelos Paiva", 7)
    benefits.append(_benefit_row(rng, reference, guardian=guardian, dependent_name=EDGE_CASES["missing_student"],
                                 dependent_nis=nis, dependent_birthdate=birthdate, household_size=2))

    # Same dependent claimed by the mother and the father; the mother keeps it
    mother, nis, birthdate = _pair("Fernanda Arruda Lins", 10)
    father = _guardian(rng, ids, reference, "Marcos Arruda Lins")
    for claimant in (father, mother):
        benefits.append(_benefit_row(rng, reference, guardian=claimant, dependent_name=EDGE_CASES["split"],
                                     dependent_nis=nis, dependent_birthdate=birthdate, household_size=4))
    enrollment.append(_enrollment_row(ids, student_name=EDGE_CASES["split"], birthdate=birthdate,
                                      mother="Fernanda Arruda Lins", father="Marcos Arruda Lins"))

    # Accents and case differ between the registries -> still a match
    guardian, nis, birthdate = _pair("Conceição Araújo", 11)
    accented = _benefit_row(rng, reference, guardian=guardian, dependent_name=EDGE_CASES["accents"].upper(),
                            dependent_nis=nis, dependent_birthdate=birthdate, household_size=3)
    benefits.append(accented)
    enrollment.append(_enrollment_row(ids, student_name="Joao  Conceicao Araujo", birthdate=birthdate,
                                      mother="CONCEICAO ARAUJO"))

    # Repeated payroll line (kept once)
    benefits.append(dict(accented))

    # Guardian NIS missing -> conversion failure
    guardian, nis, birthdate = _pair("Tatiana Castilho Reis", 8)
    invalid = _benefit_row(rng, reference, guardian=guardian, dependent_name=EDGE_CASES["invalid_nis"],
                           dependent_nis=nis, dependent_birthdate=birthdate, household_size=2)
    invalid["NISTITULAR"] = ""
    benefits.append(invalid)
    enrollment.append(_enrollment_row(ids, student_name=EDGE_CASES["invalid_nis"], birthdate=birthdate,
                                      mother="Tatiana Castilho Reis"))

    return benefits, enrollment


def _validate_sample_headers(benefits_df: pd.DataFrame, enrollment_df: pd.DataFrame) -> None:
    missing = [col for col in BENEFIT_COLUMN_MAP if col not in benefits_df.columns]
    missing += [col for col in ENROLLMENT_COLUMN_MAP if col not in enrollment_df.columns]
    if missing:
        raise ValueError(f"Sample data is missing mapped columns: {', '.join(missing)}")


def generate_sample_data(
    output_dir: Path = SAMPLE_DIR,
    seed: int = DEFAULT_SEED,
    reference_date: date = DEFAULT_REFERENCE_DATE,
    family_count: int = DEFAULT_FAMILY_COUNT,
) -> dict[str, Path]:
    rng = random.Random(seed)
    faker = Faker("pt_BR")
    faker.seed_instance(seed)
    ids = _Ids(rng)
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    benefits, enrollment = _build_regular_families(rng, faker, ids, reference_date, family_count)
    edge_benefits, edge_enrollment = _build_edge_cases(rng, ids, reference_date)

    # Edge cases spread through the extracts instead of sitting at the end
    for row in edge_benefits:
        benefits.insert(rng.randint(0, len(benefits)), row)
    for row in edge_enrollment:
        enrollment.insert(rng.randint(0, len(enrollment)), row)

    benefits_df = pd.DataFrame(benefits, columns=BENEFIT_HEADERS)
    enrollment_df = pd.DataFrame(enrollment, columns=ENROLLMENT_HEADERS)
    _validate_sample_headers(benefits_df, enrollment_df)

    outputs = {
        "benefits": output_dir / "benefits_sample.csv",
        "enrollment": output_dir / "enrollment_sample.csv",
    }
    benefits_df.to_csv(
        outputs["benefits"],
        sep=RECONCILIATION_CONFIG.benefit_delimiter,
        index=False,
        encoding=RECONCILIATION_CONFIG.encoding,
    )
    enrollment_df.to_csv(
        outputs["enrollment"],
        sep=RECONCILIATION_CONFIG.enrollment_delimiter,
        index=False,
        encoding=RECONCILIATION_CONFIG.encoding,
    )
    return outputs


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate seeded synthetic benefit and enrollment sample CSVs."
    )
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Deterministic RNG seed")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=SAMPLE_DIR,
        help="Destination directory for sample CSV files",
    )
    parser.add_argument(
        "--reference-date",
        type=lambda value: datetime.strptime(value, "%Y-%m-%d").date(),
        default=DEFAULT_REFERENCE_DATE,
        help="Date the sample ages are computed against (YYYY-MM-DD)",
    )
    parser.add_argument("--families", type=int, default=DEFAULT_FAMILY_COUNT, help="Regular families to generate")
    return parser.parse_args()


def main() -> None:
    args = _parse_args()
    outputs = generate_sample_data(
        output_dir=args.output_dir,
        seed=args.seed,
        reference_date=args.reference_date,
        family_count=args.families,
    )
    for label, path in outputs.items():
        print(f"Wrote {label} sample to: {path}")


if __name__ == "__main__":
    main()
