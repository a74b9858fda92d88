# Docstring for family_import/engines/registry_import module
"""
registry_import.py

Family import from the single registry (CadUnico) person extract.

Unlike the benefit/enrollment reconciliation, this import trusts the registry:
every person flagged as the family's responsible (kinship code "1") becomes a
family, grouped by the per-capita income bracket (fx_rfpc). Other lines are
counted as wrong and described in the report; nothing is written to the audit
sink.

Families are keyed by the responsible NIS, the same key the reconciliation
import writes, not by the family code (cod_familiar_fam). A responsible line
without a usable NIS is therefore counted as wrong, and a family code whose
responsible changes NIS between extracts is stored as a new family.

Public API
----------
- RegistryImportReport (dataclass)
- import_responsibles(raw_df, tenant_id, store) -> RegistryImportReport
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from typing import Hashable

import pandas as pd

from ..config import (
    RECONCILIATION_CONFIG,
    REGISTRY_COLUMN_MAP,
    REGISTRY_REQUIRED_COLUMNS,
    get_family_group_by_code,
)
from ..core.errors import PersistenceError
from ..core.models import Grant
from ..core.normalizers import normalize_nis, parse_date
from ..core.validators import check_required_columns
from ..outputs.family_store import FamilyStore


RESPONSIBLE_KINSHIP_CODE = "1"


@dataclass
class RegistryImportReport:
    created: int = 0
    updated: int = 0
    wrong: int = 0
    report: list[str] = field(default_factory=list)
    finished: bool = False


def _text(value: object) -> str | None:
    if value is None or pd.isna(value):
        return None
    text = " ".join(str(value).split())
    return text or None


def import_responsibles(
    raw_df: pd.DataFrame,
    tenant_id: Hashable,
    store: FamilyStore,
    date_format: str = RECONCILIATION_CONFIG.date_format,
) -> RegistryImportReport:

    """

    Upsert one family per family responsible found in the registry extract.

    Args:
        raw_df:
            Raw registry rows (all cells text, original headers).
        tenant_id:
            Owner of the imported families.
        store:
            Family store receiving one upsert per responsible.
        date_format:
            strptime format of dta_nasc_pessoa.

    Returns:
        RegistryImportReport with created/updated/wrong counts and one message
        per wrong line ("[line: n] ...", n counted from 1).

    Raises:
        SchemaValidationError: required columns missing.
        PersistenceError: the store failed (lines already saved stay saved).

    """

    check_required_columns(raw_df, REGISTRY_REQUIRED_COLUMNS, "Single registry")
    df = raw_df.reset_index(drop=True).rename(columns=REGISTRY_COLUMN_MAP)

    result = RegistryImportReport()
    for position, row in df.iterrows():
        line = int(position) + 1
        name = _text(row["responsible_name"])
        family_code = _text(row["family_code"])

        # Only the family's responsible person (RF) becomes a family
        if _text(row["kinship_code"]) != RESPONSIBLE_KINSHIP_CODE:
            result.wrong += 1
            result.report.append(f"[line: {line}] Person {name} is not a family responsible")
            continue

        group = get_family_group_by_code(row["income_bracket"])
        if group is None:
            result.wrong += 1
            result.report.append(f"[line: {line}] Family {family_code} has an invalid fx_rfpc value")
            continue

        nis = normalize_nis(row["responsible_nis"])
        if pd.isna(nis):
            result.wrong += 1
            result.report.append(f"[line: {line}] Family {family_code} has no responsible NIS")
            continue

        grant = Grant(
            guardian_nis=nis,
            guardian_name=name,
            guardian_birthdate=parse_date(row["responsible_birthdate"], date_format),
            family_code=family_code,
            mother_name=_text(row["responsible_mother_name"]),
            group_name=group.key,
            tenant_id=tenant_id,
        )
        try:
            created = store.upsert_family(grant)
        except Exception as exc:
            raise PersistenceError(f"Could not save family {family_code} (line {line}): {exc}") from exc

        if created:
            result.created += 1
        else:
            result.updated += 1

    if result.wrong > 0:
        warnings.warn(
            f"Single registry import skipped {result.wrong} lines.",
            stacklevel=2,
        )

    result.finished = True
    return result
