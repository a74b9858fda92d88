# Docstring for family_import/outputs/export_utils module
"""
export_utils.py

Excel exports of an import run for review by the social assistance team.

Design goals
------------
- Low friction: one call writes the whole run (families, dependents,
  rejections) to a workbook.
- Safe output: parent directories are created before writing.
- Consistent engine: openpyxl for every .xlsx file.

Public API
----------
- grants_to_frames(grants) -> tuple[pd.DataFrame, pd.DataFrame]
- write_df_excel(df, output_path=None, *, out_dir=REPORTS_OUTPUTS_DIR,
  filename_prefix="export", sheet_name="data", index=False) -> Path
- write_multi_sheet_excel(sheets, output_path, *, index=False) -> Path
- write_import_workbook(grants, rejections, output_path=None, *,
  out_dir=REPORTS_OUTPUTS_DIR, tenant_id=None) -> Path
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Hashable, Iterable, Mapping

import pandas as pd

from ..config import AUDIT_COLUMNS, REPORTS_OUTPUTS_DIR
from ..core.models import Grant


EXCEL_SHEETNAME_LIMIT = 31

FAMILY_SHEET_COLUMNS = [
    "guardian_nis",
    "guardian_name",
    "guardian_birthdate",
    "family_code",
    "household_size",
    "group_name",
    "dependent_count",
]


def _ensure_parent_dir(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def _timestamped_filename(prefix: str) -> str:
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{stamp}.xlsx"


def _sheet_names(names: list[str]) -> list[str]:
    """Truncate to Excel's limit, numbering repeats (name_1, name_2...)."""
    seen: dict[str, int] = {}
    out: list[str] = []
    for name in names:
        base = name[:EXCEL_SHEETNAME_LIMIT]
        if base not in seen:
            seen[base] = 0
            out.append(base)
            continue
        seen[base] += 1
        suffix = f"_{seen[base]}"
        out.append(f"{base[: EXCEL_SHEETNAME_LIMIT - len(suffix)]}{suffix}")
    return out


def grants_to_frames(grants: Iterable[Grant]) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Flatten grants into a families sheet (one row per guardian) and a
    dependents sheet (one row per dependent, keyed by guardian_nis).
    """
    family_rows = []
    dependent_rows = []
    for grant in grants:
        family_rows.append(
            {
                "guardian_nis": grant.guardian_nis,
                "guardian_name": grant.guardian_name,
                "guardian_birthdate": grant.guardian_birthdate,
                "family_code": grant.family_code,
                "household_size": grant.household_size,
                "group_name": grant.group_name,
                "dependent_count": len(grant.dependents),
            }
        )
        for dependent in grant.dependents:
            dependent_rows.append({"guardian_nis": grant.guardian_nis, **asdict(dependent)})

    families = pd.DataFrame(family_rows, columns=FAMILY_SHEET_COLUMNS)
    dependents = pd.DataFrame(dependent_rows)
    return families, dependents


def write_df_excel(
    df: pd.DataFrame,
    output_path: Path | str | None = None,
    *,
    out_dir: Path | str = REPORTS_OUTPUTS_DIR,
    filename_prefix: str = "export",
    sheet_name: str = "data",
    index: bool = False,
) -> Path:
    """
    Write a DataFrame to a single-sheet Excel file and return the output path.

    Without output_path, a timestamped file named <filename_prefix>_<stamp>.xlsx
    is created under out_dir.
    """
    if output_path is None:
        output_path = Path(out_dir) / _timestamped_filename(filename_prefix)
    path = Path(output_path)
    _ensure_parent_dir(path)
    df.to_excel(path, engine="openpyxl", sheet_name=sheet_name, index=index)
    return path


def write_multi_sheet_excel(
    sheets: Mapping[str, pd.DataFrame],
    output_path: Path | str,
    *,
    index: bool = False,
) -> Path:
    """Write several DataFrames to one workbook, one sheet per dict key."""
    path = Path(output_path)
    _ensure_parent_dir(path)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for name, sheet_name in zip(sheets.keys(), _sheet_names(list(sheets.keys()))):
            sheets[name].to_excel(writer, sheet_name=sheet_name, index=index)
    return path


def write_import_workbook(
    grants: Iterable[Grant],
    rejections: Iterable[Mapping[str, Any]],
    output_path: Path | str | None = None,
    *,
    out_dir: Path | str = REPORTS_OUTPUTS_DIR,
    tenant_id: Hashable | None = None,
) -> Path:
    """
    Workbook with the families, dependents and rejections sheets of one run.
    """
    families, dependents = grants_to_frames(grants)

    rejections_df = pd.DataFrame(list(rejections))
    if rejections_df.empty:
        rejections_df = pd.DataFrame(columns=AUDIT_COLUMNS)

    if output_path is None:
        prefix = f"family_import_{tenant_id}" if tenant_id is not None else "family_import"
        output_path = Path(out_dir) / _timestamped_filename(prefix)

    return write_multi_sheet_excel(
        {
            "families": families,
            "dependents": dependents,
            "rejections": rejections_df,
        },
        output_path,
    )
