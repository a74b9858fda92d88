# Docstring for family_import/engines/cross_reference module
"""
cross_reference.py

Cross-reference engine: benefit candidates vs school enrollment.

For each benefit candidate that survived deduplication and the minor-age
filter, the engine looks for the dependent in the enrollment registry and
decides one terminal outcome.

Core matching logic
-------------------
1) Full match
   - First enrollment entry (registry order) whose student name matches the
     dependent name AND whose mother, father or designated responsible name
     matches the guardian name.

2) Enrollment-side age check
   - The enrollment birth date must also describe a minor (the two registries
     can disagree). Otherwise -> rejected_overage.
   - Passing -> accepted; the pipeline merges the dependent into the grant of
     the same guardian NIS.

3) Better rejection reason
   - No full match: first entry with the same student name only ->
     rejected_wrong_guardian, citing the guardians found there (the first
     name-only hit is used, not the "closest" one).
   - Nothing at all -> rejected_no_match.

Name comparison is exact after normalization (`core.normalizers.normalize_name`):
accents, case and extra spaces are ignored, spelling differences are not.

Public API
----------
- EnrollmentIndex(enrollment_df)
- resolve(candidate, index, as_of) -> MatchOutcome
- build_grant(candidate, benefit_raw_row, group_name=None, tenant_id=None) -> Grant
- build_dependent(candidate, benefit_raw_row, index, position) -> Dependent
"""

from __future__ import annotations

from datetime import date
from typing import Any, Hashable, Iterable

import pandas as pd

from ..config import (
    BENEFIT_COLUMN_MAP,
    ENROLLMENT_COLUMN_MAP,
    GUARDIAN_ROLE_PRIORITY,
    OUTCOME_STATUS_CONFIG,
    REJECTION_REASONS,
)
from ..core.models import Dependent, Grant, MatchOutcome
from ..core.normalizers import normalize_name, normalize_name_series, parse_date
from .eligibility import is_minor


# canonical -> raw, to read display values from the untouched raw rows
_BENEFIT_RAW = {canonical: raw for raw, canonical in BENEFIT_COLUMN_MAP.items()}
_ENROLLMENT_RAW = {canonical: raw for raw, canonical in ENROLLMENT_COLUMN_MAP.items()}


def _raw_text(raw_row: pd.Series | None, raw_col: str) -> str | None:
    """Trimmed raw cell text, None when absent or blank."""
    if raw_row is None or raw_col not in raw_row.index:
        return None
    value = raw_row[raw_col]
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    text = " ".join(str(value).split())
    return text or None


def _clean_value(value: Any) -> Any:
    """pandas missing markers (NA/NaT/NaN) -> None."""
    if value is None:
        return None
    if not isinstance(value, (list, tuple)) and pd.isna(value):
        return None
    return value


class EnrollmentIndex:

    """
    Lookup structure over the cleaned enrollment dataset.

    Normalized name keys are computed once. `positions_for` returns the
    positions of one student name in registry order, so every scan keeps
    first-match semantics.
    """

    def __init__(self, enrollment_df: pd.DataFrame) -> None:
        self.frame = enrollment_df.reset_index(drop=True)
        self.student_keys: list[str] = normalize_name_series(self.frame["student_name"]).tolist()
        self.role_keys: dict[str, list[str]] = {
            role: normalize_name_series(self.frame[role]).tolist()
            for role in GUARDIAN_ROLE_PRIORITY
        }

        self._by_student: dict[str, list[int]] = {}
        for position, key in enumerate(self.student_keys):
            if key:
                self._by_student.setdefault(key, []).append(position)

    def __len__(self) -> int:
        return len(self.frame)

    def positions_for(self, student_name: Any) -> list[int]:
        return self._by_student.get(normalize_name(student_name), [])

    def find_with_guardian(
        self,
        student_name: Any,
        guardian_name: Any,
        roles: Iterable[str] = GUARDIAN_ROLE_PRIORITY,
    ) -> int | None:
        """First position whose student and one of `roles` match."""
        guardian_key = normalize_name(guardian_name)
        if not guardian_key:
            return None
        roles = tuple(roles)
        for position in self.positions_for(student_name):
            if any(self.role_keys[role][position] == guardian_key for role in roles):
                return position
        return None

    def find_student(self, student_name: Any) -> int | None:
        """First position with the same student name, guardian ignored."""
        positions = self.positions_for(student_name)
        return positions[0] if positions else None

    def role_name(self, position: int, role: str) -> str | None:
        return _clean_value(self.frame.at[position, role])

    def guardian_names(self, position: int) -> list[str]:
        """Non-empty guardian names of an entry, in role priority order."""
        names = []
        for role in GUARDIAN_ROLE_PRIORITY:
            name = self.role_name(position, role)
            if name and name not in names:
                names.append(name)
        return names

    def birthdate(self, position: int) -> date | None:
        return _clean_value(self.frame.at[position, "student_birthdate"])

    def row_id(self, position: int) -> int:
        return int(self.frame.at[position, "row_id"])


def resolve(candidate: pd.Series, index: EnrollmentIndex, as_of: date) -> MatchOutcome:

    """

    Decide the outcome of one benefit candidate against the enrollment registry.

    Args:
        candidate:
            One cleaned benefit row (needs row_id, dependent_name, guardian_name).
        index:
            EnrollmentIndex over the cleaned, deduplicated enrollment rows.
        as_of:
            Processing date for the enrollment-side age check.

    Returns:
        MatchOutcome with status accepted, rejected_overage,
        rejected_wrong_guardian or rejected_no_match.

    """

    status_cfg = OUTCOME_STATUS_CONFIG
    row_id = int(candidate["row_id"])

    position = index.find_with_guardian(candidate["dependent_name"], candidate["guardian_name"])
    if position is not None:
        if not is_minor(index.birthdate(position), as_of):
            return MatchOutcome(
                row_id=row_id,
                status=status_cfg.rejected_overage,
                reason=REJECTION_REASONS["enrollment_overage"],
                enrollment_position=position,
            )
        return MatchOutcome(
            row_id=row_id,
            status=status_cfg.accepted,
            enrollment_position=position,
        )

    # Not found with the guardian: look for the student alone to give a better reason
    position = index.find_student(candidate["dependent_name"])
    if position is not None:
        guardians = index.guardian_names(position)
        return MatchOutcome(
            row_id=row_id,
            status=status_cfg.rejected_wrong_guardian,
            reason=REJECTION_REASONS["wrong_guardian"].format(
                guardians=", ".join(guardians) if guardians else "no guardian informed"
            ),
            enrollment_position=position,
            cited_guardian=guardians[0] if guardians else None,
        )

    return MatchOutcome(
        row_id=row_id,
        status=status_cfg.rejected_no_match,
        reason=REJECTION_REASONS["no_match"],
    )


def build_grant(
    candidate: pd.Series,
    benefit_raw_row: pd.Series | None,
    group_name: str | None = None,
    tenant_id: Hashable | None = None,
) -> Grant:
    """Guardian part of a grant; display names come from the raw row (accents kept)."""
    household_size = _clean_value(candidate.get("household_size"))
    return Grant(
        guardian_nis=str(candidate["guardian_nis"]),
        guardian_name=_raw_text(benefit_raw_row, _BENEFIT_RAW["guardian_name"])
        or _clean_value(candidate["guardian_name"]),
        guardian_birthdate=_clean_value(candidate.get("guardian_birthdate")),
        family_code=_clean_value(candidate.get("family_code")),
        household_size=int(household_size) if household_size is not None else None,
        group_name=group_name,
        tenant_id=tenant_id,
    )


def build_dependent(
    candidate: pd.Series,
    benefit_raw_row: pd.Series | None,
    index: EnrollmentIndex,
    position: int,
    enrollment_raw_row: pd.Series | None = None,
) -> Dependent:
    """Dependent record combining the benefit row and its enrollment entry."""

    def _school(canonical: str) -> str | None:
        return _raw_text(enrollment_raw_row, _ENROLLMENT_RAW[canonical]) or _clean_value(
            index.frame.at[position, canonical]
        )

    enrollment_birthdate = index.birthdate(position)
    if enrollment_birthdate is None and enrollment_raw_row is not None:
        enrollment_birthdate = parse_date(_raw_text(enrollment_raw_row, _ENROLLMENT_RAW["student_birthdate"]))

    return Dependent(
        nis=str(candidate["dependent_nis"]),
        name=_raw_text(benefit_raw_row, _BENEFIT_RAW["dependent_name"])
        or _clean_value(candidate["dependent_name"]),
        birthdate=_clean_value(candidate.get("dependent_birthdate")),
        enrollment_id=_school("enrollment_id"),
        enrollment_birthdate=enrollment_birthdate,
        school_mother_name=_school("mother_name"),
        school_father_name=_school("father_name"),
        school_responsible_name=_school("responsible_name"),
    )
