# Docstring for family_import/engines/duplicate_resolution module
"""
duplicate_resolution.py

Settles split dependents: one dependent NIS claimed by several guardians.

Each SplitGroup is processed once, as an immutable batch. The enrollment
registry decides which guardian keeps the dependent:

1) Roles are tried in `config.GUARDIAN_ROLE_PRIORITY` order
   (mother, designated responsible, father).
2) For a role, the first enrollment entry (registry order) whose student name
   matches the dependent name AND whose role name matches the name of ANY
   claimant settles the group.
3) The first claimant (extract order) whose guardian name matches that role
   name wins; the enrollment-side minority check still applies to the winner.
   Every other claimant is rejected as linked to another guardian.
4) No role finds an entry: every claimant is rejected as not found.

Public API
----------
- resolve_priority_group(group, claimants, index, as_of) -> list[MatchOutcome]
"""

from __future__ import annotations

from datetime import date

import pandas as pd

from ..config import (
    GUARDIAN_ROLE_PRIORITY,
    OUTCOME_STATUS_CONFIG,
    REJECTION_REASONS,
)
from ..core.models import MatchOutcome
from ..core.normalizers import normalize_name
from .cross_reference import EnrollmentIndex
from .deduplicate import SplitGroup
from .eligibility import is_minor


def _find_settling_entry(
    dependent_name: object,
    guardian_keys: list[str],
    index: EnrollmentIndex,
) -> tuple[int, str] | None:
    """(enrollment position, role) of the entry that settles the group."""
    claimed = {key for key in guardian_keys if key}
    for role in GUARDIAN_ROLE_PRIORITY:
        for position in index.positions_for(dependent_name):
            if index.role_keys[role][position] in claimed:
                return position, role
    return None


def resolve_priority_group(
    group: SplitGroup,
    claimants: pd.DataFrame,
    index: EnrollmentIndex,
    as_of: date,
) -> list[MatchOutcome]:

    """

    Decide the outcome of every claimant of one split dependent.

    Args:
        group:
            SplitGroup with the claimant row_ids in extract order.
        claimants:
            Cleaned benefit rows indexed by row_id (must contain every id of
            the group).
        index:
            EnrollmentIndex over the cleaned, deduplicated enrollment rows.
        as_of:
            Processing date for the enrollment-side age check.

    Returns:
        One MatchOutcome per claimant, in group order.

    """

    status_cfg = OUTCOME_STATUS_CONFIG
    rows = claimants.loc[list(group.row_ids)]

    # The dependent name is taken from the first claimant
    dependent_name = rows.iloc[0]["dependent_name"]
    guardian_keys = [normalize_name(name) for name in rows["guardian_name"]]

    found = _find_settling_entry(dependent_name, guardian_keys, index)
    if found is None:
        return [
            MatchOutcome(
                row_id=int(row_id),
                status=status_cfg.rejected_no_match,
                reason=REJECTION_REASONS["no_match"],
            )
            for row_id in group.row_ids
        ]

    position, role = found
    winner_key = index.role_keys[role][position]
    winner_name = index.role_name(position, role)
    winner_row_id = next(
        int(row_id) for row_id, key in zip(group.row_ids, guardian_keys) if key == winner_key
    )

    outcomes = []
    for row_id in group.row_ids:
        row_id = int(row_id)
        if row_id != winner_row_id:
            outcomes.append(
                MatchOutcome(
                    row_id=row_id,
                    status=status_cfg.rejected_duplicate_loser,
                    reason=REJECTION_REASONS["duplicate_loser"].format(guardian=winner_name),
                    enrollment_position=position,
                    cited_guardian=winner_name,
                )
            )
        elif not is_minor(index.birthdate(position), as_of):
            outcomes.append(
                MatchOutcome(
                    row_id=row_id,
                    status=status_cfg.rejected_overage,
                    reason=REJECTION_REASONS["enrollment_overage"],
                    enrollment_position=position,
                )
            )
        else:
            outcomes.append(
                MatchOutcome(
                    row_id=row_id,
                    status=status_cfg.accepted,
                    enrollment_position=position,
                )
            )
    return outcomes
