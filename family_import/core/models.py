"""
models.py

Record types shared by the reconciliation engines.

- MatchOutcome: terminal decision for one benefit candidate.
- Dependent / Grant: the accepted guardian + dependents aggregate handed to the
  family store.
- GrantBook: ordered collection of grants keyed by guardian NIS, enforcing that
  a dependent is granted to one guardian only.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Hashable, Iterator

from ..config import OUTCOME_STATUS_CONFIG


@dataclass(frozen=True)
class MatchOutcome:
    row_id: int
    status: str
    reason: str | None = None
    enrollment_position: int | None = None
    cited_guardian: str | None = None

    @property
    def is_accepted(self) -> bool:
        return self.status == OUTCOME_STATUS_CONFIG.accepted


@dataclass(frozen=True)
class Dependent:
    nis: str
    name: str | None
    birthdate: date | None = None
    enrollment_id: str | None = None
    enrollment_birthdate: date | None = None
    school_mother_name: str | None = None
    school_father_name: str | None = None
    school_responsible_name: str | None = None


@dataclass
class Grant:
    guardian_nis: str
    guardian_name: str | None
    guardian_birthdate: date | None = None
    family_code: str | None = None
    household_size: int | None = None
    mother_name: str | None = None
    group_name: str | None = None
    tenant_id: Hashable | None = None
    dependents: list[Dependent] = field(default_factory=list)

    @property
    def dependent_nis(self) -> list[str]:
        return [dependent.nis for dependent in self.dependents]

    def to_record(self) -> dict[str, Any]:
        """Persistence payload: guardian fields + list of dependent fields."""
        return asdict(self)


class GrantBook:

    """
    Accepted grants in creation order, merged by guardian NIS.
    """

    def __init__(self) -> None:
        self._grants: dict[str, Grant] = {}
        self._dependent_owner: dict[str, str] = {}

    def add(self, grant: Grant, dependent: Dependent) -> Grant:
        """
        Attach dependent to the grant of grant.guardian_nis, creating it from
        `grant` when this guardian has none yet.
        """
        owner = self._dependent_owner.get(dependent.nis)
        if owner is not None:
            raise ValueError(
                f"Dependent {dependent.nis} is already granted to guardian {owner}."
            )

        existing = self._grants.get(grant.guardian_nis)
        if existing is None:
            existing = grant
            existing.dependents = []
            self._grants[grant.guardian_nis] = existing
        existing.dependents.append(dependent)
        self._dependent_owner[dependent.nis] = grant.guardian_nis
        return existing

    def get(self, guardian_nis: str) -> Grant | None:
        return self._grants.get(guardian_nis)

    def grants(self) -> list[Grant]:
        return list(self._grants.values())

    def __iter__(self) -> Iterator[Grant]:
        return iter(self.grants())

    def __len__(self) -> int:
        return len(self._grants)

    @property
    def dependent_count(self) -> int:
        return len(self._dependent_owner)
