# Docstring for family_import/outputs/family_store module
"""
family_store.py

Persistence port for granted families.

The reconciliation pipeline only needs one operation: upsert a family keyed by
(tenant, guardian NIS). Writes are issued one at a time, in grant order; a
failure stops the run and leaves earlier writes in place.

Public API
----------
- FamilyStore (protocol): upsert_family(grant) -> bool (True when created)
- InMemoryFamilyStore: dict-backed implementation with lookups and a
  per-group dashboard summary
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Hashable, Protocol

import pandas as pd

from ..config import FAMILY_GROUPS
from ..core.models import Grant


class FamilyStore(Protocol):
    def upsert_family(self, grant: Grant) -> bool:
        ...


class InMemoryFamilyStore:

    """
    Families keyed by (tenant_id, guardian NIS).

    Upserting the same grant twice leaves one stored family (the latest
    payload) and reports created only the first time.
    """

    def __init__(self) -> None:
        self._families: dict[tuple[Hashable, str], dict[str, Any]] = {}
        self._created_at: dict[tuple[Hashable, str], datetime] = {}
        self.writes: list[str] = []

    def upsert_family(self, grant: Grant) -> bool:
        key = (grant.tenant_id, grant.guardian_nis)
        created = key not in self._families
        self._families[key] = grant.to_record()
        if created:
            self._created_at[key] = datetime.now()
        self.writes.append(grant.guardian_nis)
        return created

    def find_by_nis(self, guardian_nis: str, tenant_id: Hashable | None = None) -> dict[str, Any] | None:
        return self._families.get((tenant_id, guardian_nis))

    def families(self, tenant_id: Hashable | None = None) -> list[dict[str, Any]]:
        return [
            record for (tenant, _), record in self._families.items() if tenant == tenant_id
        ]

    def __len__(self) -> int:
        return len(self._families)

    def dashboard_summary(self, tenant_id: Hashable | None = None) -> dict[str, Any]:
        """
        Family counts per group for one tenant, plus the total and the most
        recent creation time (None when the tenant has no families).
        """
        records = self.families(tenant_id)
        counts = pd.Series([r.get("group_name") for r in records], dtype=object).value_counts()

        created = [
            stamp for (tenant, _), stamp in self._created_at.items() if tenant == tenant_id
        ]
        return {
            "groups": {group.key: int(counts.get(group.key, 0)) for group in FAMILY_GROUPS},
            "total": len(records),
            "last_created_at": max(created) if created else None,
        }
