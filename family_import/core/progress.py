"""
progress.py

Per-tenant progress reports for long-running imports.

An import run publishes its current stage (and, for the long stages, a 0..1
percentage) to an ImportProgressRegistry that an external caller polls. Each
write replaces the stored report for that tenant; nothing is merged and no
history is kept. Reports only live as long as the process.

Public API
----------
- ImportReport (dataclass)
- ImportProgressRegistry.set_stage(tenant_id, stage, percentage=None, message=None, in_progress=None) -> ImportReport
- ImportProgressRegistry.get_stage(tenant_id) -> ImportReport
- ImportProgressRegistry.clear(tenant_id) -> None
"""

from __future__ import annotations

import threading
from dataclasses import asdict, dataclass
from typing import Any, Hashable

from ..config import IMPORT_STAGES, TERMINAL_STAGES


@dataclass(frozen=True)
class ImportReport:
    tenant_id: Hashable
    stage: str = "idle"
    percentage: float | None = None
    message: str | None = None
    in_progress: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Polling payload; optional fields are left out when unset."""
        payload = asdict(self)
        return {key: value for key, value in payload.items() if value is not None}


class ImportProgressRegistry:

    """
    Thread-safe map tenant_id -> ImportReport with replace-on-write semantics.

    Imports for different tenants may run on different threads; they share
    one registry and only ever touch their own key.
    """

    def __init__(self) -> None:
        self._reports: dict[Hashable, ImportReport] = {}
        self._lock = threading.Lock()

    def set_stage(
        self,
        tenant_id: Hashable,
        stage: str,
        percentage: float | None = None,
        message: str | None = None,
        in_progress: bool | None = None,
    ) -> ImportReport:
        if stage not in IMPORT_STAGES:
            raise ValueError(f"Unknown import stage: {stage!r}. Expected one of {IMPORT_STAGES}.")
        if percentage is not None and not 0.0 <= percentage <= 1.0:
            raise ValueError(f"Percentage must be between 0 and 1, got {percentage!r}.")

        # Running stages are in progress unless told otherwise
        if in_progress is None:
            in_progress = stage not in TERMINAL_STAGES

        report = ImportReport(
            tenant_id=tenant_id,
            stage=stage,
            percentage=percentage,
            message=message,
            in_progress=in_progress,
        )
        with self._lock:
            self._reports[tenant_id] = report
        return report

    def get_stage(self, tenant_id: Hashable) -> ImportReport:
        with self._lock:
            report = self._reports.get(tenant_id)
        if report is None:
            return ImportReport(tenant_id=tenant_id)
        return report

    def clear(self, tenant_id: Hashable) -> None:
        with self._lock:
            self._reports.pop(tenant_id, None)
