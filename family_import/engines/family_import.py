# Docstring for family_import/engines/family_import module
"""
family_import.py

End-to-end family import: benefit registry x school enrollment registry.

Given the benefit payroll extract (guardian/dependent pairs) and the school
enrollment extract, the pipeline decides which dependents are granted to which
guardian, writes every rejected candidate (raw row + reason) to the audit
sink, upserts the granted families into the family store, and publishes its
stage to the progress registry all along.

Stages
------
1) reading files
   - Required columns of both extracts (SchemaValidationError, fatal).
2) filtering data
   - Cleaning + accent stripping.
   - Exact duplicates dropped (first kept, no outcome), unusable rows included.
   - Rows that failed conversion -> rejected_invalid_row.
   - Benefit-side minor check -> rejected_overage.
   - Split dependents (several guardians) moved to their own groups.
3) comparing data
   - One cross-reference decision per remaining candidate.
4) resolving duplicates
   - Split groups settled by guardian role priority.
5) saving
   - Grants written one at a time, in grant order.
6) completed

Rejections are written as soon as they are found, so the audit file order is
the discovery order. Any fatal error sets the stage to "failed" with the
error message and is re-raised; whatever was already written stays written.

Public API
----------
- ImportContext (dataclass)
- ImportResult (dataclass)
- run_family_import(benefits_raw, enrollment_raw, context, verbose=False) -> ImportResult
- import_family_files(benefits_path, enrollment_path, context, verbose=False) -> ImportResult
- main() (CLI)
"""

from __future__ import annotations

import argparse
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Hashable, Optional

import pandas as pd

from ..config import (
    AUDIT_DIR,
    BENEFIT_MATCH_KEYS,
    BENEFIT_REQUIRED_COLUMNS,
    ENROLLMENT_REQUIRED_COLUMNS,
    OUTCOME_STATUS_CONFIG,
    RECONCILED_FAMILY_GROUP_CODE,
    RECONCILIATION_CONFIG,
    REJECTION_REASONS,
    REPORTS_OUTPUTS_DIR,
    ReconciliationConfig,
    get_audit_path,
    get_family_group_by_code,
)
from ..cleaning.clean_benefits import clean_benefits
from ..cleaning.clean_enrollment import clean_enrollment
from ..core.errors import AuditSinkError, PersistenceError, RowConversionError
from ..core.models import Grant, GrantBook, MatchOutcome
from ..core.progress import ImportProgressRegistry
from ..core.validators import check_required_columns
from ..load_data import load_benefits_csv, load_enrollment_csv
from ..outputs.audit_sink import AuditSink, CsvAuditSink
from ..outputs.export_utils import write_import_workbook
from ..outputs.family_store import FamilyStore, InMemoryFamilyStore
from .cross_reference import EnrollmentIndex, build_dependent, build_grant, resolve
from .deduplicate import dedupe_enrollment, drop_duplicate_rows, split_dependents
from .duplicate_resolution import resolve_priority_group
from .eligibility import filter_minors


@dataclass
class ImportContext:

    """

    Collaborators of one import run.

    tenant_id:
        Owner of the run (city / institution). Keys the progress report and
        the stored families.
    progress:
        Registry polled by callers for the stage of the run.
    audit_sink:
        Receives one record per rejected candidate.
    store:
        Receives one upsert per granted family.
    as_of:
        Processing date; the minor-age rule uses the first day of its month.

    """

    tenant_id: Hashable
    progress: ImportProgressRegistry
    audit_sink: AuditSink
    store: FamilyStore
    as_of: date = field(default_factory=date.today)
    config: ReconciliationConfig = RECONCILIATION_CONFIG


@dataclass
class ImportResult:
    grants: list[Grant] = field(default_factory=list)
    outcomes: list[MatchOutcome] = field(default_factory=list)
    rejections: list[dict[str, Any]] = field(default_factory=list)
    created: int = 0
    updated: int = 0

    @property
    def accepted_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.is_accepted)

    @property
    def rejected_count(self) -> int:
        return len(self.outcomes) - self.accepted_count

    def outcomes_frame(self) -> pd.DataFrame:
        """One row per candidate outcome, in discovery order."""
        columns = ["row_id", "status", "reason", "enrollment_position", "cited_guardian"]
        return pd.DataFrame([asdict(outcome) for outcome in self.outcomes], columns=columns)


class _Run:

    """State of one pipeline run (frames, grant book, outcomes)."""

    def __init__(self, context: ImportContext, benefits_raw: pd.DataFrame, verbose: bool) -> None:
        self.context = context
        self.benefits_raw = benefits_raw.reset_index(drop=True)
        self.verbose = verbose
        self.book = GrantBook()
        self.result = ImportResult()

    def log(self, message: str) -> None:
        if self.verbose:
            print(f"[import] {message}")

    def stage(self, stage: str, percentage: float | None = None, message: str | None = None) -> None:
        self.context.progress.set_stage(
            self.context.tenant_id, stage, percentage=percentage, message=message
        )

    def progress_every(self, done: int, total: int, stage: str) -> None:
        """Publish (done/total) every persist_batch_size items and at the end."""
        batch = max(1, self.context.config.persist_batch_size)
        if done % batch == 0 or done == total:
            self.stage(stage, percentage=done / total if total else 1.0)

    def reject(self, outcome: MatchOutcome) -> None:
        """Record a rejection and write the raw row + reason to the audit sink."""
        record = {**self.benefits_raw.iloc[outcome.row_id].to_dict(), "reason": outcome.reason}
        try:
            self.context.audit_sink.write(record)
        except Exception as exc:
            raise AuditSinkError(f"Could not write rejection for row {outcome.row_id}: {exc}") from exc
        self.result.outcomes.append(outcome)
        self.result.rejections.append(record)

    def accept(
        self,
        outcome: MatchOutcome,
        candidate: pd.Series,
        index: EnrollmentIndex,
        enrollment_raw: pd.DataFrame,
        group_name: str | None,
    ) -> None:
        position = outcome.enrollment_position
        benefit_raw_row = self.benefits_raw.iloc[outcome.row_id]
        enrollment_raw_row = enrollment_raw.iloc[index.row_id(position)]
        grant = build_grant(
            candidate,
            benefit_raw_row,
            group_name=group_name,
            tenant_id=self.context.tenant_id,
        )
        dependent = build_dependent(
            candidate, benefit_raw_row, index, position, enrollment_raw_row=enrollment_raw_row
        )
        self.book.add(grant, dependent)
        self.result.outcomes.append(outcome)

    def record(self, outcome: MatchOutcome, candidate: pd.Series, **accept_kwargs: Any) -> None:
        if outcome.is_accepted:
            self.accept(outcome, candidate, **accept_kwargs)
        else:
            self.reject(outcome)

    def save(self, grant: Grant) -> None:
        try:
            created = self.context.store.upsert_family(grant)
        except Exception as exc:
            raise PersistenceError(
                f"Could not save family of guardian {grant.guardian_nis}: {exc}"
            ) from exc
        if created:
            self.result.created += 1
        else:
            self.result.updated += 1


def run_family_import(
    benefits_raw: pd.DataFrame,
    enrollment_raw: pd.DataFrame,
    context: ImportContext,
    verbose: bool = False,
) -> ImportResult:

    """

    Reconcile the benefit extract against the enrollment extract for one tenant.

    Args:
        benefits_raw:
            Raw benefit registry rows (all cells text, original headers).
        enrollment_raw:
            Raw enrollment registry rows (all cells text, original headers).
        context:
            Tenant, progress registry, audit sink, family store and as-of date.
        verbose:
            Print "[import] ..." lines with intermediate counts.

    Returns:
        ImportResult with the grants written, one outcome per candidate and
        the rejection records (in audit order).

    Raises:
        SchemaValidationError, AuditSinkError, PersistenceError: after setting
        the progress stage to "failed".

    """

    status_cfg = OUTCOME_STATUS_CONFIG
    config = context.config
    run = _Run(context, benefits_raw, verbose)
    enrollment_raw = enrollment_raw.reset_index(drop=True)

    group = get_family_group_by_code(RECONCILED_FAMILY_GROUP_CODE)
    group_name = group.key if group is not None else None

    try:
        # --- reading files ----------------------------------------------------
        run.stage("reading files")
        check_required_columns(run.benefits_raw, BENEFIT_REQUIRED_COLUMNS, "Benefit registry")
        check_required_columns(enrollment_raw, ENROLLMENT_REQUIRED_COLUMNS, "Enrollment registry")
        run.log(f"Benefit registry: {len(run.benefits_raw)} rows")
        run.log(f"Enrollment registry: {len(enrollment_raw)} rows")

        # --- filtering data ---------------------------------------------------
        run.stage("filtering data")
        benefits = clean_benefits(run.benefits_raw, date_format=config.date_format)
        enrollment = dedupe_enrollment(clean_enrollment(enrollment_raw, date_format=config.date_format))

        # Exact duplicates go first, unusable lines included (<NA> keys compare equal)
        benefits = drop_duplicate_rows(benefits, BENEFIT_MATCH_KEYS)
        run.log(f"Candidates after removing duplicated lines: {len(benefits)}")

        invalid_mask = benefits["conversion_issues"].map(bool)
        for row in benefits[invalid_mask].itertuples(index=False):
            error = RowConversionError(row.row_id, row.conversion_issues)
            run.reject(
                MatchOutcome(
                    row_id=int(row.row_id),
                    status=status_cfg.rejected_invalid_row,
                    reason=REJECTION_REASONS["invalid_row"].format(issues=error),
                )
            )

        candidates = benefits[~invalid_mask]

        eligible, overage = filter_minors(candidates, context.as_of, age_limit=config.minor_age_limit)
        for row_id in overage["row_id"]:
            run.reject(
                MatchOutcome(
                    row_id=int(row_id),
                    status=status_cfg.rejected_overage,
                    reason=REJECTION_REASONS["overage"],
                )
            )
        run.log(f"Minor dependents: {len(eligible)}")

        unique, split_groups = split_dependents(eligible)
        run.log(f"Dependents claimed by more than one guardian: {len(split_groups)}")

        # --- comparing data ---------------------------------------------------
        run.stage("comparing data", percentage=0.0)
        index = EnrollmentIndex(enrollment)
        accept_kwargs = {"index": index, "enrollment_raw": enrollment_raw, "group_name": group_name}

        total = len(unique)
        for i, (_, candidate) in enumerate(unique.iterrows()):
            run.record(resolve(candidate, index, context.as_of), candidate, **accept_kwargs)
            run.progress_every(i + 1, total, "comparing data")

        # --- resolving duplicates ---------------------------------------------
        run.stage("resolving duplicates")
        claimants = eligible.set_index("row_id", drop=False)
        for split_group in split_groups:
            for outcome in resolve_priority_group(split_group, claimants, index, context.as_of):
                run.record(outcome, claimants.loc[outcome.row_id], **accept_kwargs)

        # --- saving -----------------------------------------------------------
        run.result.grants = run.book.grants()
        total = len(run.result.grants)
        run.stage("saving", percentage=0.0)
        for i, grant in enumerate(run.result.grants):
            run.save(grant)
            run.progress_every(i + 1, total, "saving")

        run.log(
            f"Families saved: {total} ({run.result.created} created, {run.result.updated} updated), "
            f"dependents granted: {run.book.dependent_count}, rejected: {run.result.rejected_count}"
        )
        run.stage(
            "completed",
            message=f"{total} families granted, {run.result.rejected_count} candidates rejected",
        )

    except Exception as exc:
        context.progress.set_stage(context.tenant_id, "failed", message=str(exc))
        raise

    return run.result


def import_family_files(
    benefits_path: Optional[Path],
    enrollment_path: Optional[Path],
    context: ImportContext,
    verbose: bool = False,
) -> ImportResult:
    """
    Load both CSV extracts (sample files when a path is None) and run the import.
    """
    try:
        context.progress.set_stage(context.tenant_id, "reading files")
        benefits_raw = load_benefits_csv(benefits_path, encoding=context.config.encoding)
        enrollment_raw = load_enrollment_csv(enrollment_path, encoding=context.config.encoding)
    except Exception as exc:
        context.progress.set_stage(context.tenant_id, "failed", message=str(exc))
        raise
    return run_family_import(benefits_raw, enrollment_raw, context, verbose=verbose)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Reconcile a benefit registry extract against the school enrollment extract. "
            "Families are kept in memory for this command only; the granted families, "
            "dependents and rejections are written to an Excel workbook unless --no-report is given."
        )
    )
    parser.add_argument("--benefits", type=Path, default=None, help="Benefit registry CSV (';' delimited)")
    parser.add_argument("--enrollment", type=Path, default=None, help="Enrollment registry CSV (',' delimited)")
    parser.add_argument("--tenant", default="demo", help="Tenant (city) identifier")
    parser.add_argument(
        "--as-of",
        type=lambda value: datetime.strptime(value, "%Y-%m-%d").date(),
        default=None,
        help="Processing date YYYY-MM-DD (defaults to today)",
    )
    parser.add_argument("--audit-dir", type=Path, default=AUDIT_DIR, help="Folder for reasons_<tenant>.csv")
    parser.add_argument("--report-dir", type=Path, default=REPORTS_OUTPUTS_DIR, help="Folder for the run workbook")
    parser.add_argument("--no-report", action="store_true", help="Skip the Excel workbook (audit file and counts only)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    audit_path = get_audit_path(args.tenant, args.audit_dir)
    context = ImportContext(
        tenant_id=args.tenant,
        progress=ImportProgressRegistry(),
        audit_sink=CsvAuditSink(audit_path),
        store=InMemoryFamilyStore(),
        as_of=args.as_of or date.today(),
    )

    result = import_family_files(args.benefits, args.enrollment, context, verbose=True)

    print(f"Families granted: {len(result.grants)}")
    print(f"Candidates accepted: {result.accepted_count}")
    print(f"Candidates rejected: {result.rejected_count}")
    print(f"Rejections written to: {audit_path}")
    if not args.no_report:
        report_path = write_import_workbook(
            result.grants, result.rejections, out_dir=args.report_dir, tenant_id=args.tenant
        )
        print(f"Report written to: {report_path}")


if __name__ == "__main__":
    main()
