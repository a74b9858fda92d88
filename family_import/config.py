#Docstring for family_import/config module
"""
config.py

Central configuration for the family import reconciliation pipeline.

This module defines canonical column mappings, required columns, match keys,
age thresholds, outcome labels and I/O defaults used across the project.

It is intentionally the single source of truth for:
- Column standardization (raw export headers -> canonical names)
- Required columns per dataset (benefit registry, school enrollment registry)
- Identity keys used for deduplication
- Eligibility rules (minor age limit, as-of month)
- Outcome status labels and rejection reasons written to the audit file

Design goals
------------
- Consistency: all modules rely on the same canonical names and thresholds.
- Maintainability: business rules and reasons are edited in one place.
- Clarity: separate dataset mappings from engine settings.
- Safety: matching stays exact (no fuzzy name comparison) to avoid granting a
  benefit to the wrong family.

Contents
--------
1) Paths and project defaults
   - Default input/output folders (sample data, raw data, audit files, reports)

2) Column mappings
   - BENEFIT_COLUMN_MAP: raw benefit registry header -> canonical column name
   - ENROLLMENT_COLUMN_MAP: raw enrollment registry header -> canonical name
   - REGISTRY_COLUMN_MAP: raw single-registry (CadUnico) header -> canonical name

3) Required columns and identity keys
   - BENEFIT_REQUIRED_COLUMNS / ENROLLMENT_REQUIRED_COLUMNS (raw names)
   - BENEFIT_MATCH_KEYS / ENROLLMENT_MATCH_KEYS (canonical names)

4) Reconciliation configuration
   - RECONCILIATION_CONFIG (dataclass): age limit, date format, delimiters,
     batch sizes
   - OUTCOME_STATUS_CONFIG (dataclass): outcome labels
   - REJECTION_REASONS: human readable reasons for the audit file
   - GUARDIAN_ROLE_PRIORITY: role order used to settle split dependents

5) Family groups
   - FAMILY_GROUPS: income bracket code -> family group key

Usage
-----
All other modules import configuration from here. Example:

    from family_import.config import BENEFIT_COLUMN_MAP, RECONCILIATION_CONFIG

Privacy / compliance note
-------------------------
Benefit and enrollment extracts contain personal data (names, birth dates, NIS
numbers). The public repository must only hold synthetic data generated by
`core.generate_sample_data`. Real extracts belong in data/raw/ (never
committed) or in a secured location passed by path.
"""


from dataclasses import dataclass #create simple classes for configuration
from pathlib import Path #object-oriented filesystem paths instead of strings



# --- Base paths ----------------------------------------------------------------

# family_import/ -> project root
BASE_DIR = Path(__file__).resolve().parents[1]
#parents[0] = config.py directory = family_import/
#parents[1] = project root directory

DATA_DIR = BASE_DIR / "data"
SAMPLE_DIR = DATA_DIR / "sample"
RAW_DATA_DIR = DATA_DIR / "raw"
AUDIT_DIR = DATA_DIR / "audit"

REPORTS_DIR = BASE_DIR / "reports"
REPORTS_OUTPUTS_DIR = REPORTS_DIR / "outputs"
REPORTS_FIGURES_DIR = REPORTS_DIR / "figures"



# --- Column name mapping (raw -> canonical) --------------------------------------------

# IMPORTANT:
# Left side keys MUST match the header names in the actual CSV extracts.
# Canonical names are what the rest of the pipeline will use.

# Benefit registry extract (Bolsa Familia payroll, one row per guardian/dependent pair)
BENEFIT_COLUMN_MAP = {
    # Raw column name     # Canonical name
    "TITULAR":            "guardian_name",
    "DTNASCTIT":          "guardian_birthdate",
    "NISTITULAR":         "guardian_nis",
    "DEPENDENTE":         "dependent_name",
    "DTNASCDEP":          "dependent_birthdate",
    "NISDEPENDEN":        "dependent_nis",
    "CODFAMILIAR":        "family_code",       # optional, not present in every extract
    "QTDE. MEMBROS":      "household_size",    # optional
}

# School enrollment extract (Sislame, one row per student)
ENROLLMENT_COLUMN_MAP = {
    # Raw column name     # Canonical name
    "Aluno":              "student_name",
    "Data Nascimento":    "student_birthdate",
    "Mãe":                "mother_name",
    "Pai":                "father_name",
    "Nome Responsável":   "responsible_name",
    "Matricula":          "enrollment_id",     # optional
}

# Single registry extract (CadUnico, one row per person)
REGISTRY_COLUMN_MAP = {
    "cod_familiar_fam":          "family_code",
    "cod_parentesco_rf_pessoa":  "kinship_code",
    "nom_pessoa":                "responsible_name",
    "dta_nasc_pessoa":           "responsible_birthdate",
    "num_nis_pessoa_atual":      "responsible_nis",
    "nom_completo_mae_pessoa":   "responsible_mother_name",
    "fx_rfpc":                   "income_bracket",
}



# --- Required columns & match keys ----------------------------------------------------

# Raw names, checked BEFORE accents are removed from the dataset.
BENEFIT_REQUIRED_COLUMNS = [
    "DEPENDENTE",
    "NISDEPENDEN",
    "NISTITULAR",
    "TITULAR",
    "DTNASCTIT",
    "DTNASCDEP",
]

ENROLLMENT_REQUIRED_COLUMNS = [
    "Aluno",
    "Mãe",
    "Pai",
    "Nome Responsável",
    "Data Nascimento",
]

REGISTRY_REQUIRED_COLUMNS = list(REGISTRY_COLUMN_MAP.keys())

# Canonical columns kept after cleaning (in this order).
BENEFIT_CORE_COLUMNS = list(BENEFIT_COLUMN_MAP.values())
ENROLLMENT_CORE_COLUMNS = list(ENROLLMENT_COLUMN_MAP.values())

# Identity keys used to drop exact duplicates inside each dataset.
BENEFIT_MATCH_KEYS = [
    "guardian_nis",
    "dependent_nis",
]

ENROLLMENT_MATCH_KEYS = [
    "student_name",
    "enrollment_id",
]

# Audit (rejection) file layout: raw benefit columns + reason
AUDIT_COLUMNS = [
    "UF",
    "MUNICIPIO",
    "TITULAR",
    "DTNASCTIT",
    "NISTITULAR",
    "COMPETFOLHA",
    "SITFAM",
    "NISDEPENDEN",
    "DEPENDENTE",
    "IDADE",
    "DTNASCDEP",
    "QTDE. MEMBROS",
    "reason",
]

# Audit CSV header titles that differ from the record key
AUDIT_HEADER_TITLES = {
    "reason": "MOTIVO",
}



# --- Reconciliation configuration ------------------------------------------------------------

@dataclass(frozen=True)
class ReconciliationConfig:

    """

    Configuration for the reconciliation engine.

    minor_age_limit:
        A dependent is eligible while the completed years between the birth
        date and the first day of the processing month are below this limit.
    date_format:
        Fixed day/month/year format used by both extracts. Anything else is
        treated as a missing date.
    benefit_delimiter / enrollment_delimiter:
        CSV delimiters of each extract.
    persist_batch_size:
        Number of grants written between two progress updates in the saving
        stage (and comparisons between two updates in the comparing stage).
    read_chunk_size:
        Rows per chunk when reading the CSV extracts lazily.

    """

    minor_age_limit: int = 18
    date_format: str = "%d/%m/%Y"
    benefit_delimiter: str = ";"
    enrollment_delimiter: str = ","
    registry_delimiter: str = ";"
    encoding: str = "utf-8"
    persist_batch_size: int = 100
    read_chunk_size: int = 5000


RECONCILIATION_CONFIG = ReconciliationConfig()
#Creates a singleton instance of ReconciliationConfig with default values



@dataclass(frozen=True)
class OutcomeStatusConfig:

    """

    Labels for the terminal outcome of each benefit candidate.

    """

    accepted: str = "accepted"
    rejected_overage: str = "rejected_overage"
    rejected_no_match: str = "rejected_no_match"
    rejected_wrong_guardian: str = "rejected_wrong_guardian"
    rejected_duplicate_loser: str = "rejected_duplicate_loser"
    rejected_invalid_row: str = "rejected_invalid_row"

    @property
    def rejected(self) -> tuple[str, ...]:
        return (
            self.rejected_overage,
            self.rejected_no_match,
            self.rejected_wrong_guardian,
            self.rejected_duplicate_loser,
            self.rejected_invalid_row,
        )


OUTCOME_STATUS_CONFIG = OutcomeStatusConfig()


# Reason strings written next to the raw row in the audit file.
REJECTION_REASONS = {
    "overage": "dependent is of age",
    "enrollment_overage": "dependent is not a minor in the enrollment registry",
    "no_match": "dependent not found in the enrollment registry",
    "wrong_guardian": (
        "found a student with the same name in the enrollment registry, "
        "but a different guardian ({guardians}); update the enrollment "
        "registry or this is a namesake"
    ),
    "duplicate_loser": "dependent is linked to another guardian ({guardian})",
    "invalid_row": "row conversion failed: {issues}",
}

# For dependents claimed by more than one guardian: mother first, then the
# designated responsible, then the father.
GUARDIAN_ROLE_PRIORITY = (
    "mother_name",
    "responsible_name",
    "father_name",
)



# --- Import stages --------------------------------------------------------------

IMPORT_STAGES = (
    "idle",
    "reading files",
    "filtering data",
    "comparing data",
    "resolving duplicates",
    "saving",
    "completed",
    "failed",
)

TERMINAL_STAGES = ("idle", "completed", "failed")



# --- Family groups ------------------------------------------------------------

@dataclass(frozen=True)
class FamilyGroup:
    code: int
    key: str
    label: str


# Code 0 is the group assigned to families confirmed by the benefit/enrollment
# reconciliation. Codes 1-3 follow the CadUnico per-capita income bracket (fx_rfpc).
FAMILY_GROUPS = (
    FamilyGroup(code=0, key="bolsa-familia", label="Bolsa Familia"),
    FamilyGroup(code=1, key="extreme-poverty", label="Extreme poverty"),
    FamilyGroup(code=2, key="poverty-line", label="Poverty line"),
    FamilyGroup(code=3, key="cad", label="Low income (CadUnico)"),
)

RECONCILED_FAMILY_GROUP_CODE = 0


def get_family_group_by_code(code: object) -> FamilyGroup | None:
    """Return the family group for an income bracket code, or None when unknown."""
    try:
        code_int = int(str(code).strip())
    except (TypeError, ValueError):
        return None
    for group in FAMILY_GROUPS:
        if group.code == code_int:
            return group
    return None



# --- Output folders ------------------------------------------------------------

def get_audit_path(tenant_id: object, audit_dir: Path | None = None) -> Path:
    """Per-tenant rejection file: <audit_dir>/reasons_<tenant_id>.csv"""
    return Path(audit_dir or AUDIT_DIR) / f"reasons_{tenant_id}.csv"
