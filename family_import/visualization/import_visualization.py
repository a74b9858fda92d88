"""
import_visualization.py

Helpers for summarizing and visualizing the outcomes of a family import run.
"""

from __future__ import annotations

from typing import Tuple

import matplotlib.pyplot as plt
import pandas as pd

from ..config import OUTCOME_STATUS_CONFIG


STATUS_CFG = OUTCOME_STATUS_CONFIG
OUTCOME_STATUS_GROUPS = [
    ("accepted", STATUS_CFG.accepted),
    ("overage", STATUS_CFG.rejected_overage),
    ("no_match", STATUS_CFG.rejected_no_match),
    ("wrong_guardian", STATUS_CFG.rejected_wrong_guardian),
    ("duplicate_loser", STATUS_CFG.rejected_duplicate_loser),
    ("invalid_row", STATUS_CFG.rejected_invalid_row),
]


def _validate_required_columns(df: pd.DataFrame, required_cols: list[str]) -> None:
    missing = [col for col in required_cols if col not in df.columns]
    if missing:
        missing_list = ", ".join(missing)
        raise ValueError(f"Missing required columns: {missing_list}")


def build_outcome_summary(outcomes_df: pd.DataFrame) -> pd.DataFrame:
    """
    Counts and share of candidates per outcome status.

    Required columns:
      - status
    """

    _validate_required_columns(outcomes_df, ["status"])

    columns = ["status_group", "count", "percent"]
    if outcomes_df.empty:
        return pd.DataFrame(columns=columns)

    total = int(outcomes_df.shape[0])
    counts = outcomes_df["status"].value_counts()
    rows = [
        {
            "status_group": group_label,
            "count": int(counts.get(status_value, 0)),
            "percent": int(counts.get(status_value, 0)) / total,
        }
        for group_label, status_value in OUTCOME_STATUS_GROUPS
    ]
    return pd.DataFrame(rows, columns=columns)


def plot_outcome_summary(
    summary_df: pd.DataFrame,
    title: str = "Family Import Outcomes",
) -> Tuple[plt.Figure, plt.Axes]:
    """
    Horizontal bar chart of the outcome summary (percent of candidates).
    """

    _validate_required_columns(summary_df, ["status_group", "count", "percent"])

    fig, ax = plt.subplots(figsize=(8, 4))
    if summary_df.empty:
        ax.text(0.5, 0.5, "No data available", ha="center", va="center")
        ax.set_axis_off()
        return fig, ax

    order = [group_label for group_label, _ in OUTCOME_STATUS_GROUPS]
    data = summary_df.set_index("status_group").reindex(order).fillna(0)
    counts = data["count"].astype(int)
    percents = data["percent"].astype(float) * 100

    ax.barh(order, percents, color="#4C78A8")
    ax.set_xlabel("Percent of Candidates")
    ax.set_title(title)

    max_pct = float(percents.max() if len(percents) else 0)
    ax.set_xlim(0, max(10.0, max_pct * 1.15))

    for idx, (pct, count) in enumerate(zip(percents, counts)):
        ax.text(pct + 0.5, idx, f"{pct:.1f}% ({count})", va="center")

    return fig, ax
