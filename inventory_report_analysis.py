#!/usr/bin/env python3
"""
inventory_report_analysis.py

Reporting and analysis pipeline for the university inventory.

This module provides functions to:
- Turn an in-memory InventorySystem into canonical item and staff DataFrames
- Compute inventory metrics (value, maintenance fees, utilisation) per item type
- Bucket items by remaining warranty
- Produce charts and save them to disk
- Export aggregate CSVs and a summary Excel workbook when possible

Typical usage:
    python inventory_report_analysis.py --out inventory_outputs

Run directly, the module builds a small demo inventory and analyses it. The
public entrypoint is `analyze(system, out)` which orchestrates the full
pipeline and returns a small summary dictionary.
"""
from __future__ import annotations
import argparse
import datetime
import logging
from pathlib import Path

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns

from university_inventory_system import InventorySystem, ItemKind

plt.rcParams.update({"figure.max_open_warning": 0})

logger = logging.getLogger("InventoryAnalysis")

# -------------------- Config / Helpers -------------------- #
WARRANTY_BUCKETS = ["Expired", "<90 days", "<1 year", "1 year+"]
KIND_ORDER = [k.value for k in ItemKind]


def warranty_bucket(days_left) -> str:
    """
    Map a number of remaining warranty days to a bucket label.

    Args:
        days_left: days until the warranty ends (negative when already expired).

    Returns:
        One of WARRANTY_BUCKETS, or "Unknown" for missing values.
    """
    if days_left is None or pd.isna(days_left):
        return "Unknown"
    if days_left < 0:
        return "Expired"
    if days_left < 90:
        return "<90 days"
    if days_left < 365:
        return "<1 year"
    return "1 year+"


def save_chart(fig, plots_dir: Path, name: str) -> Path:
    """Write `fig` to plots_dir/<name>.png, close it and return the path."""
    path = plots_dir / f"{name}.png"
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, bbox_inches="tight")
    plt.close(fig)
    return path


def label_bars(ax, fmt="{:.0f}"):
    """Print each bar's value above it; empty and zero-height bars get no label."""
    for container in ax.containers:
        values = np.nan_to_num(np.asarray(container.datavalues, dtype=float))
        ax.bar_label(container, labels=[fmt.format(v) if v else "" for v in values], fontsize=8)


def write_summary_workbook(sheets: dict, out_path: Path) -> tuple:
    """
    Write the non-empty report tables into one Excel workbook, a sheet per table.

    Excel output needs openpyxl; when it is missing (or the write fails) the
    CSV exports are the only output and (False, reason) is returned.

    Returns:
        (written, error_message_or_None)
    """
    tables = {name[:31]: df for name, df in sheets.items() if not df.empty}
    if not tables:
        return False, "no report tables to write"
    try:
        with pd.ExcelWriter(out_path) as writer:
            for sheet, df in tables.items():
                df.to_excel(writer, sheet_name=sheet, index=False)
    except (ImportError, ValueError, OSError) as e:
        return False, str(e)
    return True, None


# -------------------- Frames -------------------- #
def items_frame(system: InventorySystem, as_of: datetime.date | None = None) -> pd.DataFrame:
    """
    Build the canonical items DataFrame used across the pipeline.

    Starts from InventorySystem.export_report_items() and adds numeric helper
    columns: Warranty_Days_Left, Warranty_Bucket, Purchase_Year and a boolean
    Available column.

    Args:
        system: inventory to read.
        as_of: reference date for warranty calculations (today by default).
    """
    as_of = as_of or datetime.date.today()
    df = system.export_report_items()
    if df.empty:
        for col in ["Warranty_Days_Left", "Warranty_Bucket", "Purchase_Year", "Available"]:
            df[col] = pd.Series(dtype=object)
        return df
    warranty = pd.to_datetime(df["Warranty End"], errors="coerce")
    df["Warranty_Days_Left"] = (warranty - pd.Timestamp(as_of)).dt.days
    df["Warranty_Bucket"] = df["Warranty_Days_Left"].apply(warranty_bucket)
    df["Purchase_Year"] = pd.to_datetime(df["Purchase Date"], errors="coerce").dt.year
    df["Available"] = df["Availability"] == "Available"
    df["Price"] = pd.to_numeric(df["Price"], errors="coerce")
    df["Maintenance Fee"] = pd.to_numeric(df["Maintenance Fee"], errors="coerce")
    return df


def staff_frame(system: InventorySystem) -> pd.DataFrame:
    """
    Staff report with a Load column (share of the assignment limit in use).
    """
    df = system.export_report_staff()
    if system.max_assigned > 0:
        df["Load"] = df["AssignedCount"] / float(system.max_assigned)
    else:
        df["Load"] = 0.0
    return df


# -------------------- Metrics -------------------- #
def inventory_metrics(df: pd.DataFrame) -> dict:
    """
    Compute headline numbers and per-type aggregates.

    Returns:
        dict with total_items, total_value, total_fees, assigned_items,
        utilisation (share of items assigned) and by_kind, a DataFrame with one
        row per item type: Type, Count, Value, Fees, Assigned.
    """
    metrics = {
        "total_items": int(len(df)),
        "total_value": float(df["Price"].sum()) if not df.empty else 0.0,
        "total_fees": round(float(df["Maintenance Fee"].sum()), 2) if not df.empty else 0.0,
    }
    assigned = int((~df["Available"].astype(bool)).sum()) if not df.empty else 0
    metrics["assigned_items"] = assigned
    metrics["utilisation"] = assigned / len(df) if len(df) else 0.0

    if df.empty:
        metrics["by_kind"] = pd.DataFrame(columns=["Type", "Count", "Value", "Fees", "Assigned"])
        return metrics
    by_kind = df.groupby("Type").agg(
        Count=("Item ID", "count"),
        Value=("Price", "sum"),
        Fees=("Maintenance Fee", "sum"),
        Assigned=("Available", lambda s: int((~s.astype(bool)).sum())),
    ).reindex(KIND_ORDER).rename_axis("Type").fillna(0).reset_index()
    by_kind["Count"] = by_kind["Count"].astype(int)
    by_kind["Assigned"] = by_kind["Assigned"].astype(int)
    by_kind["Fees"] = by_kind["Fees"].round(2)
    metrics["by_kind"] = by_kind
    return metrics


def warranty_analysis(df: pd.DataFrame) -> dict:
    """
    Count items per warranty bucket and per (bucket, type).

    Returns:
        dict with bucket_counts (DataFrame Warranty_Bucket/Count in bucket order)
        and bucket_by_kind (pivot: index=bucket, columns=type).
    """
    if df.empty:
        return {
            "bucket_counts": pd.DataFrame({"Warranty_Bucket": WARRANTY_BUCKETS, "Count": [0] * len(WARRANTY_BUCKETS)}),
            "bucket_by_kind": pd.DataFrame(0, index=WARRANTY_BUCKETS, columns=KIND_ORDER),
        }
    counts = df["Warranty_Bucket"].value_counts().reindex(WARRANTY_BUCKETS, fill_value=0)
    bucket_counts = counts.rename_axis("Warranty_Bucket").reset_index(name="Count")
    pivot = (df.groupby(["Warranty_Bucket", "Type"]).size()
             .unstack(fill_value=0)
             .reindex(index=WARRANTY_BUCKETS, columns=KIND_ORDER, fill_value=0))
    return {"bucket_counts": bucket_counts, "bucket_by_kind": pivot.astype(int)}


# -------------------- Visualisations -------------------- #
def create_visualisations(metrics: dict, warranty: dict, staff_df: pd.DataFrame, out_dir: Path) -> list:
    """
    Draw the report charts and save them as PNGs under out_dir/plots.

    Each chart is drawn independently; a chart that cannot be produced is
    logged and skipped.

    Returns:
        List of saved plot paths.
    """
    plots_dir = out_dir / "plots"
    plots_dir.mkdir(parents=True, exist_ok=True)
    saved = []
    by_kind = metrics["by_kind"]

    # Maintenance fees by type
    try:
        if not by_kind.empty:
            fig, ax = plt.subplots(figsize=(7, 4))
            sns.barplot(data=by_kind, x="Type", y="Fees", ax=ax, color="#4c72b0")
            ax.set_title("Yearly maintenance fees by item type")
            ax.set_xlabel("")
            label_bars(ax, fmt="{:.2f}")
            saved.append(save_chart(fig, plots_dir, "fees_by_type"))
    except (ValueError, TypeError, KeyError) as e:
        logger.warning("could not plot fees by type: %s", e)

    # Assigned vs available by type
    try:
        if not by_kind.empty:
            stacked = by_kind.set_index("Type")[["Assigned", "Count"]].copy()
            stacked["Available"] = stacked["Count"] - stacked["Assigned"]
            stacked = stacked[["Available", "Assigned"]]
            fig, ax = plt.subplots(figsize=(7, 4))
            stacked.plot(kind="bar", stacked=True, ax=ax, rot=0)
            ax.set_title("Availability by item type")
            ax.set_xlabel("")
            ax.set_ylabel("Items")
            totals = stacked.sum(axis=1)
            for x, total in zip(np.arange(len(totals)), totals):
                ax.text(x, total, f"{total:.0f}", ha="center", va="bottom", fontsize=8)
            saved.append(save_chart(fig, plots_dir, "availability_by_type"))
    except (ValueError, TypeError, KeyError) as e:
        logger.warning("could not plot availability by type: %s", e)

    # Warranty buckets heatmap
    try:
        pivot = warranty["bucket_by_kind"]
        if pivot.to_numpy().sum() > 0:
            fig, ax = plt.subplots(figsize=(7, 4))
            sns.heatmap(pivot, annot=True, fmt="d", cmap="YlOrRd", cbar=False, ax=ax)
            ax.set_title("Items by remaining warranty")
            ax.set_xlabel("")
            ax.set_ylabel("")
            saved.append(save_chart(fig, plots_dir, "warranty_heatmap"))
    except (ValueError, TypeError, KeyError) as e:
        logger.warning("could not plot warranty heatmap: %s", e)

    # Items held per staff member
    try:
        if not staff_df.empty:
            fig, ax = plt.subplots(figsize=(max(6, len(staff_df) * 0.6), 4))
            sns.barplot(data=staff_df, x="Staff ID", y="AssignedCount", ax=ax, color="#55a868")
            ax.set_title("Items held per staff member")
            ax.set_ylabel("Items")
            label_bars(ax)
            saved.append(save_chart(fig, plots_dir, "staff_load"))
    except (ValueError, TypeError, KeyError) as e:
        logger.warning("could not plot staff load: %s", e)

    return saved


# -------------------- Export -------------------- #
def save_aggregates(out_dir: Path, items_df: pd.DataFrame, staff_df: pd.DataFrame,
                    metrics: dict, warranty: dict) -> tuple:
    """
    Write aggregate tables as CSVs under out_dir/aggregates, then try an Excel workbook.

    Returns:
        (excel_ok, error_message_or_None) from write_summary_workbook.
    """
    agg_dir = out_dir / "aggregates"
    agg_dir.mkdir(parents=True, exist_ok=True)

    items_df.to_csv(agg_dir / "items.csv", index=False)
    staff_df.to_csv(agg_dir / "staff.csv", index=False)
    metrics["by_kind"].to_csv(agg_dir / "by_type.csv", index=False)
    warranty["bucket_counts"].to_csv(agg_dir / "warranty_buckets.csv", index=False)
    warranty["bucket_by_kind"].to_csv(agg_dir / "warranty_by_type.csv")

    dfs_for_excel = {
        "items": items_df,
        "staff": staff_df,
        "by_type": metrics["by_kind"],
        "warranty_buckets": warranty["bucket_counts"],
    }
    return write_summary_workbook(dfs_for_excel, agg_dir / "inventory_summary.xlsx")


# -------------------- Orchestrator -------------------- #
def analyze(system: InventorySystem, out: str = "inventory_outputs",
            as_of: datetime.date | None = None) -> dict:
    """
    High-level orchestration that runs the full report pipeline.

    Steps:
      1. Build item and staff DataFrames
      2. Compute inventory metrics and warranty buckets
      3. Create visualisations and save aggregates to disk
      4. Print a concise summary

    Args:
        system: inventory to analyse.
        out: output directory for plots and aggregates.
        as_of: reference date for warranty calculations (today by default).

    Returns:
        Summary dictionary with keys: total_items, total_value, total_fees,
        assigned_items, utilisation, top_fee_type, expired_warranties, plots.
    """
    out_dir = Path(out)
    out_dir.mkdir(parents=True, exist_ok=True)

    print("Building inventory tables...")
    items_df = items_frame(system, as_of)
    staff_df = staff_frame(system)

    print("Computing metrics...")
    metrics = inventory_metrics(items_df)
    warranty = warranty_analysis(items_df)

    print("Creating visualisations...")
    plots = create_visualisations(metrics, warranty, staff_df, out_dir)

    print("Saving aggregates...")
    ok, err = save_aggregates(out_dir, items_df, staff_df, metrics, warranty)
    if not ok:
        print("Note: Excel write failed (openpyxl may be missing). CSV files were still written. Error:", err)

    top_fee_type = None
    by_kind = metrics["by_kind"]
    if not by_kind.empty and by_kind["Fees"].sum() > 0:
        top_fee_type = by_kind.sort_values("Fees", ascending=False).iloc[0]["Type"]
    counts = warranty["bucket_counts"].set_index("Warranty_Bucket")["Count"]
    expired = int(counts.get("Expired", 0))

    print("\n=== Inventory Summary ===")
    print(f"Total items: {metrics['total_items']}")
    print(f"Total purchase value: {metrics['total_value']:.2f}")
    print(f"Total yearly maintenance fees: {metrics['total_fees']:.2f}")
    print(f"Assigned items: {metrics['assigned_items']} ({metrics['utilisation']:.0%})")
    if top_fee_type:
        print(f"Highest maintenance cost type: {top_fee_type}")
    print(f"Items with expired warranty: {expired}")
    print("\nSaved plots and aggregates to:", out_dir.resolve())
    for p in plots:
        print(" -", Path(p).resolve())

    return {
        "total_items": metrics["total_items"],
        "total_value": metrics["total_value"],
        "total_fees": metrics["total_fees"],
        "assigned_items": metrics["assigned_items"],
        "utilisation": metrics["utilisation"],
        "top_fee_type": top_fee_type,
        "expired_warranties": expired,
        "plots": [str(p) for p in plots],
    }


def seed_demo_inventory() -> InventorySystem:
    """
    Build a small inventory with a few assignments, for demos and smoke runs.
    """
    system = InventorySystem()
    d = datetime.date
    today = d.today()
    system.add_item(ItemKind.EQUIPMENT, "EQ1", "Projector", d(2022, 1, 10), 850.0,
                    today + datetime.timedelta(days=400), "Epson")
    system.add_item(ItemKind.EQUIPMENT, "EQ2", "Laptop", d(2021, 9, 1), 1200.0,
                    today - datetime.timedelta(days=30), "Dell")
    system.add_item(ItemKind.FURNITURE, "FU1", "Office chair", d(2020, 5, 20), 240.0,
                    today + datetime.timedelta(days=60), "Leather")
    system.add_item(ItemKind.FURNITURE, "FU2", "Desk", d(2019, 3, 5), 400.0,
                    today + datetime.timedelta(days=200), "Wood")
    system.add_item(ItemKind.LAB_EQUIPMENT, "LB1", "Fume hood", d(2023, 2, 14), 5200.0,
                    today + datetime.timedelta(days=900), "Chemistry")
    system.add_item(ItemKind.LAB_EQUIPMENT, "LB2", "Oscilloscope", d(2022, 11, 3), 1500.0,
                    today + datetime.timedelta(days=100), "Physics")
    system.register_staff("S1", "Ada Mensah")
    system.register_staff("S2", "Kofi Boateng")
    system.assign_item("S1", "EQ1")
    system.assign_item("S1", "FU1")
    system.assign_item("S2", "LB2")
    return system


# -------------------- CLI -------------------- #
if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="University inventory report analysis (demo data)")
    parser.add_argument("--out", default="inventory_outputs", help="Output folder for plots & aggregates")
    args = parser.parse_args()

    analyze(seed_demo_inventory(), args.out)
