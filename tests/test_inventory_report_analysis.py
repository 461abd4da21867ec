import os
import sys
import pathlib
import datetime

os.environ.setdefault("MPLBACKEND", "Agg")

import matplotlib.pyplot as plt
import pandas as pd
import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parent.parent))

from university_inventory_system import InventorySystem, ItemKind
from inventory_report_analysis import (
    analyze,
    label_bars,
    save_chart,
    write_summary_workbook,
    inventory_metrics,
    items_frame,
    seed_demo_inventory,
    staff_frame,
    warranty_analysis,
    warranty_bucket,
)

AS_OF = datetime.date(2025, 1, 1)
D = datetime.date


@pytest.fixture()
def system():
    inv = InventorySystem()
    inv.add_item(ItemKind.EQUIPMENT, "EQ1", "Projector", D(2022, 1, 10), 100.0, D(2024, 12, 1), "Epson")
    inv.add_item(ItemKind.EQUIPMENT, "EQ2", "Laptop", D(2023, 1, 10), 1000.0, D(2025, 2, 1), "Dell")
    inv.add_item(ItemKind.FURNITURE, "FU1", "Desk", D(2021, 1, 10), 400.0, D(2025, 6, 1), "Wood")
    inv.add_item(ItemKind.LAB_EQUIPMENT, "LB1", "Fume hood", D(2023, 1, 10), 100.0, D(2027, 1, 1), "Chemistry")
    inv.register_staff("S1", "Ada Mensah")
    inv.assign_item("S1", "EQ2")
    inv.assign_item("S1", "LB1")
    return inv


@pytest.mark.parametrize("days, bucket", [
    (-1, "Expired"),
    (0, "<90 days"),
    (89, "<90 days"),
    (90, "<1 year"),
    (365, "1 year+"),
    (None, "Unknown"),
])
def test_warranty_bucket(days, bucket):
    assert warranty_bucket(days) == bucket


def test_items_frame_adds_helper_columns(system):
    df = items_frame(system, AS_OF).set_index("Item ID")
    assert df.loc["EQ1", "Warranty_Bucket"] == "Expired"
    assert df.loc["EQ2", "Warranty_Bucket"] == "<90 days"
    assert df.loc["FU1", "Warranty_Bucket"] == "<1 year"
    assert df.loc["LB1", "Warranty_Bucket"] == "1 year+"
    assert df.loc["EQ2", "Available"] == False  # noqa: E712
    assert df.loc["EQ1", "Purchase_Year"] == 2022


def test_inventory_metrics(system):
    metrics = inventory_metrics(items_frame(system, AS_OF))
    assert metrics["total_items"] == 4
    assert metrics["total_value"] == 1600.0
    # 10 + 100 + 20 + 90
    assert metrics["total_fees"] == 220.0
    assert metrics["assigned_items"] == 2
    assert metrics["utilisation"] == 0.5

    by_kind = metrics["by_kind"].set_index("Type")
    assert list(by_kind.index) == ["Equipment", "Furniture", "Lab Equipment"]
    assert by_kind.loc["Equipment", "Count"] == 2
    assert by_kind.loc["Equipment", "Assigned"] == 1
    assert by_kind.loc["Lab Equipment", "Fees"] == 90.0


def test_warranty_analysis(system):
    result = warranty_analysis(items_frame(system, AS_OF))
    counts = result["bucket_counts"].set_index("Warranty_Bucket")["Count"]
    assert counts["Expired"] == 1
    assert counts.sum() == 4
    assert result["bucket_by_kind"].loc["1 year+", "Lab Equipment"] == 1


def test_staff_frame_load(system):
    df = staff_frame(system).set_index("Staff ID")
    assert df.loc["S1", "AssignedCount"] == 2
    assert df.loc["S1", "Load"] == pytest.approx(0.4)


def test_analyze_writes_outputs(system, tmp_path):
    summary = analyze(system, str(tmp_path), as_of=AS_OF)
    assert summary["total_items"] == 4
    assert summary["top_fee_type"] == "Equipment"
    assert summary["expired_warranties"] == 1
    agg = tmp_path / "aggregates"
    for name in ["items.csv", "staff.csv", "by_type.csv", "warranty_buckets.csv"]:
        assert (agg / name).exists()
    for plot in summary["plots"]:
        assert pathlib.Path(plot).exists()


def test_analyze_empty_inventory(tmp_path):
    summary = analyze(InventorySystem(), str(tmp_path))
    assert summary["total_items"] == 0
    assert summary["top_fee_type"] is None
    assert summary["plots"] == []


def test_seed_demo_inventory():
    inv = seed_demo_inventory()
    assert len(inv.items) == 6
    assert len(inv.staff) == 2
    assert inv.get_staff("S1").assigned_count == 2
    assert inv.get_item("LB2").is_available() is False


def test_label_bars_skips_zero_height_bars(tmp_path):
    fig, ax = plt.subplots()
    ax.bar(["Equipment", "Furniture", "Lab Equipment"], [10.0, 0.0, 65.0])
    label_bars(ax, fmt="{:.2f}")
    labels = [t.get_text() for t in ax.texts]
    assert "10.00" in labels
    assert "65.00" in labels
    assert "0.00" not in labels
    path = save_chart(fig, tmp_path / "plots", "fees")
    assert path == tmp_path / "plots" / "fees.png"
    assert path.exists()


def test_write_summary_workbook_skips_when_all_tables_empty(tmp_path):
    out = tmp_path / "summary.xlsx"
    ok, err = write_summary_workbook({"items": pd.DataFrame(), "staff": pd.DataFrame()}, out)
    assert not ok
    assert err
    assert not out.exists()
