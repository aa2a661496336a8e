# dashboard.py
from typing import Dict, Iterable, List, Sequence

import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

VITALS_COLUMNS = [
    "recorded_at",
    "systolic",
    "diastolic",
    "heart_rate",
    "temperature",
    "oxygen_level",
    "glucose_level",
    "needs_urgent_care",
    "needs_attention",
]

LABELS = {
    "systolic": "Systolic (mmHg)",
    "diastolic": "Diastolic (mmHg)",
    "heart_rate": "Heart rate (bpm)",
    "temperature": "Temperature (°C)",
    "oxygen_level": "SpO2 (%)",
    "glucose_level": "Glucose (mg/dL)",
}


def vitals_frame(records: Iterable[Dict]) -> pd.DataFrame:
    """Stored vitals rows -> one DataFrame row per reading, oldest first."""
    rows: List[Dict] = []
    for r in records:
        a = r.get("assessment") or {}
        rows.append({
            "recorded_at": r["recorded_at"],
            "systolic": r["systolic"],
            "diastolic": r["diastolic"],
            "heart_rate": r["heart_rate"],
            "temperature": r["temperature"],
            "oxygen_level": r["oxygen_level"],
            "glucose_level": r["glucose_level"],
            "needs_urgent_care": bool(a.get("needsUrgentCare")),
            "needs_attention": bool(a.get("needsAttention")),
        })

    df = pd.DataFrame(rows, columns=VITALS_COLUMNS)
    df["recorded_at"] = pd.to_datetime(df["recorded_at"])
    return df.sort_values("recorded_at").reset_index(drop=True)


def vitals_summary(df: pd.DataFrame) -> Dict:
    if df.empty:
        return {"count": 0, "urgent": 0, "attention": 0, "means": {}}
    return {
        "count": int(len(df)),
        "urgent": int(df["needs_urgent_care"].sum()),
        "attention": int(df["needs_attention"].sum()),
        "means": {c: round(float(df[c].mean()), 1) for c in LABELS},
    }


def plot_vitals_trend(df: pd.DataFrame, columns: Sequence[str] = ("systolic", "diastolic")):
    fig = plt.figure()
    for col in columns:
        plt.plot(df["recorded_at"], df[col], marker="o", label=LABELS.get(col, col))
    plt.xticks(rotation=30)
    plt.legend()
    plt.tight_layout()
    return fig
