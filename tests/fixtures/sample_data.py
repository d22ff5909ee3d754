"""
Sample orchestrator output and archive payloads for tests.

The raw result builders produce values that are distinct per
(algorithm, date, metric) so tests can check that every value landed in
the right cell.
"""

import io
import zipfile
from typing import Dict, List, Sequence

from dcprecalc.phases.definitions import PHASE1_METRICS, PHASE2_METRICS

SAMPLE_DATES = ["20110303", "20110306", "20110309"]

PHASE1_ALGORITHMS = ["THR MMT", "IQR MC", "MAD RS"]
PHASE2_ALGORITHMS = ["LR-ACO", "ARIMA-ACO"]

HTML_INTERSTITIAL = (
    b"<!DOCTYPE html><html><head><title>Google Drive - Virus scan warning</title></head>"
    b"<body>Google Drive can't scan this file for viruses.</body></html>"
)


def _metric_value(algo_idx: int, date_idx: int, metric_idx: int) -> float:
    return round(100 * (algo_idx + 1) + 10 * date_idx + metric_idx + 0.5, 2)


def make_direct_raw(algorithms: Sequence[str], dates: Sequence[str], metrics: Sequence[str]) -> Dict:
    return {
        algo: {
            date: {metric: _metric_value(a, d, m) for m, metric in enumerate(metrics)}
            for d, date in enumerate(dates)
        }
        for a, algo in enumerate(algorithms)
    }


def make_phase1_raw(dates: Sequence[str] = SAMPLE_DATES, algorithms: Sequence[str] = PHASE1_ALGORITHMS) -> Dict:
    raw = make_direct_raw(algorithms, dates, PHASE1_METRICS)
    for records in raw.values():
        for record in records.values():
            record["overloadedHosts"] = 3
    return raw


def make_phase2_raw(dates: Sequence[str] = SAMPLE_DATES, algorithms: Sequence[str] = PHASE2_ALGORITHMS) -> Dict:
    return make_direct_raw(algorithms, dates, PHASE2_METRICS)


def make_phase3_record(total_vms=10, total_migrations=4, load_percentage=55,
                       balanced_percentage=70, system_state="Balanced") -> Dict:
    return {
        "date": None,
        "metrics": {
            "totalVMs": total_vms,
            "totalMigrations": total_migrations,
            "loadPercentage": load_percentage,
            "balancedPercentage": balanced_percentage,
            "systemState": system_state,
        },
    }


def make_phase3_raw(dates: Sequence[str] = SAMPLE_DATES) -> Dict:
    raw = {}
    for i, date in enumerate(dates):
        record = make_phase3_record(total_vms=10 + i, total_migrations=4 + i)
        record["date"] = date
        raw[date] = record
    return raw


def make_phase4_record(balanced=90, utilization=60, variance=5, migrations=3, fitness=0.92) -> Dict:
    return {
        "metrics": {
            "balancedPercentage": balanced,
            "averageUtilization": utilization,
            "loadVariance": variance,
            "totalMigrations": migrations,
            "globalBestFitness": fitness,
        },
        "iterations": 50,
    }


def make_phase4_raw(dates: Sequence[str] = SAMPLE_DATES, wrapped: bool = True) -> Dict:
    records = {date: make_phase4_record(migrations=3 + i) for i, date in enumerate(dates)}
    return {"ACOPSOHybrid": records} if wrapped else records


def make_zip_bytes(date_folders: List[str], root: str = "planetlab") -> bytes:
    """A small ZIP laid out like the trace dataset: <root>/<date>/<vm trace file>."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for date in date_folders:
            archive.writestr(f"{root}/{date}/vm_{date}_001", "12\n15\n9\n")
    return buffer.getvalue()
