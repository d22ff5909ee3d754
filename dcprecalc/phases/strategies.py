"""
Per-phase aggregation strategies.

A strategy knows two things about a phase: how to walk its raw results as
(algorithm, date, record) triples, and how to turn one record into the
phase's canonical metric values. Everything here is pure; no I/O, no state.

Variants:
    DirectExtraction   - phases 1 and 2, metric values copied from record fields
    DerivedMetrics     - phase 3, metrics computed from the record's ``metrics``
    PassThroughMetrics - phase 4, metrics copied from ``metrics`` with defaults
"""

import enum
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Tuple

Number = float
RecordTriple = Tuple[str, str, Any]


class StrategyKind(enum.Enum):
    DIRECT = "direct"
    DERIVED = "derived"
    PASS_THROUGH = "pass_through"


def _json_number(value):
    """Whole floats become ints, so 45.0 serializes as 45."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def derive_phase3_metrics(metrics: Mapping[str, Any]) -> Dict[str, Number]:
    """Compute the phase 3 canonical metrics from one date's raw metrics.

    Missing or null fields count as 0.

    Example:
        >>> derive_phase3_metrics({'totalVMs': 10, 'totalMigrations': 4, 'loadPercentage': 55,
        ...                        'balancedPercentage': 70, 'systemState': 'Balanced'})
        {'avgTaskCompletionTime': 45, 'avgResourceUtilization': 55, 'avgLoadBalanceScore': 70,
         'avgMigrationOverhead': 10, 'avgSLACompliance': 100}
    """
    total_vms = metrics.get("totalVMs") or 0
    total_migrations = metrics.get("totalMigrations") or 0
    balanced_percentage = metrics.get("balancedPercentage") or 0

    # No VMs means nothing ran, so there is no completion time to estimate.
    task_completion_time = total_migrations * 10 + total_vms * 0.5 if total_vms > 0 else 0

    return {
        "avgTaskCompletionTime": _json_number(task_completion_time),
        "avgResourceUtilization": metrics.get("loadPercentage") or 0,
        "avgLoadBalanceScore": balanced_percentage,
        "avgMigrationOverhead": _json_number(total_migrations * 2.5),
        "avgSLACompliance": 100 if metrics.get("systemState") == "Balanced" else 80,
    }


def extract_phase4_metrics(metrics: Mapping[str, Any]) -> Dict[str, Number]:
    """Copy the phase 4 metrics, renaming migration and fitness fields. Missing fields are 0."""
    return {
        "balancedPercentage": metrics.get("balancedPercentage") or 0,
        "averageUtilization": metrics.get("averageUtilization") or 0,
        "loadVariance": metrics.get("loadVariance") or 0,
        "migrationCount": metrics.get("totalMigrations") or 0,
        "fitnessScore": metrics.get("globalBestFitness") or 0,
    }


@dataclass(frozen=True)
class DirectExtraction:
    """Multi-algorithm phase: ``raw[algorithm][date][field]`` is the metric value.

    Attributes:
        fields: (metric name, source field) pairs in output order.
    """
    fields: Tuple[Tuple[str, str], ...]
    kind: StrategyKind = StrategyKind.DIRECT

    @property
    def metric_names(self) -> Tuple[str, ...]:
        return tuple(metric for metric, _ in self.fields)

    def algorithms(self, raw: Mapping[str, Any]) -> Tuple[str, ...]:
        return tuple(raw.keys())

    def records_for(self, raw: Mapping[str, Any], algorithm: str) -> Mapping[str, Any]:
        records = raw.get(algorithm)
        return records if isinstance(records, Mapping) else {}

    def iter_records(self, raw: Mapping[str, Any]) -> Iterator[RecordTriple]:
        for algorithm in self.algorithms(raw):
            for date, record in self.records_for(raw, algorithm).items():
                yield algorithm, date, record

    def extract(self, record: Any) -> Optional[Dict[str, Number]]:
        """Return the metric values present in the record, or None when there is no record.

        Each field is copied on its own; a missing or null field is simply
        absent from the result.
        """
        if not isinstance(record, Mapping):
            return None
        return {metric: record[source] for metric, source in self.fields
                if record.get(source) is not None}


@dataclass(frozen=True)
class _SingleAlgorithmStrategy:
    """Phase with one fixed algorithm whose records hold a ``metrics`` mapping.

    Raw results may be keyed by date directly or wrapped under the algorithm
    name; both are accepted.

    Attributes:
        algorithm: The phase's fixed algorithm name.
        fields: (metric name, key in the transform's output) pairs in output order.
        transform: Pure function from a record's ``metrics`` to derived values.
    """
    algorithm: str
    fields: Tuple[Tuple[str, str], ...]
    transform: Callable[[Mapping[str, Any]], Dict[str, Number]]

    @property
    def metric_names(self) -> Tuple[str, ...]:
        return tuple(metric for metric, _ in self.fields)

    def algorithms(self, raw: Mapping[str, Any]) -> Tuple[str, ...]:
        return (self.algorithm,)

    def records_for(self, raw: Mapping[str, Any], algorithm: str) -> Mapping[str, Any]:
        wrapped = raw.get(self.algorithm)
        if isinstance(wrapped, Mapping) and "metrics" not in wrapped:
            return wrapped
        return raw

    def iter_records(self, raw: Mapping[str, Any]) -> Iterator[RecordTriple]:
        for date, record in self.records_for(raw, self.algorithm).items():
            yield self.algorithm, date, record

    def extract(self, record: Any) -> Optional[Dict[str, Number]]:
        """Return metric values, or None when the record has no ``metrics`` mapping."""
        if not isinstance(record, Mapping) or not isinstance(record.get("metrics"), Mapping):
            return None
        derived = self.transform(record["metrics"])
        return {metric: derived[key] for metric, key in self.fields}


@dataclass(frozen=True)
class DerivedMetrics(_SingleAlgorithmStrategy):
    kind: StrategyKind = StrategyKind.DERIVED


@dataclass(frozen=True)
class PassThroughMetrics(_SingleAlgorithmStrategy):
    kind: StrategyKind = StrategyKind.PASS_THROUGH
