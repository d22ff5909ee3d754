"""
Phase definitions: the fixed metric table and strategy of each phase.

Phase 1: load balancing (threshold detection x VM consolidation combinations)
Phase 2: predictive consolidation (load prediction, ant colony placement)
Phase 3: TVPLCV-PSO load balancing, metrics derived from the run summary
Phase 4: ACO-PSO hybrid, metrics copied from the run summary
"""

from dataclasses import dataclass
from typing import Dict, Tuple, Union

from dcprecalc.config import PHASE3_ALGORITHM, PHASE4_ALGORITHM
from dcprecalc.phases.strategies import (
    DerivedMetrics,
    DirectExtraction,
    PassThroughMetrics,
    derive_phase3_metrics,
    extract_phase4_metrics,
)

Strategy = Union[DirectExtraction, DerivedMetrics, PassThroughMetrics]

PHASE1_METRICS = (
    "energyConsumption",
    "vmMigrations",
    "slaViolations",
    "nodeShutdowns",
    "meanTimeBeforeShutdown",
    "meanTimeBeforeMigration",
)

PHASE2_METRICS = (
    "averagePredictedLoad",
    "averagePheromoneLevel",
    "averageLoadVariance",
    "averageMigrationCount",
    "averageConsolidationEfficiency",
)

PHASE3_FIELDS = (
    ("averageTaskCompletionTime", "avgTaskCompletionTime"),
    ("averageResourceUtilization", "avgResourceUtilization"),
    ("averageLoadBalanceScore", "avgLoadBalanceScore"),
    ("averageMigrationOverhead", "avgMigrationOverhead"),
    ("averageSLACompliance", "avgSLACompliance"),
)

PHASE4_FIELDS = (
    ("balancedPercentage", "balancedPercentage"),
    ("averageUtilization", "averageUtilization"),
    ("loadVariance", "loadVariance"),
    ("migrationCount", "migrationCount"),
    ("fitnessScore", "fitnessScore"),
)


@dataclass(frozen=True)
class PhaseDefinition:
    phase_id: int
    title: str
    strategy: Strategy

    @property
    def task_name(self) -> str:
        return f"phase{self.phase_id}"

    @property
    def metric_names(self) -> Tuple[str, ...]:
        return self.strategy.metric_names


PHASE_DEFINITIONS: Dict[int, PhaseDefinition] = {
    1: PhaseDefinition(1, "Load balancing", DirectExtraction(tuple((m, m) for m in PHASE1_METRICS))),
    2: PhaseDefinition(2, "Predictive consolidation", DirectExtraction(tuple((m, m) for m in PHASE2_METRICS))),
    3: PhaseDefinition(3, "TVPLCV-PSO load balancing",
                       DerivedMetrics(PHASE3_ALGORITHM, PHASE3_FIELDS, derive_phase3_metrics)),
    4: PhaseDefinition(4, "ACO-PSO hybrid",
                       PassThroughMetrics(PHASE4_ALGORITHM, PHASE4_FIELDS, extract_phase4_metrics)),
}


def get_phase_definition(phase_id: int) -> PhaseDefinition:
    """
    Raises:
        KeyError: Unknown phase id.
    """
    return PHASE_DEFINITIONS[phase_id]
