from dcprecalc.phases.aggregator import AggregationResult, ResultAggregator
from dcprecalc.phases.definitions import PHASE_DEFINITIONS, PhaseDefinition, get_phase_definition
from dcprecalc.phases.runner import PhaseRunner
from dcprecalc.phases.strategies import (
    DerivedMetrics,
    DirectExtraction,
    PassThroughMetrics,
    StrategyKind,
    derive_phase3_metrics,
    extract_phase4_metrics,
)

__all__ = [
    "AggregationResult",
    "ResultAggregator",
    "PHASE_DEFINITIONS",
    "PhaseDefinition",
    "get_phase_definition",
    "PhaseRunner",
    "DerivedMetrics",
    "DirectExtraction",
    "PassThroughMetrics",
    "StrategyKind",
    "derive_phase3_metrics",
    "extract_phase4_metrics",
]
