"""
Reduce raw phase results into a CanonicalResultDocument.

For every algorithm and every configured date the phase strategy extracts
the metric values; each value lands at ``results[metric][algorithm][date]``.
A metric value the strategy cannot extract is a gap, handled by the gap policy:

    skip   - warn, leave the missing values out and keep the rest of the date
    strict - raise AggregationGapError
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from dcprecalc.config import GAP_POLICY
from dcprecalc.document import CanonicalResultDocument
from dcprecalc.error_messages import format_error
from dcprecalc.errors import AggregationGapError
from dcprecalc.phases.definitions import PHASE_DEFINITIONS, PhaseDefinition
from dcprecalc.utils import utc_timestamp


@dataclass
class AggregationResult:
    """
    Attributes:
        document: The aggregated document.
        gaps: Algorithm -> dates missing one or more metrics, in configured order.
        missing_metrics: Algorithm -> date -> metric names absent for dates
            that were only partly covered.
    """
    document: CanonicalResultDocument
    gaps: Dict[str, List[str]] = field(default_factory=dict)
    missing_metrics: Dict[str, Dict[str, List[str]]] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return not any(self.gaps.values())

    @property
    def missing_dates(self) -> List[str]:
        missing = []
        for dates in self.gaps.values():
            missing.extend(d for d in dates if d not in missing)
        return missing


class ResultAggregator:
    """
    Args:
        gap_policy: GAP_POLICY.SKIP or GAP_POLICY.STRICT.
        definitions: Phase id -> PhaseDefinition.
        logger: Logger for gap warnings.
        clock: Returns the ``generatedAt`` timestamp.
    """

    def __init__(self, gap_policy: GAP_POLICY = GAP_POLICY.SKIP,
                 definitions: Optional[Mapping[int, PhaseDefinition]] = None,
                 logger=None, clock: Callable[[], str] = utc_timestamp):
        self.gap_policy = gap_policy
        self.definitions = definitions or PHASE_DEFINITIONS
        self.logger = logger
        self.clock = clock

    def aggregate(self, phase_id: int, raw_results: Mapping[str, Any],
                  dates: Sequence[str]) -> AggregationResult:
        """
        Args:
            phase_id: Phase whose strategy applies.
            raw_results: Orchestrator output as returned by PhaseRunner.run.
            dates: Configured trace dates, in order.

        Raises:
            AggregationGapError: Gaps found and the policy is strict.
        """
        strategy = self.definitions[phase_id].strategy
        algorithms = list(strategy.algorithms(raw_results))
        results: Dict[str, Dict[str, Dict[str, Any]]] = {
            metric: {algorithm: {} for algorithm in algorithms} for metric in strategy.metric_names
        }
        gaps: Dict[str, List[str]] = {}
        missing_metrics: Dict[str, Dict[str, List[str]]] = {}
        aggregated = set()

        for algorithm in algorithms:
            records = strategy.records_for(raw_results, algorithm)
            for date in dates:
                values = strategy.extract(records.get(date)) or {}
                absent = [metric for metric in strategy.metric_names if metric not in values]
                if absent:
                    gaps.setdefault(algorithm, []).append(date)
                    if values:
                        missing_metrics.setdefault(algorithm, {})[date] = absent
                if not values:
                    continue
                for metric, value in values.items():
                    results[metric][algorithm][date] = value
                aggregated.add(date)

        document = CanonicalResultDocument(
            success=True,
            results=results,
            algorithms=algorithms,
            dates=[d for d in dates if d in aggregated],
            generated_at=self.clock(),
        )
        outcome = AggregationResult(document=document, gaps=gaps, missing_metrics=missing_metrics)

        if not outcome.complete:
            missing = outcome.missing_dates
            if self.gap_policy == GAP_POLICY.STRICT:
                raise AggregationGapError(f"Phase {phase_id}: {len(missing)} date(s) are missing metric values",
                                          phase_id=phase_id, missing=missing)
            if self.logger:
                self.logger.warning(format_error('AGGREGATION_GAP', phase_id=phase_id,
                                                 count=len(missing), dates=", ".join(missing)))
        return outcome
