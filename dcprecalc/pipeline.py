"""
Precalculation pipeline.

Runs an explicit, ordered task list with one driver loop:

    dataset (optional) -> phase1 -> phase2 -> phase3 -> phase4

Each task returns a TaskOutcome; the loop stops at the first failed one.
A phase's document is written before the next phase starts and is never
removed afterwards, so a late failure keeps the work of earlier phases.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Tuple

from dcprecalc.config import PrecalcConfig
from dcprecalc.dataset.manager import DatasetManager, DatasetStatus
from dcprecalc.error_messages import ErrorFormatter, format_error
from dcprecalc.outcomes import PipelineReport, TaskOutcome
from dcprecalc.phases.aggregator import AggregationResult, ResultAggregator
from dcprecalc.phases.definitions import PHASE_DEFINITIONS, PhaseDefinition
from dcprecalc.phases.runner import PhaseRunner
from dcprecalc.progress import create_stage_progress
from dcprecalc.registry import OrchestratorRegistry
from dcprecalc.utils import format_duration

DATASET_TASK = "dataset"

TaskResult = Tuple[Any, List[str]]


@dataclass(frozen=True)
class PipelineTask:
    """
    Attributes:
        name: Key used in durations and reports ("dataset", "phase1", ...).
        title: Stage description shown in progress output.
        action: Does the work and returns (value, warnings). Raises on failure.
        phase_id: Phase id for phase tasks, None for the dataset task.
    """
    name: str
    title: str
    action: Callable[[], TaskResult]
    phase_id: Optional[int] = None


class PrecalculationPipeline:
    """
    Args:
        config: Validated PrecalcConfig.
        registry: Orchestrators per phase (built from config.orchestrators when omitted).
        dataset_manager: Dataset check/download (built from config.dataset when omitted).
        aggregator: ResultAggregator (built with config.gap_policy when omitted).
        logger: Logger for status, banners and failures.
        formatter: ErrorFormatter for banners.
        stop_requested: Checked before each task; True ends the run as interrupted.
    """

    def __init__(self, config: PrecalcConfig, registry: Optional[OrchestratorRegistry] = None,
                 dataset_manager: Optional[DatasetManager] = None,
                 aggregator: Optional[ResultAggregator] = None,
                 definitions: Optional[Mapping[int, PhaseDefinition]] = None,
                 logger=None, formatter: Optional[ErrorFormatter] = None,
                 stop_requested: Optional[Callable[[], bool]] = None):
        self.config = config
        self.logger = logger
        self.definitions = definitions or PHASE_DEFINITIONS
        self.registry = registry if registry is not None else OrchestratorRegistry.from_specs(config.orchestrators)
        self._dataset_manager = dataset_manager
        self.aggregator = aggregator or ResultAggregator(gap_policy=config.gap_policy,
                                                         definitions=self.definitions, logger=logger)
        self.formatter = formatter or ErrorFormatter(use_colors=False)
        self.stop_requested = stop_requested or (lambda: False)

    @property
    def dataset_manager(self) -> DatasetManager:
        if self._dataset_manager is None:
            self._dataset_manager = DatasetManager(self.config.dataset, len(self.config.dates),
                                                   logger=self.logger)
        return self._dataset_manager

    def build_tasks(self) -> List[PipelineTask]:
        tasks = []
        if not self.config.skip_dataset:
            tasks.append(PipelineTask(DATASET_TASK, "Dataset", self.run_dataset))
        for phase_id in self.config.phases:
            definition = self.definitions[phase_id]
            tasks.append(PipelineTask(
                name=definition.task_name,
                title=f"Phase {phase_id}: {definition.title}",
                action=lambda phase_id=phase_id: self.run_phase(phase_id),
                phase_id=phase_id,
            ))
        return tasks

    def run_dataset(self) -> TaskResult:
        status = self.dataset_manager.ensure_datasets()
        warnings = []
        if status == DatasetStatus.UNAVAILABLE:
            warnings.append(f"Dataset not available in {self.config.dataset.dataset_dir}")
        return status, warnings

    def run_phase(self, phase_id: int) -> TaskResult:
        """Run, aggregate and persist one phase.

        Raises:
            ConfigurationError: No orchestrator for the phase.
            CollaboratorError: The orchestrator failed.
            AggregationGapError: Gaps under the strict policy.
            FileSystemError: The document could not be written.
        """
        definition = self.definitions[phase_id]
        runner = PhaseRunner(definition, self.registry.get(phase_id),
                             options=self.config.phase_options(phase_id), logger=self.logger)
        raw = runner.run(self.config.dates)

        aggregation = self.aggregator.aggregate(phase_id, raw, self.config.dates)
        path = self.config.result_file_path(phase_id)
        aggregation.document.write(path)

        self._log_phase_success(phase_id, path, aggregation)
        warnings = [f"{algorithm}: missing metrics for {', '.join(dates)}"
                    for algorithm, dates in aggregation.gaps.items() if dates]
        return aggregation, warnings

    def run_all(self) -> PipelineReport:
        """Run every task in order, stopping at the first failure."""
        tasks = self.build_tasks()
        report = PipelineReport(success=True)
        if self.logger:
            self.logger.status(f"Starting precalculation: {len(tasks)} task(s), "
                               f"{len(self.config.dates)} trace dates")

        with create_stage_progress([t.title for t in tasks], logger=self.logger) as advance_stage:
            for task in tasks:
                if self.stop_requested():
                    report.success = False
                    report.interrupted = True
                    report.failed_task = task.name
                    if self.logger:
                        self.logger.warning(f"Stop requested, not starting {task.title}")
                    break

                outcome = self.execute(task)
                report.outcomes.append(outcome)
                report.durations[task.name] = outcome.duration
                if not outcome.ok:
                    report.success = False
                    report.failed_task = task.name
                    report.error_kind = outcome.error_kind
                    report.error = outcome.error
                    self._log_failure(task, outcome)
                    break
                advance_stage()

        self._log_summary(report)
        return report

    def execute(self, task: PipelineTask) -> TaskOutcome:
        """Run one task and convert any exception into a failed TaskOutcome."""
        start = time.perf_counter()
        try:
            value, warnings = task.action()
        except Exception as e:
            return TaskOutcome.failure(task.name, time.perf_counter() - start, e)
        return TaskOutcome.success(task.name, time.perf_counter() - start, value, warnings)

    def _log_phase_success(self, phase_id: int, path: str, aggregation: AggregationResult):
        if not self.logger:
            return
        document = aggregation.document
        self.logger.result(self.formatter.format_banner(
            f"Phase {phase_id} results saved",
            {"File": path, "Algorithms": len(document.algorithms), "Dates": len(document.dates)},
            success=True))

    def _log_failure(self, task: PipelineTask, outcome: TaskOutcome):
        if not self.logger:
            return
        kind = outcome.error_kind.value if outcome.error_kind else "unknown"
        if task.phase_id is None:
            message = format_error('DATASET_FAILED', kind=kind, error=outcome.error)
        else:
            message = format_error('PHASE_FAILED', phase_id=task.phase_id, kind=kind, error=outcome.error)
        self.logger.error(self.formatter.format_banner(f"{task.title} FAILED", success=False))
        self.logger.error(message, exc_info=outcome.error)

    def _log_summary(self, report: PipelineReport):
        if not self.logger:
            return
        details = {name: format_duration(seconds) for name, seconds in report.durations.items()}
        details["Total"] = format_duration(report.total_duration)
        if report.success:
            self.logger.result(self.formatter.format_banner("Precalculation complete", details, success=True))
        else:
            title = "Precalculation interrupted" if report.interrupted else "Precalculation failed"
            self.logger.error(self.formatter.format_banner(f"{title} at {report.failed_task}", details,
                                                           success=False))
