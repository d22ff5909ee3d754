"""Run one phase's orchestrator and check what it returned."""

from typing import Any, Dict, List, Mapping, Optional, Sequence

from dcprecalc.errors import CollaboratorError, ErrorCode
from dcprecalc.interfaces.orchestrator import PhaseOrchestrator
from dcprecalc.phases.definitions import PhaseDefinition


class PhaseRunner:
    """
    Invokes a phase orchestrator once with the whole ordered date list.

    The raw result is returned untransformed. Orchestrators that catch their
    own per-date failures report them as an ``error`` field on the date's
    record; those are treated the same as a raise.

    Args:
        definition: Phase whose records are being produced.
        orchestrator: Object with ``run_all(dates, options)``.
        options: Phase options passed to the orchestrator.
        logger: Logger for status messages.
    """

    def __init__(self, definition: PhaseDefinition, orchestrator: PhaseOrchestrator,
                 options: Optional[Dict[str, Any]] = None, logger=None):
        self.definition = definition
        self.orchestrator = orchestrator
        self.options = dict(options or {})
        self.logger = logger

    @property
    def phase_id(self) -> int:
        return self.definition.phase_id

    def run(self, dates: Sequence[str]) -> Mapping[str, Any]:
        """
        Raises:
            CollaboratorError: The orchestrator raised, returned a non-mapping,
                or reported an error for at least one date.
        """
        dates = list(dates)
        if self.logger:
            self.logger.status(f"Running Phase {self.phase_id} ({self.definition.title}) "
                               f"for {len(dates)} dates...")
        try:
            raw = self.orchestrator.run_all(dates, dict(self.options))
        except Exception as e:
            raise CollaboratorError(f"Phase {self.phase_id} orchestrator raised {type(e).__name__}",
                                    phase_id=self.phase_id, cause=str(e),
                                    code=ErrorCode.COLLABORATOR_RAISED) from e

        if not isinstance(raw, Mapping):
            raise CollaboratorError(f"Phase {self.phase_id} orchestrator returned {type(raw).__name__}, "
                                    f"expected a mapping", phase_id=self.phase_id,
                                    code=ErrorCode.COLLABORATOR_BAD_RESULT)

        failures = self.failed_dates(raw)
        if failures:
            failed = list(dict.fromkeys(date for date, _ in failures))
            raise CollaboratorError(f"Phase {self.phase_id} failed for {len(failed)} date(s)",
                                    phase_id=self.phase_id, dates=failed, cause=str(failures[0][1]),
                                    code=ErrorCode.COLLABORATOR_DATE_FAILED)

        if self.logger:
            self.logger.verbose(f"Phase {self.phase_id} orchestrator returned {len(raw)} entries")
        return raw

    def failed_dates(self, raw: Mapping[str, Any]) -> List[tuple]:
        """Return (date, error) pairs for records that carry an ``error`` field."""
        failures = []
        for _algorithm, date, record in self.definition.strategy.iter_records(raw):
            if isinstance(record, Mapping) and record.get("error"):
                failures.append((date, record["error"]))
        return failures
