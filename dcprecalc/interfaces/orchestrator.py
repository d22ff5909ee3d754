"""
Phase orchestrator interface.

This module defines the contract each phase's simulation orchestrator must
satisfy to plug into the pipeline. The simulations themselves live outside
this package; the pipeline only needs ``run_all``.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Mapping


class PhaseOrchestrator(ABC):
    """Abstract interface for a phase's algorithm orchestrator.

    ``run_all`` is called once per pipeline run with the whole ordered date
    list; iterating over dates (and algorithms) is the orchestrator's job.

    Return shapes:
        Phases 1 and 2: ``{algorithm: {date: {metric_field: number, ...}}}``
        Phases 3 and 4: ``{date: {"metrics": {...}, ...}}``, optionally
            wrapped as ``{fixed_algorithm: {date: {...}}}``

    A per-date failure is reported either by raising or by an ``error`` field
    in that date's record.

    Example:
        class Phase4Orchestrator(PhaseOrchestrator):
            def run_all(self, dates, options):
                return {date: self.simulate(date, **options) for date in dates}
    """

    @abstractmethod
    def run_all(self, dates: List[str], options: Dict[str, Any]) -> Mapping[str, Any]:
        """Run every algorithm of the phase for every date.

        Args:
            dates: Ordered trace dates.
            options: Phase options from the configuration.

        Returns:
            Raw results in the phase's shape (see class docstring).
        """
        pass


class CallableOrchestrator(PhaseOrchestrator):
    """Adapts a plain ``func(dates, options)`` to PhaseOrchestrator."""

    def __init__(self, func: Callable[[List[str], Dict[str, Any]], Mapping[str, Any]], name: str = None):
        self.func = func
        self.name = name or getattr(func, "__name__", repr(func))

    def run_all(self, dates: List[str], options: Dict[str, Any]) -> Mapping[str, Any]:
        return self.func(dates, options)

    def __repr__(self):
        return f"CallableOrchestrator({self.name})"


def as_orchestrator(obj: Any) -> PhaseOrchestrator:
    """Return ``obj`` as something with ``run_all``.

    Objects that already have a ``run_all`` method are used as they are
    (duck typing, no subclassing required); other callables are wrapped.

    Raises:
        TypeError: If ``obj`` is neither.
    """
    if callable(getattr(obj, "run_all", None)):
        return obj
    if callable(obj):
        return CallableOrchestrator(obj)
    raise TypeError(f"{obj!r} is not an orchestrator: it needs a run_all(dates, options) method")
