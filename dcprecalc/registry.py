"""
Orchestrator registry.

Maps phase ids to the orchestrators that produce their raw results. A
registry is an ordinary object built per pipeline, so tests and parallel
pipelines never share registrations.

Usage:
    registry = OrchestratorRegistry()
    registry.register(1, LoadBalancer())

    # or from config import specs
    registry = OrchestratorRegistry.from_specs({1: "sims.phase1:LoadBalancer"})

    orchestrator = registry.get(1)
"""

import importlib
import inspect
from typing import Any, Dict, List, Mapping

from dcprecalc.config import PHASE_IDS
from dcprecalc.error_messages import format_error
from dcprecalc.errors import ConfigurationError, ErrorCode
from dcprecalc.interfaces.orchestrator import PhaseOrchestrator, as_orchestrator


def load_object(spec: str) -> Any:
    """Import ``"package.module:attribute"`` (dotted attributes allowed).

    Classes are instantiated without arguments; anything else is returned
    as-is.

    Raises:
        ConfigurationError: Malformed spec, import failure or missing attribute.
    """
    module_name, sep, attr_path = spec.partition(":")
    if not sep or not module_name or not attr_path:
        raise ConfigurationError(f"Invalid orchestrator spec: {spec!r}", parameter="orchestrators",
                                 expected="'package.module:attribute'", actual=spec,
                                 code=ErrorCode.CONFIG_ORCHESTRATOR_UNAVAILABLE)
    try:
        obj = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import orchestrator module {module_name!r}: {e}",
                                 parameter="orchestrators", actual=spec,
                                 code=ErrorCode.CONFIG_ORCHESTRATOR_UNAVAILABLE) from e
    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise ConfigurationError(f"{module_name!r} has no attribute {attr_path!r}",
                                     parameter="orchestrators", actual=spec,
                                     code=ErrorCode.CONFIG_ORCHESTRATOR_UNAVAILABLE) from e
    if inspect.isclass(obj):
        obj = obj()
    return obj


class OrchestratorRegistry:
    """Registry of phase orchestrators for one pipeline."""

    def __init__(self):
        self._orchestrators: Dict[int, PhaseOrchestrator] = {}

    @classmethod
    def from_specs(cls, specs: Mapping[int, str]) -> "OrchestratorRegistry":
        registry = cls()
        for phase_id, spec in specs.items():
            registry.register(phase_id, load_object(spec))
        return registry

    def register(self, phase_id: int, orchestrator: Any) -> None:
        """Register an orchestrator (object with run_all, or a callable) for a phase.

        Raises:
            ConfigurationError: Unknown phase id or unusable orchestrator.
        """
        if phase_id not in PHASE_IDS:
            raise ConfigurationError(f"Unknown phase: {phase_id!r}", parameter="orchestrators",
                                     expected=list(PHASE_IDS), actual=phase_id)
        try:
            self._orchestrators[phase_id] = as_orchestrator(orchestrator)
        except TypeError as e:
            raise ConfigurationError(str(e), parameter="orchestrators", actual=repr(orchestrator),
                                     code=ErrorCode.CONFIG_ORCHESTRATOR_UNAVAILABLE) from e

    def unregister(self, phase_id: int) -> None:
        self._orchestrators.pop(phase_id, None)

    def get(self, phase_id: int) -> PhaseOrchestrator:
        """
        Raises:
            ConfigurationError: Nothing registered for the phase.
        """
        if phase_id not in self._orchestrators:
            raise ConfigurationError(format_error('ORCHESTRATOR_MISSING', phase_id=phase_id),
                                     parameter=f"orchestrators.{phase_id}",
                                     code=ErrorCode.CONFIG_ORCHESTRATOR_UNAVAILABLE)
        return self._orchestrators[phase_id]

    def is_registered(self, phase_id: int) -> bool:
        return phase_id in self._orchestrators

    def missing(self, phase_ids: List[int]) -> List[int]:
        return [p for p in phase_ids if p not in self._orchestrators]
