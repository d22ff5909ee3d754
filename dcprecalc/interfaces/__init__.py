"""
Interfaces for external collaborators.
"""

from dcprecalc.interfaces.orchestrator import (
    CallableOrchestrator,
    PhaseOrchestrator,
    as_orchestrator,
)

__all__ = [
    'CallableOrchestrator',
    'PhaseOrchestrator',
    'as_orchestrator',
]
