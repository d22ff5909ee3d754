"""
Shared pytest fixtures for dcprecalc tests.

These fixtures provide loggers, configurations and fake collaborators so
no test touches the network or a real simulation.
"""

import pytest

from dcprecalc.config import DatasetSettings, GAP_POLICY, PrecalcConfig
from dcprecalc.registry import OrchestratorRegistry
from tests.fixtures import (
    SAMPLE_DATES,
    MockLogger,
    StaticOrchestrator,
    make_phase1_raw,
    make_phase2_raw,
    make_phase3_raw,
    make_phase4_raw,
)


# =============================================================================
# Logger Fixtures
# =============================================================================

@pytest.fixture
def mock_logger():
    """
    Logger that captures messages per level.

    Usage:
        def test_something(mock_logger):
            some_function(logger=mock_logger)
            mock_logger.assert_logged('status', 'expected message')
    """
    return MockLogger()


# =============================================================================
# Configuration Fixtures
# =============================================================================

@pytest.fixture
def sample_dates():
    return list(SAMPLE_DATES)


@pytest.fixture
def results_dir(tmp_path):
    return tmp_path / "results"


@pytest.fixture
def make_config(tmp_path, results_dir):
    """
    Factory for PrecalcConfig pointing at temporary directories.

    Usage:
        config = make_config(phases=(1, 2), gap_policy=GAP_POLICY.STRICT)
    """
    def _make(**overrides):
        values = dict(
            dates=tuple(SAMPLE_DATES),
            results_dir=str(results_dir),
            dataset=DatasetSettings(
                dataset_dir=str(tmp_path / "dataset" / "planetlab"),
                archive_path=str(tmp_path / "dataset" / "planetlab.zip"),
            ),
            gap_policy=GAP_POLICY.SKIP,
            skip_dataset=True,
        )
        values.update(overrides)
        return PrecalcConfig(**values)
    return _make


# =============================================================================
# Orchestrator Fixtures
# =============================================================================

@pytest.fixture
def sample_orchestrators():
    """One StaticOrchestrator per phase with complete raw results."""
    return {
        1: StaticOrchestrator(make_phase1_raw()),
        2: StaticOrchestrator(make_phase2_raw()),
        3: StaticOrchestrator(make_phase3_raw()),
        4: StaticOrchestrator(make_phase4_raw()),
    }


@pytest.fixture
def registry(sample_orchestrators):
    registry = OrchestratorRegistry()
    for phase_id, orchestrator in sample_orchestrators.items():
        registry.register(phase_id, orchestrator)
    return registry
