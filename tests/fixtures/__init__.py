"""
Test fixtures package for dcprecalc tests.

Reusable fakes for the pipeline's collaborators and sample raw results.
"""

from tests.fixtures.fakes import FakeTransport, RaisingOrchestrator, StaticOrchestrator
from tests.fixtures.mock_logger import MockLogger
from tests.fixtures.sample_data import (
    HTML_INTERSTITIAL,
    PHASE1_ALGORITHMS,
    PHASE2_ALGORITHMS,
    SAMPLE_DATES,
    make_phase1_raw,
    make_phase2_raw,
    make_phase3_raw,
    make_phase3_record,
    make_phase4_raw,
    make_phase4_record,
    make_zip_bytes,
)

__all__ = [
    'FakeTransport',
    'MockLogger',
    'RaisingOrchestrator',
    'StaticOrchestrator',
    'HTML_INTERSTITIAL',
    'PHASE1_ALGORITHMS',
    'PHASE2_ALGORITHMS',
    'SAMPLE_DATES',
    'make_phase1_raw',
    'make_phase2_raw',
    'make_phase3_raw',
    'make_phase3_record',
    'make_phase4_raw',
    'make_phase4_record',
    'make_zip_bytes',
]
