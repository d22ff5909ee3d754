"""
Artifact helpers: byte-level archive validation and atomic writes.
"""

from dcprecalc.artifacts.io_utils import atomic_write, atomic_write_json, read_head
from dcprecalc.artifacts.validator import (
    ArtifactClass,
    ArtifactInspection,
    ArtifactValidator,
    classify,
    inspect,
)

__all__ = [
    'ArtifactClass',
    'ArtifactInspection',
    'ArtifactValidator',
    'atomic_write',
    'atomic_write_json',
    'classify',
    'inspect',
    'read_head',
]
