"""
Trace dataset acquisition: download, validate, extract.
"""

from dcprecalc.dataset.acquirer import DatasetAcquirer, DownloadArtifact
from dcprecalc.dataset.extract import ZipExtractor
from dcprecalc.dataset.manager import DatasetManager, DatasetStatus

__all__ = [
    'DatasetAcquirer',
    'DatasetManager',
    'DatasetStatus',
    'DownloadArtifact',
    'ZipExtractor',
]
