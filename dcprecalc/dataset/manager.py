"""
Make sure the trace dataset is present before any phase runs.

Flow:
    1. Dataset directory already holds a folder per trace date -> nothing to do
    2. No download URL configured -> warn and carry on
    3. Download (validated), extract, re-check, delete the archive
"""

import enum
import os
from contextlib import suppress
from typing import Optional

from dcprecalc.config import DatasetSettings
from dcprecalc.dataset.acquirer import DatasetAcquirer
from dcprecalc.dataset.extract import ZipExtractor
from dcprecalc.error_messages import format_error
from dcprecalc.errors import ErrorCode, FileSystemError


class DatasetStatus(enum.Enum):
    PRESENT = "present"
    DOWNLOADED = "downloaded"
    UNAVAILABLE = "unavailable"


class DatasetManager:
    """
    Args:
        settings: Dataset paths and download URL.
        expected_dates: Number of date folders a complete dataset has.
        acquirer: DatasetAcquirer (built from settings when omitted).
        extractor: Object with ``extract(archive_path, dest_dir)``.
        logger: Logger for status messages.
    """

    def __init__(self, settings: DatasetSettings, expected_dates: int,
                 acquirer: Optional[DatasetAcquirer] = None, extractor=None, logger=None):
        self.settings = settings
        self.expected_dates = expected_dates
        self.logger = logger
        if acquirer is None:
            from dcprecalc.dataset.transport import HttpTransport
            acquirer = DatasetAcquirer(HttpTransport(timeout=settings.timeout, logger=logger), logger=logger)
        self.acquirer = acquirer
        self.extractor = extractor or ZipExtractor(logger=logger)

    def datasets_exist(self) -> bool:
        path = self.settings.dataset_dir
        if not os.path.isdir(path):
            return False
        date_folders = [item for item in os.listdir(path) if os.path.isdir(os.path.join(path, item))]
        return len(date_folders) >= self.expected_dates

    def cleanup_archive(self):
        with suppress(FileNotFoundError):
            os.unlink(self.settings.archive_path)
            if self.logger:
                self.logger.verbose(f"Removed archive {self.settings.archive_path}")

    def ensure_datasets(self) -> DatasetStatus:
        """
        Download and extract the dataset when it is missing.

        Returns:
            DatasetStatus telling whether anything was downloaded.

        Raises:
            TransportError, ArtifactValidationError, FileSystemError: see DatasetAcquirer.
            FileSystemError: The archive extracted but the date folders are still missing.
        """
        if self.logger:
            self.logger.status(f"Dataset path: {self.settings.dataset_dir}")

        if self.datasets_exist():
            if self.logger:
                self.logger.status("Datasets already exist. Skipping download.")
            return DatasetStatus.PRESENT

        if not self.settings.url:
            if self.logger:
                self.logger.warning(format_error('DATASET_URL_MISSING', path=self.settings.dataset_dir))
            return DatasetStatus.UNAVAILABLE

        try:
            artifact = self.acquirer.acquire(self.settings.url, self.settings.archive_path)
            extract_to = os.path.dirname(os.path.normpath(self.settings.dataset_dir)) or "."
            self.extractor.extract(artifact.path, extract_to)
            if not self.datasets_exist():
                raise FileSystemError(
                    "Extraction completed but datasets not found. Check the archive structure.",
                    path=self.settings.dataset_dir, operation="extract",
                    code=ErrorCode.FS_INVALID_STRUCTURE)
        finally:
            self.cleanup_archive()

        if self.logger:
            self.logger.status("Datasets downloaded and extracted successfully")
        return DatasetStatus.DOWNLOADED
