"""
Dataset archive acquisition.

The acquirer owns the contract "a successful acquire() means a genuine
archive is on disk". The byte transfer itself is delegated to a transport
(HttpTransport by default) and the result is checked by the ArtifactValidator
before success is reported.
"""

import os
from contextlib import suppress
from dataclasses import dataclass
from typing import Optional, Protocol

from dcprecalc.artifacts.validator import ArtifactClass, ArtifactValidator
from dcprecalc.errors import ArtifactValidationError, ErrorCode, FileSystemError, PrecalcException

VALIDATION_CODES = {
    ArtifactClass.DECEPTIVE_HTML: ErrorCode.ARTIFACT_DECEPTIVE_HTML,
    ArtifactClass.UNRECOGNIZED: ErrorCode.ARTIFACT_UNRECOGNIZED,
    ArtifactClass.TRUNCATED: ErrorCode.ARTIFACT_TRUNCATED,
}

VALIDATION_MESSAGES = {
    ArtifactClass.DECEPTIVE_HTML: "Downloaded file is an HTML page, not the archive",
    ArtifactClass.UNRECOGNIZED: "Downloaded file is not a ZIP archive",
    ArtifactClass.TRUNCATED: "Downloaded file is empty or truncated",
}


class Transport(Protocol):
    def fetch(self, url: str, dest_path: str) -> int:
        ...


@dataclass(frozen=True)
class DownloadArtifact:
    path: str
    size: int
    classification: ArtifactClass


class DatasetAcquirer:
    """
    Fetch the dataset archive and refuse anything that is not a real archive.

    Args:
        transport: Object with ``fetch(url, dest_path) -> int``. Defaults to HttpTransport.
        validator: ArtifactValidator used on the fetched file.
        logger: Logger for status messages.
    """

    def __init__(self, transport: Optional[Transport] = None,
                 validator: Optional[ArtifactValidator] = None, logger=None):
        if transport is None:
            from dcprecalc.dataset.transport import HttpTransport
            transport = HttpTransport(logger=logger)
        self.transport = transport
        self.validator = validator or ArtifactValidator(logger=logger)
        self.logger = logger

    def acquire(self, source_url: str, dest_path: str) -> DownloadArtifact:
        """
        Download ``source_url`` to ``dest_path`` and validate it.

        Re-running with the same dest_path replaces whatever is there.

        Returns:
            DownloadArtifact describing the validated archive.

        Raises:
            TransportError: The transfer failed (retry the download).
            FileSystemError: The destination could not be written (fix disk/permissions).
            ArtifactValidationError: The bytes are not an archive (fix the source URL).
        """
        dest_dir = os.path.dirname(dest_path)
        try:
            if dest_dir:
                os.makedirs(dest_dir, exist_ok=True)
            size = self.transport.fetch(source_url, dest_path)
        except PrecalcException:
            raise
        except OSError as e:
            raise FileSystemError.from_os_error(e, dest_path, "write") from e

        inspection = self.validator.inspect(dest_path)
        if not inspection.is_valid:
            with suppress(FileNotFoundError):
                os.unlink(dest_path)
            raise ArtifactValidationError(
                VALIDATION_MESSAGES[inspection.classification],
                path=dest_path,
                classification=inspection.classification,
                preview=inspection.preview,
                code=VALIDATION_CODES[inspection.classification],
            )

        if self.logger:
            self.logger.status(f"Archive validated: {dest_path} ({size} bytes)")
        return DownloadArtifact(path=dest_path, size=size, classification=inspection.classification)
