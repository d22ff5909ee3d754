"""Byte-level validation of the downloaded dataset archive.

File-sharing hosts often answer a download request with HTTP 200 and an HTML
confirmation page instead of the file. The transfer looks successful, so only
the leading bytes tell the two apart:

* ``VALID``: starts with the ZIP signature ``PK`` and holds no HTML markers.
* ``DECEPTIVE_HTML``: ``<html`` or ``<!DOCTYPE`` within the first 200 bytes,
  whatever the first two bytes are.
* ``UNRECOGNIZED``: anything else.
* ``TRUNCATED``: fewer than 4 bytes, or the path cannot be read.
"""

import enum
from dataclasses import dataclass
from typing import Any, Optional

from dcprecalc.artifacts.io_utils import read_head

ZIP_MAGIC = b"\x50\x4b"
MIN_ARTIFACT_BYTES = 4
PREVIEW_BYTES = 200
HTML_MARKERS = ("<html", "<!DOCTYPE")


class ArtifactClass(enum.Enum):
    VALID = "valid"
    DECEPTIVE_HTML = "deceptive_html"
    UNRECOGNIZED = "unrecognized"
    TRUNCATED = "truncated"


@dataclass(frozen=True)
class ArtifactInspection:
    """What the validator saw in the leading bytes."""
    classification: ArtifactClass
    head_size: int
    preview: str = ""
    reason: str = ""

    @property
    def is_valid(self) -> bool:
        return self.classification is ArtifactClass.VALID


def _preview_text(head: bytes) -> str:
    return head[:PREVIEW_BYTES].decode("utf-8", errors="replace")


def inspect(source: Any) -> ArtifactInspection:
    """Inspect a path, byte buffer or binary file object.

    Only reads; the artifact is never moved or deleted.
    """
    try:
        head = read_head(source, PREVIEW_BYTES)
    except OSError as e:
        return ArtifactInspection(ArtifactClass.TRUNCATED, 0, reason=f"unreadable: {e}")

    if len(head) < MIN_ARTIFACT_BYTES:
        return ArtifactInspection(ArtifactClass.TRUNCATED, len(head), preview=_preview_text(head),
                                  reason=f"only {len(head)} byte(s) available")

    preview = _preview_text(head)
    for marker in HTML_MARKERS:
        if marker in preview:
            return ArtifactInspection(ArtifactClass.DECEPTIVE_HTML, len(head), preview=preview,
                                      reason=f"found {marker!r} in leading bytes")

    if head[:len(ZIP_MAGIC)] == ZIP_MAGIC:
        return ArtifactInspection(ArtifactClass.VALID, len(head))

    return ArtifactInspection(ArtifactClass.UNRECOGNIZED, len(head), preview=preview,
                              reason=f"leading bytes {head[:4].hex()} are not a ZIP signature")


def classify(source: Any) -> ArtifactClass:
    return inspect(source).classification


class ArtifactValidator:
    """Object form of :func:`inspect` for injection into the acquirer."""

    def __init__(self, logger: Optional[Any] = None):
        self.logger = logger

    def inspect(self, source: Any) -> ArtifactInspection:
        result = inspect(source)
        if self.logger is not None:
            if result.is_valid:
                self.logger.verbose(f"Artifact is a valid archive ({result.head_size} leading bytes checked)")
            else:
                self.logger.warning(f"Artifact rejected as {result.classification.value}: {result.reason}")
                if result.preview:
                    self.logger.debug(f"Artifact preview: {result.preview!r}")
        return result

    def classify(self, source: Any) -> ArtifactClass:
        return self.inspect(source).classification
