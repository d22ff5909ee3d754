"""
Custom exceptions for the precalculation pipeline.

Every failure the pipeline can report belongs to one ErrorKind, so callers
(the batch driver, tests) can branch on the kind instead of parsing messages:

- CONFIGURATION: invalid or missing settings, unloadable orchestrators
- TRANSPORT: the dataset archive could not be fetched
- VALIDATION: fetched bytes are not the expected archive
- COLLABORATOR: a phase orchestrator failed for some date
- AGGREGATION_GAP: a date is missing metric values and the gap policy is strict
- FILESYSTEM: reading or writing local files failed

Each exception carries a PrecalcError with a machine-readable code, the
message, technical details and a suggestion.
"""

import errno
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List


class ErrorKind(Enum):
    CONFIGURATION = "configuration"
    TRANSPORT = "transport"
    VALIDATION = "validation"
    COLLABORATOR = "collaborator"
    AGGREGATION_GAP = "aggregation_gap"
    FILESYSTEM = "filesystem"
    INTERNAL = "internal"


class ErrorCode(Enum):
    """Machine-readable error codes."""
    # Configuration errors (1xx)
    CONFIG_MISSING_REQUIRED = "E101"
    CONFIG_INVALID_VALUE = "E102"
    CONFIG_FILE_NOT_FOUND = "E103"
    CONFIG_PARSE_ERROR = "E104"
    CONFIG_ORCHESTRATOR_UNAVAILABLE = "E105"

    # Transport errors (2xx)
    TRANSPORT_CONNECTION = "E201"
    TRANSPORT_TIMEOUT = "E202"
    TRANSPORT_HTTP_STATUS = "E203"
    TRANSPORT_TOO_MANY_REDIRECTS = "E204"

    # Artifact validation errors (3xx)
    ARTIFACT_DECEPTIVE_HTML = "E301"
    ARTIFACT_UNRECOGNIZED = "E302"
    ARTIFACT_TRUNCATED = "E303"

    # Collaborator errors (4xx)
    COLLABORATOR_RAISED = "E401"
    COLLABORATOR_DATE_FAILED = "E402"
    COLLABORATOR_BAD_RESULT = "E403"

    # Aggregation errors (5xx)
    AGGREGATION_GAP = "E501"

    # File system errors (6xx)
    FS_PATH_NOT_FOUND = "E601"
    FS_PERMISSION_DENIED = "E602"
    FS_DISK_FULL = "E603"
    FS_WRITE_FAILED = "E604"
    FS_INVALID_STRUCTURE = "E605"

    # Internal errors (9xx)
    INTERNAL_ERROR = "E901"


@dataclass
class PrecalcError:
    """
    Structured error information.

    Attributes:
        code: Machine-readable error code.
        message: User-facing error message.
        details: Technical details for debugging.
        suggestion: How to fix the issue.
        context: Additional context information.
    """
    code: ErrorCode
    message: str
    details: str = ""
    suggestion: str = ""
    context: dict = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"[{self.code.value}] {self.message}"]
        if self.details:
            lines.append(f"  Details: {self.details}")
        if self.suggestion:
            lines.append(f"  Suggestion: {self.suggestion}")
        return "\n".join(lines)


class PrecalcException(Exception):
    """
    Base exception class for the pipeline.

    Subclasses set KIND so the driver can classify a failure without
    inspecting the message.
    """

    KIND = ErrorKind.INTERNAL

    def __init__(self, message: str, code: ErrorCode = ErrorCode.INTERNAL_ERROR,
                 details: str = "", suggestion: str = "", **context):
        self.error = PrecalcError(
            code=code,
            message=message,
            details=details,
            suggestion=suggestion,
            context=context
        )
        super().__init__(str(self.error))

    @property
    def code(self) -> ErrorCode:
        return self.error.code

    @property
    def kind(self) -> ErrorKind:
        return self.KIND

    @property
    def message(self) -> str:
        return self.error.message

    @property
    def suggestion(self) -> str:
        return self.error.suggestion


class ConfigurationError(PrecalcException):
    """
    Raised when configuration is invalid or missing.

    Examples:
        - Malformed or duplicate trace date
        - Unknown phase id or gap policy
        - Orchestrator import spec that cannot be loaded
    """

    KIND = ErrorKind.CONFIGURATION

    def __init__(self, message: str, parameter: str = None,
                 expected: Any = None, actual: Any = None,
                 suggestion: str = None,
                 code: ErrorCode = ErrorCode.CONFIG_INVALID_VALUE):
        details_parts = []
        if parameter:
            details_parts.append(f"Parameter: {parameter}")
        if expected is not None:
            details_parts.append(f"Expected: {expected}")
        if actual is not None:
            details_parts.append(f"Actual: {actual}")

        super().__init__(
            message=message,
            code=code,
            details="; ".join(details_parts),
            suggestion=suggestion or self._default_suggestion(code),
            parameter=parameter,
            expected=expected,
            actual=actual
        )

    @staticmethod
    def _default_suggestion(code: ErrorCode) -> str:
        suggestions = {
            ErrorCode.CONFIG_MISSING_REQUIRED: "Add the missing setting to the config file",
            ErrorCode.CONFIG_INVALID_VALUE: "Check the setting value and correct it",
            ErrorCode.CONFIG_FILE_NOT_FOUND: "Verify the config file path exists",
            ErrorCode.CONFIG_PARSE_ERROR: "Check config file syntax (YAML format)",
            ErrorCode.CONFIG_ORCHESTRATOR_UNAVAILABLE: (
                "Set orchestrators.<phase> to an importable 'module:attribute' spec"
            ),
        }
        return suggestions.get(code, "Check the configuration and try again")


class TransportError(PrecalcException):
    """
    Raised when the dataset archive could not be fetched.

    Not retried automatically; remediation is to retry the transfer.
    """

    KIND = ErrorKind.TRANSPORT

    def __init__(self, message: str, url: str = None, status_code: int = None,
                 cause: str = None, suggestion: str = None,
                 code: ErrorCode = ErrorCode.TRANSPORT_CONNECTION):
        details_parts = []
        if url:
            details_parts.append(f"URL: {url}")
        if status_code is not None:
            details_parts.append(f"HTTP status: {status_code}")
        if cause:
            details_parts.append(f"Cause: {cause}")

        super().__init__(
            message=message,
            code=code,
            details="; ".join(details_parts),
            suggestion=suggestion or self._default_suggestion(code),
            url=url,
            status_code=status_code,
        )

    @staticmethod
    def _default_suggestion(code: ErrorCode) -> str:
        suggestions = {
            ErrorCode.TRANSPORT_CONNECTION: "Check network connectivity and DNS, then retry",
            ErrorCode.TRANSPORT_TIMEOUT: "Retry, or raise dataset.timeout in the config",
            ErrorCode.TRANSPORT_HTTP_STATUS: "Verify the download URL is still shared and reachable",
            ErrorCode.TRANSPORT_TOO_MANY_REDIRECTS: "Use a direct download link for the archive",
        }
        return suggestions.get(code, "Retry the download")


class ArtifactValidationError(PrecalcException):
    """
    Raised when downloaded bytes are not a valid archive.

    The transfer itself succeeded, so retrying rarely helps: the source URL
    usually points at an interstitial page instead of the file.
    """

    KIND = ErrorKind.VALIDATION

    def __init__(self, message: str, path: str = None, classification: Any = None,
                 preview: str = None, suggestion: str = None,
                 code: ErrorCode = ErrorCode.ARTIFACT_UNRECOGNIZED):
        details_parts = []
        if path:
            details_parts.append(f"Path: {path}")
        if classification is not None:
            details_parts.append(f"Classification: {getattr(classification, 'value', classification)}")
        if preview:
            preview_display = preview[:100] + "..." if len(preview) > 100 else preview
            details_parts.append(f"Preview: {preview_display!r}")

        super().__init__(
            message=message,
            code=code,
            details="; ".join(details_parts),
            suggestion=suggestion or self._default_suggestion(code),
            path=path,
            classification=classification,
            preview=preview,
        )

    @property
    def classification(self):
        return self.error.context.get("classification")

    @staticmethod
    def _default_suggestion(code: ErrorCode) -> str:
        suggestions = {
            ErrorCode.ARTIFACT_DECEPTIVE_HTML: (
                "The host returned a web page instead of the archive; "
                "fix the source URL (use a direct download link)"
            ),
            ErrorCode.ARTIFACT_UNRECOGNIZED: "Verify the source URL points at a ZIP archive",
            ErrorCode.ARTIFACT_TRUNCATED: "The download is empty or cut short; retry the transfer",
        }
        return suggestions.get(code, "Check the downloaded file")


class CollaboratorError(PrecalcException):
    """
    Raised when a phase orchestrator fails.

    Aborts the phase's aggregation entirely; no document is written for it.
    """

    KIND = ErrorKind.COLLABORATOR

    def __init__(self, message: str, phase_id: int = None, dates: List[str] = None,
                 cause: str = None, suggestion: str = None,
                 code: ErrorCode = ErrorCode.COLLABORATOR_RAISED):
        details_parts = []
        if phase_id is not None:
            details_parts.append(f"Phase: {phase_id}")
        if dates:
            details_parts.append(f"Dates: {', '.join(dates)}")
        if cause:
            cause_display = cause[:500] + "..." if len(cause) > 500 else cause
            details_parts.append(f"Cause: {cause_display}")

        super().__init__(
            message=message,
            code=code,
            details="; ".join(details_parts),
            suggestion=suggestion or "Check the orchestrator logs for the failing dates",
            phase_id=phase_id,
            dates=dates,
        )


class AggregationGapError(PrecalcException):
    """
    Raised under the strict gap policy when dates are missing metric values.
    """

    KIND = ErrorKind.AGGREGATION_GAP

    def __init__(self, message: str, phase_id: int = None, missing: List[str] = None,
                 suggestion: str = None, code: ErrorCode = ErrorCode.AGGREGATION_GAP):
        details_parts = []
        if phase_id is not None:
            details_parts.append(f"Phase: {phase_id}")
        if missing:
            details_parts.append(f"Missing: {', '.join(missing)}")

        super().__init__(
            message=message,
            code=code,
            details="; ".join(details_parts),
            suggestion=suggestion or "Re-run the phase, or use gap_policy: skip to accept partial results",
            phase_id=phase_id,
            missing=missing,
        )


class FileSystemError(PrecalcException):
    """
    Raised when file system operations fail.

    Examples:
        - Results directory cannot be created
        - Disk full while writing an artifact
        - Extracted dataset does not have the expected structure
    """

    KIND = ErrorKind.FILESYSTEM

    def __init__(self, message: str, path: str = None,
                 operation: str = None, suggestion: str = None,
                 code: ErrorCode = ErrorCode.FS_WRITE_FAILED):
        details_parts = []
        if path:
            details_parts.append(f"Path: {path}")
        if operation:
            details_parts.append(f"Operation: {operation}")

        super().__init__(
            message=message,
            code=code,
            details="; ".join(details_parts),
            suggestion=suggestion or self._default_suggestion(code),
            path=path,
            operation=operation
        )

    @staticmethod
    def _default_suggestion(code: ErrorCode) -> str:
        suggestions = {
            ErrorCode.FS_PATH_NOT_FOUND: "Verify the path exists and is accessible",
            ErrorCode.FS_PERMISSION_DENIED: "Check file/directory permissions",
            ErrorCode.FS_DISK_FULL: "Free up disk space or use a different location",
            ErrorCode.FS_WRITE_FAILED: "Check that the destination is writable",
            ErrorCode.FS_INVALID_STRUCTURE: "Check the archive layout (one folder per trace date)",
        }
        return suggestions.get(code, "Check file system and try again")

    @classmethod
    def from_os_error(cls, exc: OSError, path: str, operation: str) -> "FileSystemError":
        """Map an OSError to the matching error code."""
        if exc.errno == errno.ENOSPC:
            code = ErrorCode.FS_DISK_FULL
        elif exc.errno in (errno.EACCES, errno.EPERM):
            code = ErrorCode.FS_PERMISSION_DENIED
        elif exc.errno == errno.ENOENT:
            code = ErrorCode.FS_PATH_NOT_FOUND
        else:
            code = ErrorCode.FS_WRITE_FAILED
        return cls(f"Failed to {operation} {path}: {exc.strerror or exc}", path=path,
                   operation=operation, code=code)
