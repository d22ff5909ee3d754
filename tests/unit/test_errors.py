"""
Tests for dcprecalc.errors, dcprecalc.error_messages and dcprecalc.outcomes.
"""

import errno

import pytest

from dcprecalc.error_messages import ErrorFormatter, format_error
from dcprecalc.errors import (
    AggregationGapError,
    ArtifactValidationError,
    CollaboratorError,
    ConfigurationError,
    ErrorCode,
    ErrorKind,
    FileSystemError,
    PrecalcException,
    TransportError,
)
from dcprecalc.outcomes import PipelineReport, TaskOutcome


class TestExceptionKinds:

    @pytest.mark.parametrize("exc_class,kind", [
        (ConfigurationError, ErrorKind.CONFIGURATION),
        (TransportError, ErrorKind.TRANSPORT),
        (ArtifactValidationError, ErrorKind.VALIDATION),
        (CollaboratorError, ErrorKind.COLLABORATOR),
        (AggregationGapError, ErrorKind.AGGREGATION_GAP),
        (FileSystemError, ErrorKind.FILESYSTEM),
    ])
    def test_kind(self, exc_class, kind):
        error = exc_class("something failed")
        assert isinstance(error, PrecalcException)
        assert error.kind == kind
        assert error.suggestion

    def test_str_includes_code_details_and_suggestion(self):
        error = ConfigurationError("Bad date", parameter="dates", expected="YYYYMMDD", actual="2011")
        text = str(error)
        assert text.startswith("[E102] Bad date")
        assert "Parameter: dates" in text
        assert "Suggestion:" in text

    def test_transport_details(self):
        error = TransportError("Failed", url="https://example.org", status_code=503,
                               code=ErrorCode.TRANSPORT_HTTP_STATUS)
        assert "HTTP status: 503" in str(error)
        assert error.error.context["status_code"] == 503


class TestFileSystemErrorFromOSError:

    @pytest.mark.parametrize("err,code", [
        (errno.ENOSPC, ErrorCode.FS_DISK_FULL),
        (errno.EACCES, ErrorCode.FS_PERMISSION_DENIED),
        (errno.EPERM, ErrorCode.FS_PERMISSION_DENIED),
        (errno.ENOENT, ErrorCode.FS_PATH_NOT_FOUND),
        (errno.EIO, ErrorCode.FS_WRITE_FAILED),
    ])
    def test_errno_mapping(self, err, code):
        error = FileSystemError.from_os_error(OSError(err, "boom"), "/tmp/x", "write")
        assert error.code == code
        assert "/tmp/x" in error.message


class TestMessages:

    def test_format_phase_failed(self):
        text = format_error('PHASE_FAILED', phase_id=2, kind="collaborator", error="boom")
        assert "Phase 2 failed (collaborator)" in text

    def test_unknown_key(self):
        assert format_error('NOT_A_KEY', a=1).startswith("Unknown error: NOT_A_KEY")

    def test_missing_parameter(self):
        assert "Missing format parameter" in format_error('PHASE_FAILED', phase_id=1)

    def test_banner_without_colors(self):
        banner = ErrorFormatter(use_colors=False).format_banner("Phase 1 results saved", {"Dates": 10})
        lines = banner.splitlines()
        assert lines[0] == ErrorFormatter.RULE
        assert lines[1] == "Phase 1 results saved"
        assert "Dates: 10" in lines[2]


class TestOutcomes:

    def test_failure_kind_from_precalc_exception(self):
        outcome = TaskOutcome.failure("phase1", 0.5, CollaboratorError("x"))
        assert not outcome.ok
        assert outcome.error_kind == ErrorKind.COLLABORATOR

    def test_failure_kind_from_os_error(self):
        assert TaskOutcome.failure("phase1", 0.1, PermissionError("x")).error_kind == ErrorKind.FILESYSTEM

    def test_failure_kind_internal(self):
        assert TaskOutcome.failure("phase1", 0.1, ZeroDivisionError()).error_kind == ErrorKind.INTERNAL

    def test_report_totals(self):
        report = PipelineReport(success=True, durations={"phase1": 1.5, "phase2": 2.0},
                                outcomes=[TaskOutcome.success("phase1", 1.5), TaskOutcome.success("phase2", 2.0)])
        assert report.total_duration == 3.5
        assert report.completed_tasks == ["phase1", "phase2"]
        assert report.as_dict()["error_kind"] is None
