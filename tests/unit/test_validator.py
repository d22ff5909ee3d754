"""
Tests for dcprecalc.artifacts.validator.

Tests cover:
- Classification of ZIP, HTML, unknown and short payloads
- HTML markers taking precedence over the ZIP signature
- Paths, buffers and file objects as sources
- ArtifactValidator logging
"""

import io

import pytest

from dcprecalc.artifacts.validator import (
    ArtifactClass,
    ArtifactValidator,
    PREVIEW_BYTES,
    classify,
    inspect,
)
from tests.fixtures import HTML_INTERSTITIAL, make_zip_bytes


class TestClassify:
    """Tests for classify() over byte buffers."""

    @pytest.mark.parametrize("payload,expected", [
        (b"PK\x03\x04" + b"\x00" * 100, ArtifactClass.VALID),
        (HTML_INTERSTITIAL, ArtifactClass.DECEPTIVE_HTML),
        (b"<html><body>quota exceeded</body></html>", ArtifactClass.DECEPTIVE_HTML),
        (b"\x1f\x8b\x08\x00 not a zip", ArtifactClass.UNRECOGNIZED),
        (b"PK", ArtifactClass.TRUNCATED),
        (b"", ArtifactClass.TRUNCATED),
    ])
    def test_classification(self, payload, expected):
        assert classify(payload) == expected

    def test_real_zip_is_valid(self):
        assert classify(make_zip_bytes(["20110303"])) == ArtifactClass.VALID

    def test_html_marker_beats_zip_signature(self):
        """A PK prefix followed by HTML is still a web page."""
        payload = b"PK" + b" " * 20 + b"<!DOCTYPE html>"
        assert classify(payload) == ArtifactClass.DECEPTIVE_HTML

    def test_html_markers_are_case_sensitive(self):
        payload = b"PK\x03\x04<HTML><!doctype html>"
        assert classify(payload) == ArtifactClass.VALID

    def test_marker_beyond_preview_window_is_ignored(self):
        payload = b"PK\x03\x04" + b"\x00" * PREVIEW_BYTES + b"<html>"
        assert classify(payload) == ArtifactClass.VALID

    def test_invalid_utf8_does_not_raise(self):
        payload = b"\xff\xfe\xfd\xfc\xfb<html>"
        assert classify(payload) == ArtifactClass.DECEPTIVE_HTML


class TestInspectSources:
    """Tests for inspect() with different source types."""

    def test_path(self, tmp_path):
        path = tmp_path / "archive.zip"
        path.write_bytes(make_zip_bytes(["20110303"]))
        result = inspect(str(path))
        assert result.is_valid
        assert result.head_size > 0

    def test_missing_path_is_truncated(self, tmp_path):
        result = inspect(str(tmp_path / "missing.zip"))
        assert result.classification == ArtifactClass.TRUNCATED
        assert "unreadable" in result.reason

    def test_file_object_position_restored(self):
        handle = io.BytesIO(HTML_INTERSTITIAL)
        handle.seek(0)
        result = inspect(handle)
        assert result.classification == ArtifactClass.DECEPTIVE_HTML
        assert handle.tell() == 0

    def test_preview_holds_leading_text(self):
        result = inspect(HTML_INTERSTITIAL)
        assert result.preview.startswith("<!DOCTYPE html>")
        assert len(result.preview) <= PREVIEW_BYTES

    def test_unrecognized_reason_mentions_signature(self):
        result = inspect(b"\x00\x01\x02\x03\x04")
        assert result.classification == ArtifactClass.UNRECOGNIZED
        assert "00010203" in result.reason

    def test_inspection_has_no_side_effects(self, tmp_path):
        path = tmp_path / "page.html"
        path.write_bytes(HTML_INTERSTITIAL)
        inspect(str(path))
        assert path.read_bytes() == HTML_INTERSTITIAL


class TestArtifactValidator:
    """Tests for the injectable ArtifactValidator."""

    def test_logs_rejection(self, mock_logger):
        validator = ArtifactValidator(logger=mock_logger)
        assert validator.classify(HTML_INTERSTITIAL) == ArtifactClass.DECEPTIVE_HTML
        mock_logger.assert_logged('warning', 'deceptive_html')

    def test_logs_valid_archive_at_verbose(self, mock_logger):
        validator = ArtifactValidator(logger=mock_logger)
        assert validator.inspect(b"PK\x03\x04data").is_valid
        mock_logger.assert_logged('verbose', 'valid archive')
        assert mock_logger.call_count['warning'] == 0
