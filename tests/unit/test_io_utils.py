"""
Tests for dcprecalc.artifacts.io_utils.
"""

import json
import os

import pytest

from dcprecalc.artifacts.io_utils import (
    TEMP_PREFIX,
    atomic_write,
    atomic_write_json,
    read_head,
)


class TestAtomicWrite:

    def test_writes_chunks_and_returns_size(self, tmp_path):
        dest = tmp_path / "out.bin"
        written = atomic_write(dest, [b"abc", b"", b"def"])
        assert written == 6
        assert dest.read_bytes() == b"abcdef"

    def test_creates_parent_directories(self, tmp_path):
        dest = tmp_path / "a" / "b" / "out.bin"
        atomic_write(dest, [b"x"])
        assert dest.exists()

    def test_replaces_existing_file(self, tmp_path):
        dest = tmp_path / "out.bin"
        dest.write_bytes(b"old content that is longer")
        atomic_write(dest, [b"new"])
        assert dest.read_bytes() == b"new"

    def test_failure_keeps_previous_file_and_no_temp(self, tmp_path):
        dest = tmp_path / "out.bin"
        dest.write_bytes(b"previous")

        def failing_chunks():
            yield b"partial"
            raise ConnectionError("reset")

        with pytest.raises(ConnectionError):
            atomic_write(dest, failing_chunks())

        assert dest.read_bytes() == b"previous"
        assert not [name for name in os.listdir(tmp_path) if name.startswith(TEMP_PREFIX)]

    def test_json_uses_two_space_indent(self, tmp_path):
        dest = tmp_path / "doc.json"
        atomic_write_json(dest, {"success": True, "dates": ["20110303"]})
        text = dest.read_text()
        assert text.startswith('{\n  "success": true')
        assert json.loads(text)["dates"] == ["20110303"]


class TestReadHead:

    def test_bytes(self):
        assert read_head(b"abcdef", 3) == b"abc"

    def test_memoryview(self):
        assert read_head(memoryview(b"abcdef"), 2) == b"ab"

    def test_path(self, tmp_path):
        path = tmp_path / "f"
        path.write_bytes(b"hello")
        assert read_head(path, 10) == b"hello"

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            read_head(12345, 4)
