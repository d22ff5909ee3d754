"""
Fake collaborators: orchestrators and a dataset transport.
"""

import copy
from typing import Any, Callable, Dict, List, Optional

from dcprecalc.artifacts.io_utils import atomic_write


class StaticOrchestrator:
    """Returns a fixed raw result and records every call."""

    def __init__(self, raw: Any):
        self.raw = raw
        self.calls: List[Dict[str, Any]] = []

    def run_all(self, dates, options):
        self.calls.append({"dates": list(dates), "options": dict(options)})
        return copy.deepcopy(self.raw)


class RaisingOrchestrator:
    """Raises on every call."""

    def __init__(self, exc: Optional[BaseException] = None):
        self.exc = exc or RuntimeError("simulation crashed")
        self.calls = 0

    def run_all(self, dates, options):
        self.calls += 1
        raise self.exc


class FakeTransport:
    """Writes a fixed payload to the destination, or raises.

    Args:
        payload: Bytes written on fetch.
        exc: Exception raised instead of writing.
        on_fetch: Optional hook called with (url, dest_path) before writing.
    """

    def __init__(self, payload: bytes = b"", exc: Optional[BaseException] = None,
                 on_fetch: Optional[Callable[[str, str], None]] = None):
        self.payload = payload
        self.exc = exc
        self.on_fetch = on_fetch
        self.calls: List[tuple] = []

    def fetch(self, url: str, dest_path: str) -> int:
        self.calls.append((url, dest_path))
        if self.on_fetch:
            self.on_fetch(url, dest_path)
        if self.exc is not None:
            raise self.exc
        return atomic_write(dest_path, [self.payload])
