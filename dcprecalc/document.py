"""
The per-phase result artifact.

Serialized form (JSON, 2-space indent):

    {
      "success": true,
      "results": {metric: {algorithm: {date: number}}},
      "algorithms": [...],
      "dates": [...],
      "generatedAt": "2011-03-03T12:00:00.000Z"
    }

Documents are written once per run and replaced atomically; a reader never
sees a half-written file.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List

from dcprecalc.artifacts.io_utils import atomic_write_json
from dcprecalc.errors import ErrorCode, FileSystemError


@dataclass(frozen=True)
class CanonicalResultDocument:
    success: bool
    results: Dict[str, Dict[str, Dict[str, Any]]] = field(default_factory=dict)
    algorithms: List[str] = field(default_factory=list)
    dates: List[str] = field(default_factory=list)
    generated_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "results": self.results,
            "algorithms": list(self.algorithms),
            "dates": list(self.dates),
            "generatedAt": self.generated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CanonicalResultDocument":
        return cls(
            success=bool(data.get("success", False)),
            results=data.get("results") or {},
            algorithms=list(data.get("algorithms") or []),
            dates=list(data.get("dates") or []),
            generated_at=data.get("generatedAt", ""),
        )

    def content_equals(self, other: "CanonicalResultDocument") -> bool:
        """Compare everything except ``generatedAt``."""
        return (self.success == other.success and self.results == other.results
                and list(self.algorithms) == list(other.algorithms) and list(self.dates) == list(other.dates))

    def write(self, path: str) -> int:
        """Atomically write the document to ``path``.

        Raises:
            FileSystemError: The file or its directory cannot be written.
        """
        try:
            return atomic_write_json(path, self.to_dict(), indent=2)
        except OSError as e:
            raise FileSystemError.from_os_error(e, path, "write") from e

    @classmethod
    def load(cls, path: str) -> "CanonicalResultDocument":
        """
        Raises:
            FileSystemError: Missing, unreadable or malformed file.
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise FileSystemError.from_os_error(e, path, "read") from e
        except json.JSONDecodeError as e:
            raise FileSystemError(f"Invalid result document {path}: {e}", path=path, operation="read",
                                  code=ErrorCode.FS_INVALID_STRUCTURE) from e
        if not isinstance(data, dict):
            raise FileSystemError(f"Invalid result document {path}: not a JSON object", path=path,
                                  operation="read", code=ErrorCode.FS_INVALID_STRUCTURE)
        return cls.from_dict(data)
