# errors.py
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ScanError(Exception):
    """
    Structured error raised while collecting workflows, with enough context
    for clean CLI output without a traceback.
    """
    kind: str
    message: str
    path: str | None = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        if self.path:
            lines.append(f"path={self.path}")
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)
