"""Run-wide counters reported at the end of a purge."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any


@dataclass
class RunStats:
    """Aggregate counters for one purge run.

    Counters only ever increase. ``finish()`` freezes the elapsed time so the
    summary can be rendered more than once with the same numbers.
    """

    folders_visited: int = 0
    files_scanned: int = 0
    files_without_versions: int = 0
    versions_removed: int = 0
    errors: int = 0
    started_at: float = field(default_factory=time.monotonic)
    elapsed_seconds: float | None = None

    def finish(self) -> float:
        """Record and return the elapsed time; later calls keep the first value."""
        if self.elapsed_seconds is None:
            self.elapsed_seconds = time.monotonic() - self.started_at
        return self.elapsed_seconds

    def as_dict(self) -> dict[str, Any]:
        elapsed = (
            self.elapsed_seconds
            if self.elapsed_seconds is not None
            else time.monotonic() - self.started_at
        )
        return {
            "folders_visited": self.folders_visited,
            "files_scanned": self.files_scanned,
            "files_without_versions": self.files_without_versions,
            "versions_removed": self.versions_removed,
            "errors": self.errors,
            "elapsed_seconds": round(elapsed, 2),
        }

    def summary_lines(self) -> list[str]:
        data = self.as_dict()
        return [
            f"Folders visited:         {data['folders_visited']}",
            f"Files scanned:           {data['files_scanned']}",
            f"Files without versions:  {data['files_without_versions']}",
            f"Versions removed:        {data['versions_removed']}",
            f"Errors:                  {data['errors']}",
            f"Elapsed:                 {data['elapsed_seconds']:.2f}s",
        ]
