"""Optional timing of service actions.

A recorder is handed to ``MatchService`` explicitly; nothing here is global.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, List


@dataclass
class TimingEntry:
    label: str
    duration_ms: float


@dataclass
class PerfRecorder:
    entries: List[TimingEntry] = field(default_factory=list)

    @contextmanager
    def timer(self, label: str) -> Iterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            self.entries.append(TimingEntry(label, (time.perf_counter() - start) * 1000.0))

    def report(self) -> Dict[str, Dict[str, float]]:
        """Total and call count per label."""
        summary: Dict[str, Dict[str, float]] = {}
        for entry in self.entries:
            bucket = summary.setdefault(entry.label, {"total_ms": 0.0, "count": 0})
            bucket["total_ms"] += entry.duration_ms
            bucket["count"] += 1
        return summary

    def reset(self) -> None:
        self.entries.clear()


class NullRecorder:
    @contextmanager
    def timer(self, label: str) -> Iterator[None]:
        yield
