# src/miseq_demux/status.py
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List
import time
import yaml

from miseq_demux.utils.fs import atomic_write_text


@dataclass
class RunStatus:
    """
    Counters for one demultiplexing run.

    Every counter moves in steps of 2: each quad stands for a forward and a
    reverse read. After a run, count == match + undetermined + rejected.
    """
    count: int = 0
    match: int = 0
    undetermined: int = 0
    index1_bad_mean: int = 0
    index2_bad_mean: int = 0
    index1_bad_min: int = 0
    index2_bad_min: int = 0
    sample_id: List[str] = field(default_factory=list)
    index1: List[str] = field(default_factory=list)
    index2: List[str] = field(default_factory=list)
    time_start: float = field(default_factory=time.monotonic, repr=False)

    @property
    def rejected(self) -> int:
        return self.index1_bad_mean + self.index2_bad_mean + self.index1_bad_min + self.index2_bad_min

    @property
    def undetermined_percent(self) -> float:
        if self.count == 0:
            return 0.0
        return round(100 * self.undetermined / self.count, 1)

    @property
    def time(self) -> str:
        """Elapsed wall-clock time as HH:MM:SS."""
        elapsed = int(time.monotonic() - self.time_start)
        hours, rest = divmod(elapsed, 3600)
        minutes, seconds = divmod(rest, 60)
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "match": self.match,
            "undetermined": self.undetermined,
            "undetermined_percent": self.undetermined_percent,
            "index1_bad_mean": self.index1_bad_mean,
            "index2_bad_mean": self.index2_bad_mean,
            "index1_bad_min": self.index1_bad_min,
            "index2_bad_min": self.index2_bad_min,
            "time": self.time,
            "sample_id": list(self.sample_id),
            "index1": list(self.index1),
            "index2": list(self.index2),
        }

    def __str__(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=False, default_flow_style=False)

    def save(self, path: Path) -> None:
        atomic_write_text(Path(path), str(self))
