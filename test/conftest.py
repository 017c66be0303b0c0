"""
Shared fixtures: tiny MiSeq-style runs written to tmp_path.
"""
from pathlib import Path
from typing import List, Optional, Tuple
import pytest

GOOD = "I"  # Phred 40
BAD = "#"   # Phred 2


def fastq_text(records: List[Tuple[str, str, str]]) -> str:
    return "".join(f"@{name}\n{seq}\n+\n{qual}\n" for name, seq, qual in records)


@pytest.fixture
def samples_file(tmp_path: Path):
    def _write(text: str, name: str = "samples.tsv") -> Path:
        p = tmp_path / name
        p.write_text(text)
        return p
    return _write


@pytest.fixture
def miseq_run(tmp_path: Path):
    """
    Write I1/I2/R1/R2 files for a list of quads.

    Each quad is (index1, index2) or (index1, index2, qual1, qual2); reads are
    named read<N> and carry fixed sequences.
    """
    def _write(quads, prefix: str = "Data", lengths: Optional[dict] = None) -> List[Path]:
        raw = tmp_path / "raw"
        raw.mkdir(exist_ok=True)
        recs = {"I1": [], "I2": [], "R1": [], "R2": []}
        for n, q in enumerate(quads, start=1):
            i1, i2 = q[0], q[1]
            q1 = q[2] if len(q) > 2 else GOOD * len(i1)
            q2 = q[3] if len(q) > 3 else GOOD * len(i2)
            recs["I1"].append((f"read{n} 1:N:0:1", i1, q1))
            recs["I2"].append((f"read{n} 2:N:0:1", i2, q2))
            recs["R1"].append((f"read{n} 1:N:0:1", "ACGTACGTAC", GOOD * 10))
            recs["R2"].append((f"read{n} 2:N:0:1", "TTGGCCAATT", GOOD * 10))
        paths = []
        for tag in ("I1", "I2", "R1", "R2"):
            keep = recs[tag] if not lengths or tag not in lengths else recs[tag][: lengths[tag]]
            p = raw / f"{prefix}_S1_L001_{tag}_001.fastq"
            p.write_text(fastq_text(keep))
            paths.append(p)
        return paths
    return _write
