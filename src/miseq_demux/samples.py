# src/miseq_demux/samples.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple
import logging
import re

from miseq_demux.config import INDEX_ALPHABET, SAMPLE_ID_ALLOWED, UNDETERMINED
from miseq_demux.errors import SampleTableError

log = logging.getLogger(__name__)

_COMPLEMENT = str.maketrans("ATCGatcg", "TAGCtagc")
_ID_RE = re.compile(SAMPLE_ID_ALLOWED)
_INDEX_RE = re.compile(f"^[{INDEX_ALPHABET}]+$")


@dataclass(frozen=True)
class Sample:
    id: str
    index1: str
    index2: str


def reverse_complement(seq: str) -> str:
    """Reverse-complement a DNA index; symbols outside ATCG (e.g. N) are kept."""
    return seq.translate(_COMPLEMENT)[::-1]


def _parse_rows(path: Path) -> Tuple[List[Tuple[int, List[str]]], List[str]]:
    rows: List[Tuple[int, List[str]]] = []
    problems: List[str] = []
    with open(path, "r") as fh:
        for lineno, raw in enumerate(fh, start=1):
            line = raw.rstrip("\r\n")
            if not line.strip() or line.startswith("#"):
                continue
            cols = [c.strip() for c in line.split("\t")]
            if len(cols) != 3 or not all(cols):
                problems.append(f"line {lineno}: expected 3 tab-separated columns, got {line!r}")
                continue
            rows.append((lineno, cols))
    return rows, problems


def check_index_combos(samples: List[Sample]) -> List[str]:
    """Report every sample whose (index1, index2) pair was already taken."""
    problems: List[str] = []
    seen: Dict[Tuple[str, str], str] = {}
    for s in samples:
        key = (s.index1, s.index2)
        if key in seen:
            problems.append(f"Samples with same index combo\t{s.id}\t{seen[key]}")
        else:
            seen[key] = s.id
    return problems


def check_sample_ids(samples: List[Sample]) -> List[str]:
    """Ids must be usable as output file name prefixes inside output_dir."""
    problems: List[str] = []
    for s in samples:
        if not _ID_RE.match(s.id):
            problems.append(f"Sample id contains invalid characters (allowed: {SAMPLE_ID_ALLOWED})\t{s.id}")
        elif s.id == UNDETERMINED:
            problems.append(f"Sample id is reserved for unmatched reads\t{s.id}")
    return problems


def check_unique_ids(samples: List[Sample]) -> List[str]:
    problems: List[str] = []
    seen = set()
    for s in samples:
        if s.id in seen:
            problems.append(f"Non-unique sample id\t{s.id}")
        seen.add(s.id)
    return problems


def read_samples(
    path: Path | str,
    revcomp_index1: bool = False,
    revcomp_index2: bool = False,
) -> List[Sample]:
    """
    Parse a samples file of three tab-separated columns (sample_id, index1, index2),
    no header, into Sample objects in file order.

    Indexes are upper-cased, then reverse-complemented when requested. Problems
    (malformed rows, indexes outside ATCG, duplicate index combos, duplicate
    or unsafe ids) are collected over the whole file and raised together as a SampleTableError.
    """
    path = Path(path)
    rows, problems = _parse_rows(path)

    samples: List[Sample] = []
    for lineno, (sid, i1, i2) in rows:
        i1, i2 = i1.upper(), i2.upper()
        bad = [seq for seq in (i1, i2) if not _INDEX_RE.match(seq)]
        if bad:
            problems.append(f"line {lineno}: index not made of {INDEX_ALPHABET} only\t{sid}\t{', '.join(bad)}")
            continue
        if revcomp_index1:
            i1 = reverse_complement(i1)
        if revcomp_index2:
            i2 = reverse_complement(i2)
        samples.append(Sample(sid, i1, i2))

    problems.extend(check_index_combos(samples))
    problems.extend(check_unique_ids(samples))
    problems.extend(check_sample_ids(samples))
    if not samples and not problems:
        problems.append("no samples found")

    if problems:
        for p in problems:
            log.error("%s: %s", path, p)
        raise SampleTableError(path, problems)

    log.info("Loaded %d samples from %s", len(samples), path)
    return samples


def unique_index1(samples: List[Sample]) -> List[str]:
    return sorted({s.index1 for s in samples})


def unique_index2(samples: List[Sample]) -> List[str]:
    return sorted({s.index2 for s in samples})
