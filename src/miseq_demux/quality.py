# src/miseq_demux/quality.py
from __future__ import annotations
from typing import List

from miseq_demux.fastq import FastqRecord
from miseq_demux.status import RunStatus


def _mean(scores: List[int]) -> float:
    return sum(scores) / len(scores) if scores else 0.0


def _min(scores: List[int]) -> int:
    return min(scores) if scores else 0


class QualityGate:
    """
    Reject an index pair whose quality scores are too low.

    Means are checked for both indexes before minimums are checked for either:
    index1 mean, index2 mean, index1 min, index2 min. Only the first failing
    check is tallied on the RunStatus (in units of 2, one per read of the pair).
    """

    def __init__(self, scores_min: int, scores_mean: int):
        self.scores_min = scores_min
        self.scores_mean = scores_mean

    def accept(self, index1: FastqRecord, index2: FastqRecord, status: RunStatus) -> bool:
        scores1, scores2 = index1.scores, index2.scores
        if _mean(scores1) < self.scores_mean:
            status.index1_bad_mean += 2
            return False
        if _mean(scores2) < self.scores_mean:
            status.index2_bad_mean += 2
            return False
        if _min(scores1) < self.scores_min:
            status.index1_bad_min += 2
            return False
        if _min(scores2) < self.scores_min:
            status.index2_bad_min += 2
            return False
        return True
