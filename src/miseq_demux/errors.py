# src/miseq_demux/errors.py
from __future__ import annotations
from typing import List


class DemuxError(Exception):
    """Base class for fatal demultiplexing errors."""


class SampleTableError(DemuxError, ValueError):
    """One or more problems found in the samples file.

    All problems are collected in a single pass and carried on `.problems`.
    """

    def __init__(self, path, problems: List[str]):
        self.path = path
        self.problems = list(problems)
        lines = "\n".join(f"  {p}" for p in self.problems)
        super().__init__(f"errors found in samples file {path}:\n{lines}")


class BarcodeCollisionError(DemuxError, ValueError):
    """Two samples claim the same (possibly mismatched) index combination."""


class FilenamePatternError(DemuxError, ValueError):
    """An input file name lacks the _S<n>_L<nnn>_R<n>_<nnn> pattern."""


class InputFilesError(DemuxError, ValueError):
    """The input FASTQ files do not form an I1/I2/R1/R2 set."""


class FastqFormatError(DemuxError, ValueError):
    """A FASTQ record is truncated or malformed."""
