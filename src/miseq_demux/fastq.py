# src/miseq_demux/fastq.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Iterator, List, Optional
import bz2, gzip, io

from miseq_demux.errors import FastqFormatError

PHRED_OFFSET = 33


@dataclass
class FastqRecord:
    name: str
    sequence: str
    quality: str

    @property
    def scores(self) -> List[int]:
        """Per-base Phred scores (Sanger / Illumina 1.8+ encoding)."""
        return [ord(c) - PHRED_OFFSET for c in self.quality]

    def to_fastq(self) -> str:
        return f"@{self.name}\n{self.sequence}\n+\n{self.quality}\n"


def open_fastq(path: Path | str, mode: str = "r", compress: Optional[str] = None) -> IO[str]:
    """
    Open a FASTQ file as text.

    Reading picks the codec from the suffix (.gz, .bz2, else plain). Writing uses
    `compress` ('gzip', 'bzip2' or None/'none'); gzip members are written with
    mtime=0 so identical content gives identical bytes.
    """
    path = str(path)
    if mode == "r":
        if path.endswith(".gz"):
            return gzip.open(path, "rt")
        if path.endswith(".bz2"):
            return bz2.open(path, "rt")
        return open(path, "r")
    if mode == "w":
        if compress == "gzip":
            return io.TextIOWrapper(gzip.GzipFile(path, "wb", mtime=0), newline="\n")
        if compress == "bzip2":
            return bz2.open(path, "wt", newline="\n")
        return open(path, "w", newline="\n")
    raise ValueError(f"Unsupported mode: {mode}")


def read_fastq(fh: IO[str], source: str = "<stream>") -> Iterator[FastqRecord]:
    """Stream FastqRecords from an open text handle."""
    lineno = 0
    while True:
        header = fh.readline()
        if not header:
            return
        lineno += 1
        if not header.strip():
            continue
        seq = fh.readline(); plus = fh.readline(); qual = fh.readline()
        if not qual:
            raise FastqFormatError(f"{source}: truncated record at line {lineno}")
        header = header.rstrip("\r\n"); seq = seq.rstrip("\r\n")
        plus = plus.rstrip("\r\n"); qual = qual.rstrip("\r\n")
        if not header.startswith("@") or not plus.startswith("+"):
            raise FastqFormatError(f"{source}: malformed record at line {lineno}: {header!r}")
        if len(seq) != len(qual):
            raise FastqFormatError(
                f"{source}: sequence/quality length differ at line {lineno}: {len(seq)} != {len(qual)}"
            )
        lineno += 3
        yield FastqRecord(header[1:], seq, qual)


def write_fastq(fh: IO[str], record: FastqRecord) -> None:
    fh.write(record.to_fastq())
