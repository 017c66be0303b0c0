# src/miseq_demux/streams.py
from __future__ import annotations
from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import Dict, IO, Iterator, List, NamedTuple, Optional, Sequence, Tuple
import logging
import re

from miseq_demux.config import UNDETERMINED
from miseq_demux.errors import FilenamePatternError, InputFilesError
from miseq_demux.fastq import FastqRecord, open_fastq, read_fastq
from miseq_demux.samples import Sample

log = logging.getLogger(__name__)

# sample number, lane, read, set: e.g. Data_S1_L001_R1_001.fastq.gz -> _S1_L001_R1_001
_SUFFIX_RE = re.compile(r"(_S\d+_L\d{3}_R[12]_\d{3})")

_EXTENSIONS = {"none": ".fastq", "gzip": ".fastq.gz", "bzip2": ".fastq.bz2"}


class InputFiles(NamedTuple):
    index1: Path
    index2: Path
    read1: Path
    read2: Path


def identify_input_files(fastq_files: Sequence[Path | str]) -> InputFiles:
    """Assign four paths to I1, I2, R1, R2 by their _I1_/_I2_/_R1_/_R2_ tags."""
    if len(fastq_files) != 4:
        raise InputFilesError(f"Expected 4 input files - not {len(fastq_files)}")
    found: Dict[str, List[Path]] = {tag: [] for tag in ("_I1_", "_I2_", "_R1_", "_R2_")}
    for f in map(Path, fastq_files):
        for tag, hits in found.items():
            if tag in f.name:
                hits.append(f)
    problems = [
        f"{tag!r} matched {len(hits)} files: {', '.join(map(str, hits)) or '-'}"
        for tag, hits in found.items() if len(hits) != 1
    ]
    if problems:
        raise InputFilesError("Cannot identify I1/I2/R1/R2 input files; " + "; ".join(problems))
    return InputFiles(*(found[tag][0] for tag in ("_I1_", "_I2_", "_R1_", "_R2_")))


def fastq_extension(compress: Optional[str]) -> str:
    try:
        return _EXTENSIONS[compress or "none"]
    except KeyError:
        raise ValueError(f"Bad compress mode: {compress!r} (expected one of {', '.join(_EXTENSIONS)})")


def extract_suffix(path: Path | str, compress: Optional[str] = None) -> str:
    """
    '_S1_L001_R1_001' part of a MiSeq file name plus the output extension.

    >>> extract_suffix("Data_S1_L001_R1_001.fastq.gz", "gzip")
    '_S1_L001_R1_001.fastq.gz'
    """
    name = Path(path).name
    m = _SUFFIX_RE.search(name)
    if not m:
        raise FilenamePatternError(f"Unable to parse file SLR from: {name}")
    return m.group(1) + fastq_extension(compress)


class DataIO:
    """
    Owns the four input streams and the 2 x (N + 1) output streams of a run.

    Output slots 0..N-1 belong to the samples in table order, slot N to the
    Undetermined pair. Names are derived once, here, so a bad input file name
    fails before anything is opened.
    """

    def __init__(self, samples: List[Sample], input_files: InputFiles, compress: Optional[str], output_dir: Path):
        self.samples = samples
        self.input_files = input_files
        self.compress = compress or "none"
        self.output_dir = Path(output_dir)
        self.suffix1 = extract_suffix(input_files.read1, self.compress)
        self.suffix2 = extract_suffix(input_files.read2, self.compress)
        self.undetermined = len(samples)
        self._streams: List[Iterator[FastqRecord]] = []
        self._outputs: Dict[int, Tuple[IO[str], IO[str]]] = {}

    def output_paths(self) -> Dict[int, Tuple[Path, Path]]:
        names = [s.id for s in self.samples] + [UNDETERMINED]
        return {
            i: (self.output_dir / f"{name}{self.suffix1}", self.output_dir / f"{name}{self.suffix2}")
            for i, name in enumerate(names)
        }

    @contextmanager
    def open_input_files(self):
        with ExitStack() as stack:
            self._streams = []
            for path in self.input_files:
                fh = stack.enter_context(open_fastq(path, "r"))
                self._streams.append(read_fastq(fh, source=str(path)))
                log.debug("Opened input %s", path)
            try:
                yield self
            finally:
                self._streams = []

    @contextmanager
    def open_output_files(self):
        with ExitStack() as stack:
            self._outputs = {}
            for i, (fwd, rev) in self.output_paths().items():
                self._outputs[i] = (
                    stack.enter_context(open_fastq(fwd, "w", self.compress)),
                    stack.enter_context(open_fastq(rev, "w", self.compress)),
                )
            log.info("Opened %d output files in %s", 2 * len(self._outputs), self.output_dir)
            try:
                yield self
            finally:
                self._outputs = {}

    def __getitem__(self, ordinal: int) -> Tuple[IO[str], IO[str]]:
        return self._outputs[ordinal]

    def quads(self) -> Iterator[Tuple[FastqRecord, FastqRecord, FastqRecord, FastqRecord]]:
        """
        Yield (index1, index2, read1, read2) in lockstep; stop as soon as any
        stream runs out, so unequal files are cut at the shortest one.
        """
        while True:
            entries = [next(stream, None) for stream in self._streams]
            if any(e is None for e in entries):
                dry = [str(p) for p, e in zip(self.input_files, entries) if e is None]
                if len(dry) != len(entries):
                    log.debug("Input streams ended unevenly; stopped at end of %s", ", ".join(dry))
                return
            yield tuple(entries)
