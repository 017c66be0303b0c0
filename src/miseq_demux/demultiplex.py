# src/miseq_demux/demultiplex.py
from __future__ import annotations
from pathlib import Path
from typing import Sequence
import logging

from miseq_demux.barcodes import SearchIndex
from miseq_demux.config import DemuxOptions
from miseq_demux.fastq import FastqRecord, write_fastq
from miseq_demux.quality import QualityGate
from miseq_demux.samples import read_samples, unique_index1, unique_index2
from miseq_demux.status import RunStatus
from miseq_demux.streams import DataIO, identify_input_files

log = logging.getLogger(__name__)


class Demultiplexer:
    """
    Split MiSeq I1/I2/R1/R2 FASTQ files into one read pair per sample.

    All configuration checks (options, samples file, index collisions, input
    file names) happen in the constructor, before any output file is opened.
    """

    def __init__(self, fastq_files: Sequence[Path | str], options: DemuxOptions):
        self.options = options
        self.samples = read_samples(options.samples_file, options.revcomp_index1, options.revcomp_index2)
        self.index = SearchIndex.build(self.samples, options.mismatches_max)
        self.gate = QualityGate(options.scores_min, options.scores_mean)
        self.data_io = DataIO(self.samples, identify_input_files(fastq_files),
                              options.compress, options.output_dir)
        self.undetermined = len(self.samples)
        self.status = RunStatus(
            sample_id=[s.id for s in self.samples],
            index1=unique_index1(self.samples),
            index2=unique_index2(self.samples),
        )

    @classmethod
    def run(cls, fastq_files: Sequence[Path | str], options: DemuxOptions) -> RunStatus:
        """Demultiplex, then save the run report to `output_dir/Demultiplex.log`."""
        demultiplexer = cls(fastq_files, options)
        demultiplexer.demultiplex()
        demultiplexer.status.save(options.report_path)
        log.info("Wrote report %s", options.report_path)
        return demultiplexer.status

    def demultiplex(self) -> RunStatus:
        """
        Read one record from each input file at a time. Quads whose indexes fail
        the quality gate are only counted; the rest are routed to the matching
        sample, or to Undetermined with the observed indexes appended to the
        read names.
        """
        status = self.status
        every = 2 * self.options.progress_every
        with self.data_io.open_input_files() as ios_in:
            with self.data_io.open_output_files() as ios_out:
                for index1, index2, read1, read2 in ios_in.quads():
                    status.count += 2
                    if status.count % every == 0:
                        log.info("Processed %d reads, %d matched, %.1f%% undetermined",
                                 status.count, status.match, status.undetermined_percent)

                    if not self.gate.accept(index1, index2, status):
                        continue

                    self._match_index(ios_out, index1, index2, read1, read2)

        log.info("Done: %d reads, %d matched, %d undetermined, %d quality rejected",
                 status.count, status.match, status.undetermined, status.rejected)
        return status

    def _match_index(self, ios_out: DataIO, index1: FastqRecord, index2: FastqRecord,
                     read1: FastqRecord, read2: FastqRecord) -> None:
        ordinal = self.index.find(index1.sequence, index2.sequence)
        if ordinal is None:
            self._write_undetermined(ios_out, index1, index2, read1, read2)
        else:
            self._write_match(ios_out, ordinal, read1, read2)

    def _write_match(self, ios_out: DataIO, ordinal: int, read1: FastqRecord, read2: FastqRecord) -> None:
        self.status.match += 2
        io_forward, io_reverse = ios_out[ordinal]
        write_fastq(io_forward, read1)
        write_fastq(io_reverse, read2)

    def _write_undetermined(self, ios_out: DataIO, index1: FastqRecord, index2: FastqRecord,
                            read1: FastqRecord, read2: FastqRecord) -> None:
        self.status.undetermined += 2
        read1.name = f"{read1.name} {index1.sequence}"
        read2.name = f"{read2.name} {index2.sequence}"
        io_forward, io_reverse = ios_out[self.undetermined]
        write_fastq(io_forward, read1)
        write_fastq(io_reverse, read2)
