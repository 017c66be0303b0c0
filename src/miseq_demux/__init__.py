"""miseq-demux: demultiplex MiSeq dual-index paired-end FASTQ files by sample."""

__version__ = "0.1.0"

from .barcodes import SearchIndex, expand_barcode
from .config import DemuxOptions
from .demultiplex import Demultiplexer
from .samples import Sample, read_samples
from .status import RunStatus

__all__ = [
    "DemuxOptions",
    "Demultiplexer",
    "RunStatus",
    "Sample",
    "SearchIndex",
    "expand_barcode",
    "read_samples",
]
