# src/miseq_demux/cli.py
from __future__ import annotations
from pathlib import Path
from typing import List, Optional
import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from miseq_demux.barcodes import SearchIndex
from miseq_demux.config import DemuxOptions
from miseq_demux.demultiplex import Demultiplexer
from miseq_demux.errors import DemuxError
from miseq_demux.samples import read_samples
from miseq_demux.status import RunStatus
from miseq_demux.utils.fs import ensure_dir
from miseq_demux.utils.logging import setup_logging

app = typer.Typer(add_completion=False, help="Demultiplex MiSeq dual-index paired-end FASTQ files")
console = Console()


@app.callback()
def _main(verbose: int = typer.Option(0, "-v", count=True, help="-v/-vv for more logs")):
    setup_logging(verbose)


def _fail(err: Exception) -> None:
    console.print(f"[red]Error[/]: {escape(str(err))}")
    raise typer.Exit(1)


def _status_table(status: RunStatus) -> Table:
    table = Table(title="Demultiplex status")
    table.add_column("Key")
    table.add_column("Value", justify="right")
    for key, value in status.to_dict().items():
        if isinstance(value, list):
            value = f"{len(value)} unique" if key != "sample_id" else f"{len(value)} samples"
        table.add_row(key, str(value))
    return table


@app.command()
def run(
    fastq_files: List[Path] = typer.Argument(..., exists=True, dir_okay=False, readable=True,
                                             help="I1, I2, R1 and R2 FASTQ files (any order)"),
    samples_file: Optional[Path] = typer.Option(None, "--samples-file", "-s", exists=True, dir_okay=False,
                                                help="TSV: sample_id, index1, index2 (no header)"),
    mismatches_max: Optional[int] = typer.Option(None, "--mismatches-max", "-m",
                                                 help="Max mismatches per index, 0-3 (default 1)"),
    scores_min: Optional[int] = typer.Option(None, help="Drop pairs with any index score below this (default 16)"),
    scores_mean: Optional[int] = typer.Option(None, help="Drop pairs with mean index score below this (default 16)"),
    revcomp_index1: bool = typer.Option(False, "--revcomp-index1", help="Reverse-complement index1"),
    revcomp_index2: bool = typer.Option(False, "--revcomp-index2", help="Reverse-complement index2"),
    compress: Optional[str] = typer.Option(None, "--compress", "-c", help="none|gzip|bzip2"),
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", "-o", help="Output directory (default: cwd)"),
    config: Optional[Path] = typer.Option(None, "--config", exists=True, dir_okay=False,
                                          help="YAML with any of the options above; flags win"),
):
    """Split the four input files into one FASTQ pair per sample plus Undetermined."""
    try:
        options = DemuxOptions.from_yaml(
            config,
            samples_file=samples_file,
            mismatches_max=mismatches_max,
            scores_min=scores_min,
            scores_mean=scores_mean,
            revcomp_index1=revcomp_index1 or None,
            revcomp_index2=revcomp_index2 or None,
            compress=compress,
            output_dir=output_dir,
        )
    except (ValidationError, ValueError, yaml.YAMLError) as e:
        _fail(e)

    ensure_dir(options.output_dir)
    try:
        status = Demultiplexer.run(fastq_files, options)
    except DemuxError as e:
        _fail(e)
    console.print(_status_table(status))
    console.print(f"[bold]Report[/]: {options.report_path}")


@app.command("check-samples")
def check_samples(
    samples_file: Path = typer.Argument(..., exists=True, dir_okay=False),
    mismatches_max: int = typer.Option(1, "--mismatches-max", "-m", min=0, max=3),
    revcomp_index1: bool = typer.Option(False, "--revcomp-index1"),
    revcomp_index2: bool = typer.Option(False, "--revcomp-index2"),
):
    """Validate a samples file and check that its indexes stay unambiguous."""
    try:
        samples = read_samples(samples_file, revcomp_index1, revcomp_index2)
        index = SearchIndex.build(samples, mismatches_max)
    except DemuxError as e:
        _fail(e)

    table = Table(title=f"{samples_file.name}: {len(samples)} samples")
    table.add_column("#", justify="right")
    table.add_column("Sample")
    table.add_column("Index1")
    table.add_column("Index2")
    for i, s in enumerate(samples):
        table.add_row(str(i), s.id, s.index1, s.index2)
    console.print(table)
    console.print(f"[green]OK[/]: {len(index)} index keys ({index.backend}) at mismatches_max={mismatches_max}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
