from pathlib import Path
from typer.testing import CliRunner
import yaml

from miseq_demux.cli import app

runner = CliRunner()


def test_run_command(tmp_path: Path, samples_file, miseq_run):
    samples = samples_file("S1\tATCG\tGGTA\n")
    files = miseq_run([("ATCG", "GGTA"), ("GGGG", "CCCC")])
    out = tmp_path / "out"
    result = runner.invoke(app, ["run", *map(str, files), "-s", str(samples), "-o", str(out), "-c", "gzip"])
    assert result.exit_code == 0, result.output
    assert (out / "S1_S1_L001_R1_001.fastq.gz").exists()
    assert (out / "Undetermined_S1_L001_R2_001.fastq.gz").exists()
    report = yaml.safe_load((out / "Demultiplex.log").read_text())
    assert (report["match"], report["undetermined"]) == (2, 2)


def test_run_with_config_file(tmp_path: Path, samples_file, miseq_run):
    samples = samples_file("S1\tATCG\tGGTA\n")
    cfg = tmp_path / "demux.yaml"
    out = tmp_path / "cfg_out"
    cfg.write_text(f"samples_file: {samples}\noutput_dir: {out}\nmismatches_max: 0\n")
    files = miseq_run([("ATCC", "GGTA")])
    result = runner.invoke(app, ["run", *map(str, files), "--config", str(cfg)])
    assert result.exit_code == 0, result.output
    assert yaml.safe_load((out / "Demultiplex.log").read_text())["undetermined"] == 2


def test_run_rejects_bad_mismatches(tmp_path: Path, samples_file, miseq_run):
    samples = samples_file("S1\tATCG\tGGTA\n")
    files = miseq_run([("ATCG", "GGTA")])
    result = runner.invoke(app, ["run", *map(str, files), "-s", str(samples), "-m", "4", "-o", str(tmp_path / "o")])
    assert result.exit_code == 1
    assert not (tmp_path / "o").exists()


def test_run_reports_sample_errors(tmp_path: Path, samples_file, miseq_run):
    samples = samples_file("S1\tATCG\tGGTA\nS2\tATCG\tGGTA\n")
    files = miseq_run([("ATCG", "GGTA")])
    result = runner.invoke(app, ["run", *map(str, files), "-s", str(samples), "-o", str(tmp_path / "o")])
    assert result.exit_code == 1
    assert "same index combo" in result.output


def test_check_samples(samples_file):
    ok = runner.invoke(app, ["check-samples", str(samples_file("S1\tATCG\tGGTA\nS2\tTTAA\tCCGG\n"))])
    assert ok.exit_code == 0, ok.output
    assert "OK" in ok.output

    clash = runner.invoke(app, ["check-samples", str(samples_file("S1\tATCG\tGGTA\nS2\tATCC\tGGTA\n", "b.tsv"))])
    assert clash.exit_code == 1


def test_run_reports_bad_config_file(tmp_path: Path, miseq_run):
    files = miseq_run([("ATCG", "GGTA")])
    not_mapping = tmp_path / "list.yaml"
    not_mapping.write_text("- a\n- b\n")
    broken = tmp_path / "broken.yaml"
    broken.write_text("samples_file: [unclosed\n")
    for cfg in (not_mapping, broken):
        result = runner.invoke(app, ["run", *map(str, files), "--config", str(cfg)])
        assert result.exit_code == 1
        assert "Error" in result.output
        assert not isinstance(result.exception, (ValueError, yaml.YAMLError))
