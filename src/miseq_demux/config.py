# src/miseq_demux/config.py
from __future__ import annotations
from pydantic import BaseModel, Field, field_validator
from pathlib import Path
from typing import Literal, Optional
import yaml

DEFAULT_MISMATCHES = 1
DEFAULT_SCORE_MIN = 16
DEFAULT_SCORE_MEAN = 16
MISMATCHES_LIMIT = 3
SCORE_LIMIT = 40

REPORT_NAME = "Demultiplex.log"

# sample ids become output file names
SAMPLE_ID_ALLOWED = r"^[A-Za-z0-9._-]+$"
UNDETERMINED = "Undetermined"
INDEX_ALPHABET = "ATCG"

Compress = Literal["none", "gzip", "bzip2"]


class DemuxOptions(BaseModel):
    samples_file: Path = Field(..., description="TSV with sample_id, index1, index2")
    mismatches_max: int = Field(DEFAULT_MISMATCHES, ge=0, le=MISMATCHES_LIMIT,
                                description="Max substitutions allowed per index")
    scores_min: int = Field(DEFAULT_SCORE_MIN, ge=0, le=SCORE_LIMIT,
                            description="Drop pair if any index position scores below this")
    scores_mean: int = Field(DEFAULT_SCORE_MEAN, ge=0, le=SCORE_LIMIT,
                             description="Drop pair if mean index score is below this")
    revcomp_index1: bool = False
    revcomp_index2: bool = False
    compress: Compress = "none"
    output_dir: Path = Field(default_factory=Path.cwd)
    progress_every: int = Field(1_000_000, gt=0, description="Log progress every N read pairs")

    @field_validator("compress", mode="before")
    @classmethod
    def _none_means_plain(cls, v):
        if v is None or v is False:
            return "none"
        return str(v).lower()

    @property
    def report_path(self) -> Path:
        return Path(self.output_dir) / REPORT_NAME

    @classmethod
    def from_yaml(cls, path: Optional[Path] = None, **overrides) -> "DemuxOptions":
        """Load options from a YAML mapping; non-None `overrides` win."""
        data = {}
        if path is not None:
            with open(path, "r") as fh:
                data = yaml.safe_load(fh) or {}
            if not isinstance(data, dict):
                raise ValueError(f"{path}: expected a YAML mapping of options")
        data.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**data)
