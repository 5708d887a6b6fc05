"""Configuration model for the sheetlens pipeline.

Provides ``SheetLensConfig`` with all tunable parameters and sensible
defaults.  Supports loading overrides from YAML or JSON files via the
``from_file()`` classmethod.
"""

from __future__ import annotations

import json
import pathlib
from typing import Literal

import yaml
from pydantic import BaseModel


class SheetLensConfig(BaseModel):
    """All tunable parameters with sensible defaults.

    Override individual values via constructor kwargs or load a complete
    config from a file with ``SheetLensConfig.from_file(path)``.
    """

    # --- Upload gate ---
    accepted_extensions: list[str] = [".xlsx", ".xls", ".csv"]
    max_file_size_mb: int = 50

    # --- Decoding ---
    csv_encodings: list[str] = ["utf-8-sig", "cp1252"]
    csv_delimiter: str = ","
    csv_sheet_name: str = "Sheet1"
    max_rows_in_memory: int = 100_000

    # --- Profiling ---
    sample_size: int = 100
    column_universe: Literal["first_row", "union"] = "first_row"
    date_parser: Literal["dateutil", "iso"] = "dateutil"
    date_dayfirst: bool = False

    # --- Logging / PII safety ---
    log_sample_data: bool = False

    @classmethod
    def from_file(cls, path: str) -> SheetLensConfig:
        """Load configuration from a YAML or JSON file.

        File format is detected by extension: ``.yaml`` / ``.yml`` for YAML,
        ``.json`` for JSON.  Any keys present in the file override the
        corresponding defaults; keys not present retain their defaults.

        Raises:
            FileNotFoundError: If *path* does not exist.
            ValueError: If the file extension is not recognized.
        """
        file_path = pathlib.Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        suffix = file_path.suffix.lower()

        if suffix in (".yaml", ".yml"):
            with open(file_path) as fh:
                data = yaml.safe_load(fh)
        elif suffix == ".json":
            with open(file_path) as fh:
                data = json.load(fh)
        else:
            raise ValueError(
                f"Unsupported config file extension '{suffix}'. "
                "Use .yaml, .yml, or .json."
            )

        if data is None:
            data = {}

        return cls(**data)
