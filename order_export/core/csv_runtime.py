"""
CSV runtime helpers:
- Path construction for a single pipeline run
- Pipeline config loading
- CSV loading
- CSV writing onto the output header

This module contains all file-facing runtime infrastructure.
Nothing more, nothing less.
"""

import csv
import os
import yaml
from typing import Any, Dict, List, Optional

from order_export.core.csv_model import HeaderColumn, map_row, output_titles, parse_header_mapping
from order_export.core.errors import ConfigError, CsvFormatError, CsvIOError
from order_export.core.transform import (
    DEFAULT_COUNTRY_FIELD,
    DEFAULT_COUNTRY_VALUE,
    DEFAULT_NAME_FIELD,
    DEFAULT_TRUNCATE_FIELD,
    DEFAULT_TRUNCATE_LENGTH,
)


# ---------------------------------------------------------------------------
# Prepare paths
# ---------------------------------------------------------------------------
def build_paths(input_file: str, output_file: str, run_timestamp: str) -> Dict[str, str]:
    """
    Construct all file paths for a single pipeline run.

    The temporary output lives next to the final output so the commit in
    completion.finalize is a same-filesystem os.replace.
    """
    output_csv = os.path.abspath(output_file)
    output_dir = os.path.dirname(output_csv)

    return {
        "input_csv": os.path.abspath(input_file),
        "output_csv": output_csv,
        "output_dir": output_dir,
        "temp_output_csv": os.path.join(
            output_dir,
            f".{os.path.basename(output_csv)}.{run_timestamp}.tmp",
        ),
    }


# ---------------------------------------------------------------------------
# Load pipeline config
# ---------------------------------------------------------------------------
def load_pipeline_config(
    config_path: str,
    overrides: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """
    Load the YAML pipeline configuration.

    `overrides` holds values from app.env (INPUT_FILE, OUTPUT_FILE, LOGFILE);
    when present they win over the YAML file.

    Returns a dict with keys:
        input_file, output_file, logfile, transforms, header_mapping

    Raises:
        ConfigError: if the file is missing, unparsable, or incomplete.
    """
    overrides = overrides or {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {config_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config file {config_path} is not valid YAML: {exc}") from exc

    if not isinstance(cfg, dict):
        raise ConfigError(f"Config file {config_path} must contain a map.")

    input_file = overrides.get("INPUT_FILE") or cfg.get("input_file")
    output_file = overrides.get("OUTPUT_FILE") or cfg.get("output_file")
    logfile = overrides.get("LOGFILE") or cfg.get("logfile")

    if not input_file:
        raise ConfigError("Config has no 'input_file'.")
    if not output_file:
        raise ConfigError("Config has no 'output_file'.")

    transforms_cfg = cfg.get("transforms") or {}
    if not isinstance(transforms_cfg, dict):
        raise ConfigError("Config 'transforms' must be a map.")

    transforms = {
        "truncate_field": transforms_cfg.get("truncate_field", DEFAULT_TRUNCATE_FIELD),
        "truncate_length": transforms_cfg.get("truncate_length", DEFAULT_TRUNCATE_LENGTH),
        "name_field": transforms_cfg.get("name_field", DEFAULT_NAME_FIELD),
        "country_field": transforms_cfg.get("country_field", DEFAULT_COUNTRY_FIELD),
        "country_value": transforms_cfg.get("country_value", DEFAULT_COUNTRY_VALUE),
    }

    for key in ("truncate_field", "name_field", "country_field", "country_value"):
        value = transforms[key]
        if not isinstance(value, str) or not value:
            raise ConfigError(f"transforms.{key} must be a non-empty string, got {value!r}.")

    length = transforms["truncate_length"]
    if isinstance(length, bool) or not isinstance(length, int) or length < 0:
        raise ConfigError(f"transforms.truncate_length must be a non-negative integer, got {length!r}.")

    return {
        "input_file": str(input_file),
        "output_file": str(output_file),
        "logfile": str(logfile) if logfile else None,
        "transforms": transforms,
        "header_mapping": parse_header_mapping(cfg.get("header")),
    }


# ---------------------------------------------------------------------------
# Load CSV
# ---------------------------------------------------------------------------
def load_csv_rows(csv_file_path: str) -> List[Dict[str, str]]:
    """
    Load CSV rows into a list of dictionaries keyed by the header row.

    - UTF-8, a leading BOM is stripped
    - comma delimited, values kept as raw strings
    - blank lines are skipped
    - a row whose field count differs from the header is rejected

    Raises:
        CsvIOError: if the file is missing or unreadable.
        CsvFormatError: for an empty file, duplicate header names,
            a field-count mismatch, or undecodable content.
    """
    rows: List[Dict[str, str]] = []

    try:
        with open(csv_file_path, "r", encoding="utf-8-sig", newline="") as f:
            reader = csv.reader(f)

            header = next(reader, None)
            if not header:
                raise CsvFormatError(f"{csv_file_path} has no header row.")

            duplicates = sorted({name for name in header if header.count(name) > 1})
            if duplicates:
                raise CsvFormatError(f"{csv_file_path} has duplicate header columns: {duplicates}")

            for values in reader:
                if not values:
                    continue

                if len(values) != len(header):
                    raise CsvFormatError(
                        f"{csv_file_path} line {reader.line_num}: "
                        f"expected {len(header)} fields, found {len(values)}."
                    )

                rows.append(dict(zip(header, values)))

    except OSError as exc:
        raise CsvIOError(f"Cannot read {csv_file_path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise CsvFormatError(f"{csv_file_path} is not valid UTF-8: {exc}") from exc
    except csv.Error as exc:
        raise CsvFormatError(f"{csv_file_path} is not valid CSV: {exc}") from exc

    return rows


# ---------------------------------------------------------------------------
# Write output CSV
# ---------------------------------------------------------------------------
def write_output_csv(
    rows: List[Dict[str, Optional[str]]],
    header_mapping: List[HeaderColumn],
    path: str,
) -> None:
    """
    Write the record set onto the output header. Every field is quoted.

    Raises:
        CsvIOError: if the file cannot be created or written.
    """
    try:
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f, quoting=csv.QUOTE_ALL, lineterminator="\n")
            writer.writerow(output_titles(header_mapping))
            for row in rows:
                writer.writerow(map_row(row, header_mapping))
    except OSError as exc:
        raise CsvIOError(f"Cannot write {path}: {exc}") from exc
