"""Shared fixtures for order export tests."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from tests.fixture_data import HEADER, SAMPLE_CSV


@pytest.fixture
def sample_csv(tmp_path: Path) -> Path:
    """Order report with two US rows sharing a buyer and one Canadian row."""
    path = tmp_path / "input.csv"
    path.write_text(SAMPLE_CSV, encoding="utf-8")
    return path


@pytest.fixture
def write_config(tmp_path: Path):
    """Write a pipeline YAML config and return its path."""

    def _write(input_file: Path, output_file: Path, **extra) -> Path:
        cfg = {
            "input_file": str(input_file),
            "output_file": str(output_file),
            "header": HEADER,
        }
        cfg.update(extra)
        path = tmp_path / "pipeline.yaml"
        path.write_text(yaml.safe_dump(cfg), encoding="utf-8")
        return path

    return _write
