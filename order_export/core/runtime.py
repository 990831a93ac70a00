"""
Generic runtime utilities used across the export pipeline.

This module contains only small, infrastructure-level helpers that:
- do NOT belong to CSV reading or writing
- do NOT belong to transform logic
- do NOT belong to completion logic

Functions included:
- log_event: timestamped console line, mirrored to an optional logfile
- load_env: minimal .env key=value loader
"""

import os
from datetime import datetime
from typing import Dict, Optional


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
def log_event(logfile_path: Optional[str], message: str) -> None:
    """
    Print a timestamped log message and append it to the logfile.

    The console line is always printed. Logfile failures must never
    interrupt the pipeline, so they are silently ignored.
    """
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    line = f"{timestamp} {message}"
    print(line, flush=True)

    if not logfile_path:
        return

    try:
        with open(logfile_path, "a", encoding="utf-8") as f:
            f.write(f"{line}\n")
    except OSError:
        # Logging failures must never break the pipeline
        pass


# ---------------------------------------------------------------------------
# Minimal .env loader
# ---------------------------------------------------------------------------
def load_env(path: str) -> Dict[str, str]:
    """
    Load a minimal .env file containing simple KEY=VALUE pairs.

    - Lines starting with '#' are ignored.
    - Empty lines are ignored.
    - No quoting, no type conversion, no nesting.
    - Returns a dict with string keys and string values.
    - A missing file yields an empty dict.
    """
    config: Dict[str, str] = {}

    if not os.path.exists(path):
        return config

    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                key, value = line.split("=", 1)
                config[key.strip()] = value.strip()

    return config
