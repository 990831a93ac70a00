"""
Completion module:
Handles ALL end-of-processing operations:
- Committing the temporary output to its final path
- Discarding the temporary output of a failed run
- Final log + exit

This module is the single exit path for the entire processing flow.
"""

import os
import sys
from typing import Any, Dict

from order_export.core.errors import (
    ConfigError,
    CsvFormatError,
    CsvIOError,
    FieldMissingError,
    FieldTypeError,
    PipelineError,
)

EXIT_SUCCESS = 0
EXIT_DATA_ERROR = 65
EXIT_IO_ERROR = 74
EXIT_CONFIG_ERROR = 78
EXIT_UNEXPECTED_ERROR = 99


# ---------------------------------------------------------------------------
# Error classification
# ---------------------------------------------------------------------------
def exit_code_for(error: BaseException) -> int:
    """Map a pipeline error onto a sysexits-style status code."""
    if isinstance(error, ConfigError):
        return EXIT_CONFIG_ERROR
    if isinstance(error, CsvIOError):
        return EXIT_IO_ERROR
    if isinstance(error, (CsvFormatError, FieldMissingError, FieldTypeError)):
        return EXIT_DATA_ERROR
    return EXIT_UNEXPECTED_ERROR


def describe_failure(error: PipelineError) -> str:
    """One-line failure message naming the stage that failed."""
    stage = error.stage or "unknown"
    return f"STAGE '{stage}' FAILED ({type(error).__name__}): {error}"


# ---------------------------------------------------------------------------
# Temporary output handling
# ---------------------------------------------------------------------------
def discard_temp_output(context: Dict[str, Any]) -> None:
    """Remove the temporary output file, if one was started."""
    temp_output_csv = context.get("paths", {}).get("temp_output_csv")
    if temp_output_csv and os.path.exists(temp_output_csv):
        try:
            os.remove(temp_output_csv)
        except OSError as exc:
            context["log_event"](context["logfile_path"], f"[CLEANUP ERROR] {exc}")


def commit_output(context: Dict[str, Any]) -> None:
    """Atomically move the temporary output onto the final output path."""
    paths = context["paths"]
    try:
        os.replace(paths["temp_output_csv"], paths["output_csv"])
    except OSError as exc:
        raise CsvIOError(f"Cannot move output into place at {paths['output_csv']}: {exc}", stage="write") from exc


# ---------------------------------------------------------------------------
# Finalization
# ---------------------------------------------------------------------------
def finalize(context: Dict[str, Any], exit_code: int, outcome: str, message: str) -> None:
    """
    Perform all end-of-processing operations, then exit.

    On success the temporary output is committed. On any other outcome it is
    discarded, so a failed run never leaves a partial output file behind.
    This is the ONLY exit path for the entire processing flow.
    """
    log_event = context["log_event"]
    logfile_path = context["logfile_path"]

    if exit_code == EXIT_SUCCESS:
        try:
            commit_output(context)
        except CsvIOError as exc:
            discard_temp_output(context)
            log_event(logfile_path, f"[error] {describe_failure(exc)}")
            sys.exit(EXIT_IO_ERROR)
    else:
        discard_temp_output(context)

    log_event(logfile_path, f"[{outcome}] {message}")
    sys.exit(exit_code)
