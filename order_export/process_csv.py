#!/usr/bin/env python3
import os
import sys
import traceback
from datetime import datetime
from typing import Any, Dict, List, Optional

from order_export.core.csv_runtime import (
    build_paths,
    load_csv_rows,
    load_pipeline_config,
    write_output_csv,
)
from order_export.core.errors import PipelineError
from order_export.core.runtime import load_env, log_event
from order_export.core.transform import build_stages, run_transforms
import order_export.core.completion as completion


# -------------------------------------------------------------------------
# Directory configuration
# -------------------------------------------------------------------------
BASE_DIR: str = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
CONFIG_DIR: str = os.path.join(BASE_DIR, "config")
DEFAULT_CONFIG_PATH: str = os.path.join(CONFIG_DIR, "pipeline.yaml")
ENV_PATH: str = os.path.join(CONFIG_DIR, "app.env")

RUN_TS_FORMAT = "%Y%m%d-%H%M%S"


# -------------------------------------------------------------------------
# Main pipeline
# -------------------------------------------------------------------------
def main(argv: Optional[List[str]] = None) -> None:
    args = sys.argv[1:] if argv is None else argv

    # Installed copies have no bundled config/, so the path must be given
    if len(args) > 1 or (not args and not os.path.exists(DEFAULT_CONFIG_PATH)):
        print("Usage: process_csv.py [config_path]")
        print(f"  (default config_path: {DEFAULT_CONFIG_PATH})")
        sys.exit(1)

    config_path = args[0] if args else DEFAULT_CONFIG_PATH
    run_timestamp = datetime.now().strftime(RUN_TS_FORMAT)

    # ---------------------------------------------------------------------
    # CONTEXT (filled in as the run progresses)
    # ---------------------------------------------------------------------
    context: Dict[str, Any] = {
        "config_path": config_path,
        "run_timestamp": run_timestamp,
        "logfile_path": None,
        "paths": {},
        "stage": "config",
        "log_event": log_event,
    }

    try:
        # -----------------------------------------------------------------
        # Load config (+ app.env overrides)
        # -----------------------------------------------------------------
        config = load_pipeline_config(config_path, load_env(ENV_PATH))
        context["logfile_path"] = config["logfile"]
        logfile_path = context["logfile_path"]

        paths = build_paths(config["input_file"], config["output_file"], run_timestamp)
        context["paths"] = paths

        log_event(logfile_path, "Initiating...")

        # -----------------------------------------------------------------
        # Load CSV
        # -----------------------------------------------------------------
        context["stage"] = "load"
        log_event(logfile_path, f"Preparing to parse CSV file... {paths['input_csv']}")
        csv_rows = load_csv_rows(paths["input_csv"])
        log_event(logfile_path, f"...Done ({len(csv_rows)} rows)")

        # -----------------------------------------------------------------
        # Transforms (run_transforms keeps context["stage"] current)
        # -----------------------------------------------------------------
        context["stage"] = "transform"
        log_event(logfile_path, "Initiating script functionality...")
        stages = build_stages(config["transforms"])
        final_rows = run_transforms(csv_rows, stages, logfile_path, context)

        # -----------------------------------------------------------------
        # Write to the temporary output; finalize commits it
        # -----------------------------------------------------------------
        context["stage"] = "write"
        log_event(logfile_path, "Writing data to a file...")
        write_output_csv(final_rows, config["header_mapping"], paths["temp_output_csv"])
        log_event(logfile_path, "The CSV file was written successfully!")

        completion.finalize(
            context,
            exit_code=completion.EXIT_SUCCESS,
            outcome="success",
            message=f"...Finished! {len(final_rows)} rows written to {paths['output_csv']}",
        )

    except PipelineError as e:
        if e.stage is None:
            e.stage = context["stage"]
        completion.finalize(
            context,
            exit_code=completion.exit_code_for(e),
            outcome="failed",
            message=completion.describe_failure(e),
        )

    except Exception as e:
        completion.finalize(
            context,
            exit_code=completion.EXIT_UNEXPECTED_ERROR,
            outcome="error",
            message=f"UNEXPECTED ERROR in stage '{context['stage']}': {e}\n\nTraceback:\n{traceback.format_exc()}",
        )


if __name__ == "__main__":
    main()
