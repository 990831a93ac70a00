"""
Record-set transforms.

Each stage takes the whole record set and returns a new one. Stages are
order dependent and always run as:

    truncate_field -> dedupe_names -> filter_country

Rows are shallow-copied before a field is rewritten, so a stage never
mutates the list it was given.
"""

from functools import partial
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from order_export.core.csv_validation import field_equals, require_text_field
from order_export.core.errors import PipelineError
from order_export.core.runtime import log_event

Record = Dict[str, Optional[str]]
Stage = Callable[[List[Record]], List[Record]]

DEFAULT_TRUNCATE_FIELD = "Item Title"
DEFAULT_TRUNCATE_LENGTH = 23
DEFAULT_NAME_FIELD = "Buyer Name"
DEFAULT_COUNTRY_FIELD = "Ship To Country"
DEFAULT_COUNTRY_VALUE = "United States"


# ---------------------------------------------------------------------------
# Stage A: truncate a text field
# ---------------------------------------------------------------------------
def truncate_field(
    rows: List[Record],
    field: str = DEFAULT_TRUNCATE_FIELD,
    length: int = DEFAULT_TRUNCATE_LENGTH,
) -> List[Record]:
    """
    Cut `field` down to its first `length` characters on every record.

    Shorter values are left as they are. No record is dropped or moved.

    Raises:
        FieldMissingError / FieldTypeError: via require_text_field.
    """
    truncated: List[Record] = []

    for row_number, csv_row in enumerate(rows, start=1):
        value = require_text_field(csv_row, field, row_number)
        row = dict(csv_row)  # shallow copy
        row[field] = value[:length]
        truncated.append(row)

    return truncated


# ---------------------------------------------------------------------------
# Stage B: strip the last name, null repeated names
# ---------------------------------------------------------------------------
def drop_last_token(full_name: str) -> str:
    """Drop the final space-separated token. "Jane Q Public" -> "Jane Q"."""
    return " ".join(full_name.split(" ")[:-1])


def dedupe_names(rows: List[Record], field: str = DEFAULT_NAME_FIELD) -> List[Record]:
    """
    Keep the first occurrence of each distinct name, null the rest.

    Names are compared exactly and before modification, across the whole
    record set. The first occurrence is rewritten with drop_last_token;
    every later occurrence gets None. Record count never changes.

    Raises:
        FieldMissingError / FieldTypeError: via require_text_field.
    """
    seen_names: Set[str] = set()
    deduped: List[Record] = []

    for row_number, csv_row in enumerate(rows, start=1):
        full_name = require_text_field(csv_row, field, row_number)
        row = dict(csv_row)  # shallow copy

        if full_name not in seen_names:
            seen_names.add(full_name)
            row[field] = drop_last_token(full_name)
        else:
            row[field] = None

        deduped.append(row)

    return deduped


# ---------------------------------------------------------------------------
# Stage C: keep one destination country
# ---------------------------------------------------------------------------
def filter_country(
    rows: List[Record],
    field: str = DEFAULT_COUNTRY_FIELD,
    value: str = DEFAULT_COUNTRY_VALUE,
) -> List[Record]:
    """Keep records whose `field` equals `value` exactly; absent field drops the record."""
    return [row for row in rows if field_equals(row, field, value)]


# ---------------------------------------------------------------------------
# Stage assembly
# ---------------------------------------------------------------------------
def build_stages(transforms_cfg: Dict[str, Any]) -> List[Tuple[str, str, Stage]]:
    """
    Bind the configured field names to the fixed stage sequence.

    Returns a list of (stage_name, description, callable) in execution order.
    """
    return [
        (
            "truncate_field",
            "Removing extra letters in description...",
            partial(
                truncate_field,
                field=transforms_cfg["truncate_field"],
                length=transforms_cfg["truncate_length"],
            ),
        ),
        (
            "dedupe_names",
            "Removing last name and duplicates...",
            partial(dedupe_names, field=transforms_cfg["name_field"]),
        ),
        (
            "filter_country",
            "Removing items shipped to different countries...",
            partial(
                filter_country,
                field=transforms_cfg["country_field"],
                value=transforms_cfg["country_value"],
            ),
        ),
    ]


def run_transforms(
    rows: List[Record],
    stages: List[Tuple[str, str, Stage]],
    logfile_path: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
) -> List[Record]:
    """
    Thread the record set through every stage in order.

    The running stage name is kept in context["stage"], so the driver can
    name the stage behind any failure. A PipelineError is also re-raised
    tagged with the stage name.
    """
    for stage_name, description, stage in stages:
        if context is not None:
            context["stage"] = stage_name
        log_event(logfile_path, description)
        try:
            rows = stage(rows)
        except PipelineError as exc:
            exc.stage = stage_name
            raise
        log_event(logfile_path, f"...Done ({len(rows)} rows)")

    return rows
