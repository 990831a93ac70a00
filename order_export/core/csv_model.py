from typing import Any, Dict, List, NamedTuple, Optional

from order_export.core.errors import ConfigError


class HeaderColumn(NamedTuple):
    """One output column: the input column it reads from and its title."""

    source: str
    title: str


# ---------------------------------------------------------------------------
# Parse header mapping
# ---------------------------------------------------------------------------
def parse_header_mapping(header_cfg: Any) -> List[HeaderColumn]:
    """
    Build the ordered header mapping from the `header` config section.

    Each entry is a map with a `title` and an optional `source`. An empty or
    missing source means the output column is always blank. The same source
    may feed several output columns.

    Raises:
        ConfigError: if the section is not a non-empty list of such maps.
    """
    if not isinstance(header_cfg, list) or not header_cfg:
        raise ConfigError("Config 'header' must be a non-empty list.")

    header_mapping: List[HeaderColumn] = []

    for position, entry in enumerate(header_cfg, start=1):
        if not isinstance(entry, dict):
            raise ConfigError(f"Header entry {position} must be a map with 'source' and 'title'.")

        title = entry.get("title")
        if not isinstance(title, str) or not title:
            raise ConfigError(f"Header entry {position} has no 'title'.")

        source = entry.get("source") or ""
        if not isinstance(source, str):
            raise ConfigError(f"Header entry {position} ({title}) has a non-string 'source'.")

        header_mapping.append(HeaderColumn(source=source, title=title))

    return header_mapping


def output_titles(header_mapping: List[HeaderColumn]) -> List[str]:
    """Return the output header row."""
    return [column.title for column in header_mapping]


# ---------------------------------------------------------------------------
# Map a record onto the output header
# ---------------------------------------------------------------------------
def map_row(row: Dict[str, Optional[str]], header_mapping: List[HeaderColumn]) -> List[str]:
    """
    Resolve one output row, in header order.

    Blank source, a source the record lacks, and a null value all give "";
    otherwise the record's value.
    """
    values: List[str] = []

    for column in header_mapping:
        value = row.get(column.source) if column.source else None
        values.append("" if value is None else value)

    return values
