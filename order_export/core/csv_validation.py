from typing import Dict, Optional

from order_export.core.errors import FieldMissingError, FieldTypeError


# ---------------------------------------------------------------------------
# Required text field (fail-fast)
# ---------------------------------------------------------------------------
def require_text_field(row: Dict[str, Optional[str]], field: str, row_number: int) -> str:
    """
    Return the string value of `field`, or fail.

    Used by stages that rewrite a field: an absent field or a non-string value
    (e.g. a name already nulled) is an error, never a silent skip.

    Raises:
        FieldMissingError: if the record has no such field.
        FieldTypeError: if the value is not a string.
    """
    if field not in row:
        raise FieldMissingError(f"Record {row_number} has no field '{field}'.")

    value = row[field]
    if not isinstance(value, str):
        raise FieldTypeError(
            f"Record {row_number} field '{field}' is {type(value).__name__}, expected str."
        )

    return value


# ---------------------------------------------------------------------------
# Optional field comparison (absent = no match)
# ---------------------------------------------------------------------------
def field_equals(row: Dict[str, Optional[str]], field: str, expected: str) -> bool:
    """Exact, case-sensitive comparison. An absent field never matches."""
    value = row.get(field)
    if value is None:
        return False
    return value == expected
