"""Unit tests for the record-set transform stages."""

from __future__ import annotations

import pytest

from order_export.core.errors import FieldMissingError, FieldTypeError
from order_export.core.transform import (
    build_stages,
    dedupe_names,
    drop_last_token,
    filter_country,
    run_transforms,
    truncate_field,
)

LONG_TITLE = "A very long item title that definitely exceeds 23 chars"


def test_truncate_field_cuts_long_values_only() -> None:
    """Long titles keep their first 23 characters; short ones are untouched."""
    rows = [{"Item Title": LONG_TITLE}, {"Item Title": "Short title"}, {"Item Title": ""}]

    truncated = truncate_field(rows)

    assert truncated[0]["Item Title"] == LONG_TITLE[:23]
    assert len(truncated[0]["Item Title"]) == 23
    assert truncated[1]["Item Title"] == "Short title"
    assert truncated[2]["Item Title"] == ""


def test_truncate_field_does_not_mutate_input() -> None:
    """The stage returns new records and leaves the given ones alone."""
    rows = [{"Item Title": LONG_TITLE, "Other": "x"}]

    truncated = truncate_field(rows)

    assert rows[0]["Item Title"] == LONG_TITLE
    assert truncated[0]["Other"] == "x"


def test_truncate_field_honours_configured_field_and_length() -> None:
    """Field name and length are parameters."""
    rows = [{"Notes": "abcdef"}]

    assert truncate_field(rows, field="Notes", length=3) == [{"Notes": "abc"}]


def test_truncate_field_fails_on_missing_field() -> None:
    """A record without the field is an error, not a crash or a skip."""
    with pytest.raises(FieldMissingError, match="Item Title"):
        truncate_field([{"Item Title": "ok"}, {"Buyer Name": "x"}])


def test_truncate_field_fails_on_null_value() -> None:
    """A non-string value raises a TypeError subclass."""
    with pytest.raises(TypeError):
        truncate_field([{"Item Title": None}])


@pytest.mark.parametrize(
    ("full_name", "expected"),
    [
        ("Jane Q Public", "Jane Q"),
        ("John Public", "John"),
        ("Cher", ""),
        ("", ""),
        ("Jane ", "Jane"),
    ],
)
def test_drop_last_token(full_name: str, expected: str) -> None:
    """Only the final space-separated token is dropped."""
    assert drop_last_token(full_name) == expected


def test_dedupe_names_keeps_first_and_nulls_repeats() -> None:
    """First occurrence is stripped, later exact repeats become None."""
    rows = [
        {"Buyer Name": "Jane Q Public"},
        {"Buyer Name": "John Public"},
        {"Buyer Name": "Jane Q Public"},
        {"Buyer Name": "jane q public"},
        {"Buyer Name": "Jane Q Public"},
    ]

    deduped = dedupe_names(rows)

    assert [row["Buyer Name"] for row in deduped] == ["Jane Q", "John", None, "jane q", None]


def test_dedupe_names_compares_original_values() -> None:
    """A later full name equal to an earlier stripped name is not a repeat."""
    rows = [{"Buyer Name": "Jane Q Public"}, {"Buyer Name": "Jane Q"}]

    deduped = dedupe_names(rows)

    assert [row["Buyer Name"] for row in deduped] == ["Jane Q", "Jane"]


def test_dedupe_names_fails_on_missing_field() -> None:
    """A record without a name field aborts the stage."""
    with pytest.raises(FieldMissingError, match="Record 2"):
        dedupe_names([{"Buyer Name": "A B"}, {}])


def test_dedupe_names_fails_on_null_name() -> None:
    """A null name is a type error."""
    with pytest.raises(FieldTypeError):
        dedupe_names([{"Buyer Name": None}])


def test_filter_country_keeps_exact_matches_in_order() -> None:
    """Only exact, case-sensitive matches survive, in their original order."""
    rows = [
        {"Ship To Country": "United States", "id": "1"},
        {"Ship To Country": "Canada", "id": "2"},
        {"Ship To Country": "united states", "id": "3"},
        {"Ship To Country": " United States", "id": "4"},
        {"Ship To Country": "United States", "id": "5"},
    ]

    filtered = filter_country(rows)

    assert [row["id"] for row in filtered] == ["1", "5"]


def test_filter_country_drops_records_without_the_field() -> None:
    """An absent country field counts as a non-match."""
    rows = [{"id": "1"}, {"Ship To Country": "United States", "id": "2"}]

    assert filter_country(rows) == [{"Ship To Country": "United States", "id": "2"}]


def test_run_transforms_applies_stages_in_order() -> None:
    """Truncate, then dedupe, then filter."""
    transforms_cfg = {
        "truncate_field": "Item Title",
        "truncate_length": 23,
        "name_field": "Buyer Name",
        "country_field": "Ship To Country",
        "country_value": "United States",
    }
    rows = [
        {"Ship To Country": "Canada", "Buyer Name": "Jane Q Public", "Item Title": "a"},
        {"Ship To Country": "United States", "Buyer Name": "Jane Q Public", "Item Title": LONG_TITLE},
    ]

    result = run_transforms(rows, build_stages(transforms_cfg))

    # The Canadian row claimed the name first, so the survivor is nulled.
    assert result == [
        {"Ship To Country": "United States", "Buyer Name": None, "Item Title": LONG_TITLE[:23]}
    ]


def test_run_transforms_tags_error_with_stage_name() -> None:
    """A failing stage name is attached to the raised error."""
    transforms_cfg = {
        "truncate_field": "Item Title",
        "truncate_length": 23,
        "name_field": "Buyer Name",
        "country_field": "Ship To Country",
        "country_value": "United States",
    }

    with pytest.raises(FieldMissingError) as excinfo:
        run_transforms([{"Item Title": "x"}], build_stages(transforms_cfg))

    assert excinfo.value.stage == "dedupe_names"


def test_run_transforms_records_running_stage_in_context() -> None:
    """Any failure leaves the failing stage name in the driver context."""
    context = {"stage": "transform"}

    def explode(rows):
        raise ValueError("boom")

    stages = [("keep", "Keeping...", lambda rows: rows), ("explode", "Exploding...", explode)]

    with pytest.raises(ValueError):
        run_transforms([{"a": "1"}], stages, context=context)

    assert context["stage"] == "explode"
