import pytest

from stop_search.errors import MalformedRecord
from stop_search.flatten import ABSENT, flatten_record, flatten_records


def test_nested_fields_become_dotted_columns(stop):
    flat = flatten_record(stop)

    assert flat["location.street.name"] == "On or near Shopping Area"
    assert flat["location.street.id"] == 883407
    assert flat["outcome_object.id"] == "bu-no-further-action"
    assert "location" not in flat
    # types are kept
    assert flat["involved_person"] is True
    assert flat["operation"] is None


def test_flat_record_passes_through():
    record = {"type": "Person search", "gender": "Male", "operation": None}
    assert flatten_record(record) == record


def test_flat_input_is_unchanged():
    records = [{"a": 1, "b": "x"}, {"a": 2, "b": "y"}]
    table = flatten_records(records)
    assert table.to_dict(orient="records") == records


def test_missing_outcome_is_marked_absent(stop):
    without_outcome = {k: v for k, v in stop.items() if k != "outcome_object"}
    table = flatten_records([stop, without_outcome])

    assert len(table) == 2
    assert "outcome_object.name" in table.columns
    assert table.loc[1, "outcome_object.name"] is ABSENT
    assert table.loc[0, "outcome_object.name"] == "A no further action disposal"


def test_columns_are_union_in_first_seen_order():
    records = [
        {"a": 1, "outcome_object": {"id": "x"}},
        {"b": 2, "outcome_object": {"name": "Arrest"}},
    ]
    table = flatten_records(records)

    assert list(table.columns) == ["a", "outcome_object.id", "b", "outcome_object.name"]
    assert table.loc[0, "b"] is ABSENT
    assert table.loc[1, "outcome_object.id"] is ABSENT


def test_null_is_not_absent():
    table = flatten_records([{"a": None}, {"b": 1}])
    assert table.loc[0, "a"] is None
    assert table.loc[1, "a"] is ABSENT


def test_null_location_passes_through():
    flat = flatten_record({"type": "Vehicle search", "location": None})
    assert flat == {"type": "Vehicle search", "location": None}


def test_scalar_where_mapping_expected_raises():
    with pytest.raises(MalformedRecord) as excinfo:
        flatten_record({"location": {"street": "High Street"}}, index=4)
    assert excinfo.value.path == "location.street"
    assert excinfo.value.index == 4


def test_malformed_record_is_skipped_by_default(stop, caplog):
    records = [stop, {"location": "nowhere"}, {"type": "Vehicle search"}]
    table = flatten_records(records)

    assert list(table.index) == [0, 2]
    assert table.loc[2, "type"] == "Vehicle search"
    assert "Skipping malformed record" in caplog.text


def test_malformed_record_fails_when_strict(stop):
    with pytest.raises(MalformedRecord):
        flatten_records([stop, ["not", "a", "mapping"]], strict=True)


def test_empty_input_gives_empty_table():
    table = flatten_records([])
    assert table.empty
    assert list(table.columns) == []
