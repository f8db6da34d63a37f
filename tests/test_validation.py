from json_record_tools.validation import validate_records


def test_valid_records(artist_records):
    result = validate_records(artist_records)

    assert result.is_valid
    assert result.errors == []
    assert result.warnings == []
    assert result.summary == {
        "total_records": 2,
        "valid_records": 2,
        "invalid_records": 0,
        "duplicates": 0,
    }


def test_invalid_and_duplicate_records():
    records = [{"artistName": "A"}, "oops", {"artistName": "A", "x": 1}, {"genre": "jazz"}]
    result = validate_records(records)

    assert not result.is_valid
    assert result.errors == ["Record 2: Invalid record type"]
    assert 'Record 3: Duplicate key "A"' in result.warnings
    assert "Record 4: Missing primary identifier (artistName/name/title)" in result.warnings
    assert result.summary["valid_records"] == 3
    assert result.summary["invalid_records"] == 1
    assert result.summary["duplicates"] == 1


def test_non_array_input_is_reported():
    result = validate_records({"artistName": "A"})
    assert not result.is_valid
    assert result.summary["total_records"] == 0
