import json
import tempfile

import pytest

from json_record_tools.handlers_merge import combine_files_handler
from json_record_tools.handlers_single import (
    analyze_upload_handler,
    convert_handler,
    deduplicate_handler,
    export_modified_handler,
    limiter_status_handler,
    load_records,
    postprocess_handler,
    validate_handler,
)
from json_record_tools.io_utils import write_export_file
from json_record_tools.rate_limiter import RateLimiter


@pytest.fixture(autouse=True)
def export_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(tempfile, "tempdir", str(tmp_path / "exports"))
    (tmp_path / "exports").mkdir()
    return tmp_path / "exports"


@pytest.fixture
def write_json(tmp_path):
    def _write(name, data):
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return str(path)
    return _write


def test_load_records_reports_problems(tmp_path, write_json):
    assert load_records(None) == ([], "No file uploaded.")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    records, message = load_records(str(broken))
    assert records == []
    assert message.startswith("Error parsing JSON")

    records, message = load_records(write_json("scalar.json", 42))
    assert records == []
    assert "No records found" in message


def test_load_records_unwraps_database_exports(write_json):
    records, message = load_records(write_json("export.json", {"version": "1.0.0", "artists": [{"artistName": "A"}]}))
    assert message == ""
    assert records == [{"artistName": "A"}]


def test_analyze_then_export_modified(write_json, artist_records, export_dir):
    records, selector, rows, tree, status = analyze_upload_handler(write_json("artists.json", artist_records))

    assert records == artist_records
    assert "mvids.[].strTrack" in selector["choices"]
    assert selector["value"] == selector["choices"]
    assert rows[0][0] == "artistName"
    assert tree["mvids"]["[]"]["strTrack"] == "mvids.[].strTrack"
    assert status.startswith("Records: 2")

    path, message, preview = export_modified_handler(records, ["artistName"], "trimmed")
    assert path == str(export_dir / "trimmed.json")
    assert "Exported 2 records" in message
    with open(path, encoding="utf-8") as f:
        assert json.load(f) == [{"artistName": "Miles Davis"}, {"artistName": "John Coltrane"}]
    assert preview == [{"artistName": "Miles Davis"}, {"artistName": "John Coltrane"}]


def test_export_modified_needs_selection(artist_records):
    assert export_modified_handler(artist_records, [], None) == (None, "No fields selected.", None)
    assert export_modified_handler(None, ["a"], None) == (None, "No data loaded.", None)


def test_deduplicate_handler(write_json):
    path, summary, keys = deduplicate_handler(write_json("dupes.json", [{"name": "X"}, {"name": "X"}]), "")
    assert summary == "Original: 2 | Kept: 1 | Removed: 1"
    assert keys == "Likely identifying fields: name"
    with open(path, encoding="utf-8") as f:
        assert json.load(f) == [{"name": "X"}]


def test_convert_handler_sql_and_csv(write_json):
    source = write_json("artists.json", [{"artistName": "A", "plays": 2}])

    path, status, preview = convert_handler(source, "SQL", "sqlite", "performers", 50, True, True, "out")
    assert path.endswith("out.sql")
    assert status == "Converted 1 records to SQL."
    assert preview.startswith("CREATE TABLE performers")

    path, status, preview = convert_handler(source, "CSV", "sqlite", "", 50, True, True, "")
    assert path.endswith("converted.csv")
    assert preview == "artistname,plays\nA,2"


def test_convert_handler_rejects_bad_dialect(write_json):
    source = write_json("artists.json", [{"a": 1}])
    path, status, _ = convert_handler(source, "SQL", "oracle", "t", 10, True, True, "")
    assert path is None
    assert status.startswith("Invalid conversion options")


def test_combine_files_handler(write_json):
    first = write_json("a.json", [{"artistName": "A", "x": 1}])
    second = write_json("b.json", [{"artistName": "A", "x": 2}, {"artistName": "B"}])

    path, summary, preview = combine_files_handler([first, second], "merge", "combine", "combined")
    assert summary == "Files: 2 | Input records: 3 | Output records: 2 | Strategy: merge (combine)"
    assert preview == [{"artistName": "A", "x": 2}, {"artistName": "B"}]
    with open(path, encoding="utf-8") as f:
        assert len(json.load(f)) == 2

    assert combine_files_handler([first], "zip", "keep_first", "")[1] == "Unknown merge strategy: 'zip'"
    assert combine_files_handler([], "append", "keep_first", "")[0] is None


def test_validate_handler(write_json):
    report, summary = validate_handler(write_json("v.json", [{"artistName": "A"}, 3]))
    assert report.splitlines()[0] == "Invalid"
    assert "Error: Record 2: Invalid record type" in report
    assert summary["invalid_records"] == 1


def test_write_export_file_appends_extension(export_dir):
    path = write_export_file("a,b", "../report", "CSV")
    assert path == str(export_dir / "report.csv")
    with open(path, encoding="utf-8") as f:
        assert f.read() == "a,b"


def test_postprocess_handler(write_json, artist_records, export_dir):
    path, status, preview = postprocess_handler(write_json("artists.json", artist_records), "slim")

    assert path == str(export_dir / "slim.json")
    assert status.startswith("Artists: 2 | With videos: 1 | Without videos: 1")
    with open(path, encoding="utf-8") as f:
        assert [a["artistName"] for a in json.load(f)] == ["Miles Davis"]
    assert preview[0]["mvids"][1]["strTrack"] == "Blue in Green"

    assert postprocess_handler(None, "") == (None, "No file uploaded.", None)


def test_limiter_status_handler_lists_every_api():
    rows = limiter_status_handler()
    assert [row[0] for row in rows] == ["musicbrainz", "theaudiodb", "youtube"]
    assert all(row[3:] == [0, 0, "normal"] for row in rows)

    limiter = RateLimiter(max_calls=3, window_ms=500, name="custom")
    assert limiter_status_handler({"custom": limiter}) == [["custom", 3, 500, 0, 0, "normal"]]
