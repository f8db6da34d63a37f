from json_record_tools.paths import ARRAY_MARKER, escape_path_segment, join_path, split_path


def test_join_path_uses_dots_and_array_marker():
    assert join_path(["mvids", ARRAY_MARKER, "strTrack"]) == "mvids.[].strTrack"


def test_dotted_keys_stay_one_segment():
    key = join_path(["responses", "gpt-3.5-turbo"])
    assert key == "responses.gpt-3\\.5-turbo"
    assert split_path(key) == ["responses", "gpt-3.5-turbo"]


def test_array_marker_is_not_escaped():
    assert escape_path_segment(ARRAY_MARKER) == "[]"


def test_split_path_handles_empty_input():
    assert split_path(None) == []
    assert split_path("") == []


def test_backslashes_round_trip():
    segments = ["a\\b", "c.d\\", ARRAY_MARKER]
    assert split_path(join_path(segments)) == segments


def test_trailing_backslash_is_literal():
    assert split_path("a.b\\") == ["a", "b\\"]
