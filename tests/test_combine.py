import pytest

from json_record_tools.combine import (
    MergeConfiguration,
    combine_json_files,
    display_record_key,
    get_record_key,
)
from json_record_tools.errors import ConfigurationError


def test_merge_combine_overwrites_fields():
    result = combine_json_files(
        [[{"artistName": "A", "x": 1}], [{"artistName": "A", "x": 2}]],
        MergeConfiguration(strategy="merge", conflict_resolution="combine"),
    )
    assert result == [{"artistName": "A", "x": 2}]


def test_merge_keep_first():
    result = combine_json_files(
        [[{"artistName": "A", "x": 1}], [{"artistName": "A", "x": 2}]],
        MergeConfiguration(strategy="merge", conflict_resolution="keep_first"),
    )
    assert result == [{"artistName": "A", "x": 1}]


def test_merge_keep_last_replaces_in_place():
    first = [{"artistName": "A", "x": 1, "y": 1}, {"artistName": "B"}]
    second = [{"artistName": "A", "x": 2}, {"artistName": "C"}]
    result = combine_json_files([first, second], MergeConfiguration("merge", "keep_last"))

    assert result == [{"artistName": "A", "x": 2}, {"artistName": "B"}, {"artistName": "C"}]


def test_merge_combine_keeps_unmatched_left_fields():
    result = combine_json_files(
        [[{"id": 7, "a": 1}], [{"id": 7, "b": 2}]],
        MergeConfiguration("merge", "combine"),
    )
    assert result == [{"id": 7, "a": 1, "b": 2}]


def test_merge_does_not_mutate_inputs():
    first = [{"artistName": "A", "x": 1}]
    second = [{"artistName": "A", "x": 2}]
    combine_json_files([first, second], MergeConfiguration("merge", "combine"))
    assert first == [{"artistName": "A", "x": 1}]
    assert second == [{"artistName": "A", "x": 2}]


def test_merge_records_appear_once_per_identity():
    files = [
        [{"name": "A"}, {"name": "B"}],
        [{"name": "B", "v": 1}, {"name": "C"}],
        [{"name": "C", "v": 2}, {"name": "A", "v": 3}],
    ]
    result = combine_json_files(files, MergeConfiguration("merge", "combine"))
    assert result == [{"name": "A", "v": 3}, {"name": "B", "v": 1}, {"name": "C", "v": 2}]


def test_append_length_is_sum_of_inputs():
    files = [[{"a": 1}], [{"a": 1}, {"b": 2}], []]
    result = combine_json_files(files, MergeConfiguration("append"))
    assert len(result) == sum(len(f) for f in files)
    assert result == [{"a": 1}, {"a": 1}, {"b": 2}]


def test_replace_keeps_last_array():
    files = [[{"a": 1}], [{"b": 2}], [{"c": 3}, {"d": 4}]]
    assert combine_json_files(files, MergeConfiguration("replace")) == [{"c": 3}, {"d": 4}]


def test_single_and_empty_inputs():
    only = [{"a": 1}]
    assert combine_json_files([only], MergeConfiguration("merge", "combine")) is only
    assert combine_json_files([]) == []


def test_record_key_priority():
    assert get_record_key({"artistName": "A", "id": 1, "name": "N"}) == '"A"'
    assert get_record_key({"id": 1, "name": "N"}) == "1"
    assert get_record_key({"name": "N"}) == '"N"'
    assert get_record_key({"artistName": "", "name": "N"}) == '"N"'
    assert get_record_key({"x": 1}) == '{"x":1}'


def test_unknown_options_fail_fast():
    with pytest.raises(ConfigurationError):
        MergeConfiguration(strategy="zip")
    with pytest.raises(ConfigurationError):
        MergeConfiguration(strategy="merge", conflict_resolution="newest")


def test_identifiers_of_different_types_stay_distinct():
    keys = {get_record_key({"id": v}) for v in (1, True, 1.5, "1")}
    assert len(keys) == 4

    result = combine_json_files(
        [[{"id": 1, "v": "int"}], [{"id": True, "v": "bool"}, {"id": "1", "v": "str"}]],
        MergeConfiguration(strategy="merge", conflict_resolution="keep_last"),
    )
    assert [r["v"] for r in result] == ["int", "bool", "str"]


def test_display_record_key():
    assert display_record_key('"Miles Davis"') == "Miles Davis"
    assert display_record_key("7") == "7"
    assert display_record_key("[unserializable]") == "[unserializable]"
