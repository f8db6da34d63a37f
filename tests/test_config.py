import pytest
from pydantic import ValidationError

from json_record_tools.config import Settings


def test_defaults():
    config = Settings()
    assert config.schema_sample_size == 100
    assert config.musicbrainz_limit.max_calls == 1
    assert config.youtube_limit.window_ms == 1000
    assert config.max_file_size_bytes == 100 * 1024 * 1024


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("JSON_TOOLS_SCHEMA_SAMPLE_SIZE", "250")
    monkeypatch.setenv("JSON_TOOLS_SQL_TABLE_NAME", "performers")
    config = Settings()
    assert config.schema_sample_size == 250
    assert config.sql_table_name == "performers"


def test_non_positive_values_are_rejected():
    with pytest.raises(ValidationError):
        Settings(sql_batch_size=0)
    with pytest.raises(ValidationError):
        Settings(theaudiodb_limit={"max_calls": 0, "window_ms": 1000})
