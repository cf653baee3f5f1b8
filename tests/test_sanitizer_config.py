import json

import pytest

from utils.sanitizer_config import (
    DEFAULT_CONFIG,
    load_config_from_json,
    merge_config,
    validate_config,
)


def test_default_config_is_valid():
    validate_config(DEFAULT_CONFIG)
    assert DEFAULT_CONFIG.chunk_size == 10_000
    assert DEFAULT_CONFIG.min_quoted_length == 10
    assert len(DEFAULT_CONFIG.sensitive_fields) == 15
    assert "sobriety_date" in DEFAULT_CONFIG.sensitive_fields
    assert DEFAULT_CONFIG.oauth_params == ("access_token", "refresh_token", "code", "id_token", "state")


def test_merge_normalizes_field_names_and_keeps_base():
    merged = merge_config(DEFAULT_CONFIG, {"sensitive_fields": ["Email", " SSN "], "chunk_size": "500"})
    assert merged.sensitive_fields == frozenset({"email", "ssn"})
    assert merged.chunk_size == 500
    assert DEFAULT_CONFIG.chunk_size == 10_000


def test_merge_rejects_unknown_keys():
    with pytest.raises(ValueError):
        merge_config(DEFAULT_CONFIG, {"chunk": 5})


@pytest.mark.parametrize(
    "overrides",
    [
        {"chunk_size": 0},
        {"min_quoted_length": -1},
        {"sensitive_fields": [""]},
        {"backend_query_path": "/rest/v1/.*"},
        {"backend_query_path": "/rest/v1/([^?"},
    ],
)
def test_merge_rejects_invalid_values(overrides):
    with pytest.raises(ValueError):
        merge_config(DEFAULT_CONFIG, overrides)


def test_load_config_from_json(tmp_path):
    path = tmp_path / "sanitizer.json"
    path.write_text(json.dumps({"oauth_params": ["code"], "backend_host_markers": []}), encoding="utf-8")

    config = load_config_from_json(str(path))

    assert config.oauth_params == ("code",)
    assert config.backend_host_markers == ()
    assert config.sensitive_fields == DEFAULT_CONFIG.sensitive_fields


def test_load_config_rejects_non_object(tmp_path):
    path = tmp_path / "sanitizer.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config_from_json(str(path))


@pytest.mark.parametrize("max_depth", [0, 10_000])
def test_merge_rejects_out_of_range_max_depth(max_depth):
    with pytest.raises(ValueError):
        merge_config(DEFAULT_CONFIG, {"max_depth": max_depth})
