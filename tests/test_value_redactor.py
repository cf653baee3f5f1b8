"""Tests for field-name based redaction of JSON-shaped values."""

from scrubbing.value_redactor import (
    CIRCULAR_PLACEHOLDER,
    FILTERED_PLACEHOLDER,
    is_sensitive_key,
    sanitize_value,
)
from utils.sanitizer_config import DEFAULT_CONFIG, merge_config


def test_sensitive_keys_filtered_at_any_depth():
    value = {
        "step": 4,
        "reflection": "today was hard",
        "profile": {"Display_Name": "Jane", "meta": [{"notes": {"a": 1}}, {"phone": None}]},
    }

    out = sanitize_value(value)

    assert out == {
        "step": 4,
        "reflection": FILTERED_PLACEHOLDER,
        "profile": {
            "Display_Name": FILTERED_PLACEHOLDER,
            "meta": [{"notes": FILTERED_PLACEHOLDER}, {"phone": FILTERED_PLACEHOLDER}],
        },
    }


def test_does_not_mutate_original():
    d = {"email": "a@b.com", "keep": {"token": "t"}}
    out = sanitize_value(d)
    assert d == {"email": "a@b.com", "keep": {"token": "t"}}
    assert out["keep"]["token"] == FILTERED_PLACEHOLDER


def test_primitive_unchanged():
    assert sanitize_value(42) == 42
    assert sanitize_value("hello a@b.com") == "hello a@b.com"
    assert sanitize_value(None) is None
    assert sanitize_value(True) is True


def test_self_referential_dict_terminates_with_sentinel():
    d = {"id": 1}
    d["self"] = d
    assert sanitize_value(d) == {"id": 1, "self": CIRCULAR_PLACEHOLDER}


def test_self_referential_list_terminates_with_sentinel():
    lst = [1]
    lst.append(lst)
    assert sanitize_value(lst) == [1, CIRCULAR_PLACEHOLDER]


def test_shared_reference_is_visited_once_per_pass():
    shared = {"x": 1}
    out = sanitize_value({"a": shared, "b": shared})
    assert out == {"a": {"x": 1}, "b": CIRCULAR_PLACEHOLDER}


def test_explicit_visited_set_is_used():
    d = {"x": 1}
    visited = {id(d)}
    assert sanitize_value(d, visited) == CIRCULAR_PLACEHOLDER


def test_fresh_visited_set_per_call():
    d = {"x": 1}
    assert sanitize_value(d) == {"x": 1}
    assert sanitize_value(d) == {"x": 1}


def test_non_json_values_are_omitted_from_dicts_and_nulled_in_lists():
    out = sanitize_value({"ok": 1, "fn": print, "items": [object(), 2]})
    assert out == {"ok": 1, "items": [None, 2]}


def test_tuple_shape_is_kept():
    assert sanitize_value(({"email": "x"}, 1)) == ({"email": FILTERED_PLACEHOLDER}, 1)


def test_idempotent_on_acyclic_values():
    value = {"a": [{"name": "x"}, {"b": {"c": "d", "content": [1, 2]}}], "z": None}
    once = sanitize_value(value)
    assert sanitize_value(once) == once


def test_is_sensitive_key_case_insensitive():
    assert is_sensitive_key("EMAIL")
    assert is_sensitive_key("Access_Token")
    assert not is_sensitive_key("emails")


def test_custom_sensitive_fields():
    config = merge_config(DEFAULT_CONFIG, {"sensitive_fields": ["SSN"]})
    assert sanitize_value({"ssn": "1", "email": "a@b.com"}, config=config) == {
        "ssn": FILTERED_PLACEHOLDER,
        "email": "a@b.com",
    }


def _nested(depth, leaf):
    value = leaf
    for _ in range(depth):
        value = {"child": value}
    return value


def test_deeply_nested_value_does_not_raise_and_is_cut_off_filtered():
    out = sanitize_value(_nested(3000, {"email": "a@b.com"}))

    node = out
    levels = 0
    while isinstance(node, dict):
        node = node["child"]
        levels += 1
    assert node == FILTERED_PLACEHOLDER
    assert levels == DEFAULT_CONFIG.max_depth + 1


def test_nesting_within_max_depth_is_walked_fully():
    config = merge_config(DEFAULT_CONFIG, {"max_depth": 5})
    assert sanitize_value(_nested(4, {"notes": "x", "ok": 1}), config=config) == _nested(
        4, {"notes": FILTERED_PLACEHOLDER, "ok": 1}
    )
    assert sanitize_value(_nested(6, {"ok": 1}), config=config) == _nested(6, FILTERED_PLACEHOLDER)
