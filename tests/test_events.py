"""Tests for full-event sanitization before transmission."""

from telemetry_hooks.events import sanitize_event


def test_user_reduced_to_id():
    event = {"user": {"id": "u1", "email": "a@b.com", "display_name": "Jane", "ip_address": "1.2.3.4"}}
    assert sanitize_event(event)["user"] == {"id": "u1"}


def test_user_without_id_becomes_empty():
    assert sanitize_event({"user": {"email": "a@b.com"}})["user"] == {}


def test_request_data_sensitive_fields_filtered():
    event = {"request": {"url": "/api/tasks", "data": {"title": "Step 4", "notes": "private", "owner": {"email": "a@b.com"}}}}

    out = sanitize_event(event)

    assert out["request"] == {
        "url": "/api/tasks",
        "data": {"title": "Step 4", "notes": "[Filtered]", "owner": {"email": "[Filtered]"}},
    }


def test_request_data_cycle_does_not_hang():
    data = {"a": 1}
    data["loop"] = data
    out = sanitize_event({"request": {"data": data}})
    assert out["request"]["data"] == {"a": 1, "loop": "[Circular]"}


def test_message_only_emails_redacted():
    event = {"message": 'Failed for a@b.com at https://app.com/cb?code=1 "a long quoted string"'}
    out = sanitize_event(event)
    assert out["message"] == 'Failed for [email] at https://app.com/cb?code=1 "a long quoted string"'


def test_logentry_emails_redacted():
    event = {"logentry": {"message": "login %s", "formatted": "login a@b.com", "params": ["a@b.com"]}}
    out = sanitize_event(event)
    assert out["logentry"]["formatted"] == "login [email]"
    assert out["logentry"]["message"] == "login %s"


def test_exception_values_fully_scrubbed_in_sdk_shape():
    event = {
        "exception": {
            "values": [
                {"type": "Error", "value": 'a@b.com "my private journal" https://a.com/?state=x&p=1 code: 9'},
                {"type": "Other"},
            ]
        }
    }

    out = sanitize_event(event)

    values = out["exception"]["values"]
    assert values[0] == {"type": "Error", "value": '[email] "[Filtered]" https://a.com/?p=1 code: [FILTERED]'}
    assert values[1] == {"type": "Other"}


def test_exception_as_plain_list():
    out = sanitize_event({"exception": [{"value": "token for a@b.com"}]})
    assert out["exception"] == [{"value": "token for [email]"}]


def test_input_event_not_mutated_and_other_fields_kept():
    event = {"level": "error", "user": {"id": "u1", "email": "a@b.com"}, "tags": {"screen": "profile"}}
    out = sanitize_event(event)
    assert event["user"] == {"id": "u1", "email": "a@b.com"}
    assert out["level"] == "error"
    assert out["tags"] == {"screen": "profile"}


def test_empty_event_returns_event():
    assert sanitize_event({}) == {}


def test_deeply_nested_request_data_does_not_raise():
    data = {"notes": "private"}
    for _ in range(3000):
        data = {"child": data}

    out = sanitize_event({"request": {"data": data}})

    assert out["request"]["data"]["child"]["child"] is not None
