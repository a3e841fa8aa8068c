from labshare.core.logging import _redact_sensitive, redact_email


def test_redact_email():
    assert redact_email("student@example.edu") == "st***@example.edu"
    assert redact_email("nonsense") == "redacted"


def test_sensitive_fields_are_masked():
    event = _redact_sensitive(
        None,
        "info",
        {
            "event": "otp_issued",
            "code": "482913",
            "to_email": "student@example.edu",
            "token": "eyJhbGciOi",
            "code_id": "a1b2",
            "error_code": "invalid_code",
            "student_id": "s-1",
        },
    )
    assert event["code"] == "***"
    assert event["to_email"] == "st***@example.edu"
    assert event["token"] == "***"
    assert event["code_id"] == "a1b2"
    assert event["error_code"] == "invalid_code"
    assert event["student_id"] == "s-1"
    assert event["event"] == "otp_issued"
