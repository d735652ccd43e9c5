from __future__ import annotations

from trackersync.errors import (
    TrackerAPIError,
    VerificationError,
    classify_error,
    describe_failure,
    redact,
)


def test_classify_by_status():
    assert classify_error(TrackerAPIError("nope", status=401)).category == "auth"
    assert classify_error(TrackerAPIError("gone", status=404)).category == "not_found"
    assert classify_error(TrackerAPIError("bad", status=422)).category == "validation"
    info = classify_error(TrackerAPIError("slow down", status=429))
    assert info.category == "rate_limit"
    assert info.transient is True
    assert info.details == {"status": 429}


def test_classify_by_message():
    assert classify_error(VerificationError("denied")).category == "auth"
    assert classify_error(RuntimeError("Connection reset by peer")).category == "network"
    assert classify_error(RuntimeError("API Rate Limit Exceeded")).category == "rate_limit"
    assert classify_error(ValueError("Some other problem")).category == "generic"


def test_redact_tokens():
    sample = (
        "Token ghp_ABCDEFGHIJKLMNOPQRSTUVWX plus github_pat_1234567890abcdefghijkl "
        "and lin_api_abcdefghijklmnopqrstuvwxyz "
        "and ATATT3xFfGF0abcdefghijklmnopqrstuvwxyz "
        "Authorization: Basic dXNlcjpzZWNyZXQ="
    )
    out = redact(sample)

    assert "ghp_" not in out
    assert "github_pat_" not in out
    assert "lin_api_" not in out
    assert "ATATT" not in out
    assert "dXNlcjpzZWNyZXQ=" not in out
    assert "Authorization: Basic <redacted>" in out


def test_describe_failure_is_redacted():
    exc = TrackerAPIError("boom for ghp_ABCDEFGHIJKLMNOPQRSTUVWX", status=500)

    assert describe_failure("create label bug", exc) == "Failed to create label bug: boom for <redacted>"


def test_describe_failure_without_message():
    assert describe_failure("link", KeyError()) == "Failed to link: KeyError"
