"""Tests for the retry decorator used around STS calls."""

from __future__ import annotations

import pytest
from botocore.exceptions import ClientError

from core import retry as retry_mod
from core.retry import is_throttling_error, retry_with_backoff


def _err(code: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, "AssumeRole")


@pytest.fixture(name="no_sleep")
def fixture_no_sleep(monkeypatch):
    slept = []
    monkeypatch.setattr(retry_mod.time, "sleep", slept.append)
    return slept


def test_is_throttling_error() -> None:
    assert is_throttling_error(_err("Throttling"))
    assert is_throttling_error(_err("ThrottlingException"))
    assert not is_throttling_error(_err("AccessDenied"))
    assert not is_throttling_error(ValueError("x"))


def test_retries_throttling_then_succeeds(no_sleep) -> None:
    attempts = {"n": 0}

    @retry_with_backoff(exceptions=(ClientError,), tries=3, jitter=False, should_retry=is_throttling_error)
    def flaky():
        attempts["n"] += 1
        if attempts["n"] < 3:
            raise _err("Throttling")
        return "ok"

    assert flaky() == "ok"
    assert attempts["n"] == 3
    assert no_sleep == [0.5, 1.0]


def test_non_retryable_error_fails_fast(no_sleep) -> None:
    attempts = {"n": 0}

    @retry_with_backoff(exceptions=(ClientError,), tries=5, should_retry=is_throttling_error)
    def denied():
        attempts["n"] += 1
        raise _err("AccessDenied")

    with pytest.raises(ClientError):
        denied()
    assert attempts["n"] == 1
    assert no_sleep == []


def test_gives_up_after_tries(no_sleep) -> None:
    @retry_with_backoff(exceptions=(ClientError,), tries=2, jitter=False, max_delay=0.1)
    def always():
        raise _err("Throttling")

    with pytest.raises(ClientError):
        always()
    assert no_sleep == [0.1]
