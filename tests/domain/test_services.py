"""Tests for domain service pure functions."""
from __future__ import annotations

from datetime import timedelta

import pytest

from kvcache.domain.entities import Entry
from kvcache.domain.exceptions import ValidationError
from kvcache.domain.services import (
    MAX_DEADLINE,
    deadline,
    duration_seconds,
    is_live,
    normalize_default_ttl,
    resolve_ttl,
    validate_deadline,
)
from kvcache.domain.value_objects import DEFAULT_EXPIRATION, NO_EXPIRATION

# ---------------------------------------------------------------------------
# duration_seconds
# ---------------------------------------------------------------------------

def test_duration_seconds_number() -> None:
    assert duration_seconds(5) == 5.0
    assert duration_seconds(0.25) == 0.25


def test_duration_seconds_timedelta() -> None:
    assert duration_seconds(timedelta(minutes=2)) == 120.0


@pytest.mark.parametrize("bad", ["10", None, True])
def test_duration_seconds_rejects_non_durations(bad: object) -> None:
    with pytest.raises(ValidationError):
        duration_seconds(bad)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# normalize_default_ttl
# ---------------------------------------------------------------------------

def test_normalize_default_never() -> None:
    assert normalize_default_ttl(NO_EXPIRATION) is None


def test_normalize_default_of_default_means_never() -> None:
    assert normalize_default_ttl(DEFAULT_EXPIRATION) is None


def test_normalize_default_finite() -> None:
    assert normalize_default_ttl(timedelta(seconds=30)) == 30.0


def test_normalize_default_rejects_zero() -> None:
    with pytest.raises(ValidationError):
        normalize_default_ttl(0)


# ---------------------------------------------------------------------------
# resolve_ttl
# ---------------------------------------------------------------------------

def test_resolve_default_uses_store_default() -> None:
    assert resolve_ttl(DEFAULT_EXPIRATION, 60.0) == 60.0


def test_resolve_default_with_never_store_default() -> None:
    assert resolve_ttl(DEFAULT_EXPIRATION, None) is None


def test_resolve_never_ignores_store_default() -> None:
    assert resolve_ttl(NO_EXPIRATION, 60.0) is None


def test_resolve_finite() -> None:
    assert resolve_ttl(1.5, 60.0) == 1.5


@pytest.mark.parametrize("bad", [0, -1, timedelta(0), timedelta(seconds=-3)])
def test_resolve_rejects_non_positive(bad: object) -> None:
    with pytest.raises(ValidationError, match="positive"):
        resolve_ttl(bad, None)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# deadline / is_live
# ---------------------------------------------------------------------------

def test_deadline_never() -> None:
    assert deadline(None, 1000.0) is None


def test_deadline_finite() -> None:
    assert deadline(10.0, 1000.0) == 1010.0


def test_is_live() -> None:
    assert is_live(Entry("v", None), 1e12) is True
    assert is_live(Entry("v", 1000.0), 1000.0) is True
    assert is_live(Entry("v", 1000.0), 1001.0) is False


# ---------------------------------------------------------------------------
# out-of-range durations and deadlines
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("bad", [float("inf"), float("-inf"), float("nan"), 10**400])
def test_duration_seconds_rejects_non_finite(bad: float) -> None:
    with pytest.raises(ValidationError):
        duration_seconds(bad)


@pytest.mark.parametrize("bad", [float("inf"), float("nan"), 1e12, timedelta(days=999_999_999)])
def test_resolve_rejects_unrepresentable_ttl(bad: object) -> None:
    with pytest.raises(ValidationError):
        resolve_ttl(bad, None)  # type: ignore[arg-type]


def test_normalize_default_rejects_inf() -> None:
    with pytest.raises(ValidationError):
        normalize_default_ttl(float("inf"))


def test_deadline_past_max_rejected() -> None:
    with pytest.raises(ValidationError, match="out of range"):
        deadline(100.0, MAX_DEADLINE)


def test_validate_deadline() -> None:
    assert validate_deadline(None) is None
    assert validate_deadline(1000.0) == 1000.0
    assert validate_deadline(MAX_DEADLINE) == MAX_DEADLINE
    for bad in (float("nan"), float("inf"), -1.0, MAX_DEADLINE + 1):
        with pytest.raises(ValidationError):
            validate_deadline(bad)
