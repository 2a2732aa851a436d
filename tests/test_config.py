import pytest
from pydantic import ValidationError

from linguist.config import Settings


def test_review_intervals_default(monkeypatch):
    monkeypatch.delenv("REVIEW_INTERVALS", raising=False)
    s = Settings(_env_file=None)
    assert s.review_intervals == (1, 2, 4, 7, 15, 30)


def test_review_intervals_from_comma_separated_env(monkeypatch):
    monkeypatch.setenv("REVIEW_INTERVALS", "1, 3,9")
    s = Settings(_env_file=None)
    assert s.review_intervals == (1, 3, 9)


@pytest.mark.parametrize("raw", ["", "0,1", "4,2", "-1"])
def test_review_intervals_rejects_invalid_values(monkeypatch, raw):
    monkeypatch.setenv("REVIEW_INTERVALS", raw)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_review_tick_seconds_must_be_positive(monkeypatch):
    monkeypatch.setenv("REVIEW_TICK_SECONDS", "0")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)
