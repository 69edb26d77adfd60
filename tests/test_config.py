"""Settings tests."""

import pytest
from pydantic import ValidationError

from marketwire.config import Settings


def test_defaults_match_log_capacities():
    s = Settings()
    assert s.chat_log_capacity == 100
    assert s.notification_log_capacity == 100
    assert s.search_log_capacity == 1000
    assert s.presence_ttl_seconds == 300


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("MARKETWIRE_CHAT_LOG_CAPACITY", "25")
    monkeypatch.setenv("MARKETWIRE_REDIS_URL", "redis://cache:6379/2")
    s = Settings()
    assert s.chat_log_capacity == 25
    assert s.redis_url == "redis://cache:6379/2"


@pytest.mark.parametrize("field", ["chat_log_capacity", "presence_ttl_seconds", "search_log_capacity"])
def test_non_positive_limits_are_rejected(field):
    with pytest.raises(ValidationError):
        Settings(**{field: 0})
