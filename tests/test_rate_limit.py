"""Tests for the Redis-backed rate limiter."""

from unittest.mock import MagicMock, patch

import pytest
import redis

import usergate.services.rate_limit as rate_limit_module
from usergate.errors import TooManyRequests
from usergate.services.rate_limit import enforce, get_redis, hit, rate_limit_key

KEY = "ratelimit:login:1.2.3.4"


class FakePipeline:
    """Queues INCR/EXPIRE and applies them together on execute, like MULTI/EXEC."""

    def __init__(self, store):
        self.store = store
        self.commands = []

    def incr(self, key):
        self.commands.append(("incr", key, None, False))

    def expire(self, key, seconds, nx=False):
        self.commands.append(("expire", key, seconds, nx))

    def execute(self):
        if self.store.failures:
            self.store.failures -= 1
            raise redis.ConnectionError("connection reset")
        results = []
        for name, key, seconds, nx in self.commands:
            if name == "incr":
                self.store.counts[key] = self.store.counts.get(key, 0) + 1
                results.append(self.store.counts[key])
            elif nx and key in self.store.ttls:
                results.append(False)
            else:
                self.store.ttls[key] = seconds
                results.append(True)
        return results


class FakeRedis:
    def __init__(self):
        self.counts = {}
        self.ttls = {}
        self.failures = 0

    def pipeline(self, transaction=True):
        assert transaction
        return FakePipeline(self)


@pytest.fixture
def fake_redis():
    """Install an in-memory Redis stand-in for the duration of a test."""
    client = FakeRedis()
    rate_limit_module._redis = client
    yield client
    rate_limit_module._redis = None


@pytest.fixture
def mock_redis():
    """Install a mock Redis client whose pipeline returns ``count`` on execute."""
    client = MagicMock()
    rate_limit_module._redis = client
    yield client
    rate_limit_module._redis = None


def _set_count(mock_redis, count):
    mock_redis.pipeline.return_value.execute.return_value = [count, True]


class TestGetRedis:
    """Tests for get_redis."""

    def test_creates_redis_client(self):
        rate_limit_module._redis = None

        with patch("usergate.services.rate_limit.redis.from_url") as mock_from_url:
            mock_client = MagicMock()
            mock_from_url.return_value = mock_client

            assert get_redis() == mock_client
            mock_from_url.assert_called_once()

        rate_limit_module._redis = None

    def test_reuses_existing_client(self, mock_redis):
        with patch("usergate.services.rate_limit.redis.from_url") as mock_from_url:
            assert get_redis() == mock_redis
            mock_from_url.assert_not_called()


class TestHit:
    """Tests for the fixed-window counter."""

    def test_counts_and_expires_in_one_transaction(self, mock_redis):
        _set_count(mock_redis, 1)

        assert hit("login", "1.2.3.4", limit=5, window_seconds=60)
        mock_redis.pipeline.assert_called_once_with(transaction=True)
        pipe = mock_redis.pipeline.return_value
        pipe.incr.assert_called_once_with(KEY)
        pipe.expire.assert_called_once_with(KEY, 60, nx=True)

    def test_first_hit_sets_expiry(self, fake_redis):
        assert hit("login", "1.2.3.4", limit=5, window_seconds=60)
        assert fake_redis.counts == {KEY: 1}
        assert fake_redis.ttls == {KEY: 60}

    def test_later_hits_keep_window(self, fake_redis):
        hit("login", "1.2.3.4", limit=5, window_seconds=60)
        fake_redis.ttls[KEY] = 12

        hit("login", "1.2.3.4", limit=5, window_seconds=60)
        assert fake_redis.ttls[KEY] == 12

    def test_limit_boundary(self, fake_redis):
        results = [hit("login", "1.2.3.4", limit=3, window_seconds=60) for _ in range(5)]
        assert results == [True, True, True, False, False]

    def test_failed_transaction_never_leaves_counter_without_expiry(self, fake_redis):
        fake_redis.failures = 1

        results = [hit("login", "1.2.3.4", limit=3, window_seconds=60) for _ in range(6)]

        # The failed call fails open and changes nothing
        assert results == [True, True, True, True, False, False]
        assert fake_redis.counts == {KEY: 5}
        assert fake_redis.ttls == {KEY: 60}

    def test_counter_without_expiry_is_rearmed(self, fake_redis):
        fake_redis.counts[KEY] = 40

        assert not hit("login", "1.2.3.4", limit=3, window_seconds=60)
        assert fake_redis.ttls == {KEY: 60}

    def test_redis_failure_allows_request(self, mock_redis):
        mock_redis.pipeline.return_value.execute.side_effect = redis.ConnectionError("down")

        assert hit("login", "1.2.3.4", limit=5, window_seconds=60)


class TestEnforce:
    """Tests for enforce and the endpoint wiring."""

    def test_disabled_does_not_touch_redis(self, mock_redis):
        with patch.object(rate_limit_module.settings, "rate_limit_enabled", False):
            enforce("login", "1.2.3.4")
        mock_redis.pipeline.assert_not_called()

    def test_enabled_over_limit_raises(self, mock_redis):
        _set_count(mock_redis, 99)
        with patch.object(rate_limit_module.settings, "rate_limit_enabled", True):
            with pytest.raises(TooManyRequests):
                enforce("login", "1.2.3.4")

    def test_login_endpoint_returns_429(self, client, mock_redis):
        _set_count(mock_redis, 99)
        with patch.object(rate_limit_module.settings, "rate_limit_enabled", True):
            response = client.post(
                "/api/auth/login", json={"email": "a@x.com", "password": "123456"}
            )
        assert response.status_code == 429
        assert response.json()["success"] is False
        mock_redis.pipeline.return_value.incr.assert_called_once_with(
            rate_limit_key("login", "testclient")
        )

    def test_register_endpoint_within_limit(self, client, mock_redis):
        _set_count(mock_redis, 1)
        with patch.object(rate_limit_module.settings, "rate_limit_enabled", True):
            response = client.post(
                "/api/auth/register",
                json={"name": "T", "email": "t@e.com", "password": "123456"},
            )
        assert response.status_code == 200
