"""
Session storage backend tests
"""

from unittest.mock import MagicMock, patch

from traffic_source.services.attribution_service import AttributionStore
from traffic_source.utils.session import InMemorySessionStorage, RedisSessionStorage


class TestInMemorySessionStorage:
    def test_get_missing_returns_none(self):
        assert InMemorySessionStorage().get_item("wego_utm") is None

    def test_set_get_remove(self):
        storage = InMemorySessionStorage()
        storage.set_item("wego_referrer", "")

        assert storage.get_item("wego_referrer") == ""
        storage.remove_item("wego_referrer")
        assert storage.get_item("wego_referrer") is None

    def test_values_stored_as_strings(self):
        storage = InMemorySessionStorage({"a": "1"})
        storage.set_item("b", 2)

        assert storage.get_item("b") == "2"
        assert len(storage) == 2


class TestRedisSessionStorage:
    def test_keys_are_namespaced_by_session(self):
        client = MagicMock()
        storage = RedisSessionStorage(client, "sess-123", ttl_seconds=600)

        storage.set_item("wego_utm", "{}")

        client.setex.assert_called_once_with("session:sess-123:wego_utm", 600, "{}")

    def test_get_decodes_bytes(self):
        client = MagicMock()
        client.get.return_value = b"https://www.google.com/"
        storage = RedisSessionStorage(client, "sess-123")

        assert storage.get_item("wego_referrer") == "https://www.google.com/"
        client.get.assert_called_once_with("session:sess-123:wego_referrer")

    def test_get_missing_returns_none(self):
        client = MagicMock()
        client.get.return_value = None

        assert RedisSessionStorage(client, "s").get_item("wego_utm") is None

    def test_remove(self):
        client = MagicMock()
        RedisSessionStorage(client, "s").remove_item("wego_utm")

        client.delete.assert_called_once_with("session:s:wego_utm")

    def test_default_ttl_from_settings(self):
        from traffic_source.config import settings

        assert RedisSessionStorage(MagicMock(), "s").ttl_seconds == settings.session_ttl_seconds

    def test_from_url(self):
        with patch("traffic_source.utils.session.redis.Redis.from_url") as from_url:
            storage = RedisSessionStorage.from_url("redis://localhost:6379/0", "s")

        from_url.assert_called_once_with("redis://localhost:6379/0", decode_responses=True)
        assert storage._redis is from_url.return_value

    def test_capture_once_shared_across_pages_of_a_session(self):
        data = {}
        client = MagicMock()
        client.get.side_effect = data.get
        client.setex.side_effect = lambda key, ttl, value: data.__setitem__(key, value)

        first = AttributionStore(RedisSessionStorage(client, "visitor"))
        second = AttributionStore(RedisSessionStorage(client, "visitor"))

        assert first.capture_once("https://example.com/?utm_medium=email", "") is True
        assert second.capture_once("https://example.com/pricing", "https://www.google.com/") is False
        assert second.resolve_label() == "Tracked: email"
