"""
Attribution Tests

Test classes:
    TestCaptureOnce      — first-touch capture into session storage
    TestResolveLabel     — label precedence (UTM, referrer, direct)
    TestReferrerLabel    — curated table, plain referrals, malformed referrers
"""

import json

import pytest

from traffic_source.services.attribution_service import AttributionStore, extract_utm_params, referrer_label
from traffic_source.utils.session import InMemorySessionStorage

PAGE_URL = "https://example.com/services"


@pytest.fixture
def storage():
    return InMemorySessionStorage()


@pytest.fixture
def store(storage):
    return AttributionStore(storage)


# ══════════════════════════════════════════════════════════════════════════════
# 1. TestCaptureOnce
# ══════════════════════════════════════════════════════════════════════════════


class TestCaptureOnce:
    def test_writes_both_slots_on_first_visit(self, store, storage):
        assert store.capture_once(PAGE_URL, "") is True
        assert storage.get_item("wego_utm") == "{}"
        assert storage.get_item("wego_referrer") == ""

    def test_captures_recognised_utm_params_only(self, store):
        url = f"{PAGE_URL}?utm_source=newsletter&utm_medium=email&utm_campaign=spring&gclid=123&utm_foo=bar"
        store.capture_once(url, "")
        assert store.utm_params() == {"utm_source": "newsletter", "utm_medium": "email", "utm_campaign": "spring"}

    def test_empty_utm_values_are_not_stored(self, store):
        store.capture_once(f"{PAGE_URL}?utm_medium=&utm_term=shoes", "")
        assert store.utm_params() == {"utm_term": "shoes"}

    def test_external_referrer_stored_trimmed(self, store):
        store.capture_once(PAGE_URL, "  https://www.google.com/search?q=x  ")
        assert store.referrer() == "https://www.google.com/search?q=x"

    def test_internal_referrer_not_stored(self, store):
        store.capture_once(PAGE_URL, "https://EXAMPLE.com/previous-page")
        assert store.referrer() == ""

    def test_unparseable_referrer_stored_as_external(self, store):
        store.capture_once(PAGE_URL, "not a url")
        assert store.referrer() == "not a url"

    def test_second_capture_is_a_no_op(self, store, storage):
        store.capture_once(f"{PAGE_URL}?utm_medium=cpc", "https://www.bing.com/")
        first = dict(storage._items)

        assert store.capture_once(f"{PAGE_URL}?utm_medium=email&utm_term=x", "https://duckduckgo.com/") is False
        assert storage._items == first

    def test_no_op_when_only_referrer_slot_exists(self, storage):
        storage.set_item("wego_referrer", "")
        store = AttributionStore(storage)

        assert store.capture_once(f"{PAGE_URL}?utm_medium=email", "") is False
        assert storage.get_item("wego_utm") is None

    def test_no_op_when_only_utm_slot_exists(self, storage):
        storage.set_item("wego_utm", json.dumps({"utm_medium": "social"}))
        store = AttributionStore(storage)

        assert store.capture_once(PAGE_URL, "https://www.google.com/") is False
        assert storage.get_item("wego_referrer") is None

    def test_extract_utm_params_takes_first_value(self):
        assert extract_utm_params("https://example.com/?utm_medium=a&utm_medium=b") == {"utm_medium": "a"}


# ══════════════════════════════════════════════════════════════════════════════
# 2. TestResolveLabel
# ══════════════════════════════════════════════════════════════════════════════


class TestResolveLabel:
    def test_utm_medium_and_term(self, store, storage):
        storage.set_item("wego_utm", json.dumps({"utm_medium": "email", "utm_term": "spring"}))
        storage.set_item("wego_referrer", "https://www.google.com/")
        assert store.resolve_label() == "Tracked: email - spring"

    def test_utm_medium_only(self, store):
        store.capture_once(f"{PAGE_URL}?utm_medium=cpc", "")
        assert store.resolve_label() == "Tracked: cpc"

    def test_utm_without_medium_falls_through_to_referrer(self, store):
        store.capture_once(f"{PAGE_URL}?utm_source=fb&utm_term=x", "https://randomsite.example/page")
        assert store.resolve_label() == "Referral from randomsite.example"

    def test_search_engine_referrer(self, store):
        store.capture_once(PAGE_URL, "https://www.google.com/search?q=x")
        assert store.resolve_label() == "Organic Search: Google"

    def test_direct_when_nothing_stored(self, store):
        store.capture_once(PAGE_URL, "")
        assert store.resolve_label() == "Direct"

    def test_direct_before_capture(self, store):
        assert store.resolve_label() == "Direct"

    def test_unreadable_utm_slot_is_ignored(self, store, storage):
        storage.set_item("wego_utm", "{broken")
        storage.set_item("wego_referrer", "")
        assert store.resolve_label() == "Direct"


# ══════════════════════════════════════════════════════════════════════════════
# 3. TestReferrerLabel
# ══════════════════════════════════════════════════════════════════════════════


class TestReferrerLabel:
    @pytest.mark.parametrize(
        "referrer,label",
        [
            ("https://www.bing.com/search?q=plumber", "Organic Search: Bing"),
            ("https://duckduckgo.com/", "Organic Search: DuckDuckGo"),
            ("https://mail.google.com/mail/u/0/", "Email: Gmail"),
            ("https://outlook.live.com/mail/0/inbox", "Email: Outlook"),
            ("https://WWW.GOOGLE.COM/", "Organic Search: Google"),
        ],
    )
    def test_curated_sources(self, referrer, label):
        assert referrer_label(referrer) == label

    def test_hostname_match_is_exact(self):
        assert referrer_label("https://google.com.evil.example/") == "Referral from google.com.evil.example"
        assert referrer_label("https://notgoogle.com/") == "Referral from notgoogle.com"

    def test_plain_referral(self):
        assert referrer_label("https://randomsite.example/page") == "Referral from randomsite.example"

    def test_malformed_referrer_short(self):
        assert referrer_label("garbage") == "Malformed Referral: garbage"

    def test_malformed_referrer_truncated_with_ellipsis(self):
        referrer = "x" * 150
        assert referrer_label(referrer) == "Malformed Referral: " + "x" * 100 + "…"

    def test_malformed_referrer_exactly_100_chars_not_truncated(self):
        referrer = "y" * 100
        assert referrer_label(referrer) == "Malformed Referral: " + referrer

    def test_malformed_ipv6_referrer_does_not_raise(self):
        assert referrer_label("http://[::1").startswith("Malformed Referral: ")
