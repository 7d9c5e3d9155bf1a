"""
Link Click event source tests
"""

import logging

from conftest import tracked

PHONE_LINKS = """
<header>
  <a id="call" href="tel:+15551234"><span class="icon"><b>Call us</b></span></a>
  <a id="no-href" class="tel-button">Call (no href)</a>
  <a id="other" href="https://example.com/contact">Contact</a>
</header>
"""


class TestLinkClick:
    def test_nested_click_emits_raw_href(self, make_page, make_engine):
        page = make_page(PHONE_LINKS)
        engine = make_engine(page, [tracked("phone_call", type="link_click", selector='a[href^="tel:"]')])

        page.click(page.document.select_one("b"))

        assert engine.transport.primary_values == ["tel:+15551234"]
        assert engine.transport.sent[0].event_type == "phone_call"

    def test_href_is_not_resolved_to_absolute(self, make_page, make_engine):
        page = make_page('<a class="rel" href="/book-now">Book</a>', url="https://example.com/a/b")
        engine = make_engine(page, [tracked("booking", type="link_click", selector="a.rel")])

        page.click(page.document.select_one("a.rel"))

        assert engine.transport.primary_values == ["/book-now"]

    def test_anchor_without_href_never_emits(self, make_page, make_engine):
        page = make_page(PHONE_LINKS)
        engine = make_engine(page, [tracked("phone_call", type="link_click", selector="a")])

        page.click(page.document.select_one("#no-href"))

        assert engine.transport.sent == []

    def test_click_outside_selector_ignored(self, make_page, make_engine):
        page = make_page(PHONE_LINKS)
        engine = make_engine(page, [tracked("phone_call", type="link_click", selector='a[href^="tel:"]')])

        page.click(page.document.select_one("#other"))

        assert engine.transport.sent == []

    def test_each_click_emits(self, make_page, make_engine):
        page = make_page(PHONE_LINKS)
        engine = make_engine(page, [tracked("phone_call", type="link_click", selector='a[href^="tel:"]')])
        link = page.document.select_one("#call")

        page.click(link)
        page.click(link)

        assert len(engine.transport.sent) == 2

    def test_not_armed_when_nothing_matches(self, make_page, make_engine, caplog):
        page = make_page(PHONE_LINKS)
        with caplog.at_level(logging.INFO):
            engine = make_engine(page, [tracked("booking", type="link_click", selector="a.calendly")])

        assert engine.armed_events == []
        assert page.listener_count("click") == 0
        assert any(getattr(r, "slug", None) == "booking" for r in caplog.records)

    def test_invalid_selector_does_not_raise(self, make_page, make_engine, caplog):
        page = make_page(PHONE_LINKS)
        with caplog.at_level(logging.INFO):
            engine = make_engine(page, [tracked("phone_call", type="link_click", selector='a[href^="tel:"')])

        assert engine.is_armed
        assert engine.armed_events == []
        diagnostics = [r for r in caplog.records if getattr(r, "slug", None) == "phone_call"]
        assert len(diagnostics) == 1
        assert diagnostics[0].levelno == logging.WARNING
