"""Tests for the RSS fetcher, against a mocked HTTP transport."""

from datetime import datetime, timezone

import httpx
import pytest

from feedpulse.ingestion import FetchError, ParseError, RSSFetcher
from feedpulse.ingestion.dates import resolve_published_at
from feedpulse.ingestion.rss_fetcher import html_to_text, parse_feed

from .conftest import EMPTY_RSS_FEED, HTML_PAGE, RSS_FEED

FEED_URL = "https://journal.example.com/rss.xml"
NOW = datetime(2025, 1, 6, 12, 0, tzinfo=timezone.utc)


def make_fetcher(handler, **kwargs) -> RSSFetcher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RSSFetcher(client=client, **kwargs)


def serve(body: bytes, status_code: int = 200, content_type: str = "application/rss+xml; charset=utf-8"):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, content=body, headers={"content-type": content_type})

    return handler


class TestParseFeed:

    def test_channel_metadata(self):
        feed = parse_feed(FEED_URL, RSS_FEED)
        assert feed.title == "Le Journal"
        assert feed.link == "https://journal.example.com"
        assert feed.language == "fr-FR"
        assert feed.item_count == 2

    def test_item_with_media_content(self):
        item = parse_feed(FEED_URL, RSS_FEED).items[0]
        assert item.title == "Premier article"
        assert item.link == "https://journal.example.com/a1"
        assert item.iso_date == datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc)
        assert item.pub_date == "Mon, 06 Jan 2025 10:00:00 +0100"
        assert item.media_url == "https://img.example.com/a1.jpg"
        assert item.creator == "Marie Dupont"
        assert item.categories == ["Politique", "Europe"]
        assert item.content_snippet == "Résumé du premier article"
        assert item.language == "fr-FR"

    def test_missing_updated_does_not_borrow_published(self):
        item = parse_feed(FEED_URL, RSS_FEED).items[0]
        assert item.dc_date is None

    @pytest.mark.parametrize(
        "pub_date, expected",
        [
            ("Mon, 06 Jan 2025 10:00:00 CEST", datetime(2025, 1, 6, 8, 0, tzinfo=timezone.utc)),
            ("Mon, 06 Jan 2025 10:00:00 CET", datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc)),
            ("Mon, 06 Jan 2025 10:00:00 BST", datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc)),
        ],
    )
    def test_european_zone_names_resolve_to_utc(self, pub_date, expected):
        body = (
            '<?xml version="1.0" encoding="UTF-8"?><rss version="2.0"><channel><title>Zones</title>'
            f"<item><title>Heure locale</title><link>https://journal.example.com/tz</link>"
            f"<pubDate>{pub_date}</pubDate></item></channel></rss>"
        ).encode()

        item = parse_feed(FEED_URL, body).items[0]

        assert item.iso_date is None
        assert item.pub_date == pub_date
        assert resolve_published_at(item, now=NOW) == expected

    def test_atom_updated_with_zone_name(self):
        body = b"""<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Atom</title>
  <entry>
    <title>Mise a jour</title>
    <link href="https://journal.example.com/atom"/>
    <updated>Mon, 06 Jan 2025 10:00:00 CEST</updated>
  </entry>
</feed>
"""
        item = parse_feed(FEED_URL, body).items[0]
        assert resolve_published_at(item, now=NOW) == datetime(2025, 1, 6, 8, 0, tzinfo=timezone.utc)

    def test_item_with_encoded_content_and_enclosure(self):
        item = parse_feed(FEED_URL, RSS_FEED).items[1]
        assert item.iso_date == datetime(2025, 1, 5, 8, 30, tzinfo=timezone.utc)
        assert item.dc_date == "2025-01-05T08:30:00Z"
        assert "Texte complet" in item.content_encoded
        assert item.content == "Court résumé"
        assert item.enclosure_url == "https://img.example.com/a2.jpg"
        assert item.media_url is None

    def test_feed_without_items_is_valid(self):
        feed = parse_feed(FEED_URL, EMPTY_RSS_FEED)
        assert feed.items == []
        assert feed.title == "Empty"

    def test_html_page_is_not_a_feed(self):
        with pytest.raises(ParseError) as exc_info:
            parse_feed(FEED_URL, HTML_PAGE, "text/html")
        assert exc_info.value.content_type == "text/html"
        assert exc_info.value.url == FEED_URL


def test_html_to_text():
    assert html_to_text("<p>Un &amp; deux</p>\n<p>trois</p>") == "Un & deux trois"
    assert html_to_text(None) == ""


class TestFetchFeed:

    @pytest.mark.asyncio
    async def test_fetch_and_parse(self):
        fetcher = make_fetcher(serve(RSS_FEED))
        feed = await fetcher.fetch_feed(FEED_URL)
        assert feed.url == FEED_URL
        assert [i.link for i in feed.items] == [
            "https://journal.example.com/a1",
            "https://journal.example.com/a2",
        ]

    @pytest.mark.asyncio
    async def test_sends_user_agent(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["user-agent"] = request.headers.get("user-agent")
            seen["accept"] = request.headers.get("accept")
            return httpx.Response(200, content=RSS_FEED)

        fetcher = make_fetcher(handler, user_agent="feedpulse-test/0.1")
        await fetcher.fetch_feed(FEED_URL)
        assert seen["user-agent"] == "feedpulse-test/0.1"
        assert "application/rss+xml" in seen["accept"]

    @pytest.mark.asyncio
    async def test_not_found_carries_status_code(self):
        fetcher = make_fetcher(serve(b"not found", status_code=404, content_type="text/html"))
        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch_feed(FEED_URL)
        assert exc_info.value.status_code == 404
        assert str(exc_info.value) == "Status code 404"

    @pytest.mark.asyncio
    async def test_timeout_is_a_fetch_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        fetcher = make_fetcher(handler, timeout=5.0)
        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch_feed(FEED_URL)
        assert exc_info.value.status_code is None
        assert "timed out" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_connection_error_is_a_fetch_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        fetcher = make_fetcher(handler)
        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch_feed(FEED_URL)
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_html_response_is_a_parse_error(self):
        fetcher = make_fetcher(serve(HTML_PAGE, content_type="text/html; charset=utf-8"))
        with pytest.raises(ParseError) as exc_info:
            await fetcher.fetch_feed(FEED_URL)
        assert exc_info.value.content_type.startswith("text/html")
