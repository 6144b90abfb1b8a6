"""Shared fixtures: in-memory stand-ins for the Postgres-backed stores."""

from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest

from feedpulse.config import IngestionConfig
from feedpulse.db import UpsertResult
from feedpulse.ingestion import ItemNormalizer, PersistenceError
from feedpulse.ingestion.models import FeedItem, ParsedFeed
from feedpulse.models import Article, FetchStatus, Source

NOW = datetime(2025, 1, 6, 12, 0, tzinfo=timezone.utc)


RSS_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:media="http://search.yahoo.com/mrss/"
     xmlns:content="http://purl.org/rss/1.0/modules/content/"
     xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel>
    <title>Le Journal</title>
    <link>https://journal.example.com</link>
    <description>Toute l'actualit\xc3\xa9</description>
    <language>fr-FR</language>
    <item>
      <title>Premier article</title>
      <link>https://journal.example.com/a1</link>
      <description>&lt;p&gt;R\xc3\xa9sum\xc3\xa9 du premier article&lt;/p&gt;</description>
      <pubDate>Mon, 06 Jan 2025 10:00:00 +0100</pubDate>
      <dc:creator>Marie Dupont</dc:creator>
      <category>Politique</category>
      <category>Europe</category>
      <media:content url="https://img.example.com/a1.jpg" medium="image"/>
    </item>
    <item>
      <title>Deuxi\xc3\xa8me article</title>
      <link>https://journal.example.com/a2</link>
      <description>Court r\xc3\xa9sum\xc3\xa9</description>
      <content:encoded><![CDATA[<p>Texte complet</p><img src="https://img.example.com/inline.png"/>]]></content:encoded>
      <dc:date>2025-01-05T08:30:00Z</dc:date>
      <enclosure url="https://img.example.com/a2.jpg" type="image/jpeg" length="1234"/>
    </item>
  </channel>
</rss>
"""

EMPTY_RSS_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Empty</title>
    <link>https://empty.example.com</link>
    <description>Nothing yet</description>
  </channel>
</rss>
"""

HTML_PAGE = b"""<!DOCTYPE html>
<html><head><title>Accueil</title></head><body><p>Bienvenue</p></body></html>
"""


def make_source(source_id: int = 1, name: str = "Le Journal", **kwargs) -> Source:
    data = dict(
        id=source_id,
        name=name,
        url="https://journal.example.com",
        rss_url=f"https://journal.example.com/rss/{source_id}.xml",
        favicon_url="https://journal.example.com/favicon.ico",
        orientation=["centre"],
        categories=["politique"],
    )
    data.update(kwargs)
    return Source(**data)


def make_item(title: str = "Titre", link: str = "https://journal.example.com/a", **kwargs) -> FeedItem:
    data = dict(title=title, link=link, iso_date=datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc))
    data.update(kwargs)
    return FeedItem(**data)


def make_article(title: str = "Titre", link: str = "https://journal.example.com/a", source_id: int = 1, **kwargs) -> Article:
    data = dict(
        title=title,
        link=link,
        language="fr",
        published_at=datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc),
        source_id=source_id,
        source_name="Le Journal",
    )
    data.update(kwargs)
    return Article(**data)


class FakeSourceRegistry:
    """Source registry kept in a dict."""

    def __init__(self, sources: Optional[List[Source]] = None) -> None:
        self.sources: Dict[int, Source] = {s.id: s for s in (sources or [])}
        self.health_updates: List[tuple] = []
        self.fail_listing = False
        self.fail_health_updates = False

    async def list_all_sources(self) -> List[Source]:
        if self.fail_listing:
            raise RuntimeError("registry unavailable")
        return [s for s in self.sources.values() if s.enabled]

    async def list_sources(self, include_disabled: bool = True) -> List[Source]:
        return [s for s in self.sources.values() if include_disabled or s.enabled]

    async def update_source_health(self, source_id: int, last_fetched_at: datetime, fetch_status: FetchStatus) -> None:
        if self.fail_health_updates:
            raise RuntimeError("health write failed")
        self.health_updates.append((source_id, fetch_status))
        source = self.sources[source_id]
        self.sources[source_id] = source.model_copy(
            update={"last_fetched_at": last_fetched_at, "fetch_status": fetch_status}
        )


class FakeArticleStore:
    """Article store keyed by link, like the unique index on articles.link."""

    def __init__(self) -> None:
        self.by_link: Dict[str, Article] = {}
        self.upsert_calls = 0
        self.fail_upserts = False

    async def find_existing(self, title: str, source_id: int) -> Optional[Article]:
        for article in self.by_link.values():
            if article.title == title and article.source_id == source_id:
                return article
        return None

    async def bulk_upsert_by_link(self, articles: List[Article]) -> UpsertResult:
        self.upsert_calls += 1
        if self.fail_upserts:
            raise PersistenceError("Bulk upsert failed: connection lost")
        result = UpsertResult()
        for article in articles:
            if article.link in self.by_link:
                result.modified_count += 1
            else:
                result.inserted_count += 1
            self.by_link[article.link] = article
        return result

    def count(self) -> int:
        return len(self.by_link)


class FakeFetcher:
    """Serve prepared feeds (or errors) by URL."""

    def __init__(self, responses: Optional[Dict[str, object]] = None) -> None:
        self.responses = responses or {}
        self.requested: List[str] = []

    async def fetch_feed(self, url: str) -> ParsedFeed:
        self.requested.append(url)
        response = self.responses[url]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def source() -> Source:
    return make_source()


@pytest.fixture
def normalizer() -> ItemNormalizer:
    return ItemNormalizer(IngestionConfig())


@pytest.fixture
def article_store() -> FakeArticleStore:
    return FakeArticleStore()
