"""Data models for ingestion."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class FeedItem(BaseModel):
    """Parsed feed item.

    Every field the feeds disagree on is explicitly optional.
    """

    title: Optional[str] = Field(None, description="Item title")
    link: Optional[str] = Field(None, description="Item URL")
    iso_date: Optional[datetime] = Field(None, description="Date already parsed by the feed parser")
    dc_date: Optional[str] = Field(None, description="Raw Dublin Core dc:date")
    pub_date: Optional[str] = Field(None, description="Raw display publication date")
    content: Optional[str] = Field(None, description="Summary/description HTML")
    content_encoded: Optional[str] = Field(None, description="Full content:encoded HTML")
    content_snippet: Optional[str] = Field(None, description="Plain-text snippet")
    media_url: Optional[str] = Field(None, description="media:content URL")
    enclosure_url: Optional[str] = Field(None, description="Enclosure URL")
    creator: Optional[str] = Field(None, description="Author or dc:creator")
    categories: List[str] = Field(default_factory=list, description="Item categories/tags")
    language: Optional[str] = Field(None, description="Item or feed language")


class ParsedFeed(BaseModel):
    """A fetched and parsed feed."""

    url: str = Field(..., description="Feed URL that was fetched")
    title: Optional[str] = Field(None, description="Feed title")
    link: Optional[str] = Field(None, description="Feed website link")
    description: Optional[str] = Field(None, description="Feed description")
    language: Optional[str] = Field(None, description="Feed language")
    items: List[FeedItem] = Field(default_factory=list, description="Items in feed order")

    @property
    def item_count(self) -> int:
        return len(self.items)
