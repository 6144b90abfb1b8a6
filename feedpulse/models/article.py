"""Article model for ingested feed items."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .base import DBModel

UNSPECIFIED_CREATOR = "non-spécifié"


class Article(DBModel):
    """Canonical article record.

    ``link`` is the natural identity. ``(title, source_id)`` is only used to
    suppress duplicates before writing.
    """

    title: str = Field(..., description="Article title")
    link: str = Field(..., description="Canonical article URL")
    content: str = Field("", description="Article body as published in the feed")
    content_snippet: str = Field("", description="Short plain-text excerpt")
    image: Optional[str] = Field(None, description="Representative image URL")
    tags: List[str] = Field(default_factory=list, description="Free-form item tags")
    language: str = Field(..., description="Language code")
    creator: str = Field(UNSPECIFIED_CREATOR, description="Author or creator")
    published_at: datetime = Field(..., description="Publication timestamp (UTC)")
    source_id: int = Field(..., description="Foreign key to sources table")
    source_name: str = Field(..., description="Source name at ingestion time")
    source_favicon: Optional[str] = Field(None, description="Source favicon at ingestion time")
    orientations: List[str] = Field(default_factory=list, description="Source orientation at ingestion time")
    categories: List[str] = Field(default_factory=list, description="Source categories at ingestion time")
