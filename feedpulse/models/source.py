"""Source model for RSS feed sources."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .base import DBModel


class FetchStatus(BaseModel):
    """Outcome of the latest fetch attempt for a source."""

    success: bool = Field(..., description="Whether the last fetch succeeded")
    message: str = Field("", description="Short human-readable summary")
    timestamp: datetime = Field(..., description="When the attempt completed")


class Source(DBModel):
    """RSS feed source model."""

    name: str = Field(..., description="Source name")
    url: str = Field(..., description="Website URL")
    rss_url: str = Field(..., description="RSS/Atom feed URL")
    favicon_url: Optional[str] = Field(None, description="Favicon URL")
    description: Optional[str] = Field(None, description="Short description")
    orientation: List[str] = Field(default_factory=list, description="Editorial orientation tags")
    categories: List[str] = Field(default_factory=list, description="Topic categories")
    enabled: bool = Field(True, description="Whether the source is enabled")
    last_fetched_at: Optional[datetime] = Field(None, description="Last fetch attempt")
    fetch_status: Optional[FetchStatus] = Field(None, description="Outcome of the last fetch attempt")

    @property
    def is_healthy(self) -> bool:
        return self.fetch_status is not None and self.fetch_status.success
