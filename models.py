"""Shared typed models for the article feed."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

PUBLISHED_STATUS = "Published"
DEFAULT_TITLE = "No Title"
# Same key as the fallback theme, so untyped and unknown articles render alike.
DEFAULT_ARTICLE_TYPE = "Trending Topic"


@dataclass(frozen=True, slots=True)
class ArticleRecord:
    """Normalized article record built from one Firestore document."""

    id: str
    title: str = DEFAULT_TITLE
    flash_content: str = ""
    deep_dive_content: str = ""
    image_url: str | None = None
    article_type: str = DEFAULT_ARTICLE_TYPE
    categories: tuple[str, ...] = ()
    source_title: str = ""
    source_url: str = ""
    status: str = ""
    published_at: datetime | None = None

    @property
    def has_image(self) -> bool:
        return bool(self.image_url)

    @property
    def is_published(self) -> bool:
        return self.status == PUBLISHED_STATUS


@dataclass(frozen=True, slots=True)
class ArticleTheme:
    """Four-color palette (CSS hex strings) for one article type."""

    base: str
    accent: str
    text: str
    text_secondary: str
