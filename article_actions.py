"""Per-article actions shown on feed cards (read link, share text, labels)."""

from __future__ import annotations

from dataclasses import dataclass

from models import ArticleRecord

DEEP_DIVE_ARTICLE_TYPE = "Misinformation"


@dataclass(frozen=True, slots=True)
class ReadAction:
    label: str
    link: str
    opens_deep_dive: bool


def article_view_path(article_id: str) -> str:
    return f"#/view/{article_id}"


def has_deep_dive(record: ArticleRecord) -> bool:
    """Only fact-checks carry an in-app deep dive; everything else links out."""
    return record.article_type == DEEP_DIVE_ARTICLE_TYPE and bool(record.deep_dive_content)


def resolve_read_action(record: ArticleRecord) -> ReadAction | None:
    """Pick the card's primary action, or None when there is nothing to open."""
    if has_deep_dive(record):
        return ReadAction(
            label="Read Full Story",
            link=article_view_path(record.id),
            opens_deep_dive=True,
        )
    if record.source_url:
        return ReadAction(
            label=f"Read at {record.source_title or 'Source'}",
            link=record.source_url,
            opens_deep_dive=False,
        )
    return None


def share_message(record: ArticleRecord, app_base_url: str, app_name: str = "Lumina") -> str:
    share_url = f"{app_base_url.rstrip('/')}/{article_view_path(record.id)}"
    return f"Read on {app_name}: {record.title}\n{share_url}"


def category_label(record: ArticleRecord) -> str:
    return ", ".join(record.categories).upper()
