"""Defensive mapping from raw Firestore article documents to ArticleRecord."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from models import DEFAULT_ARTICLE_TYPE, DEFAULT_TITLE, ArticleRecord

LOGGER = logging.getLogger(__name__)


def parse_snapshot(snapshot: Any) -> ArticleRecord:
    """Parse a Firestore DocumentSnapshot (or anything with .id and .to_dict())."""
    return parse_article(snapshot.id, snapshot.to_dict())


def parse_article(doc_id: str, data: Mapping[str, Any] | None) -> ArticleRecord:
    """Map one untyped document payload into an ArticleRecord.

    Every field has a total default, so this never raises: a missing or
    wrongly-typed value degrades to the default instead of failing the feed.

    Args:
        doc_id: Identifier assigned by the store.
        data: Document payload; None is treated as an empty document.
    """
    if not isinstance(data, Mapping):
        if data is not None:
            LOGGER.debug("Article %s: payload is %s, not a mapping", doc_id, type(data).__name__)
        data = {}

    return ArticleRecord(
        id=doc_id,
        title=_str_field(doc_id, data, "title", DEFAULT_TITLE),
        flash_content=_str_field(doc_id, data, "flashContent", ""),
        deep_dive_content=_str_field(doc_id, data, "deepDiveContent", ""),
        image_url=_optional_str(data.get("imageUrl")),
        article_type=_str_field(doc_id, data, "articleType", DEFAULT_ARTICLE_TYPE),
        categories=_as_categories(data.get("categories")),
        source_title=_str_field(doc_id, data, "sourceTitle", ""),
        source_url=_str_field(doc_id, data, "sourceUrl", ""),
        status=_str_field(doc_id, data, "status", ""),
        published_at=parse_published_at(data.get("publishedAt")),
    )


def parse_published_at(raw: Any) -> datetime | None:
    """Convert a stored publishedAt value into a UTC datetime, or None.

    Accepts Firestore timestamps (datetime subclasses), protobuf Timestamps,
    exported {"seconds", "nanoseconds"} mappings and ISO-8601 strings left
    over from legacy records.
    """
    if raw is None:
        return None

    if isinstance(raw, datetime):
        return _as_utc(raw)

    if hasattr(raw, "ToDatetime"):
        try:
            return raw.ToDatetime(tzinfo=UTC)
        except (TypeError, ValueError, OverflowError):
            return None

    if isinstance(raw, Mapping):
        return _parse_exported_timestamp(raw)

    if isinstance(raw, str):
        return _parse_iso_datetime(raw)

    return None


def _parse_exported_timestamp(raw: Mapping[str, Any]) -> datetime | None:
    seconds = raw.get("seconds", raw.get("_seconds"))
    nanos = raw.get("nanoseconds", raw.get("_nanoseconds", 0))
    if isinstance(seconds, bool) or not isinstance(seconds, int):
        return None
    if isinstance(nanos, bool) or not isinstance(nanos, int):
        nanos = 0
    try:
        return datetime.fromtimestamp(seconds + nanos / 1_000_000_000, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def _parse_iso_datetime(raw: str) -> datetime | None:
    value = raw.strip()
    if not value:
        return None

    # Legacy records were written as RFC3339 strings with a trailing Z.
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None

    return _as_utc(parsed)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _as_categories(value: Any) -> tuple[str, ...]:
    # Non-string elements are dropped rather than stringified.
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(item for item in value if isinstance(item, str))


def _str_field(doc_id: str, data: Mapping[str, Any], key: str, default: str) -> str:
    value = data.get(key)
    if isinstance(value, str):
        return value
    if value is not None:
        LOGGER.debug(
            "Article %s: field %s has type %s, using default",
            doc_id,
            key,
            type(value).__name__,
        )
    return default


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None
