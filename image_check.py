"""Reachability checks for article image URLs."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import requests
from google.cloud.firestore_v1.base_query import FieldFilter

from article_parser import parse_snapshot
from config import DEFAULT_IMAGE_CHECK_TIMEOUT_SECONDS
from models import ArticleRecord

USER_AGENT = "Lumina-Image-URL-Checker/1.0"

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ImageCheckResult:
    article_id: str
    title: str
    image_url: str
    reachable: bool
    status_code: int | None = None
    error: str | None = None


def fetch_articles_with_images(client: Any, collection: str = "articles") -> list[ArticleRecord]:
    """Return every stored article (any status) that has a non-empty imageUrl."""
    query = client.collection(collection).where(filter=FieldFilter("imageUrl", "!=", None))
    records = [parse_snapshot(doc) for doc in query.stream()]
    return [record for record in records if record.has_image]


def check_image_url(url: str, timeout: float = DEFAULT_IMAGE_CHECK_TIMEOUT_SECONDS) -> tuple[bool, int | None, str | None]:
    """HEAD the URL (following redirects) and return (reachable, status_code, error)."""
    try:
        response = requests.head(
            url,
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
            allow_redirects=True,
        )
    except requests.Timeout:
        return False, None, f"Request timed out after {timeout:g}s"
    except requests.RequestException as exc:
        return False, None, str(exc) or "Unknown request error"

    if response.ok:
        return True, response.status_code, None
    return False, response.status_code, f"Request failed with HTTP Status {response.status_code}"


def check_article_images(
    records: Iterable[ArticleRecord],
    timeout: float = DEFAULT_IMAGE_CHECK_TIMEOUT_SECONDS,
) -> list[ImageCheckResult]:
    """Check each record's image URL; records without an image are skipped."""
    results: list[ImageCheckResult] = []
    for record in records:
        if not record.image_url:
            continue
        reachable, status_code, error = check_image_url(record.image_url, timeout=timeout)
        if not reachable:
            LOGGER.warning(
                "Unreachable image for article_id=%s url=%s: %s",
                record.id,
                record.image_url,
                error,
            )
        results.append(
            ImageCheckResult(
                article_id=record.id,
                title=record.title,
                image_url=record.image_url,
                reachable=reachable,
                status_code=status_code,
                error=error,
            )
        )

    LOGGER.info(
        "Image check: checked=%s reachable=%s unreachable=%s",
        len(results),
        sum(1 for r in results if r.reachable),
        sum(1 for r in results if not r.reachable),
    )
    return results
