from unittest.mock import MagicMock, patch

import pytest
import requests

from config import DEFAULT_IMAGE_CHECK_TIMEOUT_SECONDS, load_settings
from fake_firestore import FakeClient
from image_check import (
    USER_AGENT,
    ImageCheckResult,
    check_article_images,
    check_image_url,
    fetch_articles_with_images,
)
from models import ArticleRecord


def _response(status_code: int) -> MagicMock:
    mock = MagicMock()
    mock.status_code = status_code
    mock.ok = status_code < 400
    return mock


def test_check_image_url_reachable() -> None:
    with patch("image_check.requests.head", return_value=_response(200)) as mock_head:
        assert check_image_url("https://example.com/a.png", timeout=5) == (True, 200, None)

    mock_head.assert_called_once_with(
        "https://example.com/a.png",
        timeout=5,
        headers={"User-Agent": USER_AGENT},
        allow_redirects=True,
    )


def test_check_image_url_http_error() -> None:
    with patch("image_check.requests.head", return_value=_response(404)):
        assert check_image_url("https://example.com/a.png") == (
            False,
            404,
            "Request failed with HTTP Status 404",
        )


def test_check_image_url_timeout() -> None:
    with patch("image_check.requests.head", side_effect=requests.Timeout("slow")):
        assert check_image_url("https://example.com/a.png", timeout=10) == (
            False,
            None,
            "Request timed out after 10s",
        )


def test_check_image_url_connection_error() -> None:
    with patch("image_check.requests.head", side_effect=requests.ConnectionError("refused")):
        reachable, status_code, error = check_image_url("https://example.com/a.png")

    assert reachable is False
    assert status_code is None
    assert error == "refused"


def test_check_article_images_skips_records_without_image() -> None:
    records = [
        ArticleRecord(id="a1", title="With image", image_url="https://example.com/ok.png"),
        ArticleRecord(id="a2", title="No image"),
        ArticleRecord(id="a3", title="Broken", image_url="https://example.com/gone.png"),
    ]

    with patch("image_check.requests.head", side_effect=[_response(200), _response(410)]):
        results = check_article_images(records)

    assert results == [
        ImageCheckResult("a1", "With image", "https://example.com/ok.png", True, 200, None),
        ImageCheckResult(
            "a3",
            "Broken",
            "https://example.com/gone.png",
            False,
            410,
            "Request failed with HTTP Status 410",
        ),
    ]


def test_fetch_articles_with_images_any_status() -> None:
    client = FakeClient()
    articles = client.collection("articles")
    articles.set("draft", {"title": "Draft", "status": "Draft", "imageUrl": "https://example.com/d.png"})
    articles.set("pub", {"title": "Pub", "status": "Published", "imageUrl": "https://example.com/p.png"})
    articles.set("none", {"title": "No image", "status": "Published", "imageUrl": None})
    articles.set("empty", {"title": "Empty", "status": "Published", "imageUrl": ""})
    articles.set("absent", {"title": "Absent", "status": "Published"})

    records = fetch_articles_with_images(client)

    assert sorted(r.id for r in records) == ["draft", "pub"]


def test_default_timeout_comes_from_settings_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("IMAGE_CHECK_TIMEOUT_SECONDS", raising=False)
    with patch("image_check.requests.head", return_value=_response(200)) as mock_head:
        check_image_url("https://example.com/a.png")

    assert mock_head.call_args.kwargs["timeout"] == DEFAULT_IMAGE_CHECK_TIMEOUT_SECONDS
    assert load_settings().image_check_timeout == DEFAULT_IMAGE_CHECK_TIMEOUT_SECONDS
