from typing import Any

import pytest

from models import ArticleTheme
from themes import ARTICLE_TYPE_THEMES, DEFAULT_THEME, resolve_theme


@pytest.mark.parametrize(("article_type", "expected"), [
    ("Positive News", ArticleTheme("#E8F5E9", "#43A047", "#1B5E20", "#1B5E20CC")),
    ("Research Breakthrough", ArticleTheme("#E3F2FD", "#1976D2", "#0D47A1", "#0D47A1CC")),
    ("Misinformation", ArticleTheme("#FFF3E0", "#FB8C00", "#E65100", "#E65100CC")),
    ("Trending Topic", ArticleTheme("#F5F5F5", "#616161", "#212121", "#212121CC")),
])
def test_known_types_return_exact_palette(article_type: str, expected: ArticleTheme) -> None:
    assert resolve_theme(article_type) == expected


@pytest.mark.parametrize("article_type", [
    "",
    "Normal",
    "positive news",
    "POSITIVE NEWS",
    " Misinformation",
    "Misinformation ",
    "Sports",
    None,
    42,
    ["Positive News"],
])
def test_unknown_types_fall_back_to_trending_topic(article_type: Any) -> None:
    assert resolve_theme(article_type) is DEFAULT_THEME
    assert DEFAULT_THEME == ARTICLE_TYPE_THEMES["Trending Topic"]


def test_theme_table_is_read_only() -> None:
    with pytest.raises(TypeError):
        ARTICLE_TYPE_THEMES["Sports"] = DEFAULT_THEME


def test_custom_table_still_falls_back_to_default() -> None:
    sports = ArticleTheme("#000000", "#111111", "#222222", "#222222CC")
    table = {"Sports": sports}

    assert resolve_theme("Sports", themes=table) is sports
    assert resolve_theme("Positive News", themes=table) is DEFAULT_THEME
