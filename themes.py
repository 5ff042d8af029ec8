"""Article-type color themes."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from models import DEFAULT_ARTICLE_TYPE, ArticleTheme

# Keys must match the articleType values stored in Firestore exactly.
# text_secondary is the text color at 80% opacity.
ARTICLE_TYPE_THEMES: Mapping[str, ArticleTheme] = MappingProxyType({
    "Positive News": ArticleTheme(
        base="#E8F5E9",
        accent="#43A047",
        text="#1B5E20",
        text_secondary="#1B5E20CC",
    ),
    "Research Breakthrough": ArticleTheme(
        base="#E3F2FD",
        accent="#1976D2",
        text="#0D47A1",
        text_secondary="#0D47A1CC",
    ),
    "Misinformation": ArticleTheme(
        base="#FFF3E0",
        accent="#FB8C00",
        text="#E65100",
        text_secondary="#E65100CC",
    ),
    "Trending Topic": ArticleTheme(
        base="#F5F5F5",
        accent="#616161",
        text="#212121",
        text_secondary="#212121CC",
    ),
})

DEFAULT_THEME: ArticleTheme = ARTICLE_TYPE_THEMES[DEFAULT_ARTICLE_TYPE]


def resolve_theme(
    article_type: Any,
    themes: Mapping[str, ArticleTheme] = ARTICLE_TYPE_THEMES,
) -> ArticleTheme:
    """Return the theme for article_type, or DEFAULT_THEME for anything unknown.

    Matching is exact: "positive news" or " Positive News" fall back too.
    """
    if not isinstance(article_type, str):
        return DEFAULT_THEME
    return themes.get(article_type, DEFAULT_THEME)
