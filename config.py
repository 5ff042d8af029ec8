"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass

from image_proxy import DEFAULT_PROXY_BASE_URL

DEFAULT_IMAGE_CHECK_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True, slots=True)
class Settings:
    """Immutable settings, loaded once at startup and passed down explicitly."""

    firestore_project: str | None
    articles_collection: str
    image_proxy_base_url: str
    app_base_url: str
    app_name: str
    image_check_timeout: float


def load_settings() -> Settings:
    """Build Settings from environment variables (call after load_dotenv())."""
    return Settings(
        firestore_project=os.getenv("FIRESTORE_PROJECT") or None,
        articles_collection=os.getenv("ARTICLES_COLLECTION", "articles"),
        image_proxy_base_url=os.getenv("IMAGE_PROXY_BASE_URL", DEFAULT_PROXY_BASE_URL).rstrip("?"),
        app_base_url=os.getenv("APP_BASE_URL", "https://your-app-domain.com").rstrip("/"),
        app_name=os.getenv("APP_NAME", "Lumina"),
        image_check_timeout=float(
            os.getenv("IMAGE_CHECK_TIMEOUT_SECONDS", DEFAULT_IMAGE_CHECK_TIMEOUT_SECONDS)
        ),
    )
