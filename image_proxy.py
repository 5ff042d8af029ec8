"""Image URL rewriting for browser clients."""

from __future__ import annotations

from urllib.parse import quote

# Deployed imageProxy function; it refetches the image server-side and
# re-serves it with permissive CORS headers.
DEFAULT_PROXY_BASE_URL = "https://imageproxy-xgafrhthwa-ew.a.run.app"

# Characters JavaScript's encodeURIComponent leaves unescaped besides A-Z a-z 0-9 - _ . ~
_UNRESERVED_EXTRA = "!*'()"


def get_proxied_image_url(
    original_url: str,
    is_web: bool,
    proxy_base_url: str = DEFAULT_PROXY_BASE_URL,
) -> str:
    """Return the URL a client should load original_url from.

    Native clients are not subject to CORS and get the URL unchanged; browser
    clients get it routed through the image proxy as a ?url= parameter.
    """
    if not is_web:
        return original_url
    return f"{proxy_base_url}?url={quote(original_url, safe=_UNRESERVED_EXTRA)}"
