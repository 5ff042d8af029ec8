"""CLI entrypoint for the Lumina article feed."""

from __future__ import annotations

import argparse
import logging
import sys

from dotenv import load_dotenv
from google.cloud import firestore

from article_actions import resolve_read_action
from article_feed import FeedError, build_published_query, stream_feed
from config import Settings, load_settings
from image_check import check_article_images, fetch_articles_with_images
from image_proxy import get_proxied_image_url
from themes import resolve_theme


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="Watch the published article feed or audit its images")
    parser.add_argument(
        "--mode",
        choices=["watch", "check-images"],
        default="watch",
        help=(
            "'watch' (default): subscribe to published articles and log every snapshot. "
            "'check-images': HEAD-check the image URL of every stored article."
        ),
    )
    parser.add_argument(
        "--web",
        action="store_true",
        help="Resolve image URLs as a browser client would (through the image proxy)",
    )
    parser.add_argument(
        "--max-events",
        type=int,
        default=None,
        help="Stop watching after this many feed events (watch mode only)",
    )
    parser.add_argument(
        "--idle-timeout",
        type=float,
        default=None,
        help="Stop watching after this many seconds without a feed event (watch mode only)",
    )
    return parser.parse_args(argv)


def watch(
    client: firestore.Client,
    settings: Settings,
    is_web: bool,
    max_events: int | None = None,
    idle_timeout: float | None = None,
) -> int:
    """Log the live feed until max_events, idle_timeout or Ctrl-C. Returns events seen."""
    query = build_published_query(client, settings.articles_collection)
    seen = 0
    events = stream_feed(query, timeout=idle_timeout)
    try:
        for event in events:
            seen += 1
            if isinstance(event, FeedError):
                logging.warning(
                    "Feed error: %s (keeping %s last known articles)",
                    event.error,
                    len(event.last_known),
                )
            else:
                logging.info("Feed snapshot: %s published articles", len(event.articles))
                for article in event.articles:
                    theme = resolve_theme(article.article_type)
                    image = (
                        get_proxied_image_url(article.image_url, is_web, settings.image_proxy_base_url)
                        if article.image_url
                        else "-"
                    )
                    action = resolve_read_action(article)
                    logging.info(
                        "  %s [%s accent=%s] %s | image=%s | action=%s",
                        article.published_at.isoformat() if article.published_at else "undated",
                        article.article_type,
                        theme.accent,
                        article.title,
                        image,
                        action.label if action else "-",
                    )
            if max_events is not None and seen >= max_events:
                break
    except KeyboardInterrupt:
        logging.info("Interrupted, releasing feed listener")
    finally:
        events.close()
    return seen


def check_images(client: firestore.Client, settings: Settings) -> int:
    """Report unreachable article images. Returns the number of unreachable URLs."""
    records = fetch_articles_with_images(client, settings.articles_collection)
    if not records:
        logging.info("No articles with an imageUrl found")
        return 0

    logging.info("Checking %s article image URLs", len(records))
    results = check_article_images(records, timeout=settings.image_check_timeout)
    unreachable = [r for r in results if not r.reachable]

    logging.info("Reachable: %s, unreachable: %s", len(results) - len(unreachable), len(unreachable))
    for result in unreachable:
        logging.info(
            "Unreachable: %r (id=%s) url=%s reason=%s",
            result.title,
            result.article_id,
            result.image_url,
            result.error,
        )
    return len(unreachable)


def main(argv: list[str] | None = None) -> int:
    """Initialize config and run the selected mode."""
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = parse_args(argv)
    settings = load_settings()
    client = firestore.Client(project=settings.firestore_project)

    if args.mode == "check-images":
        return 1 if check_images(client, settings) else 0

    watch(
        client,
        settings,
        is_web=args.web,
        max_events=args.max_events,
        idle_timeout=args.idle_timeout,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
