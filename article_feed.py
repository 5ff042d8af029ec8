"""Live subscription to the published-articles feed in Firestore."""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from google.api_core.exceptions import GoogleAPICallError
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from article_parser import parse_snapshot
from models import PUBLISHED_STATUS, ArticleRecord

ARTICLES_COLLECTION = "articles"
PUBLISHED_AT_FIELD = "publishedAt"

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FeedSnapshot:
    """The full, ordered list of published articles at read_time."""

    articles: tuple[ArticleRecord, ...]
    read_time: datetime | None = None


@dataclass(frozen=True, slots=True)
class FeedError:
    """The listen stream failed; last_known is still valid to display."""

    error: BaseException
    last_known: tuple[ArticleRecord, ...] = ()


FeedEvent = FeedSnapshot | FeedError


def build_published_query(client: firestore.Client, collection: str = ARTICLES_COLLECTION) -> Any:
    """Return the feed query: published articles, most recent first.

    Ordering follows Firestore: documents without a publishedAt field are not
    matched at all, null publishedAt values sort last, and legacy string
    values sort ahead of every timestamp (strings rank above timestamps).
    """
    return (
        client.collection(collection)
        .where(filter=FieldFilter("status", "==", PUBLISHED_STATUS))
        .order_by(PUBLISHED_AT_FIELD, direction=firestore.Query.DESCENDING)
    )


class FeedSubscription:
    """One live listener on a feed query.

    Each change to the matching document set produces a FeedSnapshot holding
    the complete current list, not a delta. Listen-stream failures produce a
    FeedError instead. cancel() releases the listener exactly once; nothing is
    delivered after it returns.
    """

    def __init__(
        self,
        query: Any,
        on_articles: Callable[[FeedSnapshot], None],
        on_error: Callable[[FeedError], None] | None = None,
    ) -> None:
        self._query = query
        self._on_articles = on_articles
        self._on_error = on_error
        # Re-entrant so a callback may cancel its own subscription.
        self._lock = threading.RLock()
        self._watch: Any = None
        self._cancelled = False
        self._stream_done = False
        self._latest: tuple[ArticleRecord, ...] = ()
        # Thread currently running one of our callbacks, if any.
        self._delivering_thread: int | None = None
        self._release_thread: threading.Thread | None = None

    @property
    def latest(self) -> tuple[ArticleRecord, ...]:
        return self._latest

    @property
    def active(self) -> bool:
        return self._watch is not None and not self._cancelled

    def start(self) -> FeedSubscription:
        with self._lock:
            if self._cancelled:
                raise RuntimeError("Cannot restart a cancelled feed subscription")
            if self._watch is not None:
                return self
            watch = self._query.on_snapshot(self._handle_snapshot)
            if self._cancelled:
                # Cancelled from inside a snapshot delivered during registration.
                watch.unsubscribe()
                return self
            self._watch = watch

        # The Firestore Watch swallows stream termination; hook its RPC so a
        # dropped connection becomes a FeedError.
        rpc = getattr(self._watch, "_rpc", None)
        if rpc is not None and hasattr(rpc, "add_done_callback"):
            rpc.add_done_callback(self._handle_stream_done)
            # Callbacks added after the RPC finalized are never run.
            if getattr(rpc, "is_active", True) is False:
                self._handle_stream_done(rpc)

        LOGGER.info("Feed subscription started")
        return self

    def cancel(self) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            watch, self._watch = self._watch, None
            in_callback = self._delivering_thread == threading.get_ident()

        if watch is None:
            return
        if in_callback:
            # Watch.unsubscribe() joins the consumer thread, which is this one.
            self._release_thread = threading.Thread(
                target=watch.unsubscribe,
                name="feed-listener-release",
                daemon=True,
            )
            self._release_thread.start()
        else:
            watch.unsubscribe()
        LOGGER.info("Feed subscription cancelled")

    def wait_released(self, timeout: float | None = None) -> bool:
        """Block until a listener released from inside a callback is gone."""
        thread = self._release_thread
        if thread is None:
            return self._cancelled
        thread.join(timeout)
        return not thread.is_alive()

    def report_error(self, error: BaseException) -> None:
        """Deliver a FeedError for error unless the subscription is cancelled."""
        with self._lock:
            if self._cancelled:
                return
            event = FeedError(error=error, last_known=self._latest)
            if self._on_error is None:
                LOGGER.error(
                    "Feed listen stream failed (showing %s cached articles): %s",
                    len(event.last_known),
                    error,
                )
                return
            with self._delivering():
                self._on_error(event)

    def __enter__(self) -> FeedSubscription:
        return self.start()

    def __exit__(self, *exc_info: Any) -> None:
        self.cancel()

    def _handle_snapshot(self, docs: list[Any], changes: Any, read_time: datetime | None) -> None:
        with self._lock:
            if self._cancelled:
                return
            articles = tuple(parse_snapshot(doc) for doc in docs)
            self._latest = articles
            LOGGER.debug(
                "Feed snapshot: %s articles, %s changes",
                len(articles),
                len(changes) if changes is not None else 0,
            )
            with self._delivering():
                self._on_articles(FeedSnapshot(articles=articles, read_time=read_time))

    @contextmanager
    def _delivering(self) -> Iterator[None]:
        previous, self._delivering_thread = self._delivering_thread, threading.get_ident()
        try:
            yield
        finally:
            self._delivering_thread = previous

    def _handle_stream_done(self, future: Any) -> None:
        with self._lock:
            if self._stream_done:
                return
            self._stream_done = True

        error: BaseException | None = None
        if isinstance(future, BaseException):
            error = future
        elif callable(getattr(future, "exception", None)):
            # grpc call futures report their terminal RpcError here.
            try:
                error = future.exception()
            except Exception as exc:
                error = exc
        if not isinstance(error, BaseException):
            # Stream ended cleanly while we were still listening.
            error = ConnectionError("Article feed listen stream closed")
        self.report_error(error)


def subscribe_to_feed(
    client: firestore.Client,
    on_articles: Callable[[FeedSnapshot], None],
    on_error: Callable[[FeedError], None] | None = None,
    collection: str = ARTICLES_COLLECTION,
) -> FeedSubscription:
    """Start a live subscription to the published feed and return it."""
    query = build_published_query(client, collection)
    return FeedSubscription(query, on_articles, on_error).start()


def stream_feed(query: Any, timeout: float | None = None) -> Iterator[FeedEvent]:
    """Yield feed events from a fresh listener on query.

    Closing the generator (or leaving a for-loop early) cancels the listener.
    Stops quietly if no event arrives within timeout seconds.
    """
    events: queue.Queue[FeedEvent] = queue.Queue()
    subscription = FeedSubscription(query, events.put, events.put)
    subscription.start()
    try:
        while True:
            try:
                yield events.get(timeout=timeout)
            except queue.Empty:
                LOGGER.info("No feed events within %ss, stopping", timeout)
                return
    finally:
        subscription.cancel()


def fetch_article(
    client: firestore.Client,
    article_id: str,
    collection: str = ARTICLES_COLLECTION,
) -> ArticleRecord | None:
    """Read one article by id regardless of status; None if missing or unreadable."""
    try:
        snapshot = client.collection(collection).document(article_id).get()
    except GoogleAPICallError as exc:
        LOGGER.warning("Fetching article_id=%s failed: %s", article_id, exc)
        return None

    if not snapshot.exists:
        LOGGER.info("Article not found: article_id=%s", article_id)
        return None
    return parse_snapshot(snapshot)
