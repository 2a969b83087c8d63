#!/usr/bin/env python3
"""
Data Fetcher Module for Pocket Sync Tool
Handles fetching articles from Pocket API page by page and assembling a snapshot.
"""

import time
import logging
from typing import Dict, List, Optional, Callable, Iterable
from requests import Session
from api_client import post_json, RETRIEVE_URL
from data_parser import parse_pocket_article
from exceptions import PocketSyncError, PageFetchError, ProtocolError
from models import (
    Article,
    Page,
    SyncWindow,
    Credentials,
    DEFAULT_PAGE_SIZE,
    DETAIL_TYPE_COMPLETE,
    SORT_NEWEST,
    STATE_ALL,
)

logger = logging.getLogger(__name__)

# Pocket answers 1 for a non-empty result and 2 when the window is past the end
RETRIEVE_OK_STATUSES = (1, 2)


class ExportProgress:
    """Track and display sync progress, one update per page."""

    def __init__(self, verbose: bool = True):
        self.start_time = time.time()
        self.processed_articles = 0
        self.current_page = 0
        self.verbose = verbose

    def update(self, page: Page, page_number: int) -> None:
        """Update progress with a newly fetched page."""
        self.current_page = page_number
        self.processed_articles += len(page.articles)

        if self.verbose:
            self._display_status()

    __call__ = update

    def _display_status(self) -> None:
        elapsed_time = time.time() - self.start_time
        rate = self.processed_articles / elapsed_time if elapsed_time > 0 else 0

        print(
            f"\r🔄 Page {self.current_page} | "
            f"Articles: {self.processed_articles:,} | "
            f"Rate: {rate:.1f}/sec | Elapsed: {self._format_time(elapsed_time)}",
            end="",
            flush=True,
        )

    def _format_time(self, seconds: float) -> str:
        """Format time in human-readable format."""
        if seconds < 60:
            return f"{seconds:.0f}s"
        elif seconds < 3600:
            return f"{seconds / 60:.0f}m"
        else:
            return f"{seconds / 3600:.1f}h"

    def finish(self, total_articles: Optional[int] = None) -> None:
        """Display final completion status."""
        if self.verbose:
            total = self.processed_articles if total_articles is None else total_articles
            total_time = time.time() - self.start_time
            print(
                f"\n✅ Sync completed! "
                f"{total:,} articles in {self.current_page} pages "
                f"({self._format_time(total_time)})"
            )


class PocketDataFetcher:
    """Fetches single pages of articles from the Pocket retrieve endpoint."""

    def __init__(
        self,
        session: Session,
        consumer_key: str,
        access_token: str,
        timeout: Optional[float] = None,
    ):
        self.session = session
        self.credentials = Credentials(consumer_key, access_token)
        self.base_url = RETRIEVE_URL
        self.timeout = timeout

    @property
    def consumer_key(self) -> str:
        return self.credentials.consumer_key

    @property
    def access_token(self) -> str:
        return self.credentials.access_token

    def build_payload(
        self,
        window: SyncWindow,
        detail_type: str = DETAIL_TYPE_COMPLETE,
        state: str = STATE_ALL,
        favorite: Optional[int] = None,
        tag: Optional[str] = None,
    ) -> Dict:
        payload = self.credentials.as_payload()
        payload.update(
            {
                "state": state,
                "count": window.count,
                "offset": window.offset,
                "sort": window.sort,
                "detailType": detail_type,
            }
        )
        # Sending favorite=0 or tag="" would filter, so only send when asked
        if favorite is not None:
            payload["favorite"] = favorite
        if tag is not None:
            payload["tag"] = tag
        return payload

    def fetch_page(
        self,
        window: SyncWindow,
        detail_type: str = DETAIL_TYPE_COMPLETE,
        state: str = STATE_ALL,
        favorite: Optional[int] = None,
        tag: Optional[str] = None,
    ) -> Page:
        """
        Fetch one page of articles. Exactly one request, no retries.

        Args:
            window: offset/count/sort of the page
            detail_type: "complete" for full data, "simple" for basic
            state: "all", "unread", or "archive"
            favorite: 0/1 to filter on favorite flag, None for no filter
            tag: Tag name (or "_untagged_") filter, None for no filter

        Returns:
            Page with the parsed articles keyed by item_id

        Raises:
            PageFetchError: wrapping the transport/protocol failure
        """
        payload = self.build_payload(window, detail_type, state, favorite, tag)
        logger.debug(f"Fetching page: offset={window.offset}, count={window.count}")

        try:
            data = post_json(self.session, self.base_url, payload, self.timeout)
            status = data.get("status")
            if status not in RETRIEVE_OK_STATUSES:
                raise ProtocolError(
                    self.base_url, status_code=200, detail=f"Unexpected API status: {status}"
                )
            # An empty result comes back as [] rather than {}
            raw_list = data.get("list") or {}
            if not isinstance(raw_list, dict):
                raise ProtocolError(
                    self.base_url,
                    status_code=200,
                    detail=f"Unexpected list type: {type(raw_list).__name__}",
                )
        except PocketSyncError as e:
            raise PageFetchError(window, e) from e

        page = Page(window=window, raw_count=len(raw_list))
        for key, raw_article in raw_list.items():
            if not isinstance(raw_article, dict):
                logger.warning(f"Skipping article {key}: not an object")
                continue
            try:
                article = parse_pocket_article(raw_article, item_id=key)
            except ValueError as e:  # includes TimestampParseError
                logger.warning(f"Skipping article {key}: {e}")
                continue
            page.articles[article.item_id] = article

        logger.debug(f"Successfully fetched page: {page.raw_count} articles")
        return page


def merge_page(accumulator: Dict[str, Article], page: Page) -> int:
    """
    Insert-or-replace every article of the page into the accumulator by id.
    Merging the same page twice leaves the accumulator unchanged.

    Returns:
        Number of ids that were not in the accumulator before
    """
    added = 0
    for item_id, article in page.articles.items():
        if item_id not in accumulator:
            added += 1
        else:
            logger.debug(f"Article {item_id} seen again, replacing")
        accumulator[item_id] = article
    return added


def sort_newest_first(articles: Iterable[Article]) -> List[Article]:
    """Stable sort by time_added, newest first."""
    return sorted(articles, key=lambda article: article.time_added, reverse=True)


def collect_articles(
    fetcher: PocketDataFetcher,
    limit: int = 0,
    step: int = DEFAULT_PAGE_SIZE,
    detail_type: str = DETAIL_TYPE_COMPLETE,
    state: str = STATE_ALL,
    progress_callback: Optional[Callable[[Page, int], None]] = None,
) -> List[Article]:
    """
    Run a full sync pass: fetch pages of `step` articles until a short page
    comes back or `limit` unique articles have been collected.

    Args:
        fetcher: Page source
        limit: Stop once this many articles are collected (0 for all)
        step: Page size; not clamped to the server maximum
        detail_type: Detail level requested for every page
        state: Article state filter
        progress_callback: Called with (page, page_number) after each page

    Returns:
        Deduplicated articles sorted newest first

    Raises:
        PageFetchError: any page failure aborts the whole pass
    """
    if step <= 0:
        raise ValueError(f"step must be positive, got {step}")
    if limit < 0:
        raise ValueError(f"limit must not be negative, got {limit}")

    offset = 0
    page_number = 0
    accumulator: Dict[str, Article] = {}

    logger.info(f"Starting article sync (page size: {step}, limit: {limit or 'none'})")

    while True:
        window = SyncWindow(offset=offset, count=step, sort=SORT_NEWEST, limit=limit)
        page = fetcher.fetch_page(window, detail_type=detail_type, state=state)
        page_number += 1

        added = merge_page(accumulator, page)
        if added < len(page.articles):
            logger.warning(
                f"Page at offset {window.offset} repeated "
                f"{len(page.articles) - added} already collected articles"
            )
        if progress_callback:
            progress_callback(page, page_number)

        offset += step

        if page.raw_count < window.count:
            logger.info("No more articles to fetch")
            break
        if window.limit > 0 and len(accumulator) >= window.limit:
            logger.info(f"Reached articles limit: {window.limit}")
            break

    logger.info(f"Article sync completed. Pages: {page_number}, articles: {len(accumulator)}")
    return sort_newest_first(accumulator.values())


def create_data_fetcher(authenticator, timeout: Optional[float] = None) -> PocketDataFetcher:
    """
    Create a data fetcher from an authenticator.

    Args:
        authenticator: PocketAuthenticator with loaded credentials
        timeout: Per-request timeout in seconds, None for no deadline
    """
    session = authenticator.get_session()
    credentials = authenticator.credentials
    return PocketDataFetcher(
        session=session,
        consumer_key=credentials.consumer_key,
        access_token=credentials.access_token,
        timeout=timeout,
    )
