#!/usr/bin/env python3
"""
Pocket Sync Tool
Syncs saved Pocket articles into a local snapshot and reads from it.
"""

import sys
import random
import logging
import argparse
from typing import List, Optional
from authentication import setup_authentication
from config import AppConfig, load_config, save_config, with_credentials
from data_fetcher import create_data_fetcher, collect_articles, ExportProgress
from data_modifier import create_data_modifier
from data_parser import format_time_added
from exceptions import PocketSyncError
from models import Article, STATE_ALL, STATE_UNREAD, STATE_ARCHIVED
from storage import save_snapshot, load_snapshot, get_file_summary

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def format_article(article: Article) -> str:
    return (
        f"{article.item_id}\t{format_time_added(article.time_added)}\t"
        f"{article.title}\n\t{article.url}"
    )


def print_articles(articles: List[Article], limit: int = 0) -> None:
    shown = articles[:limit] if limit > 0 else articles
    for article in shown:
        print(format_article(article))


def auth_command(
    config: AppConfig,
    consumer_key: Optional[str] = None,
    access_token: Optional[str] = None,
) -> AppConfig:
    """Store credentials issued by Pocket in the config file."""
    consumer_key = consumer_key or config.consumer_key or input("Please enter consumer key: ")
    access_token = access_token or input("Please enter access token: ")
    updated = with_credentials(config, consumer_key.strip(), access_token.strip())
    updated.require_credentials()
    save_config(updated)
    return updated


def sync_command(
    config: AppConfig,
    limit: int = 0,
    page_size: Optional[int] = None,
    state: str = STATE_ALL,
) -> List[Article]:
    """
    Run a full sync pass and replace the local snapshot with the result.
    Nothing is written if any page fails.
    """
    authenticator = setup_authentication(config)
    fetcher = create_data_fetcher(authenticator, timeout=config.timeout)

    logger.info("🚀 SYNC: Fetching articles...")
    progress = ExportProgress(verbose=sys.stdout.isatty())
    articles = collect_articles(
        fetcher,
        limit=limit,
        step=page_size or config.page_size,
        state=state,
        progress_callback=progress,
    )
    progress.finish(len(articles))

    save_snapshot(articles, config.articles_path)
    summary = get_file_summary(config.articles_path)
    logger.info(
        f"💾 Snapshot saved: {config.articles_path} "
        f"({summary.get('article_count', 0):,} articles, {summary.get('size_bytes', 0):,} bytes)"
    )
    return articles


def list_command(config: AppConfig, limit: int, use_cache: bool = False) -> List[Article]:
    """Print the newest articles, live from Pocket or from the snapshot."""
    if use_cache:
        articles = load_snapshot(config.articles_path)
    else:
        authenticator = setup_authentication(config)
        fetcher = create_data_fetcher(authenticator, timeout=config.timeout)
        step = min(limit, config.page_size) if limit > 0 else config.page_size
        articles = collect_articles(fetcher, limit=limit, step=step)
    print_articles(articles, limit)
    return articles


def rand_command(config: AppConfig, rng: Optional[random.Random] = None) -> Optional[Article]:
    """Print one random article from the snapshot."""
    articles = load_snapshot(config.articles_path)
    if not articles:
        logger.warning("Snapshot is empty, nothing to pick")
        return None
    article = (rng or random).choice(articles)
    print(format_article(article))
    return article


def archive_command(config: AppConfig, item_id: str) -> None:
    """Archive one item on Pocket. The local snapshot is left as is."""
    authenticator = setup_authentication(config)
    modifier = create_data_modifier(authenticator, timeout=config.timeout)
    modifier.archive(item_id)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pocket Sync Tool")
    parser.add_argument("--config", help="Config file path (default: ~/.config/getpkt/config.json)")
    parser.add_argument("--articles", help="Snapshot file path (default: ~/.config/getpkt/articles.json)")
    parser.add_argument("--timeout", type=float, help="HTTP timeout in seconds (default: none)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    auth = subparsers.add_parser("auth", help="Store Pocket credentials")
    auth.add_argument("--consumer-key", help="Pocket consumer key")
    auth.add_argument("--access-token", help="Pocket access token")

    sync = subparsers.add_parser("sync", help="Download all articles into the snapshot")
    sync.add_argument("--page-size", type=int, help="Articles per request")
    sync.add_argument("--limit", type=int, default=0, help="Stop after N articles (default: all)")
    sync.add_argument("--state", choices=[STATE_ALL, STATE_UNREAD, STATE_ARCHIVED], default=STATE_ALL,
                      help="Article state filter (default: all)")

    list_parser = subparsers.add_parser("list", help="List newest articles")
    list_parser.add_argument("--limit", type=int, help="Number of articles to show (0 for all)")
    list_parser.add_argument("--cache", action="store_true", help="Read from the local snapshot")

    subparsers.add_parser("rand", help="Show a random article from the snapshot")

    archive = subparsers.add_parser("archive", help="Archive an article")
    archive.add_argument("item_id", help="Pocket item id")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = load_config(
            config_path=args.config, articles_path=args.articles, timeout=args.timeout
        )

        if args.command == "auth":
            auth_command(config, args.consumer_key, args.access_token)
        elif args.command == "sync":
            if args.limit < 0 or (args.page_size is not None and args.page_size <= 0):
                parser.error("--limit must be >= 0 and --page-size > 0")
            sync_command(config, limit=args.limit, page_size=args.page_size, state=args.state)
        elif args.command == "list":
            limit = config.list_limit if args.limit is None else args.limit
            if limit < 0:
                parser.error("--limit must be >= 0")
            list_command(config, limit=limit, use_cache=args.cache)
        elif args.command == "rand":
            rand_command(config)
        elif args.command == "archive":
            archive_command(config, args.item_id)
    except KeyboardInterrupt:
        logger.warning("⏹️  Interrupted by user")
        return 130
    except PocketSyncError as e:
        logger.error(f"❌ {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
