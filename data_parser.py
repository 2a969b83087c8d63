from typing import Dict, Any, Optional
from datetime import datetime, timezone
from exceptions import TimestampParseError
from models import Article, STATUS_UNREAD


def parse_time_added(value: Any) -> int:
    """
    Convert a Pocket time_added value (Unix timestamp, usually sent as text)
    into an int. Raises TimestampParseError instead of failing hard so callers
    can decide whether one bad article spoils the batch.
    """
    if isinstance(value, bool) or value is None:
        raise TimestampParseError(value)
    if isinstance(value, float) and not value.is_integer():
        raise TimestampParseError(value)
    try:
        timestamp = int(value)
    except (ValueError, TypeError, OverflowError):
        raise TimestampParseError(value) from None
    if timestamp < 0:
        raise TimestampParseError(value)
    # Millisecond/microsecond values parse as ints but are past year 9999
    _to_datetime(timestamp, value)
    return timestamp


def _to_datetime(timestamp: int, original: Any = None) -> datetime:
    try:
        return datetime.fromtimestamp(timestamp, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        raise TimestampParseError(timestamp if original is None else original) from None


def format_time_added(timestamp: int) -> str:
    """
    ISO 8601 rendering of a Unix timestamp, as used in listings.

    Raises:
        TimestampParseError: if the timestamp is out of range
    """
    return _to_datetime(timestamp).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_pocket_article(raw: Dict[str, Any], item_id: Optional[str] = None) -> Article:
    """
    Parse a raw Pocket API article dict into an Article dataclass.
    Handles missing/null fields and numeric values sent as strings.

    Args:
        raw: Article object from the /v3/get "list" mapping
        item_id: Mapping key, used when the object has no item_id of its own

    Raises:
        TimestampParseError: if time_added is missing or not a timestamp
        ValueError: if no item id can be determined
    """

    def get_str(field):
        val = raw.get(field)
        return str(val) if val is not None else ""

    def get_int(field, default=0):
        val = raw.get(field)
        try:
            return int(val) if val is not None else default
        except (ValueError, TypeError):
            return default

    article_id = get_str("item_id") or (str(item_id) if item_id is not None else "")
    if not article_id:
        raise ValueError("Article has no item_id")

    return Article(
        item_id=article_id,
        resolved_id=get_str("resolved_id"),
        given_url=get_str("given_url"),
        resolved_url=get_str("resolved_url"),
        given_title=get_str("given_title"),
        resolved_title=get_str("resolved_title"),
        favorite=get_int("favorite"),
        status=get_int("status", STATUS_UNREAD),
        excerpt=get_str("excerpt"),
        is_article=get_int("is_article"),
        has_video=get_int("has_video"),
        has_image=get_int("has_image"),
        # Pocket calls this word_count in newer responses
        words_count=max(get_int("words_count", get_int("word_count")), 0),
        time_added=parse_time_added(raw.get("time_added")),
    )
