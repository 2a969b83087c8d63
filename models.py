from dataclasses import dataclass, field, asdict
from typing import Dict, Any

# Retrieve states
STATE_UNREAD = "unread"
STATE_ARCHIVED = "archive"
STATE_ALL = "all"

DETAIL_TYPE_COMPLETE = "complete"

SORT_NEWEST = "newest"

ACTION_ARCHIVE = "archive"

STATUS_UNREAD = 0

DEFAULT_PAGE_SIZE = 100


@dataclass(frozen=True)
class Credentials:
    consumer_key: str
    access_token: str

    def as_payload(self) -> Dict[str, str]:
        return {"consumer_key": self.consumer_key, "access_token": self.access_token}


@dataclass(frozen=True)
class SyncWindow:
    offset: int
    count: int
    sort: str = SORT_NEWEST
    limit: int = 0  # 0 means no cap

    def __post_init__(self):
        if self.count <= 0:
            raise ValueError(f"count must be positive, got {self.count}")
        if self.offset < 0:
            raise ValueError(f"offset must not be negative, got {self.offset}")
        if self.limit < 0:
            raise ValueError(f"limit must not be negative, got {self.limit}")


@dataclass
class Article:
    item_id: str
    resolved_id: str = ""
    given_url: str = ""
    resolved_url: str = ""
    given_title: str = ""
    resolved_title: str = ""
    favorite: int = 0
    status: int = STATUS_UNREAD
    excerpt: str = ""
    is_article: int = 0
    has_video: int = 0
    has_image: int = 0
    words_count: int = 0
    time_added: int = 0  # Unix timestamp

    @property
    def title(self) -> str:
        return self.resolved_title or self.given_title or self.url

    @property
    def url(self) -> str:
        return self.resolved_url or self.given_url

    @property
    def video(self) -> bool:
        return self.has_video > 0

    @property
    def image(self) -> bool:
        return self.has_image > 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Page:
    """One batch of articles returned for a window."""

    window: SyncWindow
    articles: Dict[str, Article] = field(default_factory=dict)
    raw_count: int = 0  # entries the server sent, before parsing
