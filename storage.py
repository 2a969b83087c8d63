import os
import json
import logging
import tempfile
from pathlib import Path
from typing import List, Dict, Any
from data_parser import parse_pocket_article
from exceptions import StorageError, SnapshotNotFoundError, SnapshotCorruptError
from models import Article

logger = logging.getLogger(__name__)


def ensure_dir(path: str):
    if path:
        Path(path).mkdir(parents=True, exist_ok=True)


def write_json(data: Any, out_path: str) -> None:
    """
    Write indented UTF-8 JSON. Goes through a temp file in the same
    directory and os.replace, so readers see the old or the new file.
    """
    ensure_dir(os.path.dirname(out_path))
    fd, tmp_path = tempfile.mkstemp(
        dir=os.path.dirname(out_path) or ".", prefix=".tmp-", suffix=".json"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
            f.write("\n")
        os.chmod(tmp_path, 0o600)
        os.replace(tmp_path, out_path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


def read_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def save_snapshot(articles: List[Article], out_path: str) -> None:
    """Overwrite the snapshot at out_path with the given ordered articles."""
    try:
        write_json([article.to_dict() for article in articles], out_path)
    except OSError as e:
        raise StorageError(out_path, f"failed to write snapshot: {e}") from e
    logger.debug(f"Saved {len(articles)} articles to {out_path}")


def load_snapshot(path: str) -> List[Article]:
    """
    Read the snapshot written by save_snapshot, keeping its order.

    Raises:
        SnapshotNotFoundError: path missing, not a file, or unreadable
        SnapshotCorruptError: content is not a valid article list
    """
    if not os.path.isfile(path):
        raise SnapshotNotFoundError(path, "is not readable, run sync first")
    try:
        data = read_json(path)
    except OSError as e:
        raise SnapshotNotFoundError(path, f"is not readable: {e}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise SnapshotCorruptError(path, f"invalid JSON: {e}") from e

    if not isinstance(data, list):
        raise SnapshotCorruptError(path, "expected a list of articles")

    articles = []
    for index, raw in enumerate(data):
        if not isinstance(raw, dict):
            raise SnapshotCorruptError(path, f"entry {index} is not an object")
        try:
            articles.append(parse_pocket_article(raw))
        except ValueError as e:
            raise SnapshotCorruptError(path, f"entry {index}: {e}") from e
    return articles


def get_file_summary(path: str) -> Dict[str, Any]:
    try:
        size = os.path.getsize(path)
        count = len(read_json(path))
        return {"file": path, "size_bytes": size, "article_count": count}
    except (OSError, ValueError, TypeError) as e:
        return {"file": path, "error": str(e)}
