#!/usr/bin/env python3
"""
Configuration for the Pocket sync tool.

Settings come from a JSON config file, with environment variables (and a
.env file, via python-dotenv) taking precedence. An AppConfig is built once
at startup and passed to whatever needs it.
"""

import os
import json
import logging
from dataclasses import dataclass, replace
from typing import Optional
from dotenv import load_dotenv
from exceptions import ConfigurationError
from models import Credentials, DEFAULT_PAGE_SIZE
from storage import write_json, read_json

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "~/.config/getpkt/config.json"
DEFAULT_ARTICLES_PATH = "~/.config/getpkt/articles.json"
DEFAULT_LIST_LIMIT = 10


def expand_path(path: str) -> str:
    return os.path.expanduser(os.path.expandvars(path))


@dataclass(frozen=True)
class AppConfig:
    consumer_key: str = ""
    access_token: str = ""
    config_path: str = expand_path(DEFAULT_CONFIG_PATH)
    articles_path: str = expand_path(DEFAULT_ARTICLES_PATH)
    page_size: int = DEFAULT_PAGE_SIZE
    list_limit: int = DEFAULT_LIST_LIMIT
    timeout: Optional[float] = None  # no deadline, as requests does by default

    @property
    def credentials(self) -> Credentials:
        return Credentials(self.consumer_key, self.access_token)

    def require_credentials(self) -> Credentials:
        if not self.consumer_key.strip():
            raise ConfigurationError(
                f"No consumer key in {self.config_path} or POCKET_CONSUMER_KEY, run auth first"
            )
        if not self.access_token.strip():
            raise ConfigurationError(
                f"No access token in {self.config_path} or POCKET_ACCESS_TOKEN, authenticate first"
            )
        return self.credentials


def _parse_timeout(value) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid timeout: {value!r}") from None
    if timeout <= 0:
        raise ConfigurationError(f"Timeout must be positive, got {value!r}")
    return timeout


def _read_config_file(path: str) -> dict:
    if not os.path.exists(path):
        logger.debug(f"No config file at {path}")
        return {}
    try:
        data = read_json(path)
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Failed to read a config {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Failed to read a config {path}: expected an object")
    return data


def load_config(
    config_path: Optional[str] = None,
    articles_path: Optional[str] = None,
    timeout: Optional[float] = None,
    use_dotenv: bool = True,
) -> AppConfig:
    """
    Build the AppConfig for this run.

    Precedence, highest first: explicit arguments, environment, config file,
    defaults.

    Raises:
        ConfigurationError: config file unreadable or values invalid
    """
    if use_dotenv:
        load_dotenv()

    path = expand_path(
        config_path or os.getenv("POCKET_SYNC_CONFIG") or DEFAULT_CONFIG_PATH
    )
    stored = _read_config_file(path)

    consumer_key = os.getenv("POCKET_CONSUMER_KEY") or stored.get("consumer_key") or ""
    access_token = os.getenv("POCKET_ACCESS_TOKEN") or stored.get("access_token") or ""
    articles = expand_path(
        articles_path
        or os.getenv("POCKET_SYNC_ARTICLES")
        or stored.get("articles_path")
        or DEFAULT_ARTICLES_PATH
    )

    try:
        page_size = int(stored.get("page_size", DEFAULT_PAGE_SIZE))
        list_limit = int(stored.get("list_limit", DEFAULT_LIST_LIMIT))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid value in {path}: {e}") from e
    if page_size <= 0:
        raise ConfigurationError(f"page_size must be positive in {path}")

    if timeout is None:
        timeout = _parse_timeout(os.getenv("POCKET_SYNC_TIMEOUT") or stored.get("timeout"))
    else:
        timeout = _parse_timeout(timeout)

    return AppConfig(
        consumer_key=str(consumer_key),
        access_token=str(access_token),
        config_path=path,
        articles_path=articles,
        page_size=page_size,
        list_limit=list_limit,
        timeout=timeout,
    )


def save_config(config: AppConfig) -> None:
    """Write credentials back to the config file, keeping other keys in it."""
    stored = _read_config_file(config.config_path)
    stored["consumer_key"] = config.consumer_key
    stored["access_token"] = config.access_token
    try:
        write_json(stored, config.config_path)
    except OSError as e:
        raise ConfigurationError(f"Failed to write a config {config.config_path}: {e}") from e
    logger.info(f"Written to config {config.config_path}")


def with_credentials(config: AppConfig, consumer_key: str, access_token: str) -> AppConfig:
    return replace(config, consumer_key=consumer_key, access_token=access_token)
