#!/usr/bin/env python3
"""
Data Modifier Module for Pocket Sync Tool
Sends single-item state changes to the Pocket modify endpoint.
"""

import time
import logging
from typing import Optional
from requests import Session
from api_client import post_json, MODIFY_URL
from exceptions import RejectedMutation
from models import Credentials, ACTION_ARCHIVE

logger = logging.getLogger(__name__)


class PocketDataModifier:
    """Applies one action to one item and checks the server acknowledged it."""

    def __init__(
        self,
        session: Session,
        consumer_key: str,
        access_token: str,
        timeout: Optional[float] = None,
    ):
        self.session = session
        self.credentials = Credentials(consumer_key, access_token)
        self.base_url = MODIFY_URL
        self.timeout = timeout

    def _send_action(self, action: str, item_id: str, now: Optional[int] = None) -> None:
        payload = self.credentials.as_payload()
        payload["actions"] = [
            {
                "action": action,
                "item_id": item_id,
                "time": int(time.time()) if now is None else now,
            }
        ]

        data = post_json(self.session, self.base_url, payload, self.timeout)

        results = data.get("action_results")
        if data.get("status") == 0 or not isinstance(results, list) or not results:
            raise RejectedMutation(item_id, action)
        if results[0] is not True:
            raise RejectedMutation(item_id, action)

        logger.info(f"✅ {action} applied to item {item_id}")

    def archive(self, item_id: str, now: Optional[int] = None) -> None:
        """
        Archive a single item.

        Args:
            item_id: Pocket item id
            now: Action timestamp, defaults to the current time

        Raises:
            RejectedMutation: server did not acknowledge the action
            TransportError, ProtocolError: request failed
        """
        self._send_action(ACTION_ARCHIVE, item_id, now)


def create_data_modifier(authenticator, timeout: Optional[float] = None) -> PocketDataModifier:
    credentials = authenticator.credentials
    return PocketDataModifier(
        session=authenticator.get_session(),
        consumer_key=credentials.consumer_key,
        access_token=credentials.access_token,
        timeout=timeout,
    )
