#!/usr/bin/env python3
"""
JSON-over-HTTPS transport for the Pocket v3 API.
Every endpoint is a POST of a JSON body answered with a JSON body.
"""

import json
import logging
from typing import Dict, Any, Optional
import requests
from requests import Session
from exceptions import TransportError, ProtocolError

logger = logging.getLogger(__name__)

API_BASE_URL = "https://getpocket.com/v3"
RETRIEVE_URL = f"{API_BASE_URL}/get"
MODIFY_URL = f"{API_BASE_URL}/send"

REQUEST_HEADERS = {
    "Content-Type": "application/json; charset=UTF-8",
    "X-Accept": "application/json",
}


def post_json(
    session: Session,
    url: str,
    payload: Dict[str, Any],
    timeout: Optional[float] = None,
) -> Dict[str, Any]:
    """
    POST a JSON payload and return the decoded JSON object.

    Args:
        session: requests session to send through
        url: Endpoint URL
        payload: Request body
        timeout: Seconds to wait, None for no deadline

    Returns:
        Decoded response object

    Raises:
        TransportError: connection/network failure
        ProtocolError: non-200 status or a body that is not a JSON object
    """
    logger.debug(f"POST {url}")
    try:
        response = session.post(
            url, json=payload, headers=REQUEST_HEADERS, timeout=timeout
        )
    except requests.exceptions.RequestException as e:
        raise TransportError(url, e) from e

    if response.status_code != 200:
        # Pocket describes failures in headers, not the body
        raise ProtocolError(
            url,
            status_code=response.status_code,
            error_code=response.headers.get("X-Error-Code"),
            error_message=response.headers.get("X-Error"),
        )

    try:
        data = response.json()
    except (json.JSONDecodeError, ValueError) as e:
        raise ProtocolError(
            url, status_code=200, detail=f"Failed to decode json response: {e}"
        ) from e

    if not isinstance(data, dict):
        raise ProtocolError(
            url,
            status_code=200,
            detail=f"Unexpected response body type: {type(data).__name__}",
        )

    return data
