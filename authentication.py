#!/usr/bin/env python3
"""
Credential provider for the Pocket sync tool.
Credentials come from configuration; the OAuth handshake happens elsewhere.
"""

import logging
from typing import Optional
import requests
from config import AppConfig
from exceptions import ConfigurationError
from models import Credentials

logger = logging.getLogger(__name__)


class PocketAuthenticator:
    def __init__(self, config: AppConfig):
        self.config = config
        self.credentials: Optional[Credentials] = None
        self.session: Optional[requests.Session] = None

    def load_credentials(self) -> Credentials:
        """
        Take credentials from the config and open an HTTP session.

        Raises:
            ConfigurationError: consumer key or access token missing
        """
        self.credentials = self.config.require_credentials()
        logger.debug(f"Loaded credentials from {self.config.config_path}")
        self.session = requests.Session()
        return self.credentials

    def get_session(self) -> requests.Session:
        if self.session is None:
            raise ConfigurationError("Credentials not loaded")
        return self.session


def setup_authentication(config: AppConfig) -> PocketAuthenticator:
    authenticator = PocketAuthenticator(config)
    authenticator.load_credentials()
    return authenticator
