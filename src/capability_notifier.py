#!/usr/bin/env python3
"""
Delivery of the "challenge updated" signal to a capability URI.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping

import requests

from errors import DependencyError
from request_schema import CapabilityURI

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "ACME-Challenge-Updater/1.0"
REQUEST_TIMEOUT = 30


class CapabilityNotifier:
    """Sends empty requests to capability URIs over HTTPS."""

    def __init__(
        self,
        trusted_ca: Mapping[str, str] | None = None,
        timeout: float = REQUEST_TIMEOUT,
        session: requests.Session | None = None,
    ):
        """
        Initialize the notifier.

        Args:
            trusted_ca: Map of authority -> CA bundle path for private trust roots
            timeout: Per-request timeout in seconds
            session: Optional pre-built requests session
        """
        self.trusted_ca = {authority.lower(): path for authority, path in (trusted_ca or {}).items()}
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": DEFAULT_USER_AGENT})

    def verify_for(self, authority: str) -> str | bool:
        """Return the requests ``verify`` argument for an authority."""
        ca_bundle = self.trusted_ca.get(authority.lower())
        if ca_bundle is None:
            logger.debug(f"No trusted CA configured for {authority}, using system trust store")
            return True
        return ca_bundle

    def notify(self, target: CapabilityURI) -> None:
        """
        Deliver an empty completion signal to target.

        Raises:
            DependencyError: If the request fails or is not acknowledged with 2xx
        """
        url = f"https://{target.authority}/"
        verify = self.verify_for(target.authority)
        # The capability token is a bearer secret and is never logged
        logger.debug(f"Capability Request: POST {url} (verify={verify})")

        start_time = time.time()
        try:
            response = self.session.post(
                url,
                headers={"Authorization": f"Bearer {target.token}"},
                timeout=self.timeout,
                verify=verify,
            )
        except requests.exceptions.RequestException as e:
            duration = time.time() - start_time
            logger.error(f"Capability Request Failed: {type(e).__name__} (Duration: {duration:.2f}s)")
            raise DependencyError(f"Notify {target.authority}", type(e).__name__) from e

        duration = time.time() - start_time
        logger.info(
            f"Capability Response: {response.status_code} {response.reason or ''} (Duration: {duration:.2f}s)"
        )
        # raise_for_status() lets 1xx and 3xx through; only 2xx acknowledges delivery
        if not 200 <= response.status_code < 300:
            raise DependencyError(f"Notify {target.authority}", f"HTTP {response.status_code}")
