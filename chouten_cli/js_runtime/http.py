"""
Host Effect Bridge.

Performs blocking HTTP requests on behalf of plugin code and turns the
outcome into a HostResponse. Transport failures never escape this module:
they become a degraded response the script can inspect like any other.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from chouten_cli.config import HttpConfig
from .exceptions import UnsupportedHostMethodError

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = ("GET", "POST")

DEGRADED_STATUS = 500
DEGRADED_BODY = "Internal Server Error"


@dataclass
class HostResponse:
    """Result of one outbound request, as exposed to the script."""

    status_code: int
    body: str = ""
    content_type: str = ""
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def degraded(cls) -> "HostResponse":
        """Response used in place of a transport failure."""
        return cls(status_code=DEGRADED_STATUS, body=DEGRADED_BODY)

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> "HostResponse":
        """Build from an httpx response.

        Repeated header names collapse to the last value seen.
        """
        headers: dict[str, str] = {}
        for name, value in response.headers.multi_items():
            headers[name] = value

        return cls(
            status_code=response.status_code,
            body=response.text,
            content_type=response.headers.get("content-type", ""),
            headers=headers,
        )

    def to_script(self) -> dict[str, Any]:
        """Convert to the object shape plugins receive from request()."""
        return {
            "statusCode": self.status_code,
            "body": self.body,
            "contentType": self.content_type,
            "headers": dict(self.headers),
        }


class HostEffectBridge:
    """
    Blocking HTTP client used by the request() capability.

    Example:
        with HostEffectBridge(HttpConfig()) as bridge:
            response = bridge.send("https://example.com", "GET")
    """

    def __init__(
        self,
        config: Optional[HttpConfig] = None,
        client: Optional[httpx.Client] = None,
    ):
        self._config = config or HttpConfig()
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=self._config.timeout,
            follow_redirects=self._config.follow_redirects,
            verify=self._config.verify,
            headers={"User-Agent": self._config.user_agent},
        )
        self._request_count = 0

    @property
    def request_count(self) -> int:
        """Number of requests attempted, including degraded ones."""
        return self._request_count

    def send(
        self,
        url: str,
        method: str,
        headers: Optional[dict[str, str]] = None,
        body: Optional[str] = None,
    ) -> HostResponse:
        """
        Perform a request and wait for the full response.

        Args:
            url: Absolute URL to request
            method: "GET" or "POST"
            headers: Optional extra request headers
            body: Optional request body

        Returns:
            The response, or HostResponse.degraded() on transport failure

        Raises:
            UnsupportedHostMethodError: If method is not GET or POST
        """
        if method not in SUPPORTED_METHODS:
            raise UnsupportedHostMethodError(method)

        self._request_count += 1
        logger.debug(f"Plugin request #{self._request_count}: {method} {url}")

        try:
            response = self._client.request(
                method,
                url,
                headers=headers or None,
                content=body,
            )
        # UnicodeError covers bad header encodings and IDNA host names
        except (httpx.HTTPError, httpx.InvalidURL, ValueError, UnicodeError) as e:
            logger.warning(f"Request failed: {method} {url}: {e}")
            return HostResponse.degraded()

        logger.debug(f"Plugin request #{self._request_count} returned {response.status_code}")
        return HostResponse.from_httpx(response)

    def close(self) -> None:
        """Close the underlying client if this bridge created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HostEffectBridge":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
