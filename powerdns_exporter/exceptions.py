#!/usr/bin/env python3
"""
Exceptions raised while talking to the PowerDNS API and building metrics
"""

from typing import Optional


class PowerDNSError(Exception):
    """Base class for all exporter errors"""


class ConfigError(PowerDNSError):
    """Invalid exporter configuration (fatal at startup)"""


class NetworkError(PowerDNSError):
    """The API could not be reached or did not answer in time"""


class HTTPStatusError(PowerDNSError):
    """The API answered with a non-2xx status"""

    def __init__(self, status_code: int, body: str, url: Optional[str] = None):
        self.status_code = status_code
        self.body = body
        self.url = url
        super().__init__(f"HTTP {status_code} from {url or 'PowerDNS API'}: {body.strip()}")


class DecodeError(PowerDNSError):
    """The API payload is not the JSON we expect"""


class MissingKeyError(PowerDNSError):
    """A statistic required to build a metric is absent"""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Required PowerDNS stats key not found: {key}")
