#!/usr/bin/env python3
"""
Centralized configuration for the PowerDNS exporter
Loads environment variables (and an optional .env file)
"""

import os
from dotenv import load_dotenv
from pathlib import Path
from typing import Tuple
from urllib.parse import urlparse

from powerdns_exporter.exceptions import ConfigError


# Load .env
env_path = Path(__file__).parent.parent.parent / '.env'
load_dotenv(env_path)


class Config:
    """Base configuration"""
    
    # =============================================
    # EXPORTER CONFIGURATION
    # =============================================
    LISTEN_ADDRESS = os.getenv('PDNS_LISTEN_ADDRESS', ':9120')
    METRICS_PATH = os.getenv('PDNS_METRICS_PATH', '/metrics')
    NAMESPACE = 'powerdns'
    
    # =============================================
    # POWERDNS API CONFIGURATION
    # =============================================
    API_URL = os.getenv('PDNS_API_URL', 'http://localhost:8001/')
    API_KEY = os.getenv('PDNS_API_KEY', '')
    CONNECT_TIMEOUT = float(os.getenv('PDNS_CONNECT_TIMEOUT', 5))
    READ_TIMEOUT = float(os.getenv('PDNS_READ_TIMEOUT', 5))
    SCRAPE_DEADLINE = float(os.getenv('PDNS_SCRAPE_DEADLINE', 5))
    
    # =============================================
    # LOGGING CONFIGURATION
    # =============================================
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FILE = os.getenv('LOG_FILE', '')
    LOG_FORMAT = os.getenv('LOG_FORMAT', 
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    LOG_MAX_BYTES = int(os.getenv('LOG_MAX_BYTES', 10485760))  # 10MB
    LOG_BACKUP_COUNT = int(os.getenv('LOG_BACKUP_COUNT', 5))
    
    @staticmethod
    def parse_listen_address(address: str) -> Tuple[str, int]:
        """Split a "host:port" listen address; an empty host binds all interfaces"""
        host, sep, port = address.rpartition(':')
        if not sep or not port.isdigit():
            raise ConfigError(f"Invalid listen address: {address!r}")
        host = host.strip('[]') or '0.0.0.0'
        return host, int(port)
    
    @staticmethod
    def validate_api_url(api_url: str) -> str:
        """Check the API base URL and make sure it ends with a slash"""
        try:
            parsed = urlparse(api_url)
            parsed.port  # raises ValueError on a malformed port
        except ValueError as e:
            raise ConfigError(f"Error parsing api-url: {e}") from e
        
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            raise ConfigError(f"Error parsing api-url: {api_url!r} is not an http(s) URL")
        
        # urljoin drops the last path segment unless it ends with '/'
        if not api_url.endswith('/'):
            api_url += '/'
        return api_url


# Export configuration
config = Config()
