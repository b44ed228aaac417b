#!/usr/bin/env python3
"""
PowerDNS API client - fetches server info and statistics over HTTP
"""

from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

import requests

from powerdns_exporter.exceptions import DecodeError, HTTPStatusError, NetworkError
from powerdns_exporter.utils.config import Config
from powerdns_exporter.utils.logger import get_logger

logger = get_logger(__name__)

API_INFO_ENDPOINT = 'servers/localhost'
API_STATS_ENDPOINT = 'servers/localhost/statistics'

SERVER_INFO_FIELDS = ('type', 'id', 'url', 'daemon_type', 'version', 'config_url', 'zones_url')


class PowerDNSClient:
    """Thin wrapper around the PowerDNS (or dnsdist) JSON API"""
    
    def __init__(self, api_url: str, api_key: str = '',
                 connect_timeout: Optional[float] = None,
                 read_timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        self.api_url = api_url
        self.api_key = api_key
        self.timeout = (
            connect_timeout if connect_timeout is not None else Config.CONNECT_TIMEOUT,
            read_timeout if read_timeout is not None else Config.READ_TIMEOUT,
        )
        self.session = session or requests.Session()
    
    def url_for(self, path: str) -> str:
        """Resolve an endpoint path against the API base URL"""
        return urljoin(self.api_url, path)
    
    def fetch_json(self, path: str) -> Any:
        """GET an endpoint and decode its JSON body"""
        url = self.url_for(path)
        headers = {'X-API-Key': self.api_key}
        
        try:
            response = self.session.get(url, headers=headers, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise NetworkError(f"Timeout while fetching {url}: {e}") from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Error fetching {url}: {e}") from e
        
        if not 200 <= response.status_code < 300:
            raise HTTPStatusError(response.status_code, response.text, url)
        
        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"Invalid JSON from {url}: {e}") from e
    
    def get_server_info(self) -> Dict[str, Any]:
        """Decode the servers/localhost payload"""
        data = self.fetch_json(API_INFO_ENDPOINT)
        if not isinstance(data, dict):
            raise DecodeError(f"Expected an object from {API_INFO_ENDPOINT}, got {type(data).__name__}")
        
        info = {name: data.get(name, '') for name in SERVER_INFO_FIELDS}
        if not isinstance(info['daemon_type'], str):
            raise DecodeError(f"Invalid daemon_type: {info['daemon_type']!r}")
        return info
    
    def get_statistics(self) -> List[Dict[str, Any]]:
        """Decode the statistics list into {name, type, value} records"""
        data = self.fetch_json(API_STATS_ENDPOINT)
        return decode_statistics(data)


def decode_statistics(data: Any) -> List[Dict[str, Any]]:
    """
    Validate and normalize a statistics payload
    
    Values arrive as numeric strings. Map and ring statistics (list values)
    have no single number and are skipped.
    
    Raises:
        DecodeError: payload is not a list of records, or a value is not numeric
    """
    if not isinstance(data, list):
        raise DecodeError(f"Expected a list of statistics, got {type(data).__name__}")
    
    records = []
    for item in data:
        if not isinstance(item, dict) or 'name' not in item:
            raise DecodeError(f"Invalid statistics record: {item!r}")
        
        value = item.get('value')
        if isinstance(value, (list, dict)):
            continue
        if value is None or value == '':
            # an empty value reads as zero
            value = 0
        
        try:
            number = float(value)
        except (TypeError, ValueError) as e:
            raise DecodeError(f"Invalid value for {item['name']}: {value!r}") from e
        
        records.append({'name': str(item['name']), 'type': item.get('type', ''), 'value': number})
    
    logger.debug(f"Decoded {len(records)} statistics")
    return records
