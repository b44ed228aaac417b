#!/usr/bin/env python3
"""
PowerDNS Exporter - entry point
Identifies the PowerDNS server, then serves its statistics to Prometheus
"""

import argparse
import sys
from typing import List, Optional

from powerdns_exporter.client import PowerDNSClient
from powerdns_exporter.collector import build_collector
from powerdns_exporter.exceptions import ConfigError, PowerDNSError
from powerdns_exporter.exporter import create_app
from powerdns_exporter.selector import identify_server, select_catalog
from powerdns_exporter.utils.config import Config
from powerdns_exporter.utils.logger import get_logger, set_level

logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Prometheus exporter for PowerDNS authoritative server, recursor and dnsdist"
    )
    
    parser.add_argument(
        '--listen-address',
        default=Config.LISTEN_ADDRESS,
        help=f"Address to listen on for web interface and telemetry (default: {Config.LISTEN_ADDRESS})"
    )
    parser.add_argument(
        '--metric-path',
        default=Config.METRICS_PATH,
        help=f"Path under which to expose metrics (default: {Config.METRICS_PATH})"
    )
    parser.add_argument(
        '--api-url',
        default=Config.API_URL,
        help=f"Base-URL of PowerDNS authoritative server/recursor API (default: {Config.API_URL})"
    )
    parser.add_argument(
        '--api-key',
        default=Config.API_KEY,
        help="PowerDNS API Key"
    )
    parser.add_argument(
        '--log-level',
        default=Config.LOG_LEVEL,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        type=str.upper,
        help=f"Log level (default: {Config.LOG_LEVEL})"
    )
    
    return parser.parse_args(argv)


def build_app(args: argparse.Namespace):
    """Validate settings, identify the server and build the Flask app

    Raises ConfigError or PowerDNSError, both fatal.
    """
    api_url = Config.validate_api_url(args.api_url)
    client = PowerDNSClient(api_url, args.api_key)
    
    server_info = identify_server(client)
    selection = select_catalog(server_info)
    collector = build_collector(client, selection)
    
    return create_app(collector, args.metric_path)


def main(argv: Optional[List[str]] = None):
    """Entry point"""
    args = parse_args(argv)
    set_level(args.log_level)
    
    try:
        host, port = Config.parse_listen_address(args.listen_address)
        app = build_app(args)
    except ConfigError as e:
        logger.critical(str(e))
        sys.exit(1)
    except PowerDNSError as e:
        logger.critical(f"Could not fetch PowerDNS server info: {e}")
        sys.exit(1)
    
    logger.info(f"Starting Server: {args.listen_address}")
    app.run(host=host, port=port, debug=False, threaded=True)


if __name__ == "__main__":
    main()
