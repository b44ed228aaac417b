#!/usr/bin/env python3
"""
Catalog Selector - identify the PowerDNS daemon and pick its metric tables
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from powerdns_exporter.catalog import CounterDefinition, GaugeDefinition, ServerVariant, catalog_for
from powerdns_exporter.client import PowerDNSClient
from powerdns_exporter.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Selection:
    """Result of server identification"""
    server_info: Dict[str, Any]
    variant: Optional[ServerVariant]
    gauge_defs: Tuple[GaugeDefinition, ...]
    counter_defs: Tuple[CounterDefinition, ...]

    @property
    def server_type(self) -> str:
        """Metric subsystem: the canonical variant name once resolved"""
        if self.variant is not None:
            return self.variant.value
        return self.server_info.get('daemon_type', '')


def resolve_variant(daemon_type: str) -> Optional[ServerVariant]:
    """Map a daemon_type string to a ServerVariant, None if unknown"""
    try:
        return ServerVariant((daemon_type or '').strip().lower())
    except ValueError:
        return None


def identify_server(client: PowerDNSClient) -> Dict[str, Any]:
    """Fetch servers/localhost; errors propagate (fatal at startup)"""
    info = client.get_server_info()
    logger.info(
        f"Found PowerDNS {info['daemon_type']} version={info['version'] or 'unknown'} id={info['id'] or 'unknown'}"
    )
    return info


def select_catalog(server_info: Dict[str, Any]) -> Selection:
    """Resolve the daemon type once and take the matching tables"""
    variant = resolve_variant(server_info.get('daemon_type', ''))
    if variant is None:
        logger.warning(
            f"Unknown PowerDNS daemon type {server_info.get('daemon_type')!r}, "
            "only exporter health metrics will be available"
        )
    gauge_defs, counter_defs = catalog_for(variant)
    return Selection(server_info, variant, gauge_defs, counter_defs)
