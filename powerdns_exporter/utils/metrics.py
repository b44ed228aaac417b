#!/usr/bin/env python3
"""
Prometheus Metrics - metric objects owned by a PowerDNS collector

Nothing here is registered in the global REGISTRY: every collector builds
its own objects so several exporters can live in one process.
"""

import re

from prometheus_client import Counter, Gauge

from powerdns_exporter.utils.config import Config

_INVALID_NAME_CHARS = re.compile(r'[^a-zA-Z0-9_]')


# =============================================
# NAMES
# =============================================

def sanitize_subsystem(server_type: str) -> str:
    """Turn a daemon_type into something usable inside a metric name"""
    return _INVALID_NAME_CHARS.sub('_', server_type or '') or 'unknown'


def build_fq_name(*parts: str) -> str:
    """Join the non-empty name parts with underscores"""
    return '_'.join(p for p in parts if p)


def metric_name(server_type: str, name: str) -> str:
    """Fully qualified metric name, e.g. powerdns_recursor_cache_size"""
    return build_fq_name(Config.NAMESPACE, sanitize_subsystem(server_type), name)


# =============================================
# GAUGES
# =============================================

def new_gauge_metric(server_type: str, name: str, doc: str) -> Gauge:
    """Create an unregistered gauge for one gauge definition"""
    return Gauge(
        name,
        doc,
        namespace=Config.NAMESPACE,
        subsystem=sanitize_subsystem(server_type),
        registry=None
    )


def new_up_gauge(server_type: str) -> Gauge:
    """Health of the most recent scrape"""
    return new_gauge_metric(server_type, 'up', 'Was the last scrape of PowerDNS successful.')


# =============================================
# COUNTERS
# =============================================

def new_total_scrapes_counter(server_type: str) -> Counter:
    """Scrape attempts since start"""
    return Counter(
        'exporter_total_scrapes',
        'Current total PowerDNS scrapes.',
        namespace=Config.NAMESPACE,
        subsystem=sanitize_subsystem(server_type),
        registry=None
    )


def new_json_parse_failures_counter(server_type: str) -> Counter:
    """Fetch/decode failures plus missing statistic keys"""
    return Counter(
        'exporter_json_parse_failures',
        'Number of errors while parsing PowerDNS JSON stats.',
        namespace=Config.NAMESPACE,
        subsystem=sanitize_subsystem(server_type),
        registry=None
    )
