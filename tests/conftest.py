#!/usr/bin/env python3
"""
Shared fixtures - fake PowerDNS client and statistics payloads
"""

import pytest
from unittest.mock import MagicMock

from powerdns_exporter.catalog import catalog_for
from powerdns_exporter.collector import ExporterState, PowerDNSCollector
from powerdns_exporter.selector import resolve_variant

RECURSOR_STATS = {
    'qa_latency': 2500,
    'concurrent_queries': 3,
    'cache_entries': 1200,
    'questions': 42,
    'tcp-questions': 7,
    'all-outqueries': 30,
    'tcp-outqueries': 2,
    'cache-hits': 100,
    'cache-misses': 20,
    'servfail-answers': 1,
    'nxdomain-answers': 4,
    'noerror-answers': 37,
    'answers0-1': 10,
    'answers1-10': 5,
    'answers10-100': 0,
    'answers100-1000': 0,
    'answers-slow': 2,
    'resource-limits': 0,
    'over-capacity-drops': 0,
    'unreachables': 1,
    'outgoing-timeouts': 3,
}


def to_records(stats):
    """Statistics dict -> decoded API records"""
    return [{'name': k, 'type': 'StatisticItem', 'value': float(v)} for k, v in stats.items()]


@pytest.fixture
def recursor_stats():
    return dict(RECURSOR_STATS)


@pytest.fixture
def fake_client():
    client = MagicMock()
    client.api_url = 'http://localhost:8001/'
    return client


@pytest.fixture
def make_collector(fake_client):
    """Build a collector for a variant, fed by fake_client"""
    def _make(server_type='recursor', stats=None, scrape_deadline=5):
        variant = resolve_variant(server_type)
        gauge_defs, counter_defs = catalog_for(variant)
        state = ExporterState(server_type, variant, gauge_defs, counter_defs,
                              server_info={'daemon_type': server_type, 'version': '4.9.1'})
        if stats is not None:
            fake_client.get_statistics.return_value = to_records(stats)
        return PowerDNSCollector(fake_client, state, scrape_deadline=scrape_deadline)
    return _make


@pytest.fixture
def samples():
    """Flatten metric families into {(sample name, frozen labels): value}"""
    def _samples(metrics):
        return {
            (s.name, tuple(sorted(s.labels.items()))): s.value
            for m in metrics for s in m.samples
        }
    return _samples
