#!/usr/bin/env python3
"""
Test Metric Catalog and Catalog Selector
"""

import pytest
from unittest.mock import MagicMock

from powerdns_exporter.catalog import (
    RCODE_LABEL_MAP, RTIME_BUCKET_MAP, RTIME_LABEL_MAP, CounterDefinition, ServerVariant, catalog_for
)
from powerdns_exporter.exceptions import NetworkError
from powerdns_exporter.selector import identify_server, resolve_variant, select_catalog


class TestCatalog:
    """Static definition tables"""

    @pytest.mark.parametrize('variant', list(ServerVariant))
    def test_ids_and_names_are_unique(self, variant):
        gauge_defs, counter_defs = catalog_for(variant)
        
        assert len({d.id for d in gauge_defs}) == len(gauge_defs)
        assert len({d.id for d in counter_defs}) == len(counter_defs)
        assert len({d.name for d in gauge_defs}) == len(gauge_defs)
        assert len({d.name for d in counter_defs}) == len(counter_defs)

    @pytest.mark.parametrize('variant', list(ServerVariant))
    def test_every_definition_is_documented(self, variant):
        gauge_defs, counter_defs = catalog_for(variant)
        for d in gauge_defs + counter_defs:
            assert d.desc
        for d in counter_defs:
            assert d.label

    def test_unknown_variant_is_empty(self):
        assert catalog_for(None) == ((), ())
        assert catalog_for('bind') == ((), ())

    def test_recursor_tables(self):
        gauge_defs, counter_defs = catalog_for(ServerVariant.RECURSOR)
        
        assert [d.key for d in gauge_defs] == ['qa_latency', 'concurrent_queries', 'cache_entries']
        incoming = next(d for d in counter_defs if d.name == 'incoming_queries_total')
        assert incoming.label == 'net'
        assert incoming.label_map == {'questions': 'udp', 'tcp-questions': 'tcp'}

    @pytest.mark.parametrize('variant', list(ServerVariant))
    def test_label_maps_are_read_only(self, variant):
        _, counter_defs = catalog_for(variant)
        for d in counter_defs:
            with pytest.raises(TypeError):
                d.label_map['questions'] = 'changed'

    def test_shared_maps_are_read_only(self):
        with pytest.raises(TypeError):
            RCODE_LABEL_MAP['refused-answers'] = 'refused'
        with pytest.raises(TypeError):
            RTIME_BUCKET_MAP['answers-slow'] = 10

    def test_definition_copies_its_label_map(self):
        source = {'questions': 'udp'}
        definition = CounterDefinition(1, 'incoming_queries_total', 'Incoming queries.', 'net', source)
        
        source['tcp-questions'] = 'tcp'
        
        assert dict(definition.label_map) == {'questions': 'udp'}

    def test_rtime_maps_share_keys(self):
        assert set(RTIME_BUCKET_MAP) == set(RTIME_LABEL_MAP)
        assert list(RTIME_BUCKET_MAP.values()).count(0) == 1

    def test_authoritative_latency_gauge(self):
        gauge_defs, _ = catalog_for(ServerVariant.AUTHORITATIVE)
        latency = next(d for d in gauge_defs if d.name == 'latency_average_seconds')
        assert latency.key == 'latency'

    def test_lookup_by_plain_string(self):
        assert catalog_for('recursor') == catalog_for(ServerVariant.RECURSOR)


class TestSelector:
    """Server identification and variant resolution"""

    @pytest.mark.parametrize('daemon_type,expected', [
        ('recursor', ServerVariant.RECURSOR),
        ('authoritative', ServerVariant.AUTHORITATIVE),
        ('dnsdist', ServerVariant.DNSDIST),
        ('Recursor ', ServerVariant.RECURSOR),
        ('bind', None),
        ('', None),
        (None, None),
    ])
    def test_resolve_variant(self, daemon_type, expected):
        assert resolve_variant(daemon_type) == expected

    def test_select_catalog(self):
        selection = select_catalog({'daemon_type': 'authoritative', 'version': '4.8.0'})
        
        assert selection.variant == ServerVariant.AUTHORITATIVE
        assert selection.server_type == 'authoritative'
        assert (selection.gauge_defs, selection.counter_defs) == catalog_for(ServerVariant.AUTHORITATIVE)

    def test_server_type_uses_canonical_variant_name(self):
        selection = select_catalog({'daemon_type': 'Recursor'})
        
        assert selection.variant == ServerVariant.RECURSOR
        assert selection.server_type == 'recursor'

    def test_select_unknown(self):
        selection = select_catalog({'daemon_type': 'something-else'})
        
        assert selection.variant is None
        assert selection.gauge_defs == ()
        assert selection.counter_defs == ()

    def test_identify_server(self):
        client = MagicMock()
        client.get_server_info.return_value = {
            'type': 'Server', 'id': 'localhost', 'url': '/api/v1/servers/localhost',
            'daemon_type': 'recursor', 'version': '4.9.1',
            'config_url': '/api/v1/servers/localhost/config{/config_setting}',
            'zones_url': '/api/v1/servers/localhost/zones{/zone}',
        }
        
        info = identify_server(client)
        assert info['daemon_type'] == 'recursor'

    def test_identify_server_failure_propagates(self):
        client = MagicMock()
        client.get_server_info.side_effect = NetworkError('connection refused')
        
        with pytest.raises(NetworkError):
            identify_server(client)
