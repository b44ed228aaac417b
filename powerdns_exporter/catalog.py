#!/usr/bin/env python3
"""
Metric Catalog - declarative mapping of PowerDNS statistics to Prometheus metrics

Each server variant has a table of gauge definitions (one raw key, one
value) and counter definitions (several raw keys sharing a metric name,
told apart by one label).
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


class ServerVariant(str, Enum):
    """PowerDNS daemon types the exporter knows about"""
    AUTHORITATIVE = 'authoritative'
    RECURSOR = 'recursor'
    DNSDIST = 'dnsdist'


@dataclass(frozen=True)
class GaugeDefinition:
    """One raw statistic exported as a gauge"""
    id: int
    name: str
    desc: str
    key: str


@dataclass(frozen=True)
class CounterDefinition:
    """Raw statistics exported as one counter with a label dimension"""
    id: int
    name: str
    desc: str
    label: str
    # PowerDNS stats name -> Prometheus label value
    label_map: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        # read-only copy, the tables are shared by every collector
        object.__setattr__(self, 'label_map', MappingProxyType(dict(self.label_map)))


# =============================================
# SHARED LABEL MAPS
# =============================================

# Upper bound in seconds of each recursor answer-time slot, 0 means no bound
RTIME_BUCKET_MAP = MappingProxyType({
    'answers0-1': 0.001,
    'answers1-10': 0.01,
    'answers10-100': 0.1,
    'answers100-1000': 1,
    'answers-slow': 0,
})

RTIME_LABEL_MAP = MappingProxyType({
    'answers0-1': '0_1ms',
    'answers1-10': '1_10ms',
    'answers10-100': '10_100ms',
    'answers100-1000': '100_1000ms',
    'answers-slow': 'over_1000ms',
})

RCODE_LABEL_MAP = MappingProxyType({
    'servfail-answers': 'servfail',
    'nxdomain-answers': 'nxdomain',
    'noerror-answers': 'noerror',
})

EXCEPTIONS_LABEL_MAP = MappingProxyType({
    'resource-limits': 'resource_limit',
    'over-capacity-drops': 'over_capacity_drop',
    'unreachables': 'ns_unreachable',
    'outgoing-timeouts': 'outgoing_timeout',
})


# =============================================
# RECURSOR
# =============================================

RECURSOR_GAUGE_DEFS = (
    GaugeDefinition(1, 'latency_average_seconds', 'Exponential moving average of question-to-answer latency.', 'qa_latency'),
    GaugeDefinition(2, 'concurrent_queries', 'Number of concurrent queries.', 'concurrent_queries'),
    GaugeDefinition(3, 'cache_size', 'Number of entries in the cache.', 'cache_entries'),
)

RECURSOR_COUNTER_DEFS = (
    CounterDefinition(
        1, 'incoming_queries_total', 'Total number of incoming queries by network.', 'net',
        {'questions': 'udp', 'tcp-questions': 'tcp'},
    ),
    CounterDefinition(
        2, 'outgoing_queries_total', 'Total number of outgoing queries by network.', 'net',
        {'all-outqueries': 'udp', 'tcp-outqueries': 'tcp'},
    ),
    CounterDefinition(
        3, 'cache_lookups_total', 'Total number of cache lookups by result.', 'result',
        {'cache-hits': 'hit', 'cache-misses': 'miss'},
    ),
    CounterDefinition(4, 'answers_rcodes_total', 'Total number of answers by response code.', 'rcode', RCODE_LABEL_MAP),
    CounterDefinition(5, 'answers_rtime_total', 'Total number of answers grouped by response time slots.', 'timeslot', RTIME_LABEL_MAP),
    CounterDefinition(6, 'exceptions_total', 'Total number of exceptions by error.', 'error', EXCEPTIONS_LABEL_MAP),
)


# =============================================
# AUTHORITATIVE
# =============================================

AUTHORITATIVE_GAUGE_DEFS = (
    GaugeDefinition(6, 'security_status', 'PDNS Server Security status based on security-status.secpoll.powerdns.com', 'security-status'),
    GaugeDefinition(1, 'latency_average_seconds', 'Average number of microseconds a packet spends within PowerDNS', 'latency'),
    GaugeDefinition(2, 'packet_cache_size', 'Number of entries in the packet cache.', 'packetcache-size'),
    GaugeDefinition(3, 'signature_cache_size', 'Number of entries in the signature cache.', 'signature-cache-size'),
    GaugeDefinition(4, 'key_cache_size', 'Number of entries in the key cache.', 'key-cache-size'),
    GaugeDefinition(5, 'metadata_cache_size', 'Number of entries in the metadata cache.', 'meta-cache-size'),
    GaugeDefinition(7, 'qsize', 'Number of packets waiting for database attention.', 'qsize-q'),
)

AUTHORITATIVE_COUNTER_DEFS = (
    CounterDefinition(1, 'incoming_notifications', 'Number of NOTIFY packets that were received', 'type', {}),
    CounterDefinition(2, 'uptime', 'Uptime in seconds of the daemon', 'type', {'uptime': 'seconds'}),
    CounterDefinition(
        3, 'dnssec', 'DNSSEC counters', 'type',
        {'signatures': 'signatures_created', 'udp-do-queries': 'ok_queries_recv'},
    ),
    CounterDefinition(
        4, 'packet_cache_lookup', 'Packet cache lookups by result', 'result',
        {'packetcache-hit': 'hit', 'packetcache-miss': 'miss'},
    ),
    CounterDefinition(
        5, 'query_cache_lookup', 'Query cache lookups by result', 'result',
        {'query-cache-hit': 'hit', 'query-cache-miss': 'miss'},
    ),
    CounterDefinition(
        6, 'deferred_cache_actions', 'Deferred cache actions because of maintenance by type', 'type',
        {'deferred-cache-inserts': 'inserts', 'deferred-cache-lookup': 'lookups'},
    ),
    CounterDefinition(
        7, 'dnsupdate_queries_total', 'Total number of DNS update queries by status.', 'status',
        {
            'dnsupdate-answers': 'answered',
            'dnsupdate-changes': 'applied',
            'dnsupdate-queries': 'requested',
            'dnsupdate-refused': 'refused',
        },
    ),
    CounterDefinition(
        8, 'recursive_queries_total', 'Total number of recursive queries by status.', 'status',
        {
            'rd-queries': 'requested',
            'recursing-questions': 'processed',
            'recursing-answers': 'answered',
            'recursion-unanswered': 'unanswered',
        },
    ),
    CounterDefinition(
        9, 'queries_total', 'Total number of queries by protocol.', 'proto',
        {
            'tcp-queries': 'tcp',
            'tcp4-queries': 'tcp4',
            'tcp6-queries': 'tcp6',
            'udp-queries': 'udp',
            'udp4-queries': 'udp4',
            'udp6-queries': 'udp6',
        },
    ),
    CounterDefinition(
        10, 'answers_total', 'Total number of answers by protocol.', 'proto',
        {
            'tcp-answers': 'tcp',
            'tcp4-answers': 'tcp4',
            'tcp6-answers': 'tcp6',
            'udp-answers': 'udp',
            'udp4-answers': 'udp4',
            'udp6-answers': 'udp6',
        },
    ),
    CounterDefinition(
        11, 'answers_bytes_total', 'Total number of answer bytes sent over by protocol.', 'proto',
        {
            'tcp-answers-bytes': 'tcp',
            'tcp4-answers-bytes': 'tcp4',
            'tcp6-answers-bytes': 'tcp6',
            'udp-answers-bytes': 'udp',
            'udp4-answers-bytes': 'udp4',
            'udp6-answers-bytes': 'udp6',
        },
    ),
    CounterDefinition(
        12, 'exceptions_total', 'Total number of exceptions by error.', 'error',
        {
            'servfail-packets': 'servfail',
            'timedout-packets': 'timeout',
            'corrupt-packets': 'corrupt_packets',
            'overload-drops': 'backend_overload',
            'udp-recvbuf-errors': 'recvbuf_errors',
            'udp-sndbuf-errors': 'sndbuf_errors',
            'udp-in-errors': 'udp_in_errors',
            'udp-noport-errors': 'udp_noport_errors',
        },
    ),
    CounterDefinition(
        13, 'cpu_utilisation', 'Number of CPU milliseconds spent in user, and kernel space', 'type',
        {'sys-msec': 'sys', 'user-msec': 'user'},
    ),
)


# =============================================
# DNSDIST
# =============================================

DNSDIST_GAUGE_DEFS = (
    GaugeDefinition(1, 'security_status', 'dnsdist security status based on security-status.secpoll.powerdns.com', 'security-status'),
    GaugeDefinition(2, 'real_memory_usage_bytes', 'Resident memory used by dnsdist in bytes.', 'real-memory-usage'),
    GaugeDefinition(3, 'fd_usage', 'Number of open file descriptors.', 'fd-usage'),
    GaugeDefinition(4, 'dynamic_blocks', 'Number of entries in the dynamic block table.', 'dyn-block-nmg-size'),
)

DNSDIST_COUNTER_DEFS = (
    CounterDefinition(
        1, 'queries_total', 'Total number of client queries received by type.', 'type',
        {'queries': 'all', 'rdqueries': 'recursive', 'empty-queries': 'empty'},
    ),
    CounterDefinition(
        2, 'dropped_queries_total', 'Total number of client queries dropped by reason.', 'reason',
        {
            'rule-drop': 'rule',
            'dyn-blocked': 'dynamic_block',
            'no-policy': 'no_policy',
            'noncompliant-queries': 'noncompliant',
            'acl-drops': 'acl',
        },
    ),
    CounterDefinition(
        3, 'self_answers_total', 'Total number of answers generated by dnsdist itself by type.', 'type',
        {
            'self-answered': 'self_answered',
            'rule-nxdomain': 'nxdomain',
            'rule-refused': 'refused',
            'trunc-failures': 'trunc_failure',
        },
    ),
    CounterDefinition(
        4, 'backend_responses_total', 'Total number of backend responses by result.', 'result',
        {
            'responses': 'ok',
            'servfail-responses': 'servfail',
            'noncompliant-responses': 'noncompliant',
            'downstream-timeouts': 'timeout',
            'downstream-send-errors': 'send_error',
        },
    ),
    CounterDefinition(
        5, 'cache_lookups_total', 'Total number of packet cache lookups by result.', 'result',
        {'cache-hits': 'hit', 'cache-misses': 'miss'},
    ),
    CounterDefinition(
        6, 'cpu_utilisation', 'Number of CPU milliseconds spent in user, and kernel space', 'type',
        {'cpu-sys-msec': 'sys', 'cpu-user-msec': 'user'},
    ),
    CounterDefinition(
        7, 'answers_rtime_total', 'Total number of answers grouped by response time slots.', 'timeslot',
        {
            'latency0-1': '0_1ms',
            'latency1-10': '1_10ms',
            'latency10-50': '10_50ms',
            'latency50-100': '50_100ms',
            'latency100-1000': '100_1000ms',
            'latency-slow': 'over_1000ms',
        },
    ),
    CounterDefinition(8, 'uptime', 'Uptime in seconds of the daemon', 'type', {'uptime': 'seconds'}),
)


_CATALOGS = {
    ServerVariant.RECURSOR: (RECURSOR_GAUGE_DEFS, RECURSOR_COUNTER_DEFS),
    ServerVariant.AUTHORITATIVE: (AUTHORITATIVE_GAUGE_DEFS, AUTHORITATIVE_COUNTER_DEFS),
    ServerVariant.DNSDIST: (DNSDIST_GAUGE_DEFS, DNSDIST_COUNTER_DEFS),
}


def catalog_for(variant: Optional[ServerVariant]) -> Tuple[Tuple[GaugeDefinition, ...], Tuple[CounterDefinition, ...]]:
    """Gauge and counter tables for a variant; unknown variants get empty tables"""
    return _CATALOGS.get(variant, ((), ()))
