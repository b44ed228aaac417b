#!/usr/bin/env python3
"""
Collector - runs one PowerDNS scrape per Prometheus collection

Every call to collect() fetches fresh statistics, applies the metric
catalog of the server variant and returns the resulting metric families.
Nothing but the housekeeping counters survives from one cycle to the next.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Any, Dict, Iterable, List, Optional, Sequence

from prometheus_client.core import CounterMetricFamily, HistogramMetricFamily, Metric
from prometheus_client.registry import Collector

from powerdns_exporter.catalog import CounterDefinition, GaugeDefinition, ServerVariant
from powerdns_exporter.client import PowerDNSClient
from powerdns_exporter.exceptions import MissingKeyError, NetworkError, PowerDNSError
from powerdns_exporter.histogram import (
    RESPONSE_TIME_HISTOGRAM_HELP, RESPONSE_TIME_HISTOGRAM_NAME, build_response_time_histogram
)
from powerdns_exporter.selector import Selection
from powerdns_exporter.utils.config import Config
from powerdns_exporter.utils.logger import get_logger
from powerdns_exporter.utils.metrics import (
    metric_name, new_gauge_metric, new_json_parse_failures_counter,
    new_total_scrapes_counter, new_up_gauge
)

logger = get_logger(__name__)

# Gauges whose key ends with this are reported in microseconds
LATENCY_SUFFIX = 'latency'
MICROSECONDS_PER_SECOND = 1000000


def build_snapshot(stats: Iterable[Dict[str, Any]]) -> Dict[str, float]:
    """Name -> value lookup for one cycle, last value wins"""
    return {s['name']: s['value'] for s in stats}


class ExporterState:
    """Catalog tables plus every metric object that outlives a single scrape"""
    
    def __init__(self, server_type: str, variant: Optional[ServerVariant],
                 gauge_defs: Sequence[GaugeDefinition] = (),
                 counter_defs: Sequence[CounterDefinition] = (),
                 server_info: Optional[Dict[str, Any]] = None):
        self.server_type = server_type
        self.server_info = dict(server_info or {})
        self.variant = variant
        self.gauge_defs = tuple(gauge_defs)
        self.counter_defs = tuple(counter_defs)
        
        # held for a whole cycle, concurrent scrapes wait on it
        self.lock = threading.Lock()
        # one worker for the process lifetime, a hung fetch never adds threads
        self.executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='pdns-scrape')
        
        self.up = new_up_gauge(server_type)
        self.total_scrapes = new_total_scrapes_counter(server_type)
        self.json_parse_failures = new_json_parse_failures_counter(server_type)
        self.last_up = 0
        
        self.gauge_metrics = {
            d.id: new_gauge_metric(server_type, d.name, d.desc) for d in self.gauge_defs
        }
        self.counter_names = {
            d.id: metric_name(server_type, d.name) for d in self.counter_defs
        }
    
    @classmethod
    def from_selection(cls, selection: Selection) -> 'ExporterState':
        return cls(selection.server_type, selection.variant,
                   selection.gauge_defs, selection.counter_defs,
                   selection.server_info)
    
    @property
    def version(self) -> str:
        return self.server_info.get('version') or ''
    
    def set_up(self, value: int):
        self.up.set(value)
        self.last_up = value
    
    def housekeeping(self) -> List[Metric]:
        """up, total scrapes and JSON parse failures"""
        metrics = []
        for m in (self.up, self.total_scrapes, self.json_parse_failures):
            metrics.extend(m.collect())
        return metrics


class PowerDNSCollector(Collector):
    """Custom collector fetching PowerDNS statistics on every scrape"""
    
    def __init__(self, client: PowerDNSClient, state: ExporterState,
                 scrape_deadline: Optional[float] = None):
        self.client = client
        self.state = state
        self.scrape_deadline = scrape_deadline if scrape_deadline is not None else Config.SCRAPE_DEADLINE
        logger.info(
            f"PowerDNSCollector initialized - server_type={state.server_type} "
            f"gauges={len(state.gauge_defs)} counters={len(state.counter_defs)}"
        )
    
    # =============================================
    # prometheus_client Collector interface
    # =============================================
    
    def describe(self) -> List[Metric]:
        """Every metric this collector can produce, without touching the API"""
        state = self.state
        metrics: List[Metric] = []
        for gauge in state.gauge_metrics.values():
            metrics.extend(gauge.describe())
        for d in state.counter_defs:
            metrics.append(CounterMetricFamily(state.counter_names[d.id], d.desc, labels=[d.label]))
        if state.variant == ServerVariant.RECURSOR:
            metrics.append(HistogramMetricFamily(RESPONSE_TIME_HISTOGRAM_NAME, RESPONSE_TIME_HISTOGRAM_HELP))
        for m in (state.up, state.total_scrapes, state.json_parse_failures):
            metrics.extend(m.describe())
        return metrics
    
    def collect(self) -> List[Metric]:
        """Run one scrape cycle and return its metrics"""
        with self.state.lock:
            stats = self.scrape()
            metrics = self.collect_metrics(stats) if stats is not None else []
            metrics.extend(self.state.housekeeping())
        return metrics
    
    # =============================================
    # Cycle
    # =============================================
    
    def scrape(self) -> Optional[List[Dict[str, Any]]]:
        """Fetch statistics; None when the cycle has to be aborted"""
        self.state.total_scrapes.inc()
        
        try:
            stats = self._fetch_statistics()
        except PowerDNSError as e:
            self.state.set_up(0)
            self.state.json_parse_failures.inc()
            logger.error(f"Error scraping PowerDNS: {e}")
            return None
        
        self.state.set_up(1)
        return stats
    
    def _fetch_statistics(self) -> List[Dict[str, Any]]:
        """Fetch in a worker thread and wait for it at most scrape_deadline seconds"""
        future = self.state.executor.submit(self.client.get_statistics)
        try:
            return future.result(timeout=self.scrape_deadline)
        except FuturesTimeoutError as e:
            # still queued behind a hung fetch: drop it instead of piling up
            future.cancel()
            raise NetworkError(f"Scrape deadline of {self.scrape_deadline}s exceeded") from e
    
    def collect_metrics(self, stats: Iterable[Dict[str, Any]]) -> List[Metric]:
        """Apply the catalog to fetched statistics"""
        snapshot = build_snapshot(stats)
        if not snapshot:
            logger.debug("PowerDNS returned no statistics")
            return []
        
        metrics = self.collect_gauges(snapshot)
        metrics.extend(self.collect_counters(snapshot))
        
        if self.state.variant == ServerVariant.RECURSOR:
            try:
                metrics.append(build_response_time_histogram(snapshot))
            except MissingKeyError as e:
                logger.error(f"Could not create response time histogram: {e}")
        
        return metrics
    
    def collect_gauges(self, snapshot: Dict[str, float]) -> List[Metric]:
        metrics: List[Metric] = []
        for d in self.state.gauge_defs:
            if d.key not in snapshot:
                self._missing_key(d.key)
                continue
            
            value = snapshot[d.key]
            if d.key.endswith(LATENCY_SUFFIX):
                value = value / MICROSECONDS_PER_SECOND
            
            gauge = self.state.gauge_metrics[d.id]
            gauge.set(value)
            metrics.extend(gauge.collect())
        return metrics
    
    def collect_counters(self, snapshot: Dict[str, float]) -> List[Metric]:
        metrics: List[Metric] = []
        for d in self.state.counter_defs:
            family = CounterMetricFamily(self.state.counter_names[d.id], d.desc, labels=[d.label])
            for key, label_value in d.label_map.items():
                if key not in snapshot:
                    self._missing_key(key)
                    continue
                family.add_metric([label_value], snapshot[key])
            
            if family.samples:
                metrics.append(family)
        return metrics
    
    def _missing_key(self, key: str):
        logger.error(f"Expected PowerDNS stats key not found: {key}")
        self.state.json_parse_failures.inc()


def build_collector(client: PowerDNSClient, selection: Selection,
                    scrape_deadline: Optional[float] = None) -> PowerDNSCollector:
    """Collector with a fresh state for the selected catalog"""
    return PowerDNSCollector(client, ExporterState.from_selection(selection), scrape_deadline)
