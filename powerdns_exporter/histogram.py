#!/usr/bin/env python3
"""
Histogram Builder - recursor response time histogram

The recursor only reports how many answers fell into each time slot
(answers0-1, answers1-10, ...). Prometheus histograms are cumulative, so the
linear slot counts are summed up in threshold order.
"""

from typing import Dict, List, Mapping, Tuple

from prometheus_client.core import HistogramMetricFamily
from prometheus_client.utils import floatToGoString

from powerdns_exporter.catalog import RTIME_BUCKET_MAP
from powerdns_exporter.exceptions import MissingKeyError
from powerdns_exporter.utils.metrics import metric_name

RESPONSE_TIME_HISTOGRAM_NAME = metric_name('recursor', 'response_time_seconds')
RESPONSE_TIME_HISTOGRAM_HELP = 'Histogram of PowerDNS recursor response times in seconds.'


def cumulative_buckets(stats: Mapping[str, float],
                       bucket_map: Mapping[str, float] = RTIME_BUCKET_MAP) -> Tuple[List[Tuple[float, int]], int]:
    """
    Convert linear slot counters into cumulative buckets
    
    Args:
        stats: statistics snapshot (name -> value)
        bucket_map: raw key -> upper bound in seconds, 0 for the overflow slot
    
    Returns:
        (sorted list of (upper bound, cumulative count), total count)
    
    Raises:
        MissingKeyError: if any key of bucket_map is absent from stats
    """
    linear: Dict[float, int] = {}
    count = 0
    for key, bound in bucket_map.items():
        if key not in stats:
            raise MissingKeyError(key)
        value = int(stats[key])
        if bound != 0:
            linear[bound] = value
        count += value
    
    buckets = []
    cumsum = 0
    for bound in sorted(linear):
        cumsum += linear[bound]
        buckets.append((bound, cumsum))
    
    return buckets, count


def build_response_time_histogram(stats: Mapping[str, float]) -> HistogramMetricFamily:
    """Build powerdns_recursor_response_time_seconds from a snapshot"""
    buckets, count = cumulative_buckets(stats)
    
    # +Inf has to carry the total, it also becomes the _count sample
    exposed = [(floatToGoString(bound), value) for bound, value in buckets]
    exposed.append(('+Inf', count))
    
    return HistogramMetricFamily(
        RESPONSE_TIME_HISTOGRAM_NAME,
        RESPONSE_TIME_HISTOGRAM_HELP,
        buckets=exposed,
        sum_value=0
    )
