#!/usr/bin/env python3
"""
Test Histogram Builder - recursor response time histogram
"""

import pytest

from powerdns_exporter.catalog import RTIME_BUCKET_MAP
from powerdns_exporter.exceptions import MissingKeyError
from powerdns_exporter.histogram import (
    RESPONSE_TIME_HISTOGRAM_NAME, build_response_time_histogram, cumulative_buckets
)

ANSWERS = {
    'answers0-1': 10,
    'answers1-10': 5,
    'answers10-100': 0,
    'answers100-1000': 0,
    'answers-slow': 2,
}


def bucket_samples(histogram):
    return {s.labels['le']: s.value for s in histogram.samples if s.name.endswith('_bucket')}


class TestCumulativeBuckets:
    """Linear slot counters -> cumulative buckets"""
    
    def test_reference_snapshot(self):
        buckets, count = cumulative_buckets(ANSWERS)
        
        assert buckets == [(0.001, 10), (0.01, 15), (0.1, 15), (1, 15)]
        assert count == 17
    
    def test_buckets_are_non_decreasing(self):
        stats = {
            'answers0-1': 3,
            'answers1-10': 0,
            'answers10-100': 8,
            'answers100-1000': 1,
            'answers-slow': 6,
        }
        buckets, count = cumulative_buckets(stats)
        
        bounds = [b for b, _ in buckets]
        values = [v for _, v in buckets]
        assert bounds == sorted(bounds)
        assert values == sorted(values)
        assert count == sum(stats.values())
        assert values[-1] == count - stats['answers-slow']
    
    def test_overflow_slot_is_not_a_bucket(self):
        buckets, _ = cumulative_buckets(ANSWERS)
        assert 0 not in [b for b, _ in buckets]
        assert len(buckets) == len(RTIME_BUCKET_MAP) - 1
    
    def test_all_zero(self):
        stats = {k: 0 for k in ANSWERS}
        buckets, count = cumulative_buckets(stats)
        
        assert [v for _, v in buckets] == [0, 0, 0, 0]
        assert count == 0
    
    @pytest.mark.parametrize('missing', sorted(ANSWERS))
    def test_missing_key(self, missing):
        stats = {k: v for k, v in ANSWERS.items() if k != missing}
        
        with pytest.raises(MissingKeyError) as exc:
            cumulative_buckets(stats)
        assert exc.value.key == missing


class TestResponseTimeHistogram:
    """Prometheus histogram family"""
    
    def test_metric_family(self):
        histogram = build_response_time_histogram(ANSWERS)
        
        assert histogram.name == RESPONSE_TIME_HISTOGRAM_NAME == 'powerdns_recursor_response_time_seconds'
        assert histogram.type == 'histogram'
        assert bucket_samples(histogram) == {
            '0.001': 10,
            '0.01': 15,
            '0.1': 15,
            '1.0': 15,
            '+Inf': 17,
        }
    
    def test_count_and_sum(self):
        histogram = build_response_time_histogram(ANSWERS)
        by_name = {s.name: s.value for s in histogram.samples if not s.name.endswith('_bucket')}
        
        assert by_name[RESPONSE_TIME_HISTOGRAM_NAME + '_count'] == 17
        assert by_name[RESPONSE_TIME_HISTOGRAM_NAME + '_sum'] == 0
    
    def test_no_labels_besides_le(self):
        histogram = build_response_time_histogram(ANSWERS)
        for sample in histogram.samples:
            assert set(sample.labels) <= {'le'}
    
    def test_missing_key_raises(self):
        stats = dict(ANSWERS)
        del stats['answers-slow']
        
        with pytest.raises(MissingKeyError):
            build_response_time_histogram(stats)
