#!/usr/bin/env python3
"""
Tests for span construction: identity tags, fallback names and error injection.
"""

import random
import uuid

from synthetic_traces import SpanBuilder, random_duration
from synthetic_traces.latency_calculator import span_window
from synthetic_traces.span import IDENTITY_TAG_KEYS, RANDOM_NAMES


def test_default_span_has_identity_tags_once():
    for seed in range(20):
        span = SpanBuilder(rng=random.Random(seed)).build()
        for key in IDENTITY_TAG_KEYS:
            assert len(span.tag_values(key)) == 1
        assert span.operation_name
        assert span.source


def test_blank_name_and_source_fall_back_to_word_pools():
    span = SpanBuilder(None, 0, 10, '', rng=random.Random(1)).build()
    assert span.operation_name == 'operationName'
    assert span.source in RANDOM_NAMES['source']
    assert span.get_tag('cluster') in RANDOM_NAMES['cluster']
    assert span.get_tag('shard') in RANDOM_NAMES['shard']


def test_identity_tags_use_supplied_values():
    builder = SpanBuilder('op', 0, 10, 'src')
    builder.set_identity_tags('app', 'cluster-a', 'svc', 'shard-9')
    span = builder.build()
    assert span.get_tag('application') == 'app'
    assert span.get_tag('cluster') == 'cluster-a'
    assert span.get_tag('service') == 'svc'
    assert span.get_tag('shard') == 'shard-9'


def test_user_tag_wins_over_identity_value():
    builder = SpanBuilder('op', 0, 10, 'src')
    builder.add_tag('application', 'custom')
    builder.set_identity_tags('app', 'cluster', 'svc', 'shard')
    span = builder.build()
    assert span.tag_values('application') == ['custom']


def test_user_tags_may_repeat_keys():
    builder = SpanBuilder('op', 0, 10, 'src')
    builder.add_tag('team', 'a').add_tag('team', 'b')
    span = builder.build()
    assert span.tag_values('team') == ['a', 'b']


def test_error_chance_100_always_marks_error():
    for seed in range(50):
        span = SpanBuilder(rng=random.Random(seed)).set_error_chance(100).build()
        assert span.get_tag('error') == 'true'


def test_error_chance_0_never_marks_error():
    for seed in range(50):
        span = SpanBuilder(rng=random.Random(seed)).set_error_chance(0).build()
        assert span.get_tag('error') is None


def test_ids_and_parents():
    trace_id = uuid.uuid4()
    parent = uuid.uuid4()
    first = SpanBuilder().set_trace_id(trace_id).set_parents([parent]).build()
    second = SpanBuilder().build()
    assert first.trace_id == trace_id
    assert first.parents == [parent]
    assert first.follows_from == []
    assert first.span_id != second.span_id
    assert second.parents == []


def test_random_duration_keeps_small_budgets():
    rng = random.Random(3)
    assert random_duration(5, rng) == 5
    assert random_duration(0, rng) == 0


def test_random_duration_draws_upper_half():
    rng = random.Random(3)
    for _ in range(200):
        assert 50 <= random_duration(100, rng) < 100


def test_span_window_fits_inside_budget():
    rng = random.Random(11)
    for _ in range(200):
        offset, duration = span_window(40, 300, rng)
        assert 40 <= offset
        assert offset + duration <= 40 + 300
