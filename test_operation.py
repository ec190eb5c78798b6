#!/usr/bin/env python3
"""
Tests for operations, services and applications generating traces.
"""

import random
import uuid

import pytest

from synthetic_traces import Application, Operation, Service


def linear_chain():
    a, b, c = Operation('a', 'svc', 'app'), Operation('b', 'svc', 'app'), Operation('c', 'svc', 'app')
    a.add_call(b)
    b.add_call(c)
    return a, b, c


@pytest.mark.parametrize('chance', [-1, -0.01, 100.5, 197, float('nan')])
def test_error_chance_out_of_range_rejected(chance):
    with pytest.raises(ValueError):
        Operation('op', error_chance=chance)


@pytest.mark.parametrize('chance', [0, 100, 42.5])
def test_error_chance_in_range_accepted(chance):
    assert Operation('op', error_chance=chance).error_chance == chance


def test_linear_call_graph_order_and_nesting():
    a, _, _ = linear_chain()
    for seed in range(50):
        spans = a.generate_trace(uuid.uuid4(), rng=random.Random(seed))

        assert [s.operation_name for s in spans] == ['a', 'b', 'c']
        for parent, child in zip(spans, spans[1:]):
            assert child.parents == [parent.span_id]
            assert parent.start_time <= child.start_time < parent.start_time + parent.duration
            assert child.start_time + child.duration <= parent.start_time + parent.duration


def test_root_span_has_no_parent_and_shares_trace_id():
    a, _, _ = linear_chain()
    trace_id = uuid.uuid4()
    spans = a.generate_trace(trace_id)
    assert spans[0].parents == []
    assert all(s.trace_id == trace_id for s in spans)
    assert len({s.span_id for s in spans}) == 3


def test_explicit_window():
    op = Operation('op', 'svc', 'app')
    for seed in range(50):
        span = op.generate_trace(uuid.uuid4(), budget_millis=1000, rng=random.Random(seed), now_millis=0)[0]
        assert 500 <= span.duration < 1000
        assert 0 <= span.start_time
        assert span.start_time + span.duration <= 1000


def test_small_budget_is_not_halved():
    op = Operation('op', 'svc', 'app')
    span = op.generate_trace(uuid.uuid4(), offset_millis=7, budget_millis=4, now_millis=100)[0]
    assert span.duration == 4
    assert span.start_time == 107


def test_calls_run_in_declared_order():
    root = Operation('root', 'svc', 'app')
    for name in ('first', 'second', 'third'):
        root.add_call(Operation(name, 'svc', 'app'))
    spans = root.generate_trace(uuid.uuid4())
    assert [s.operation_name for s in spans] == ['root', 'first', 'second', 'third']
    assert all(s.parents == [spans[0].span_id] for s in spans[1:])


def test_generation_leaves_operation_untouched():
    a, b, c = linear_chain()
    before = [(op.name, op.service, op.application, op.source, dict(op.tags)) for op in (a, b, c)]
    a.generate_trace(uuid.uuid4())
    after = [(op.name, op.service, op.application, op.source, dict(op.tags)) for op in (a, b, c)]
    assert before == after


def test_operation_tags_and_identity():
    op = Operation('op', 'svc', 'app', tags={'region': 'eu'}, error_chance=0)
    span = op.generate_trace(uuid.uuid4())[0]
    assert span.source == 'trace-generator'
    assert span.get_tag('region') == 'eu'
    assert span.get_tag('application') == 'app'
    assert span.get_tag('service') == 'svc'
    assert span.get_tag('cluster') == 'cluster'
    assert span.get_tag('shard') == 'shard'
    assert span.get_tag('error') is None


def test_operation_always_failing():
    op = Operation('op', 'svc', 'app', error_chance=100)
    assert op.generate_trace(uuid.uuid4())[0].get_tag('error') == 'true'


def test_service_single_operation():
    op1 = Operation('one')
    subject = Service('testService', operations={'one': op1})
    trace_id = uuid.uuid4()

    result = subject.generate_trace(trace_id, 'one')

    assert len(result) == 1
    assert result[0].trace_id == trace_id
    assert result[0].operation_name == 'one'
    assert op1.service == 'testService'


def test_service_unknown_operation_yields_nothing():
    subject = Service('testService', operations={'one': Operation('one')})
    assert subject.generate_trace(uuid.uuid4(), 'missing') == []


def test_service_random_operation():
    subject = Service('testService', operations={'one': Operation('one'), 'two': Operation('two')})
    result = subject.generate_trace(uuid.uuid4())
    assert result[0].operation_name in ('one', 'two')


def test_service_cross_service_calls():
    op1 = Operation('one', service='testService')
    op2 = Operation('two', service='otherService')
    op1.add_call(op2)
    subject = Service('testService', operations={'one': op1})

    result = subject.generate_trace(uuid.uuid4(), 'one')

    assert len(result) == 2
    assert result[0].get_tag('service') == 'testService'
    assert result[1].operation_name == 'two'
    assert result[1].get_tag('service') == 'otherService'


def test_service_adds_base_latency_and_tags():
    op1 = Operation('one', error_chance=0)
    op1.add_call(Operation('two', error_chance=0))
    plain = Service('svc', operations={'one': op1})
    biased = Service('svc', operations={'one': op1}, tags={'team': 'coffee'}, base_latency=100)

    expected = plain.generate_trace(uuid.uuid4(), 'one', rng=random.Random(7))
    result = biased.generate_trace(uuid.uuid4(), 'one', rng=random.Random(7))

    assert [s.duration + 100 for s in expected] == [s.duration for s in result]
    assert all(s.tags[-1] == ('team', 'coffee') for s in result)


def test_service_tags_are_appended_not_merged():
    op1 = Operation('one')
    subject = Service('svc', operations={'one': op1}, tags={'service': 'override'})
    span = subject.generate_trace(uuid.uuid4(), 'one')[0]
    assert span.tag_values('service') == ['svc', 'override']


def test_application_generates_for_service():
    svc = Service('testService', 'testApp', operations={'one': Operation('one')})
    app = Application('testApp', {'testService': svc})

    assert app.generate_trace(uuid.uuid4())[0].operation_name == 'one'
    assert app.generate_trace(uuid.uuid4(), 'testService')[0].get_tag('application') == 'testApp'
    assert app.generate_trace(uuid.uuid4(), 'missing') == []
    assert app.get_service('testService') is svc


def test_empty_application_yields_nothing():
    assert Application('empty').generate_trace(uuid.uuid4()) == []


def test_application_uses_given_random_source():
    services = {name: Service(name, 'testApp', operations={'op': Operation('op', error_chance=0)})
                for name in ('one', 'two', 'three')}
    app = Application('testApp', services)

    def shape(seed):
        trace = app.generate_trace(uuid.uuid4(), rng=random.Random(seed))
        return [(span.get_tag('service'), span.duration) for span in trace]

    assert shape(11) == shape(11)
    assert {shape(seed)[0][0] for seed in range(20)} == {'one', 'two', 'three'}
