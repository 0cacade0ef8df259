import logging

import pytest

from rth_host.commands import (ChangeMRIParameter, DisplayAnnotation, FloatParameter, InformationInsert,
                               UpdateGroup)
from rth_host.errors import RthCommandError
from rth_host.events import InputWidget
from rth_host.sinks import DemoHost, RecordingSink, dispatch


def test_dispatch_routes_in_order(sink):
    dispatch(sink, [
        ChangeMRIParameter('s', 'EchoTime', 4.0),
        InformationInsert('s', 'mri.EchoTime', 4.0),
        DisplayAnnotation('fov', 240.0),
    ])
    assert sink.effects == [
        ChangeMRIParameter('s', 'EchoTime', 4.0),
        InformationInsert('s', 'mri.EchoTime', 4.0),
        DisplayAnnotation('fov', 240.0),
    ]
    assert sink.commands == [ChangeMRIParameter('s', 'EchoTime', 4.0)]
    assert sink.information == {('s', 'mri.EchoTime'): 4.0}


def test_dispatch_is_not_transactional():
    sink = RecordingSink()
    with pytest.raises(RthCommandError):
        dispatch(sink, [ChangeMRIParameter('s', 'FlipAngle1', 3), object()])
    assert sink.effects == [ChangeMRIParameter('s', 'FlipAngle1', 3)]


def test_update_group_is_an_immutable_sequence():
    group = UpdateGroup([FloatParameter('s', 'excitation', 'scaleRF', '', 1)])
    assert isinstance(group.commands, tuple)
    assert len(group) == 1
    assert group == UpdateGroup((FloatParameter('s', 'excitation', 'scaleRF', '', 1),))


def test_demo_host_logs_commands(caplog):
    host = DemoHost(min_tr=7.5)
    with caplog.at_level(logging.INFO, logger='rth_host.sinks'):
        assert host.get_tr('s') == 7.5
        host.set_loop_commands('s', 'tiploop', ())
    assert 'GetTR' in caplog.text
    assert 'tiploop' in caplog.text


def test_widget_calls_slots_in_connection_order():
    calls = []
    widget = InputWidget('inputWidget_TR', minimum=10, maximum=40, value=10)
    widget.valueChanged.connect(lambda v: calls.append(('a', v)))
    widget.valueChanged.connect(lambda v: calls.append(('b', v)))
    widget.setValue(12.5)
    assert calls == [('a', 12.5), ('b', 12.5)]
    assert widget.name == 'inputWidget_TR'


def test_widget_bounds_and_emits_only_on_change():
    seen = []
    widget = InputWidget('inputWidget_TE', minimum=1, maximum=8, value=3)
    widget.valueChanged.connect(lambda v: seen.append(v))
    widget.setValue(3)
    widget.setValue(0)
    widget.value = 12
    assert seen == [1, 8]
    assert all(isinstance(v, float) for v in seen)
    assert widget.value == 8
