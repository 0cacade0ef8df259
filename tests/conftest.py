import pytest

from rth_host.sinks import RecordingSink
from seq.waveforms import SpinBenchWaveforms

SEQUENCE_ID = 'vfa_test'
MIN_TR = 12.0


@pytest.fixture
def waveforms():
    return SpinBenchWaveforms(
        excitation={
            "<Slice Select Gradient>.thickness": 5.0,
            "<Sinc RF>.tip": 20.0,
            "<Sinc RF>.peak": 1.0,
        },
        readout={
            "<Cartesian Readout>.xRes": 256,
            "<Cartesian Readout>.yRes": 256,
            "<Cartesian Readout>.fov": 24.0,
            "<Phase Encode Gradient>.res": 5,
        },
    )


@pytest.fixture
def sink():
    return RecordingSink(min_tr=MIN_TR)
