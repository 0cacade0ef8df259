import pytest

from rth_host.errors import WaveformParameterError
from seq.vfa_waveforms import build_demo_waveforms
from seq.waveforms import SpinBenchWaveforms, load_waveforms, save_waveforms


def test_missing_key_names_block_and_key(waveforms):
    with pytest.raises(WaveformParameterError) as excinfo:
        waveforms.excitation["<Sinc RF>.duration"]
    assert excinfo.value.block == 'excitation'
    assert 'Sinc RF' in str(excinfo.value)
    # still a KeyError for callers that only know dict semantics
    assert isinstance(excinfo.value, KeyError)


def test_unknown_block_rejected():
    with pytest.raises(ValueError):
        SpinBenchWaveforms(refocusing={})


def test_save_and_load(tmp_path, waveforms):
    path = save_waveforms(waveforms, 'vfa_t1', directory=str(tmp_path))
    assert path.endswith('.json')
    assert load_waveforms(path) == waveforms


def test_demo_waveforms_from_pypulseq():
    sb, min_tr = build_demo_waveforms()
    assert sb.readout["<Cartesian Readout>.xRes"] == 256
    assert sb.readout["<Phase Encode Gradient>.res"] == 5
    assert sb.readout["<Cartesian Readout>.fov"] == 24.0
    assert sb.excitation["<Sinc RF>.tip"] == 20.0
    assert sb.excitation["<Slice Select Gradient>.thickness"] == 5.0
    # sinc peak sits inside the RF pulse, after the dead time
    assert 0 < sb.excitation["<Sinc RF>.peak"] < sb.excitation["<Sinc RF>.duration"] + 1
    # TR must fit excitation and readout at least
    assert min_tr > sb.excitation["<Sinc RF>.duration"] + sb.readout["<Cartesian Readout>.readoutDuration"]
