import os
from datetime import datetime

import matplotlib
import matplotlib.pyplot as plt
import numpy as np
import pytest

import configs.hw_config_vfa as hw
from rth_host.errors import ReconConfigurationError
from seq.vfa_t1_recon import ReconBlock, VFAT1Recon, demo_readouts, export_file_name


@pytest.fixture
def recon(tmp_path):
    return VFAT1Recon(sequence_id='vfa_test', instance_name='vfa_t1', export_directory=str(tmp_path),
                      date=datetime(2019, 10, 5, 12, 30, 45))


def test_export_file_name_uses_zero_based_month_and_seconds():
    name = export_file_name('/data/', 'vfa_t1', datetime(2019, 10, 5, 12, 30, 45))
    assert name == '/data/vfa_t12019945.dat'


def test_export_configuration(recon, tmp_path):
    assert recon.exportFileName == os.path.join(str(tmp_path), 'vfa_t12019945.dat')
    assert recon.imageExport.fileName == recon.exportFileName
    assert recon.imageExport.series is True
    assert recon.imageExport.objectName == 'save_image'
    assert recon.splitter.objectName == 'splitOutput'


def test_observer_keys(recon):
    recon.observer.reportValue(hw.samples_key, 256)
    recon.observer.reportValue('acquisition.other', 1)
    assert recon.observer.observed == {'samples': 256}
    assert recon.observer.sequence_id == 'vfa_test'


def test_connect_coils_builds_one_chain_per_coil(recon):
    recon.observer.reportCoils(4)
    assert len(recon.blocks) == 4
    assert recon.sos.slots == [0, 1, 2, 3]
    for i, block in enumerate(recon.blocks):
        assert recon.observer.output(i).connections == 1
        assert block.sort.phase_encodes == 256
        assert block.sort.samples == 256
        assert block.sort.slice_encodes == 5
        assert block.sort.accumulate == 256 * 5


def test_rebuild_releases_previous_chains(recon):
    recon.observer.reportCoils(4)
    old_blocks = recon.blocks
    recon.observer.reportCoils(2)
    assert len(recon.blocks) == 2
    assert recon.sos.slots == [0, 1]
    for block in old_blocks:
        assert block.sort._input is None
        assert block.fft._input is None
        assert block.output().connections == 0
    assert recon.observer.ports == [0, 1]
    for coil in range(2):
        assert recon.observer.output(coil).connections == 1


def test_zero_coils_leaves_no_chains(recon):
    recon.observer.reportCoils(3)
    recon.observer.reportCoils(0)
    assert recon.blocks == ()
    assert recon.sos.slots == []


def test_negative_coil_count_raises(recon):
    with pytest.raises(ReconConfigurationError):
        recon.connectCoils(-1)


def test_rejected_coil_count_keeps_previous_chains(recon):
    recon.observer.reportValue(hw.samples_key, hw.sort_samples)
    recon.observer.reportCoils(2)
    with pytest.raises(ReconConfigurationError):
        recon.observer.reportCoils(-1)
    assert recon.observer.coils == 2
    assert len(recon.blocks) == 2
    readout = next(demo_readouts(2, rng=np.random.default_rng(1)))
    recon.receive(readout)
    assert all(block.sort._count == 1 for block in recon.blocks)


def test_recon_block_chain_detaches_on_close(recon):
    port = recon.observer.output(7)
    block = ReconBlock(port)
    assert port.connections == 1
    block.close()
    assert port.connections == 0


def test_full_pipeline_reaches_view_and_export(recon, tmp_path):
    coils = 2
    recon.observer.reportCoils(coils)
    for readout in demo_readouts(coils, rng=np.random.default_rng(0)):
        recon.receive(readout)

    shape = (hw.sort_slice_encodes, hw.sort_phase_encodes, hw.sort_samples)
    assert recon.threePlane.frames == 1
    assert recon.threePlane.volume.shape == shape
    assert np.all(recon.threePlane.volume >= 0)
    planes = recon.threePlane.planes()
    assert planes['transversal'].shape == shape[1:]

    assert recon.imageExport.frames == 1
    assert recon.imageExport.lastFile == os.path.join(str(tmp_path), 'vfa_t12019945_000.dat')
    saved = np.fromfile(recon.imageExport.lastFile, dtype=np.float32).reshape(shape)
    np.testing.assert_allclose(saved, recon.threePlane.volume, rtol=1e-5)


def test_three_plane_view_plots_central_planes(recon):
    matplotlib.use('Agg')
    recon.observer.reportCoils(1)
    for readout in demo_readouts(1, rng=np.random.default_rng(2)):
        recon.receive(readout)

    fig = recon.threePlane.plot(show=False)
    assert [ax.get_title() for ax in fig.axes] == ['Transversal', 'Coronal', 'Sagittal']
    assert fig.axes[0].get_images()[0].get_array().shape == (hw.sort_phase_encodes, hw.sort_samples)
    plt.close(fig)
