"""
@Summary: reconstruction of the qMRLab vfa_t1 sequence.

Collects raw data and reconstructs images: every receive coil gets its own
sort + FFT block, coils are combined by sum of squares, and the combined volume
is split between the live three plane view and the file export.

For now, base resolution components are hardcoded to be 256 x 256 (in-plane)
and 5 slab encodes for the 3D readout (see configs.hw_config_vfa).
"""
import logging
import os
from datetime import datetime

import numpy as np

import configs.hw_config_vfa as hw
from rth_host.errors import ReconConfigurationError
from rth_host.recon import (ImageExport, ImageFFT, RawObserver, RawReadout, RawToImageSort, Splitter,
                            SumOfSquares, ThreePlaneOutput)
import seq.rthBlankSeq as blankSeq

logger = logging.getLogger(__name__)


class ReconBlock:
    """Sort and FFT of one receive coil."""

    def __init__(self, input_port):
        self.sort = RawToImageSort()
        self.sort.setPhaseEncodes(hw.sort_phase_encodes)
        self.sort.setSamples(hw.sort_samples)
        self.sort.setSliceEncodes(hw.sort_slice_encodes)
        self.sort.setAccumulate(hw.sort_accumulate)
        self.sort.setInput(input_port)

        self.fft = ImageFFT()
        self.fft.setInput(self.sort.output())

    def output(self):
        return self.fft.output()

    def close(self):
        self.sort.release()
        self.fft.release()


def export_file_name(directory, instance_name, date):
    # Month is zero based, as the host's date API writes it
    return os.path.join(directory, f'{instance_name}{date.year}{date.month - 1}{date.second}.dat')


class VFAT1Recon(blankSeq.RTHBLANKSEQ):
    def __init__(self, sequence_id='vfa_t1', instance_name='vfa_t1', export_directory=hw.export_directory,
                 date=None, log_file=None, log_level=hw.log_level):
        super().__init__(log_file=log_file, log_level=log_level)
        self.sequenceId = sequence_id
        self.instanceName = instance_name

        self.observer = RawObserver()
        self.observer.setSequenceId(sequence_id)
        self.observer.observeValueForKey(hw.samples_key, "samples")

        # For each coil we need sort and FFT
        self.sos = SumOfSquares()
        self.blocks = ()
        self.observer.coilsChanged.connect(self.connectCoils)

        if date is None:
            date = datetime.now()
        self.imageExport = ImageExport(hw.export_object_name)
        self.exportFileName = export_file_name(export_directory, instance_name, date)

        self.splitter = Splitter(hw.splitter_object_name)
        self.splitter.setInput(self.sos.output())

        self.imageExport.setFileName(self.exportFileName)
        self._logger.warning(f'saving to {self.exportFileName}')
        self.imageExport.saveFileSeries(hw.export_series)

        self.threePlane = ThreePlaneOutput()
        self.threePlane.setInput(self.splitter.output(0))
        self.imageExport.setInput(self.splitter.output(1))

    def connectCoils(self, coils):
        """Rebuild the per coil chains. The previous chains are released first."""
        self._error_if(coils < 0, f'Invalid coil count {coils}', ReconConfigurationError)
        for block in self.blocks:
            block.close()
        self.observer.trimPorts(coils)
        self.blocks = tuple(ReconBlock(self.observer.output(i)) for i in range(coils))
        self.sos.set_inputs([block.output() for block in self.blocks])
        self._logger.info(f'{len(self.blocks)} coil chains connected')

    def receive(self, readout: RawReadout):
        self.observer.push(readout)


def demo_readouts(coils, rng=None):
    """Random multi-coil readouts covering one full accumulate cycle."""
    if rng is None:
        rng = np.random.default_rng()
    for sl in range(hw.sort_slice_encodes):
        for ph in range(hw.sort_phase_encodes):
            data = rng.standard_normal((coils, hw.sort_samples)) + 1j * rng.standard_normal((coils, hw.sort_samples))
            yield RawReadout(data, phase_encode=ph, slice_encode=sl)


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    recon = VFAT1Recon(log_file=hw.log_file)
    recon.observer.reportValue(hw.samples_key, hw.sort_samples)
    recon.observer.reportCoils(4)
    for readout in demo_readouts(4):
        recon.receive(readout)
    print(f"Frames displayed: {recon.threePlane.frames}, saved: {recon.imageExport.frames}")
    print(f"Last export: {recon.imageExport.lastFile}")
    recon.threePlane.plot()
