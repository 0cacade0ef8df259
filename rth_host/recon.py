"""
Reconstruction stages of the RTHawk recon graph, with a numpy backend.

Stages are wired port to port, ``stage.setInput(other.output())``, and data is
pushed through synchronously: the raw observer emits one readout line per coil, the
sort accumulates lines into k-space, the FFT turns k-space into an image, the
sum of squares combines coils, and the splitter fans the result out to the sinks.

Ports and the observer are QObjects. Without an event loop their signals are
delivered directly, in connection order.
"""
import logging
import os
from dataclasses import dataclass
from typing import Dict

import numpy as np
import scipy.io
from PySide6.QtCore import QObject, Signal

from rth_host.errors import ReconConfigurationError
from seq.utils import central_planes, combine_coils, ifft_3d

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawReadout:
    """One multi-coil readout: ``data`` is (coils, samples) complex."""
    data: np.ndarray
    phase_encode: int
    slice_encode: int


@dataclass(frozen=True)
class RawLine:
    """One readout of a single coil, as delivered on an observer port."""
    data: np.ndarray
    phase_encode: int
    slice_encode: int


class Port(QObject):
    """Output of a stage. ``dataReady`` carries every frame the stage produces."""
    dataReady = Signal(object)

    def __init__(self, name='', parent=None):
        super().__init__(parent)
        self.setObjectName(name)
        self._receivers = []

    def attach(self, receiver):
        self.dataReady.connect(receiver)
        self._receivers.append(receiver)

    def detach(self, receiver):
        if receiver in self._receivers:
            self.dataReady.disconnect(receiver)
            self._receivers.remove(receiver)

    @property
    def connections(self):
        return len(self._receivers)

    def emit(self, data):
        self.dataReady.emit(data)


class ReconStage:
    """Single input, single output stage. Subclasses implement ``process``."""

    def __init__(self, object_name=''):
        self.objectName = object_name
        self._input = None
        self._output = Port(object_name)

    def setInput(self, port):
        self.release()
        self._input = port
        port.attach(self.receive)

    def output(self):
        return self._output

    def release(self):
        """Detach from the input port so the stage no longer receives data."""
        if self._input is not None:
            self._input.detach(self.receive)
            self._input = None

    def receive(self, data):
        result = self.process(data)
        if result is not None:
            self._output.emit(result)

    def process(self, data):
        raise NotImplementedError


class RawObserver(QObject):
    """
    Entry of the recon graph: observes acquisition values and hands out one
    output port per receive coil.
    """
    coilsChanged = Signal(int)

    def __init__(self, sequence_id='', parent=None):
        super().__init__(parent)
        self.sequence_id = sequence_id
        self.observed: Dict[str, object] = {}
        self._keys: Dict[str, str] = {}
        self._ports: Dict[int, Port] = {}
        self.coils = None

    def setSequenceId(self, sequence_id):
        self.sequence_id = sequence_id

    def observeValueForKey(self, key, name):
        self._keys[key] = name

    def reportValue(self, key, value):
        """Called by the host when an acquisition value changes."""
        if key in self._keys:
            self.observed[self._keys[key]] = value
            logger.debug(f'observed {key} -> {self._keys[key]} = {value}')

    def reportCoils(self, coils):
        """Called by the host once the number of receive coils is known."""
        if coils < 0:
            raise ReconConfigurationError(f'Invalid coil count {coils}')
        self.coils = coils
        logger.info(f'{coils} receive coils reported')
        self.coilsChanged.emit(coils)

    @property
    def ports(self):
        return sorted(self._ports)

    def output(self, coil):
        if coil not in self._ports:
            self._ports[coil] = Port(f'coil{coil}')
        return self._ports[coil]

    def trimPorts(self, coils):
        """Drop the ports of coils >= ``coils``."""
        for coil in [c for c in self._ports if c >= coils]:
            del self._ports[coil]

    def push(self, readout: RawReadout):
        """Fan a multi-coil readout out to the per-coil ports."""
        data = np.atleast_2d(readout.data)
        if self.coils is None:
            raise ReconConfigurationError('Raw data received before the coil count was reported')
        if data.shape[0] != self.coils:
            raise ReconConfigurationError(f'Readout carries {data.shape[0]} coils, expected {self.coils}')
        for coil in range(self.coils):
            self.output(coil).emit(RawLine(data[coil], readout.phase_encode, readout.slice_encode))


class RawToImageSort(ReconStage):
    """Sort raw readout lines into a (slice, phase, readout) k-space."""

    def __init__(self, object_name=''):
        super().__init__(object_name)
        self.phase_encodes = 1
        self.samples = 1
        self.slice_encodes = 1
        self.accumulate = 1
        self._reset()

    def setPhaseEncodes(self, n):
        self.phase_encodes = n
        self._reset()

    def setSamples(self, n):
        self.samples = n
        self._reset()

    def setSliceEncodes(self, n):
        self.slice_encodes = n
        self._reset()

    def setAccumulate(self, n):
        self.accumulate = n
        self._reset()

    def _reset(self):
        self._kspace = np.zeros((self.slice_encodes, self.phase_encodes, self.samples), dtype=complex)
        self._count = 0

    def process(self, line: RawLine):
        if np.size(line.data) != self.samples:
            raise ReconConfigurationError(f'Readout has {np.size(line.data)} samples, sort expects {self.samples}')
        if not (0 <= line.phase_encode < self.phase_encodes and 0 <= line.slice_encode < self.slice_encodes):
            raise ReconConfigurationError(
                f'Encode ({line.phase_encode}, {line.slice_encode}) outside '
                f'({self.phase_encodes}, {self.slice_encodes})')
        self._kspace[line.slice_encode, line.phase_encode, :] = line.data
        self._count += 1
        if self._count < self.accumulate:
            return None
        kspace = self._kspace
        self._reset()
        return kspace


class ImageFFT(ReconStage):
    def process(self, kspace):
        return ifft_3d(kspace)


class _CoilSlot:
    """Receiver of one sum-of-squares slot."""

    def __init__(self, owner, index):
        self.owner = owner
        self.index = index

    def receive(self, image):
        self.owner._receive(self.index, image)


class SumOfSquares:
    """
    Combine coil images. A frame is emitted once every connected slot has
    delivered an image.
    """

    def __init__(self, object_name=''):
        self.objectName = object_name
        self._inputs: Dict[int, Port] = {}
        self._slots: Dict[int, _CoilSlot] = {}
        self._pending = {}
        self._output = Port(object_name)

    @property
    def slots(self):
        return sorted(self._inputs)

    def setInput(self, index, port):
        self._detach(index)
        slot = _CoilSlot(self, index)
        self._inputs[index] = port
        self._slots[index] = slot
        port.attach(slot.receive)

    def set_inputs(self, ports):
        """Replace the whole slot mapping, slot i fed by ports[i]."""
        for index in list(self._inputs):
            self._detach(index)
        self._pending = {}
        for index, port in enumerate(ports):
            self.setInput(index, port)

    def _detach(self, index):
        if index in self._inputs:
            self._inputs.pop(index).detach(self._slots.pop(index).receive)
            self._pending.pop(index, None)

    def output(self):
        return self._output

    def _receive(self, index, image):
        self._pending[index] = image
        if len(self._pending) < len(self._inputs):
            return
        images = [self._pending[i] for i in self.slots]
        self._pending = {}
        self._output.emit(combine_coils(images))


class Splitter(ReconStage):
    """Copy the input to every numbered output tap."""

    def __init__(self, object_name=''):
        super().__init__(object_name)
        self._taps: Dict[int, Port] = {}

    def output(self, index=0):
        if index not in self._taps:
            self._taps[index] = Port(f'{self.objectName}[{index}]')
        return self._taps[index]

    def receive(self, data):
        for index in sorted(self._taps):
            self._taps[index].emit(data)


class ThreePlaneOutput(ReconStage):
    """Live view sink: keeps the latest volume and its three central planes."""

    def __init__(self, object_name='threePlane'):
        super().__init__(object_name)
        self.volume = None
        self.frames = 0

    def process(self, volume):
        self.volume = volume
        self.frames += 1
        return None

    def planes(self):
        if self.volume is None:
            return {}
        return central_planes(self.volume)

    def plot(self, show=True):
        from seq.three_plane_display import plot_three_planes
        return plot_three_planes(self.planes(), show=show)


class ImageExport(ReconStage):
    """
    File sink. ``.mat`` names are written with scipy, anything else as raw
    float32. In series mode every frame goes to its own numbered file.
    """

    def __init__(self, object_name=''):
        super().__init__(object_name)
        self.fileName = None
        self.series = False
        self.frames = 0
        self.lastFile = None

    def setFileName(self, file_name):
        self.fileName = file_name

    def saveFileSeries(self, series):
        self.series = bool(series)

    def frame_path(self, index):
        if not self.series:
            return self.fileName
        root, ext = os.path.splitext(self.fileName)
        return f'{root}_{index:03d}{ext}'

    def process(self, volume):
        if self.fileName is None:
            raise ReconConfigurationError(f'{self.objectName}: no file name set')
        path = self.frame_path(self.frames)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        if path.endswith('.mat'):
            scipy.io.savemat(path, {'image': np.asarray(volume)})
        else:
            np.asarray(np.abs(volume), dtype=np.float32).tofile(path)
        self.frames += 1
        self.lastFile = path
        logger.info(f'{self.objectName}: image saved to {path}')
        return None
