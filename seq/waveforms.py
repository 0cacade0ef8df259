"""
SpinBench waveform description of the vfa_t1 application.

The application description lists one .spv waveform per sequence block:

- [excitation] SincRF + Z (SlabSelect.spv)
- [echodelay] in us, exposed to the GUI (not linked to a file)
- [readout] 3D Cartesian Readout (CartesianReadout3D.spv)
- [spoiler] Area Trapezoid (SpoilerGradient.spv)

Each block is looked up with "<Component>.parameter" keys, e.g.
``sb.readout["<Cartesian Readout>.xRes"]``.
"""
import json
import os
from datetime import datetime

from rth_host.errors import WaveformParameterError

BLOCKS = ('excitation', 'echodelay', 'readout', 'spoiler')


class WaveformBlock(dict):
    """Parameters exported for one sequence block."""

    def __init__(self, name, params=None):
        super().__init__(params or {})
        self.name = name

    def __missing__(self, key):
        raise WaveformParameterError(self.name, key)


class SpinBenchWaveforms:
    def __init__(self, **blocks):
        unknown = set(blocks) - set(BLOCKS)
        if unknown:
            raise ValueError(f'Unknown sequence blocks: {sorted(unknown)}')
        for name in BLOCKS:
            setattr(self, name, WaveformBlock(name, blocks.get(name)))

    def to_dict(self):
        return {name: dict(getattr(self, name)) for name in BLOCKS}

    @classmethod
    def from_dict(cls, data):
        return cls(**data)

    def __eq__(self, other):
        if not isinstance(other, SpinBenchWaveforms):
            return NotImplemented
        return self.to_dict() == other.to_dict()


def save_waveforms(waveforms, filename, directory='./output'):
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filepath = os.path.join(directory, f"{filename}_{timestamp}.json")

    os.makedirs(os.path.dirname(filepath), exist_ok=True)

    with open(filepath, 'w') as f:
        json.dump(waveforms.to_dict(), f, indent=2)
    print(f'filename:{filepath}')
    return filepath


def load_waveforms(filepath):
    with open(filepath, 'r') as f:
        data = json.load(f)
    return SpinBenchWaveforms.from_dict(data)
