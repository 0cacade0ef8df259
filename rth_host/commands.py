"""
Update commands understood by the RTHawk sequencing engine.

Each class mirrors one ``RthUpdate*Command`` constructor of the host API. They are
plain immutable values: the controller builds them and a command sink
(see ``rth_host.sinks``) forwards them to the host, or records them in tests.
"""
from dataclasses import dataclass
from typing import Tuple, Union


@dataclass(frozen=True)
class ChangeReconstructionParameter:
    sequence_id: str
    name: str
    value: float


@dataclass(frozen=True)
class GetTR:
    sequence_id: str


@dataclass(frozen=True)
class ScaleGradients:
    """Scale the gradient waveforms of one sequence block, per axis."""
    sequence_id: str
    block: str
    x: float
    y: float
    z: float


@dataclass(frozen=True)
class ChangeResolution:
    sequence_id: str
    resolution: float  # mm


@dataclass(frozen=True)
class ChangeFieldOfView:
    sequence_id: str
    fov: float  # mm


@dataclass(frozen=True)
class ChangeSliceThickness:
    sequence_id: str
    thickness: float  # mm


@dataclass(frozen=True)
class IntParameter:
    """Call an integer setter ``method`` on a sequence block."""
    sequence_id: str
    block: str
    method: str
    key: str
    value: float


@dataclass(frozen=True)
class FloatParameter:
    """Call a float setter ``method`` on a sequence block."""
    sequence_id: str
    block: str
    method: str
    key: str
    value: float


@dataclass(frozen=True)
class ChangeMRIParameter:
    sequence_id: str
    name: str
    value: float


@dataclass(frozen=True)
class InformationInsert:
    """Metadata attached to the reconstructed images (``mri.*`` keys)."""
    sequence_id: str
    key: str
    value: float


@dataclass(frozen=True)
class DisplayAnnotation:
    """Annotation for the three plane display tools (FOV, slice thickness)."""
    name: str
    value: float


HostCommand = Union[ChangeReconstructionParameter, GetTR, ScaleGradients, ChangeResolution,
                    ChangeFieldOfView, ChangeSliceThickness, IntParameter, FloatParameter,
                    ChangeMRIParameter]


@dataclass(frozen=True)
class UpdateGroup:
    """Commands applied together as one step of a loop."""
    commands: Tuple[HostCommand, ...]

    def __post_init__(self):
        object.__setattr__(self, 'commands', tuple(self.commands))

    def __iter__(self):
        return iter(self.commands)

    def __len__(self):
        return len(self.commands)


HOST_COMMANDS = (ChangeReconstructionParameter, GetTR, ScaleGradients, ChangeResolution,
                 ChangeFieldOfView, ChangeSliceThickness, IntParameter, FloatParameter,
                 ChangeMRIParameter)
