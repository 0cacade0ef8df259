"""
Command sinks: the seam between the VFA controller and the scanner host.

The controller never talks to the host directly. Every change handler returns an
ordered list of effects (commands, metadata inserts, display annotations) and
``dispatch`` routes them to a sink. Production code supplies a sink bound to the
host; tests and demo runs use ``RecordingSink`` / ``DemoHost``.
"""
import logging
from typing import Dict, Iterable, List, Protocol, Sequence, Tuple

from rth_host.commands import (HOST_COMMANDS, DisplayAnnotation, GetTR, InformationInsert,
                               UpdateGroup)
from rth_host.errors import RthCommandError

logger = logging.getLogger(__name__)


class CommandSink(Protocol):
    def add_command(self, command) -> None: ...

    def information_insert(self, sequence_id: str, key: str, value: float) -> None: ...

    def annotate(self, name: str, value: float) -> None: ...

    def get_tr(self, sequence_id: str) -> float: ...

    def set_loop_commands(self, sequence_id: str, name: str, groups: Sequence[UpdateGroup]) -> None: ...


def dispatch(sink: CommandSink, effects: Iterable) -> None:
    """
    Forward effects to the sink in emission order.

    Application is sequential, not transactional: if the sink raises on one effect,
    the effects already forwarded stay applied.
    """
    for effect in effects:
        if isinstance(effect, InformationInsert):
            sink.information_insert(effect.sequence_id, effect.key, effect.value)
        elif isinstance(effect, DisplayAnnotation):
            sink.annotate(effect.name, effect.value)
        elif isinstance(effect, HOST_COMMANDS):
            sink.add_command(effect)
        else:
            raise RthCommandError(f'Cannot route effect of type {type(effect).__name__}')


class RecordingSink:
    """
    In-memory host. Keeps everything it receives, in order.

    Args:
        min_tr (float): Default 10.0 -- Minimum TR (ms) answered to ``get_tr``.
    """

    def __init__(self, min_tr=10.0):
        self.min_tr = min_tr
        self.effects: List = []
        self.information: Dict[Tuple[str, str], float] = {}
        self.annotations: Dict[str, float] = {}
        self.loops: Dict[Tuple[str, str], Tuple[UpdateGroup, ...]] = {}

    @property
    def commands(self):
        """Only the host commands, without metadata and annotations."""
        return [e for e in self.effects if isinstance(e, HOST_COMMANDS)]

    def add_command(self, command):
        self.effects.append(command)

    def information_insert(self, sequence_id, key, value):
        self.effects.append(InformationInsert(sequence_id, key, value))
        self.information[(sequence_id, key)] = value

    def annotate(self, name, value):
        self.effects.append(DisplayAnnotation(name, value))
        self.annotations[name] = value

    def get_tr(self, sequence_id):
        self.add_command(GetTR(sequence_id))
        return self.min_tr

    def set_loop_commands(self, sequence_id, name, groups):
        self.loops[(sequence_id, name)] = tuple(groups)

    def clear(self):
        self.effects.clear()


class DemoHost(RecordingSink):
    """Recording sink that also logs every effect, used for standalone runs."""

    def add_command(self, command):
        logger.info(f'command: {command}')
        super().add_command(command)

    def information_insert(self, sequence_id, key, value):
        logger.info(f'information insert [{sequence_id}] {key} = {value}')
        super().information_insert(sequence_id, key, value)

    def annotate(self, name, value):
        logger.debug(f'display annotation {name} = {value}')
        super().annotate(name, value)

    def set_loop_commands(self, sequence_id, name, groups):
        logger.info(f'loop [{name}] registered with {len(groups)} update groups')
        super().set_loop_commands(sequence_id, name, groups)
