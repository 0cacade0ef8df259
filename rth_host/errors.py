class RthError(Exception):
    """Base class for errors raised at the scanner host boundary."""


class WaveformParameterError(RthError, KeyError):
    """A key is missing from the SpinBench waveform description."""

    def __init__(self, block, key):
        self.block = block
        self.key = key
        super().__init__(f'[{block}] has no waveform parameter "{key}"')

    def __str__(self):
        return self.args[0]


class RthCommandError(RthError):
    """An effect was handed to a command sink that cannot route it."""


class ReconConfigurationError(RthError):
    """The reconstruction pipeline received an impossible configuration or frame."""
