"""
@Summary: base class of the RTHawk control scripts. Holds the parameter map
shown in the control panel and the logger shared by the scripts.
"""
import logging

import configs.hw_config_vfa as hw
from rth_host.errors import RthError
from rth_host.events import InputWidget


def setup_logging(log_file=hw.log_file, log_level=hw.log_level):
    """Send the package loggers to <log_file>.log. No file is written if log_file is None."""
    root = logging.getLogger()
    root.setLevel(log_level)
    if log_file is None:
        return
    path = log_file + '.log'
    for handler in root.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename.endswith(path):
            return
    handler = logging.FileHandler(path, mode='w', encoding='utf-8')
    handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
    root.addHandler(handler)


class RTHBLANKSEQ:
    def __init__(self, log_file=None, log_level=hw.log_level):
        self.mapKeys = []
        self.mapNmspc = {}
        self.mapVals = {}
        self.mapFields = {}
        self.mapTips = {}
        self.widgets = {}
        if log_file is not None:
            setup_logging(log_file, log_level)
        self._logger = logging.getLogger(type(self).__name__)
        self._logger.setLevel(log_level)

    def addParameter(self, key='', string='', val=0, field='', tip=None, minimum=None, maximum=None,
                     widget=None):
        """
        Register a parameter of the control panel.

        When ``minimum`` and ``maximum`` are given, a numeric input widget named
        ``widget`` (default 'inputWidget_<key>') is created for it.
        """
        if key not in self.mapKeys:
            self.mapKeys.append(key)
        self.mapNmspc[key] = string
        self.mapVals[key] = val
        self.mapFields[key] = field
        self.mapTips[key] = tip
        if minimum is not None and maximum is not None:
            name = widget or f'inputWidget_{key}'
            self.widgets[key] = InputWidget(name, minimum=minimum, maximum=maximum, value=val)
            self.mapVals[key] = self.widgets[key].value
        return self.widgets.get(key)

    def _warning_if(self, warn_condition, message):
        if warn_condition:
            self._logger.warning(message)

    def _error_if(self, err_condition, message, error=RthError):
        if err_condition:
            self._logger.error(message)
            raise error(message)

    def parameterTable(self):
        """Rows (key, label, value, field, tip) of the registered parameters, in registration order."""
        return [(key, self.mapNmspc[key], self.mapVals[key], self.mapFields[key], self.mapTips[key])
                for key in self.mapKeys]
