"""Numeric input widgets of the control panel, on Qt signals."""
from PySide6.QtCore import QObject, Signal


class InputWidget(QObject):
    """
    Numeric spin box of the control panel. Works without a QApplication:
    slots are called directly, in connection order.

    Args:
        name (str): Widget object name, e.g. 'inputWidget_FOV'.
        minimum (float): Lowest value the widget accepts.
        maximum (float): Highest value the widget accepts.
        value (float): Initial value.
    """
    valueChanged = Signal(float)

    def __init__(self, name, minimum=0.0, maximum=99.99, value=0.0, parent=None):
        super().__init__(parent)
        self.setObjectName(name)
        self.minimum = minimum
        self.maximum = maximum
        self._value = min(max(value, minimum), maximum)

    @property
    def name(self):
        return self.objectName()

    @property
    def value(self):
        return self._value

    @value.setter
    def value(self, value):
        self.setValue(value)

    def setValue(self, value):
        # Spin boxes bound the typed value, handlers may clamp again on top
        value = min(max(value, self.minimum), self.maximum)
        if value == self._value:
            return
        self._value = value
        self.valueChanged.emit(value)

    def __repr__(self):
        return f'InputWidget({self.name!r}, minimum={self.minimum}, maximum={self.maximum}, value={self._value})'
