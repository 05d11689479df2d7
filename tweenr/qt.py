# tweenr/qt.py
from PySide6 import QtCore, QtGui, QtWidgets

Signal = QtCore.Signal
Slot = QtCore.Slot
EasingCurve = QtCore.QEasingCurve

__all__ = ["QtCore", "QtGui", "QtWidgets", "Signal", "Slot", "EasingCurve"]
