from __future__ import annotations
from typing import Iterable, List, Optional
from tweenr.qt import QtCore, QtGui, QtWidgets
from tweenr.ui.theme import KEYFRAME_COLOR

class MarkerSlider(QtWidgets.QSlider):
    """Millisecond time slider that draws a tick for every keyframe time."""

    def __init__(self, orientation: QtCore.Qt.Orientation, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(orientation, parent)
        self._markers: List[int] = []
        self.setMouseTracking(True)
        self.setMinimum(0)
        self.setMaximum(5000)  # adjusted from the controller's duration

    def set_markers(self, ms_values: Iterable[int]) -> None:
        self._markers = sorted(set(int(v) for v in ms_values if v >= 0))
        self.update()

    def paintEvent(self, e: QtGui.QPaintEvent) -> None:
        super().paintEvent(e)
        if not self._markers:
            return
        p = QtGui.QPainter(self)
        p.setRenderHint(QtGui.QPainter.Antialiasing, True)

        opt = QtWidgets.QStyleOptionSlider()
        self.initStyleOption(opt)
        groove_rect = self.style().subControlRect(
            QtWidgets.QStyle.ComplexControl.CC_Slider, opt,
            QtWidgets.QStyle.SubControl.SC_SliderGroove, self,
        )
        p.setPen(QtGui.QPen(KEYFRAME_COLOR, 2))
        span = max(1, self.maximum() - self.minimum())
        for m in self._markers:
            ratio = (m - self.minimum()) / span
            x = int(groove_rect.left() + ratio * groove_rect.width())
            y1 = groove_rect.center().y() - 6
            y2 = groove_rect.center().y() + 6
            p.drawLine(x, y1, x, y2)
        p.end()

    def mousePressEvent(self, e: QtGui.QMouseEvent) -> None:
        if e.button() == QtCore.Qt.MouseButton.LeftButton:
            val = self._pixel_pos_to_value(e.position().x())
            self.setValue(val)
        super().mousePressEvent(e)

    def _pixel_pos_to_value(self, px: float) -> int:
        opt = QtWidgets.QStyleOptionSlider()
        self.initStyleOption(opt)
        groove = self.style().subControlRect(
            QtWidgets.QStyle.ComplexControl.CC_Slider, opt,
            QtWidgets.QStyle.SubControl.SC_SliderGroove, self,
        )
        if groove.width() <= 0:
            return self.value()
        ratio = (px - groove.left()) / groove.width()
        ratio = max(0.0, min(1.0, ratio))
        return int(self.minimum() + ratio * (self.maximum() - self.minimum()))
