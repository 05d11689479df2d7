from __future__ import annotations
from typing import Optional

from tweenr.qt import QtCore, QtWidgets
from tweenr.core.engine import ms_to_sec, sec_to_ms
from tweenr.core.logging import get_logger
from tweenr.core.timecode import format_timecode
from tweenr.core.timeline_controller import TimelineController
from tweenr.ui.marker_slider import MarkerSlider


class TransportWidget(QtWidgets.QWidget):
    """
    Transport bar for a TimelineController:
      - go to start / step back / play-pause / step forward / go to end
      - current and total timecode (MM:SS:FF)
      - MarkerSlider scrubber showing the selected layer's keyframes
    The controller stays the owner of time; the slider only mirrors it.
    """

    def __init__(self, controller: TimelineController, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self._log = get_logger(__name__)
        self.controller = controller

        style = self.style()
        self.prev_btn = QtWidgets.QToolButton()
        self.prev_btn.setIcon(style.standardIcon(QtWidgets.QStyle.StandardPixmap.SP_MediaSkipBackward))
        self.prev_btn.setToolTip("Go to start")
        self.step_back_btn = QtWidgets.QToolButton()
        self.step_back_btn.setIcon(style.standardIcon(QtWidgets.QStyle.StandardPixmap.SP_MediaSeekBackward))
        self.step_back_btn.setToolTip("Step back 1 frame")
        self.play_btn = QtWidgets.QToolButton()
        self.play_btn.setIcon(style.standardIcon(QtWidgets.QStyle.StandardPixmap.SP_MediaPlay))
        self.step_fwd_btn = QtWidgets.QToolButton()
        self.step_fwd_btn.setIcon(style.standardIcon(QtWidgets.QStyle.StandardPixmap.SP_MediaSeekForward))
        self.step_fwd_btn.setToolTip("Step forward 1 frame")
        self.next_btn = QtWidgets.QToolButton()
        self.next_btn.setIcon(style.standardIcon(QtWidgets.QStyle.StandardPixmap.SP_MediaSkipForward))
        self.next_btn.setToolTip("Go to end")

        self.time_label = QtWidgets.QLabel(format_timecode(0.0, controller.fps))
        self.duration_label = QtWidgets.QLabel()

        self.timeline = MarkerSlider(QtCore.Qt.Orientation.Horizontal)
        self.timeline.setMaximum(sec_to_ms(controller.duration_s))
        self._is_scrubbing = False
        self._was_playing = False

        transport = QtWidgets.QHBoxLayout()
        transport.setContentsMargins(6, 6, 6, 0)
        transport.setSpacing(8)
        for btn in (self.prev_btn, self.step_back_btn, self.play_btn, self.step_fwd_btn, self.next_btn):
            transport.addWidget(btn)
        transport.addSpacing(12)
        transport.addWidget(self.time_label)
        transport.addWidget(self.duration_label)
        transport.addStretch()

        timeline_box = QtWidgets.QVBoxLayout()
        timeline_box.setContentsMargins(6, 0, 6, 6)
        timeline_box.addWidget(self.timeline)

        root = QtWidgets.QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.setSpacing(0)
        root.addLayout(transport)
        root.addLayout(timeline_box)

        # Controls → controller
        self.play_btn.clicked.connect(controller.toggle_play)
        self.prev_btn.clicked.connect(controller.go_to_start)
        self.next_btn.clicked.connect(controller.go_to_end)
        self.step_back_btn.clicked.connect(lambda: controller.step_frame(-1))
        self.step_fwd_btn.clicked.connect(lambda: controller.step_frame(1))
        self.timeline.valueChanged.connect(self._on_slider_changed)
        self.timeline.sliderPressed.connect(self._on_slider_pressed)
        self.timeline.sliderReleased.connect(self._on_slider_released)

        # Controller → UI
        controller.timeChanged.connect(self._on_time_changed)
        controller.playStateChanged.connect(self._on_play_state_changed)
        controller.durationChanged.connect(self._on_duration_changed)
        controller.scheduleRebuilt.connect(lambda _n: self.refresh_markers())
        controller.selectionChanged.connect(lambda _lid: self.refresh_markers())

        self._on_duration_changed(controller.duration_s)
        self.refresh_markers()

    def refresh_markers(self) -> None:
        layer = self.controller.selected_layer()
        times = layer.keyframe_times() if layer is not None else ()
        self.timeline.set_markers(sec_to_ms(t) for t in times)

    @QtCore.Slot(float)
    def _on_time_changed(self, seconds: float) -> None:
        v = sec_to_ms(seconds)
        if self.timeline.value() != v:
            self.timeline.blockSignals(True)
            self.timeline.setValue(v)
            self.timeline.blockSignals(False)
        self.time_label.setText(format_timecode(seconds, self.controller.fps))

    @QtCore.Slot(bool)
    def _on_play_state_changed(self, playing: bool) -> None:
        icon = QtWidgets.QStyle.StandardPixmap.SP_MediaPause if playing else QtWidgets.QStyle.StandardPixmap.SP_MediaPlay
        self.play_btn.setIcon(self.style().standardIcon(icon))

    @QtCore.Slot(float)
    def _on_duration_changed(self, duration_s: float) -> None:
        self.timeline.setMaximum(sec_to_ms(duration_s))
        self.duration_label.setText(f"/ {format_timecode(duration_s, self.controller.fps)}")

    def _on_slider_changed(self, value: int) -> None:
        self.controller.seek(ms_to_sec(value))

    def _on_slider_pressed(self) -> None:
        self._log.debug("Slider pressed: begin scrubbing")
        self._is_scrubbing = True
        # Scrubbing owns time; playback would fight it
        self._was_playing = self.controller.is_playing
        self.controller.pause()

    def _on_slider_released(self) -> None:
        self._log.debug("Slider released")
        self._is_scrubbing = False
        self.controller.seek(ms_to_sec(self.timeline.value()))
        if self._was_playing:
            self.controller.play()
        self._was_playing = False
