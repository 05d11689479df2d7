# tweenr/ui/main_window.py
from __future__ import annotations
from typing import Dict

from tweenr.qt import QtCore, QtGui, QtWidgets
from tweenr.core.config import get_settings
from tweenr.core.logging import get_logger
from tweenr.core.properties import LayerProperties
from tweenr.core.scene import Scene
from tweenr.core.timeline_controller import TimelineController
from tweenr.ui.transport_widget import TransportWidget
from app_config import APP_NAME, DEV_LAYER, DEV_MODE


class MainWindow(QtWidgets.QMainWindow):
    """
    Shell around one TimelineController. The canvas, layer list and property
    forms plug into the controller's signals; this window only hosts the
    transport and a readout of the selected layer's resolved values.
    """

    def __init__(self):
        super().__init__()
        self._log = get_logger(__name__)
        self.setWindowTitle(APP_NAME)
        self.resize(1200, 720)
        self.settings = get_settings()

        tl = self.settings.timeline()
        scene = Scene.from_seed(DEV_LAYER if DEV_MODE else [])
        self.controller = TimelineController(
            scene=scene,
            duration_s=tl.duration_s,
            fps=tl.fps,
            easing=tl.easing,
            update_interval_ms=tl.update_interval_ms,
            parent=self,
        )

        self.readout = QtWidgets.QLabel()
        self.readout.setAlignment(QtCore.Qt.AlignmentFlag.AlignTop | QtCore.Qt.AlignmentFlag.AlignLeft)
        self.readout.setTextInteractionFlags(QtCore.Qt.TextInteractionFlag.TextSelectableByMouse)
        self.transport = TransportWidget(self.controller, self)

        central = QtWidgets.QWidget()
        layout = QtWidgets.QVBoxLayout(central)
        layout.addWidget(self.readout, 1)
        layout.addWidget(self.transport)
        self.setCentralWidget(central)

        self.controller.resolvedChanged.connect(self._on_resolved)
        self.controller.selectionChanged.connect(lambda _lid: self._on_resolved(self.controller.resolved))
        self._on_resolved(self.controller.resolved)

        self._build_menu()
        self._restore_state()

    def _build_menu(self):
        bar = self.menuBar()
        file_menu = bar.addMenu("&File")
        exit_act = QtGui.QAction("E&xit", self)
        exit_act.triggered.connect(self.close)
        file_menu.addAction(exit_act)

        timeline_menu = bar.addMenu("&Timeline")
        hotkeys = {
            "play_pause": (self.controller.toggle_play, "Play/Pause"),
            "go_start": (self.controller.go_to_start, "Go to start"),
            "go_end": (self.controller.go_to_end, "Go to end"),
            "step_prev": (lambda: self.controller.step_frame(-1), "Step back"),
            "step_next": (lambda: self.controller.step_frame(1), "Step forward"),
            "add_keyframe": (lambda: self.controller.key_selected_layer(), "Add keyframe"),
        }
        for key, (slot, label) in hotkeys.items():
            act = QtGui.QAction(label, self)
            act.setShortcut(QtGui.QKeySequence(str(self.settings.get(f"hotkeys/{key}") or "")))
            act.triggered.connect(slot)
            timeline_menu.addAction(act)

    @QtCore.Slot(object)
    def _on_resolved(self, resolved: Dict[str, LayerProperties]) -> None:
        layer = self.controller.selected_layer()
        if layer is None:
            self.readout.setText("Select a layer to see its properties")
            return
        props = resolved.get(layer.id)
        if props is None:
            self.readout.setText(f"{layer.name} (hidden)")
            return
        animated = {p.value for p in layer.animated_properties()}
        lines = [f"<b>{layer.name}</b> · {layer.shape.value}"]
        for name, value in props.as_dict().items():
            mark = " ◆" if name in animated else ""
            shown = f"{value:.2f}" if isinstance(value, float) else value
            lines.append(f"{name}: {shown}{mark}")
        self.readout.setText("<br>".join(lines))

    def _restore_state(self):
        g = self.settings.get("ui/main_geometry")
        if isinstance(g, QtCore.QByteArray):
            self.restoreGeometry(g)

    def closeEvent(self, e: QtGui.QCloseEvent) -> None:
        self.settings.set("ui/main_geometry", self.saveGeometry())
        self.controller.close()
        return super().closeEvent(e)
