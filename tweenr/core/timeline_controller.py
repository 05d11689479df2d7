# tweenr/core/timeline_controller.py
from __future__ import annotations
from contextlib import contextmanager
from enum import Enum
import math
from typing import Any, Dict, Iterable, Iterator, List, Optional

from app_config import DEFAULT_DURATION_S, ENGINE_EASING, ENGINE_UPDATE_INTERVAL_MS, TIMECODE_FPS
from tweenr.qt import QtCore
from tweenr.core.engine import QtTweenEngine, TweenEngine
from tweenr.core.keyframes import Keyframe
from tweenr.core.layer import Layer, make_layer
from tweenr.core.logging import get_logger
from tweenr.core.properties import LayerProperties, PropertyId, ShapeKind, parse_property
from tweenr.core.scene import Scene
from tweenr.core.schedule import Segment, build_schedule
from tweenr.core.timecode import format_timecode


class PlayState(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"


def _as_time(value: Any) -> Optional[float]:
    """Finite float or None."""
    if isinstance(value, bool):
        return None
    try:
        t = float(value)
    except (TypeError, ValueError):
        return None
    return t if math.isfinite(t) else None


class TimelineController(QtCore.QObject):
    """
    Owns canonical timeline time, duration and play state for one editor session.

    All scene edits go through this object. Edits that change what the tween
    engine has to play mark the schedule dirty; the rebuild is coalesced into a
    single clear-then-rebuild on the next event loop turn (or at the end of a
    batch()). While playing, time only moves through engine callbacks.
    """
    timeChanged = QtCore.Signal(float)           # seconds
    playStateChanged = QtCore.Signal(bool)       # True if playing
    durationChanged = QtCore.Signal(float)       # seconds
    layersChanged = QtCore.Signal()
    selectionChanged = QtCore.Signal(object)     # layer id or None
    resolvedChanged = QtCore.Signal(object)      # {layer_id: LayerProperties}
    scheduleRebuilt = QtCore.Signal(int)         # segment count

    def __init__(self, engine: Optional[TweenEngine] = None, scene: Optional[Scene] = None,
                 duration_s: float = DEFAULT_DURATION_S, fps: int = TIMECODE_FPS,
                 easing: str = ENGINE_EASING, update_interval_ms: int = ENGINE_UPDATE_INTERVAL_MS,
                 auto_flush: bool = True, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self._log = get_logger(__name__)

        d = _as_time(duration_s)
        self.duration_s: float = d if d is not None and d > 0 else DEFAULT_DURATION_S
        self.current_time: float = 0.0
        self.state: PlayState = PlayState.IDLE
        self.fps: int = max(1, int(fps))
        self.easing: str = easing
        self.scene: Scene = scene if scene is not None else Scene()

        self._resolved: Dict[str, LayerProperties] = {}
        self._segments: List[Segment] = []
        self._schedule_dirty = True
        self._flush_pending = False
        self._auto_flush = auto_flush
        self._batch_depth = 0
        self._reconciling = False
        self._closed = False

        # Engine clock is acquired here and released in close()
        self.engine: TweenEngine = engine if engine is not None else QtTweenEngine(
            self.duration_s, update_interval_ms, parent=self)
        self.engine.time_changed.connect(self.on_engine_time_update)
        self.engine.completed.connect(self.on_engine_complete)

        self.rebuild_schedule()
        self.reconcile()

    # ──────────────────────────────────────────────────────────────────────────
    # State
    # ──────────────────────────────────────────────────────────────────────────
    @property
    def is_playing(self) -> bool:
        return self.state is PlayState.PLAYING

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def schedule_dirty(self) -> bool:
        return self._schedule_dirty

    @property
    def segments(self) -> List[Segment]:
        """Segments handed to the engine by the last rebuild."""
        return list(self._segments)

    @property
    def resolved(self) -> Dict[str, LayerProperties]:
        """Per visible layer, the values computed by the last reconciliation."""
        return dict(self._resolved)

    def timecode(self) -> str:
        return format_timecode(self.current_time, self.fps)

    # ──────────────────────────────────────────────────────────────────────────
    # Transport
    # ──────────────────────────────────────────────────────────────────────────
    def seek(self, t: Any) -> bool:
        """Move to t (clamped to [0, duration]). Keeps playing if playing."""
        if self._closed:
            return False
        target = _as_time(t)
        if target is None:
            self._log.debug("seek(%r) rejected", t)
            return False
        self.current_time = self._clamp(target)
        self._engine_call("seek", self.current_time)
        self.reconcile()
        self.timeChanged.emit(self.current_time)
        return True

    def play(self) -> None:
        """
        Start the engine from current_time. At the end of the timeline there is
        nothing left to play, so playback restarts from 0.
        """
        if self._closed or self.is_playing:
            return
        self.flush()
        if self.current_time >= self.duration_s:
            self.current_time = 0.0
            self.reconcile()
            self.timeChanged.emit(self.current_time)
        self._log.info("play() from %.3f s", self.current_time)
        self.state = PlayState.PLAYING
        self._engine_call("play", self.current_time)
        self.playStateChanged.emit(True)

    def pause(self) -> None:
        if self._closed or not self.is_playing:
            return
        self._log.info("pause() at %.3f s", self.current_time)
        self._engine_call("pause")
        self.state = PlayState.IDLE
        self.playStateChanged.emit(False)

    def toggle_play(self) -> None:
        if self.is_playing:
            self.pause()
        else:
            self.play()

    def go_to_start(self) -> bool:
        return self.seek(0.0)

    def go_to_end(self) -> bool:
        return self.seek(self.duration_s)

    def step_frame(self, direction: int) -> bool:
        frame_s = 1.0 / self.fps
        return self.seek(self.current_time + (frame_s if direction >= 0 else -frame_s))

    @QtCore.Slot(float)
    def on_engine_time_update(self, t: float) -> None:
        if self._closed or not self.is_playing:
            return
        if self._reconciling:
            self._log.debug("Engine tick %.3f dropped: reconciliation in flight", t)
            return
        target = _as_time(t)
        if target is None:
            return
        self.current_time = self._clamp(target)
        self.reconcile()
        self.timeChanged.emit(self.current_time)

    @QtCore.Slot()
    def on_engine_complete(self) -> None:
        if self._closed or not self.is_playing:
            return
        self._log.info("Playback completed")
        self.state = PlayState.IDLE
        self.current_time = 0.0
        self._engine_call("seek", 0.0)
        self.reconcile()
        self.playStateChanged.emit(False)
        self.timeChanged.emit(self.current_time)

    def set_duration(self, duration_s: Any) -> bool:
        if self._closed:
            return False
        d = _as_time(duration_s)
        if d is None or d <= 0:
            self._log.debug("set_duration(%r) rejected; keeping %.3f", duration_s, self.duration_s)
            return False
        if d == self.duration_s:
            return True
        self.duration_s = d
        self.durationChanged.emit(self.duration_s)
        self._mark_dirty()
        if self.current_time > self.duration_s:
            self.current_time = self.duration_s
            self._engine_call("seek", self.current_time)
            self.reconcile()
            self.timeChanged.emit(self.current_time)
        return True

    # ──────────────────────────────────────────────────────────────────────────
    # Schedule
    # ──────────────────────────────────────────────────────────────────────────
    def rebuild_schedule(self) -> List[Segment]:
        """Clear the engine and hand it every segment of every visible layer."""
        if self._closed:
            return []
        segments = build_schedule(self.scene, self.easing)
        self._engine_call("clear")
        for segment in segments:
            self._engine_call("schedule", segment)
        self._engine_call("set_duration", self.duration_s)
        self._segments = segments
        self._schedule_dirty = False
        self._log.info("Schedule rebuilt: %d segment(s) over %.3f s", len(segments), self.duration_s)
        self.scheduleRebuilt.emit(len(segments))
        return list(segments)

    def flush(self) -> None:
        """Run a pending rebuild now."""
        self._flush_pending = False
        if self._schedule_dirty and self._batch_depth == 0 and not self._closed:
            self.rebuild_schedule()

    @contextmanager
    def batch(self) -> Iterator["TimelineController"]:
        """Group edits so they cost one rebuild."""
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0:
                self.flush()

    def _mark_dirty(self) -> None:
        self._schedule_dirty = True
        if self._batch_depth or not self._auto_flush or self._flush_pending:
            return
        self._flush_pending = True
        QtCore.QTimer.singleShot(0, self.flush)

    # ──────────────────────────────────────────────────────────────────────────
    # Reconciliation
    # ──────────────────────────────────────────────────────────────────────────
    def reconcile(self) -> Dict[str, LayerProperties]:
        """Recompute every visible layer's displayed values at the current time."""
        if self._reconciling:
            return dict(self._resolved)
        self._reconciling = True
        try:
            self._resolved = {
                layer.id: layer.resolved_properties(self.current_time)
                for layer in self.scene.visible_layers()
            }
            self.resolvedChanged.emit(dict(self._resolved))
        finally:
            self._reconciling = False
        return dict(self._resolved)

    def resolved_properties(self, layer_id: Optional[str]) -> Optional[LayerProperties]:
        """Fresh values for one layer at the current time; None if it no longer exists."""
        layer = self.scene.get(layer_id)
        if layer is None:
            return None
        return layer.resolved_properties(self.current_time)

    # ──────────────────────────────────────────────────────────────────────────
    # Scene edits
    # ──────────────────────────────────────────────────────────────────────────
    def add_layer(self, name: str = "Layer", shape: Any = ShapeKind.RECTANGLE,
                  properties: Optional[Dict[str, Any]] = None, select: bool = True) -> Layer:
        layer = make_layer(name, shape, properties)
        self.insert_layer(layer, select=select)
        return layer

    def insert_layer(self, layer: Layer, select: bool = False) -> bool:
        if self._closed or not self.scene.add(layer):
            return False
        self._log.debug("Layer added: %s (%s)", layer.name, layer.id)
        self.layersChanged.emit()
        if select:
            self.select_layer(layer.id)
        self._layers_edited()
        return True

    def remove_layer(self, layer_id: str) -> bool:
        if self._closed:
            return False
        was_selected = self.scene.selected_id == layer_id
        layer = self.scene.remove(layer_id)
        if layer is None:
            return False
        self._log.debug("Layer removed: %s (%s)", layer.name, layer.id)
        self.layersChanged.emit()
        if was_selected:
            self.selectionChanged.emit(None)
        self._layers_edited()
        return True

    def select_layer(self, layer_id: Optional[str]) -> bool:
        if self.scene.selected_id == layer_id:
            return layer_id is None or layer_id in self.scene
        if not self.scene.select(layer_id):
            return False
        self.selectionChanged.emit(layer_id)
        return True

    def selected_layer(self) -> Optional[Layer]:
        return self.scene.selected

    def rename_layer(self, layer_id: str, name: str) -> bool:
        layer = self.scene.get(layer_id)
        if layer is None or self._closed:
            return False
        layer.name = str(name)
        self.layersChanged.emit()
        return True

    def set_layer_visible(self, layer_id: str, visible: bool) -> bool:
        layer = self.scene.get(layer_id)
        if layer is None or self._closed:
            return False
        if layer.visible == bool(visible):
            return True
        layer.visible = bool(visible)
        self.layersChanged.emit()
        self._layers_edited()
        return True

    def toggle_layer_visible(self, layer_id: str) -> bool:
        layer = self.scene.get(layer_id)
        if layer is None or self._closed:
            return False
        return self.set_layer_visible(layer_id, not layer.visible)

    def set_layer_locked(self, layer_id: str, locked: bool) -> bool:
        layer = self.scene.get(layer_id)
        if layer is None or self._closed:
            return False
        layer.locked = bool(locked)
        self.layersChanged.emit()
        return True

    def set_property(self, layer_id: str, name: Any, value: Any) -> bool:
        """Static value edit. Segments only depend on keyframes, so no rebuild."""
        layer = self.scene.get(layer_id)
        if layer is None or self._closed:
            return False
        if not layer.set_static_property(name, value):
            return False
        self.reconcile()
        return True

    def add_keyframe(self, layer_id: str, name: Any, time: Any, value: Any) -> bool:
        layer = self.scene.get(layer_id)
        if layer is None or self._closed:
            return False
        if not layer.add_keyframe(name, time, value):
            return False
        self._layers_edited()
        return True

    def add_keyframe_at_current_time(self, layer_id: str, name: Any) -> bool:
        """Key the property's currently displayed value at the playhead."""
        prop = parse_property(name)
        resolved = self.resolved_properties(layer_id)
        if prop is None or resolved is None:
            return False
        return self.add_keyframe(layer_id, prop, self.current_time, resolved.get(prop))

    def key_selected_layer(self, props: Optional[Iterable[Any]] = None) -> int:
        """Key the selected layer's displayed values at the playhead. Returns the number of keys set."""
        layer = self.scene.selected
        if layer is None or self._closed:
            return 0
        if props is None:
            props = [p for p in PropertyId if p is not PropertyId.TEXT or layer.shape is ShapeKind.TEXT]
        count = 0
        with self.batch():
            for prop in props:
                if self.add_keyframe_at_current_time(layer.id, prop):
                    count += 1
        self._log.debug("Keyed %d propert(ies) on %s at %.3f s", count, layer.name, self.current_time)
        return count

    def remove_keyframe(self, layer_id: str, name: Any, index: int) -> Optional[Keyframe]:
        layer = self.scene.get(layer_id)
        if layer is None or self._closed:
            return None
        removed = layer.remove_keyframe(name, index)
        if removed is not None:
            self._layers_edited()
        return removed

    def _layers_edited(self) -> None:
        self._mark_dirty()
        self.reconcile()

    # ──────────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ──────────────────────────────────────────────────────────────────────────
    def close(self) -> None:
        """Stop and release the engine clock. Safe to call more than once."""
        if self._closed:
            return
        self._log.info("Closing timeline controller")
        self._closed = True
        self.state = PlayState.IDLE
        try:
            self.engine.pause()
        except Exception as ex:
            self._log.warning("Engine pause failed during close: %s", ex)
        finally:
            try:
                self.engine.time_changed.disconnect(self.on_engine_time_update)
                self.engine.completed.disconnect(self.on_engine_complete)
            except (RuntimeError, TypeError) as ex:
                self._log.debug("Engine signals already disconnected: %s", ex)
            self.engine.release()

    def __enter__(self) -> "TimelineController":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ──────────────────────────────────────────────────────────────────────────
    # Internals
    # ──────────────────────────────────────────────────────────────────────────
    def _clamp(self, t: float) -> float:
        return min(max(0.0, t), self.duration_s)

    def _engine_call(self, name: str, *args) -> None:
        try:
            getattr(self.engine, name)(*args)
        except Exception as ex:
            self._log.warning("Engine %s%r failed: %s", name, args, ex)
