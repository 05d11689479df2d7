# tweenr/core/engine.py
from __future__ import annotations
from collections import defaultdict
from typing import Callable, Dict, List, Optional, Tuple

from tweenr.qt import QtCore, EasingCurve
from tweenr.core.logging import get_logger
from tweenr.core.interpolate import lerp, step
from tweenr.core.properties import PropertyId, Value
from tweenr.core.schedule import Segment

PropertySink = Callable[[str, PropertyId, Value], None]


def sec_to_ms(seconds: float) -> int:
    return int(round(max(0.0, float(seconds)) * 1000.0))


def ms_to_sec(ms: int) -> float:
    return max(0, int(ms)) / 1000.0


def easing_curve(name: str) -> EasingCurve:
    """QEasingCurve for a type name such as "Linear" or "OutQuad"; unknown names fall back to Linear."""
    curve_type = getattr(EasingCurve.Type, str(name), None)
    if not isinstance(curve_type, EasingCurve.Type):
        get_logger(__name__).debug("Unknown easing %r; using Linear", name)
        curve_type = EasingCurve.Type.Linear
    return EasingCurve(curve_type)


class TweenEngine(QtCore.QObject):
    """
    Boundary to whatever plays the animation on screen.

    The timeline controller only ever calls the methods below and listens to
    time_changed / completed. Implementations own the clock.
    """
    time_changed = QtCore.Signal(float)  # seconds
    completed = QtCore.Signal()

    def clear(self) -> None:
        raise NotImplementedError

    def schedule(self, segment: Segment) -> None:
        raise NotImplementedError

    def set_duration(self, seconds: float) -> None:
        raise NotImplementedError

    def play(self, from_time: float) -> None:
        raise NotImplementedError

    def pause(self) -> None:
        raise NotImplementedError

    def seek(self, seconds: float) -> None:
        raise NotImplementedError

    def release(self) -> None:
        raise NotImplementedError


class QtTweenEngine(TweenEngine):
    """
    QTimeLine-clocked engine. Every tick reports the clock time and pushes the
    eased value of each scheduled (layer, property) through the optional sink.
    """

    def __init__(self, duration_s: float = 5.0, update_interval_ms: int = 16,
                 sink: Optional[PropertySink] = None, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self._log = get_logger(__name__)
        self._sink = sink
        self._released = False
        self._positioning = False
        self._segments: Dict[Tuple[str, PropertyId], List[Segment]] = defaultdict(list)
        self._curves: Dict[str, EasingCurve] = {}

        self._clock = QtCore.QTimeLine(max(1, sec_to_ms(duration_s)), self)
        self._clock.setEasingCurve(EasingCurve(EasingCurve.Type.Linear))  # clock runs in real time
        self._clock.setUpdateInterval(max(1, int(update_interval_ms)))
        self._clock.valueChanged.connect(self._on_clock_tick)
        self._clock.finished.connect(self._on_clock_finished)

    # ──────────────────────────────────────────────────────────────────────────
    # Schedule
    # ──────────────────────────────────────────────────────────────────────────
    def clear(self) -> None:
        self._segments.clear()

    def schedule(self, segment: Segment) -> None:
        if self._released:
            return
        bucket = self._segments[(segment.layer_id, segment.prop)]
        bucket.append(segment)
        bucket.sort(key=lambda s: s.start)
        if segment.easing not in self._curves:
            self._curves[segment.easing] = easing_curve(segment.easing)

    def set_duration(self, seconds: float) -> None:
        if self._released:
            return
        self._clock.setDuration(max(1, sec_to_ms(seconds)))

    def segment_count(self) -> int:
        return sum(len(b) for b in self._segments.values())

    def values_at(self, seconds: float) -> Dict[Tuple[str, PropertyId], Value]:
        """Eased value of every scheduled (layer, property) at the given time."""
        out: Dict[Tuple[str, PropertyId], Value] = {}
        for key, bucket in self._segments.items():
            seg = bucket[0]
            for candidate in bucket:
                if candidate.start <= seconds:
                    seg = candidate
                else:
                    break
            if seconds <= seg.start or seg.length <= 0.0:
                progress = 0.0 if seconds <= seg.start else 1.0
            else:
                progress = min(1.0, (seconds - seg.start) / seg.length)
            if key[1].is_numeric:
                eased = self._curves[seg.easing].valueForProgress(progress)
                out[key] = lerp(float(seg.start_value), float(seg.end_value), eased)
            else:
                out[key] = step(seg.start_value, seg.end_value, progress)
        return out

    # ──────────────────────────────────────────────────────────────────────────
    # Transport
    # ──────────────────────────────────────────────────────────────────────────
    def play(self, from_time: float) -> None:
        if self._released:
            return
        if self._clock.state() == QtCore.QTimeLine.State.Running:
            self._log.debug("play() ignored: clock already running")
            return
        self._set_clock_time(from_time)
        # resume() continues from currentTime; start() would rewind to 0
        self._clock.resume()

    def pause(self) -> None:
        if self._released:
            return
        if self._clock.state() != QtCore.QTimeLine.State.NotRunning:
            self._clock.stop()

    def seek(self, seconds: float) -> None:
        if self._released:
            return
        self._set_clock_time(seconds)
        self._apply(seconds)

    def is_running(self) -> bool:
        return not self._released and self._clock.state() == QtCore.QTimeLine.State.Running

    def release(self) -> None:
        if self._released:
            return
        self._log.info("Releasing engine clock")
        self._released = True
        try:
            self._clock.stop()
        finally:
            self._clock.valueChanged.disconnect(self._on_clock_tick)
            self._clock.finished.disconnect(self._on_clock_finished)
            self._segments.clear()
            self._sink = None

    @property
    def released(self) -> bool:
        return self._released

    # ──────────────────────────────────────────────────────────────────────────
    # Internals
    # ──────────────────────────────────────────────────────────────────────────
    def _set_clock_time(self, seconds: float) -> None:
        # setCurrentTime emits valueChanged synchronously; that is not a tick
        self._positioning = True
        try:
            self._clock.setCurrentTime(sec_to_ms(seconds))
        finally:
            self._positioning = False

    def _apply(self, seconds: float) -> None:
        if self._sink is None:
            return
        for (layer_id, prop), value in self.values_at(seconds).items():
            self._sink(layer_id, prop, value)

    @QtCore.Slot(float)
    def _on_clock_tick(self, _value: float) -> None:
        if self._released or self._positioning:
            return
        seconds = ms_to_sec(self._clock.currentTime())
        self._apply(seconds)
        self.time_changed.emit(seconds)

    @QtCore.Slot()
    def _on_clock_finished(self) -> None:
        if self._released:
            return
        self._log.debug("Engine clock finished")
        self.completed.emit()
