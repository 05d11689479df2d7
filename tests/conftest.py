"""Shared fixtures: a QCoreApplication for Qt objects and a recording engine double."""
import pytest
from PySide6.QtCore import QCoreApplication

from tweenr.core.engine import TweenEngine
from tweenr.core.timeline_controller import TimelineController


@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app


class RecordingEngine(TweenEngine):
    """TweenEngine that records every call instead of running a clock."""

    def __init__(self):
        super().__init__()
        self.calls = []
        self.segments = []
        self.duration = None
        self.running = False
        self.position = 0.0
        self.released = False

    def clear(self):
        self.calls.append(("clear",))
        self.segments.clear()

    def schedule(self, segment):
        self.calls.append(("schedule", segment))
        self.segments.append(segment)

    def set_duration(self, seconds):
        self.calls.append(("set_duration", seconds))
        self.duration = seconds

    def play(self, from_time):
        self.calls.append(("play", from_time))
        self.position = from_time
        self.running = True

    def pause(self):
        self.calls.append(("pause",))
        self.running = False

    def seek(self, seconds):
        self.calls.append(("seek", seconds))
        self.position = seconds

    def release(self):
        self.calls.append(("release",))
        self.running = False
        self.released = True

    def names(self):
        return [c[0] for c in self.calls]


@pytest.fixture
def engine(qapp):
    return RecordingEngine()


@pytest.fixture
def controller(engine):
    ctl = TimelineController(engine=engine, duration_s=5.0, auto_flush=False)
    yield ctl
    ctl.close()
