# tweenr/core/timecode.py
from __future__ import annotations
import math


def frame_of(seconds: float, fps: float) -> int:
    return int(math.floor(max(0.0, float(seconds)) * max(1e-6, float(fps)) + 1e-9))


def format_timecode(seconds: float, fps: int = 30) -> str:
    """MM:SS:FF, frames counted within the current second."""
    secs = max(0.0, float(seconds)) if math.isfinite(seconds) else 0.0
    whole = int(secs)
    minutes = whole // 60
    s = whole % 60
    frames = int((secs - whole) * max(1, int(fps)) + 1e-9)
    return f"{minutes:02d}:{s:02d}:{frames:02d}"
