# tweenr/core/interpolate.py
"""
Pure time -> value resolution for keyframe tracks.

Values are clamped to the first/last keyframe outside the keyed range (no
extrapolation). Numeric properties blend linearly between neighbours; color
and text hold the earlier keyframe's value until the next keyframe is reached.
"""
from __future__ import annotations
import math
from typing import Dict, Optional
import numpy as np

from tweenr.core.keyframes import KeyframeTrack
from tweenr.core.properties import PropertyId, PropertyKind, Value

NO_OVERRIDE = None


def segment_progress(t: float, t0: float, t1: float) -> float:
    span = t1 - t0
    if span <= 0.0:
        return 0.0
    return (t - t0) / span


def lerp(a: float, b: float, progress: float) -> float:
    return a + (b - a) * progress


def step(a: Value, b: Value, progress: float) -> Value:
    return b if progress >= 1.0 else a


def resolve_track(track: KeyframeTrack, t: float, kind: PropertyKind) -> Optional[Value]:
    """Value of track at time t, or NO_OVERRIDE when the track has no keyframes."""
    n = len(track)
    if n == 0:
        return NO_OVERRIDE
    try:
        t = float(t)
    except (TypeError, ValueError):
        return NO_OVERRIDE
    if not math.isfinite(t):
        return NO_OVERRIDE

    first, last = track.first, track.last
    if n == 1 or t <= first.time:
        return first.value
    if t >= last.time:
        return last.value

    # first.time < t < last.time: pick k_i with k_i.time <= t < k_{i+1}.time
    i = int(np.searchsorted(track.times(), t, side="right")) - 1
    k0, k1 = track[i], track[i + 1]
    progress = segment_progress(t, k0.time, k1.time)
    if kind is PropertyKind.NUMERIC:
        return lerp(float(k0.value), float(k1.value), progress)
    return step(k0.value, k1.value, progress)


def resolve_tracks(tracks: Dict[PropertyId, KeyframeTrack], t: float) -> Dict[PropertyId, Value]:
    """Resolved value for every track that overrides its property at t."""
    out: Dict[PropertyId, Value] = {}
    for prop, track in tracks.items():
        value = resolve_track(track, t, prop.kind)
        if value is not NO_OVERRIDE:
            out[prop] = value
    return out
