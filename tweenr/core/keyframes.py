# tweenr/core/keyframes.py
from __future__ import annotations
from bisect import bisect_left
from dataclasses import dataclass
import math
from typing import Iterator, List, Optional, Tuple
import numpy as np

from tweenr.core.properties import Value


@dataclass(frozen=True)
class Keyframe:
    time: float
    value: Value


class KeyframeTrack:
    """
    Keyframes for one (layer, property) pair, sorted ascending by time.
    No two keyframes share a time: inserting at an existing time replaces it.
    """

    def __init__(self, keyframes: Optional[List[Keyframe]] = None) -> None:
        self._keys: List[Keyframe] = []
        self._times: List[float] = []
        for kf in keyframes or []:
            self.insert(kf.time, kf.value)

    def insert(self, time: float, value: Value) -> bool:
        """Insert or replace-by-time. Returns False if time is negative or not finite."""
        try:
            t = float(time)
        except (TypeError, ValueError):
            return False
        if not math.isfinite(t) or t < 0.0:
            return False
        i = bisect_left(self._times, t)
        kf = Keyframe(t, value)
        if i < len(self._times) and self._times[i] == t:
            self._keys[i] = kf
        else:
            self._times.insert(i, t)
            self._keys.insert(i, kf)
        return True

    def remove_at(self, index: int) -> Optional[Keyframe]:
        """Remove by position in the sorted sequence; out of range is a no-op."""
        if not isinstance(index, int) or isinstance(index, bool):
            return None
        if index < 0 or index >= len(self._keys):
            return None
        self._times.pop(index)
        return self._keys.pop(index)

    def keyframes(self) -> Tuple[Keyframe, ...]:
        return tuple(self._keys)

    def times(self) -> np.ndarray:
        return np.asarray(self._times, dtype=np.float64)

    def index_of(self, time: float) -> Optional[int]:
        i = bisect_left(self._times, float(time))
        if i < len(self._times) and self._times[i] == float(time):
            return i
        return None

    @property
    def first(self) -> Optional[Keyframe]:
        return self._keys[0] if self._keys else None

    @property
    def last(self) -> Optional[Keyframe]:
        return self._keys[-1] if self._keys else None

    def __len__(self) -> int:
        return len(self._keys)

    def __bool__(self) -> bool:
        return bool(self._keys)

    def __iter__(self) -> Iterator[Keyframe]:
        return iter(tuple(self._keys))

    def __getitem__(self, index: int) -> Keyframe:
        return self._keys[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyframeTrack):
            return NotImplemented
        return self._keys == other._keys

    def __repr__(self) -> str:
        inner = ", ".join(f"{k.time:g}={k.value!r}" for k in self._keys)
        return f"KeyframeTrack([{inner}])"
