# tweenr/core/schedule.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List

from tweenr.core.layer import Layer
from tweenr.core.properties import PropertyId, Value


@dataclass(frozen=True)
class Segment:
    """Animate one property between two keyframes, starting at an absolute time."""
    layer_id: str
    prop: PropertyId
    start_value: Value
    end_value: Value
    start: float
    length: float
    easing: str = "Linear"

    @property
    def end(self) -> float:
        return self.start + self.length


def layer_segments(layer: Layer, easing: str = "Linear") -> List[Segment]:
    out: List[Segment] = []
    for prop in layer.animated_properties():
        keys = layer.tracks[prop].keyframes()
        for k0, k1 in zip(keys, keys[1:]):
            out.append(Segment(
                layer_id=layer.id,
                prop=prop,
                start_value=k0.value,
                end_value=k1.value,
                start=k0.time,
                length=k1.time - k0.time,
                easing=easing,
            ))
    return out


def build_schedule(layers: Iterable[Layer], easing: str = "Linear") -> List[Segment]:
    """Every segment for every visible layer. Hidden layers contribute nothing."""
    segments: List[Segment] = []
    for layer in layers:
        if not layer.visible:
            continue
        segments.extend(layer_segments(layer, easing))
    return segments
