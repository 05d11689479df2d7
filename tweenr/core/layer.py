# tweenr/core/layer.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
import uuid

from tweenr.core.interpolate import resolve_tracks
from tweenr.core.keyframes import Keyframe, KeyframeTrack
from tweenr.core.logging import get_logger
from tweenr.core.properties import (
    LayerProperties, PropertyId, ShapeKind, Value, coerce_value, parse_property,
)

_log = get_logger(__name__)


@dataclass
class Layer:
    """
    One animatable element: static property values plus keyframe tracks.

    The static values are what the layer shows when a property has no track,
    and what a new keyframe is seeded with. Resolution never writes back into
    them.
    """
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = "Layer"
    shape: ShapeKind = ShapeKind.RECTANGLE
    visible: bool = True
    locked: bool = False
    properties: LayerProperties = field(default_factory=LayerProperties)
    tracks: Dict[PropertyId, KeyframeTrack] = field(default_factory=dict)

    # Static values
    def set_static_property(self, name: Any, value: Any) -> bool:
        prop = parse_property(name)
        if prop is None:
            _log.debug("Layer %s: ignoring unknown property %r", self.id, name)
            return False
        try:
            coerced = coerce_value(prop, value)
        except (TypeError, ValueError) as ex:
            _log.debug("Layer %s: rejected %s=%r (%s)", self.id, prop.value, value, ex)
            return False
        self.properties = self.properties.with_value(prop, coerced)
        return True

    def static_value(self, prop: PropertyId) -> Value:
        return self.properties.get(prop)

    # Keyframes
    def track(self, name: Any) -> Optional[KeyframeTrack]:
        prop = parse_property(name)
        if prop is None:
            return None
        return self.tracks.get(prop)

    def add_keyframe(self, name: Any, time: float, value: Any) -> bool:
        prop = parse_property(name)
        if prop is None:
            _log.debug("Layer %s: ignoring keyframe for unknown property %r", self.id, name)
            return False
        try:
            coerced = coerce_value(prop, value)
        except (TypeError, ValueError) as ex:
            _log.debug("Layer %s: rejected keyframe %s=%r (%s)", self.id, prop.value, value, ex)
            return False
        track = self.tracks.get(prop)
        created = track is None
        if created:
            track = KeyframeTrack()
        if not track.insert(time, coerced):
            _log.debug("Layer %s: rejected keyframe time %r for %s", self.id, time, prop.value)
            return False
        if created:
            self.tracks[prop] = track
        return True

    def remove_keyframe(self, name: Any, index: int) -> Optional[Keyframe]:
        prop = parse_property(name)
        track = self.tracks.get(prop) if prop is not None else None
        if track is None:
            return None
        removed = track.remove_at(index)
        if not track:
            # empty track == no animation
            del self.tracks[prop]
        return removed

    def animated_properties(self) -> List[PropertyId]:
        return [p for p in PropertyId if self.tracks.get(p)]

    def has_keyframes(self) -> bool:
        return any(self.tracks.values())

    def keyframe_times(self) -> Tuple[float, ...]:
        times = {kf.time for track in self.tracks.values() for kf in track}
        return tuple(sorted(times))

    # Resolution
    def resolved_properties(self, time: float) -> LayerProperties:
        """Static values overridden by every non-empty track evaluated at time."""
        return self.properties.with_values(resolve_tracks(self.tracks, time))

    def resolved_value(self, name: Any, time: float) -> Optional[Value]:
        prop = parse_property(name)
        if prop is None:
            return None
        return self.resolved_properties(time).get(prop)


def make_layer(name: str = "Layer", shape: Any = ShapeKind.RECTANGLE,
               properties: Optional[Dict[str, Any]] = None) -> Layer:
    """New layer with default properties (optionally overridden) and no tracks."""
    try:
        kind = ShapeKind(shape)
    except ValueError:
        _log.debug("Unknown shape %r; using rectangle", shape)
        kind = ShapeKind.RECTANGLE
    props = LayerProperties.from_mapping(properties or {})
    if kind is ShapeKind.TEXT and props.text is None:
        props = props.with_value(PropertyId.TEXT, "Text")
    return Layer(name=name, shape=kind, properties=props)
