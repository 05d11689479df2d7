# tweenr/core/properties.py
"""
Closed set of animatable layer properties.

Every property is addressed by a PropertyId; PROPERTY_SPECS gives the total
mapping to its kind (how it interpolates), default value and allowed range.
Names coming from outside (forms, seed data) go through parse_property(), which
returns None for anything unknown instead of raising.
"""
from __future__ import annotations
from dataclasses import dataclass, fields, replace
from enum import Enum
import math
import re
from typing import Any, Dict, Optional, Union

Value = Union[float, str]

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")


class ShapeKind(str, Enum):
    RECTANGLE = "rectangle"
    CIRCLE = "circle"
    TEXT = "text"


class PropertyKind(str, Enum):
    NUMERIC = "numeric"  # linear blend
    COLOR = "color"      # step
    TEXT = "text"        # step (carried)


class PropertyId(str, Enum):
    X = "x"
    Y = "y"
    WIDTH = "width"
    HEIGHT = "height"
    ROTATION = "rotation"
    SCALE_X = "scale_x"
    SCALE_Y = "scale_y"
    OPACITY = "opacity"
    COLOR = "color"
    TEXT = "text"

    @property
    def spec(self) -> "PropertySpec":
        return PROPERTY_SPECS[self]

    @property
    def kind(self) -> PropertyKind:
        return PROPERTY_SPECS[self].kind

    @property
    def is_numeric(self) -> bool:
        return PROPERTY_SPECS[self].kind is PropertyKind.NUMERIC


@dataclass(frozen=True)
class PropertySpec:
    kind: PropertyKind
    default: Value
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    label: str = ""

    def clamp(self, value: float) -> float:
        if self.minimum is not None:
            value = max(self.minimum, value)
        if self.maximum is not None:
            value = min(self.maximum, value)
        return value


PROPERTY_SPECS: Dict[PropertyId, PropertySpec] = {
    PropertyId.X: PropertySpec(PropertyKind.NUMERIC, 100.0, label="X Position"),
    PropertyId.Y: PropertySpec(PropertyKind.NUMERIC, 100.0, label="Y Position"),
    PropertyId.WIDTH: PropertySpec(PropertyKind.NUMERIC, 200.0, minimum=1.0, label="Width"),
    PropertyId.HEIGHT: PropertySpec(PropertyKind.NUMERIC, 100.0, minimum=1.0, label="Height"),
    PropertyId.ROTATION: PropertySpec(PropertyKind.NUMERIC, 0.0, -360.0, 360.0, label="Rotation"),
    PropertyId.SCALE_X: PropertySpec(PropertyKind.NUMERIC, 1.0, 0.0, 5.0, label="Scale X"),
    PropertyId.SCALE_Y: PropertySpec(PropertyKind.NUMERIC, 1.0, 0.0, 5.0, label="Scale Y"),
    PropertyId.OPACITY: PropertySpec(PropertyKind.NUMERIC, 1.0, 0.0, 1.0, label="Opacity"),
    PropertyId.COLOR: PropertySpec(PropertyKind.COLOR, "#3b82f6", label="Color"),
    PropertyId.TEXT: PropertySpec(PropertyKind.TEXT, "", label="Text"),
}

# Camel-case names used by older front-ends
_ALIASES = {
    "scalex": PropertyId.SCALE_X,
    "scaley": PropertyId.SCALE_Y,
    "fill": PropertyId.COLOR,
}


def parse_property(name: Any) -> Optional[PropertyId]:
    """Map an external property name to a PropertyId, or None if unknown."""
    if isinstance(name, PropertyId):
        return name
    if not isinstance(name, str):
        return None
    key = name.strip()
    try:
        return PropertyId(key)
    except ValueError:
        return _ALIASES.get(key.lower().replace("_", ""))


def coerce_value(prop: PropertyId, value: Any) -> Value:
    """
    Convert value to the property's type and clamp it to its range.
    Raises TypeError/ValueError for values that can't represent the property.
    """
    spec = PROPERTY_SPECS[prop]
    if spec.kind is PropertyKind.NUMERIC:
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            raise TypeError(f"{prop.value} expects a number, got {type(value).__name__}")
        number = float(value)
        if not math.isfinite(number):
            raise ValueError(f"{prop.value} must be finite, got {value!r}")
        return spec.clamp(number)
    if spec.kind is PropertyKind.COLOR:
        if not isinstance(value, str) or not _HEX_COLOR.match(value.strip()):
            raise ValueError(f"{prop.value} expects a hex color, got {value!r}")
        return value.strip().lower()
    if value is None:
        return ""
    return str(value)


@dataclass(frozen=True)
class LayerProperties:
    """Static (or resolved) value of every property of one layer."""
    x: float = 100.0
    y: float = 100.0
    width: float = 200.0
    height: float = 100.0
    rotation: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0
    opacity: float = 1.0
    color: str = "#3b82f6"
    text: Optional[str] = None

    def get(self, prop: PropertyId) -> Value:
        value = getattr(self, prop.value)
        if value is None:
            return PROPERTY_SPECS[prop].default
        return value

    def with_value(self, prop: PropertyId, value: Value) -> "LayerProperties":
        return replace(self, **{prop.value: value})

    def with_values(self, values: Dict[PropertyId, Value]) -> "LayerProperties":
        if not values:
            return self
        return replace(self, **{p.value: v for p, v in values.items()})

    def as_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_mapping(cls, values: Dict[str, Any]) -> "LayerProperties":
        """Build from loosely-typed data; unknown keys and bad values are skipped."""
        props = cls()
        for name, raw in (values or {}).items():
            prop = parse_property(name)
            if prop is None:
                continue
            try:
                props = props.with_value(prop, coerce_value(prop, raw))
            except (TypeError, ValueError):
                continue
        return props
