# tweenr/core/scene.py
from __future__ import annotations
from typing import Dict, Iterator, List, Optional

from tweenr.core.layer import Layer, make_layer


class Scene:
    """Ordered layers (index 0 = bottom of the stack) plus the current selection."""

    def __init__(self, layers: Optional[List[Layer]] = None) -> None:
        self._layers: List[Layer] = []
        self._by_id: Dict[str, Layer] = {}
        self.selected_id: Optional[str] = None
        for layer in layers or []:
            self.add(layer)

    def add(self, layer: Layer) -> bool:
        if layer.id in self._by_id:
            return False
        self._layers.append(layer)
        self._by_id[layer.id] = layer
        return True

    def remove(self, layer_id: str) -> Optional[Layer]:
        layer = self._by_id.pop(layer_id, None)
        if layer is None:
            return None
        self._layers.remove(layer)
        if self.selected_id == layer_id:
            self.selected_id = None
        return layer

    def get(self, layer_id: Optional[str]) -> Optional[Layer]:
        if layer_id is None:
            return None
        return self._by_id.get(layer_id)

    def select(self, layer_id: Optional[str]) -> bool:
        if layer_id is not None and layer_id not in self._by_id:
            return False
        self.selected_id = layer_id
        return True

    @property
    def selected(self) -> Optional[Layer]:
        return self.get(self.selected_id)

    @property
    def layers(self) -> List[Layer]:
        return list(self._layers)

    def visible_layers(self) -> List[Layer]:
        return [l for l in self._layers if l.visible]

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self) -> Iterator[Layer]:
        return iter(list(self._layers))

    def __contains__(self, layer_id: object) -> bool:
        return layer_id in self._by_id

    @classmethod
    def from_seed(cls, specs: Optional[List[dict]]) -> "Scene":
        """Scene from plain seed data (see app_config.DEV_LAYER); first layer selected."""
        scene = cls()
        for spec in specs or []:
            scene.add(make_layer(
                name=str(spec.get("name") or "Layer"),
                shape=spec.get("shape") or "rectangle",
                properties=spec.get("properties") or {},
            ))
        if scene._layers:
            scene.selected_id = scene._layers[0].id
        return scene
