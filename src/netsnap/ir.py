import copy
from typing import Any, Dict, List, Mapping, Tuple, Union
from dataclasses import dataclass

from .errors import InvalidSettings
from .layers.catalog import get_catalog

KindTag = str
SettingV = Union[int, float, str, bool, None]

def canonical_settings(kind: KindTag, settings: Mapping[str, Any]) -> Dict[str, Any]:
    """Deep copy of settings ordered by the kind's catalog fields, then remaining keys sorted."""
    known: List[str] = []
    if kind in get_catalog():
        known = [name for name in get_catalog().describe(kind).field_names if name in settings]
    extra = sorted(name for name in settings if name not in known)
    return {name: copy.deepcopy(settings[name]) for name in known + extra}

@dataclass(frozen=True)
class IRLayer:
    kind: KindTag  # wire identifier, e.g. "Dense"; not validated here
    settings: Dict[str, SettingV]

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "settings": canonical_settings(self.kind, self.settings)}

@dataclass(frozen=True)
class ModelIR:
    input_dimension: int
    layers: Tuple[IRLayer, ...]

    def to_dict(self) -> Dict[str, Any]:
        """Plain-dict form with the document's key order: inputDimension, layers, kind, settings."""
        return {
            "inputDimension": self.input_dimension,
            "layers": [layer.to_dict() for layer in self.layers],
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ModelIR":
        if not isinstance(data, dict):
            raise InvalidSettings(f"IR document must be an object, got {type(data).__name__}")
        if "inputDimension" not in data:
            raise InvalidSettings("IR document is missing 'inputDimension'")
        raw_layers = data.get("layers", [])
        if not isinstance(raw_layers, list):
            raise InvalidSettings("IR 'layers' must be a list")

        layers: List[IRLayer] = []
        for index, raw in enumerate(raw_layers):
            if not isinstance(raw, dict) or "kind" not in raw:
                raise InvalidSettings(f"IR layer {index} must be an object with a 'kind'")
            settings = raw.get("settings", {})
            if not isinstance(settings, dict):
                raise InvalidSettings(f"IR layer {index} settings must be an object")
            layers.append(IRLayer(kind=raw["kind"], settings=dict(settings)))

        return ModelIR(input_dimension=data["inputDimension"], layers=tuple(layers))

    def kind_summary(self) -> Dict[KindTag, int]:
        """Number of layers per kind, in order of first appearance."""
        summary: Dict[KindTag, int] = {}
        for layer in self.layers:
            summary[layer.kind] = summary.get(layer.kind, 0) + 1
        return summary
