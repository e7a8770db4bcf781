"""Editing session that holds the current graph snapshot for an editor front end."""

import warnings
from typing import Any, Dict, List, Mapping, Optional, Union

from .codegen import to_source
from .config import BuilderConfig
from .graph import LayerGraph, LayerId, LayerInstance
from .ir import ModelIR
from .layers.catalog import LayerKind
from .serializer import DEFAULT_IR_FILENAME, graph_from_ir, load_ir, save_ir, to_ir, to_json
from .shapes import check_dimensions


class NetworkBuilder:
    """
    Holds the current LayerGraph and swaps in a new snapshot after each
    successful edit. A failed edit raises and leaves the current snapshot
    in place.
    """

    def __init__(self, config: Optional[BuilderConfig] = None, graph: Optional[LayerGraph] = None):
        """
        Initialize builder.

        Args:
            config: Builder configuration (defaults to BuilderConfig())
            graph: Starting snapshot (defaults to an empty graph)
        """
        self.config = config or BuilderConfig()
        self.graph = graph if graph is not None else LayerGraph(
            input_dimension=self.config.default_input_dimension
        )

    @classmethod
    def load(cls, path: str, config: Optional[BuilderConfig] = None) -> "NetworkBuilder":
        """Start a session from an IR file."""
        return cls(config=config, graph=graph_from_ir(load_ir(path)))

    @property
    def layers(self) -> List[LayerInstance]:
        return list(self.graph.layers)

    @property
    def input_dimension(self) -> int:
        return self.graph.input_dimension

    def append(self, kind: Union[LayerKind, str], placement: Optional[Dict[str, Any]] = None) -> LayerInstance:
        """
        Append a layer of the given kind.

        Returns:
            The new layer instance
        """
        self.graph = self.graph.append(
            kind,
            placement=placement,
            warn_on_unmodeled=self.config.warn_on_unmodeled_shapes,
        )
        return self.graph.last

    def update_settings(self, layer_id: LayerId, patch: Mapping[str, Any]) -> LayerInstance:
        """Merge settings into a layer and return the updated instance."""
        self.graph = self.graph.update_settings(layer_id, patch, strict=self.config.strict_settings)
        return self.graph.get(layer_id)

    def remove(self, layer_id: LayerId):
        """Remove a layer; later layers are left as they are."""
        self.graph = self.graph.remove(layer_id)

    def set_input_dimension(self, n: int):
        self.graph = self.graph.set_input_dimension(n)

    def to_ir(self) -> ModelIR:
        return to_ir(self.graph)

    def to_json(self) -> str:
        return to_json(self.to_ir(), indent=self.config.indent)

    def to_source(self) -> str:
        return to_source(self.to_ir(), class_name=self.config.class_name)

    def save(self, path: str = DEFAULT_IR_FILENAME) -> str:
        """Export the current IR to a JSON file."""
        return save_ir(self.to_ir(), path, indent=self.config.indent)

    def validate(self) -> List[str]:
        """
        Check auto-filled input sizes against the current layer sequence.

        Nothing is changed; each stale field is reported as a warning and
        returned.
        """
        issues = check_dimensions(self.graph)
        for issue in issues:
            warnings.warn(f"Dimension issue: {issue}")
        return issues
