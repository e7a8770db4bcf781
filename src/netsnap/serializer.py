"""Projection of a layer graph into the model IR, and IR persistence."""

import json
import os
from typing import Union

from .errors import InvalidSettings
from .graph import LayerGraph, LayerInstance
from .ir import IRLayer, ModelIR, canonical_settings
from .layers.catalog import LayerKind

# File name used when exporting without an explicit path
DEFAULT_IR_FILENAME = "neural_network_model.json"


def to_ir(graph: LayerGraph) -> ModelIR:
    """
    Project a graph into the IR.

    Layer ids and placement metadata are dropped. Settings are deep-copied,
    unset (None) values and unknown keys included, catalog fields first in
    canonical order and unknown keys after them sorted by name.
    """
    return ModelIR(
        input_dimension=graph.input_dimension,
        layers=tuple(
            IRLayer(kind=layer.kind.value, settings=canonical_settings(layer.kind.value, layer.settings))
            for layer in graph.layers
        ),
    )


def to_json(ir: ModelIR, indent: int = 2) -> str:
    """
    Serialize IR to JSON text. Equal IRs always give identical text.

    Raises:
        InvalidSettings: if a setting holds NaN or an infinity, which JSON cannot represent
    """
    try:
        return json.dumps(ir.to_dict(), indent=indent, allow_nan=False)
    except ValueError as e:
        raise InvalidSettings(f"IR cannot be written as JSON: {e}") from e


def from_json(text: Union[str, bytes]) -> ModelIR:
    """Parse JSON text into IR. Kinds are not checked against the catalog."""
    return ModelIR.from_dict(json.loads(text))


def save_ir(ir: ModelIR, path: str = DEFAULT_IR_FILENAME, indent: int = 2) -> str:
    """
    Write IR to a UTF-8 JSON file.

    Args:
        ir: Model IR
        path: Output path
        indent: JSON indentation

    Returns:
        The path written
    """
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(path, 'w', encoding='utf-8') as f:
        f.write(to_json(ir, indent=indent))
        f.write('\n')

    return path


def load_ir(path: str) -> ModelIR:
    """Read IR from a UTF-8 JSON file."""
    with open(path, 'r', encoding='utf-8') as f:
        return from_json(f.read())


def graph_from_ir(ir: ModelIR) -> LayerGraph:
    """
    Rebuild an editable graph from IR.

    Settings are restored verbatim, without re-running dimension inference.
    Layers get fresh ids.

    Raises:
        UnknownLayerKind: if the IR names a kind outside the catalog
    """
    layers = tuple(
        LayerInstance(id=index, kind=LayerKind.parse(layer.kind), settings=dict(layer.settings))
        for index, layer in enumerate(ir.layers)
    )
    return LayerGraph(layers=layers, input_dimension=ir.input_dimension, next_id=len(layers))
