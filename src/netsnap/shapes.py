"""Dimension propagation between consecutive layers.

Only the quantity that determines the next layer's input size is tracked:
a feature count for vector-valued layers, or a channel count for spatial
layers. Height/width arithmetic for convolution and pooling is not modeled,
and a Flatten layer reports a fixed placeholder feature count.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Union

from .layers.catalog import LayerKind, ShapeTransfer, describe

if TYPE_CHECKING:
    from .graph import LayerGraph, LayerInstance


# Feature count reported for Flatten output. The true value depends on the
# spatial extent of the incoming tensor, which is not tracked.
FLATTEN_PLACEHOLDER_FEATURES = 1000


@dataclass(frozen=True)
class Scalar:
    """Feature count of a vector-valued activation."""
    n: int
    unmodeled: bool = False  # True when n is a placeholder, not a computed size

    @property
    def size(self) -> int:
        return self.n


@dataclass(frozen=True)
class Spatial:
    """Channel count of a spatial activation; height and width are not tracked."""
    channels: int

    @property
    def size(self) -> int:
        return self.channels


Shape = Union[Scalar, Spatial]


def flatten_placeholder() -> Scalar:
    """The unmodeled Scalar produced by every Flatten layer."""
    return Scalar(FLATTEN_PLACEHOLDER_FEATURES, unmodeled=True)


def output_shape(layer: "LayerInstance", incoming: Shape) -> Shape:
    """
    Compute the shape a layer produces.

    Args:
        layer: Layer instance (only kind and settings are read)
        incoming: Shape produced by the preceding layer

    Returns:
        Outgoing shape
    """
    descriptor = describe(layer.kind)
    transfer = descriptor.transfer

    if transfer is ShapeTransfer.SCALAR_FROM_SETTING:
        return Scalar(layer.settings.get(descriptor.transfer_field))
    elif transfer is ShapeTransfer.SPATIAL_FROM_SETTING:
        return Spatial(layer.settings.get(descriptor.transfer_field))
    elif transfer is ShapeTransfer.IDENTITY:
        return incoming
    elif transfer is ShapeTransfer.FLATTEN_PLACEHOLDER:
        return flatten_placeholder()

    raise AssertionError(f"Unhandled shape transfer {transfer!r}")


def derive_auto_field(kind: Union[LayerKind, str], incoming: Shape) -> Dict[str, Any]:
    """
    Settings patch filling a new layer's input-size field from the incoming shape.

    A Spatial shape contributes its channel count even to kinds that expect a
    feature count (Dense, MultiHeadAttention); the spatial extent is dropped.
    Kinds without an input-size field get an empty patch.
    """
    descriptor = describe(kind)
    if descriptor.auto_field is None:
        return {}
    return {descriptor.auto_field: incoming.size}


def propagate(layers: Iterable["LayerInstance"], input_dimension: int) -> Shape:
    """Fold output_shape over a layer sequence, starting from Scalar(input_dimension)."""
    shape: Shape = Scalar(input_dimension)
    for layer in layers:
        shape = output_shape(layer, shape)
    return shape


def check_dimensions(graph: "LayerGraph") -> List[str]:
    """
    Report auto fields that no longer match what append-time inference would produce.

    Layers are never rewritten; the caller decides what to do about stale fields.

    Returns:
        List of issue descriptions (empty when every auto field is consistent)
    """
    issues = []
    shape: Shape = Scalar(graph.input_dimension)

    for index, layer in enumerate(graph.layers):
        expected = derive_auto_field(layer.kind, shape)
        for name, value in expected.items():
            actual = layer.settings.get(name)
            if actual != value:
                issues.append(
                    f"Layer {index} ({layer.kind.value}) has {name}={actual!r} "
                    f"but the preceding output provides {value!r}"
                )
        shape = output_shape(layer, shape)

    return issues
