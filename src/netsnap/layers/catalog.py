"""Layer catalog: the fixed set of layer kinds with their default settings and shape rules."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from ..errors import UnknownLayerKind


class LayerKind(Enum):
    """Supported layer kinds. Values are the stable wire identifiers used in IR documents."""
    DENSE = "Dense"
    SPATIAL_CONV = "SpatialConv"
    SPATIAL_BATCH_NORM = "SpatialBatchNorm"
    DROPOUT = "Dropout"
    MULTI_HEAD_ATTENTION = "MultiHeadAttention"
    SPATIAL_MAX_POOL = "SpatialMaxPool"
    FLATTEN = "Flatten"

    @classmethod
    def parse(cls, kind: Union["LayerKind", str]) -> "LayerKind":
        """Resolve a kind tag (enum member or wire string) to a LayerKind."""
        if isinstance(kind, cls):
            return kind
        try:
            return cls(kind)
        except ValueError:
            raise UnknownLayerKind(kind) from None


class ShapeTransfer(Enum):
    """How a layer kind turns its incoming shape into an outgoing shape."""
    SCALAR_FROM_SETTING = "scalar_from_setting"  # Scalar(settings[transfer_field])
    SPATIAL_FROM_SETTING = "spatial_from_setting"  # Spatial(settings[transfer_field])
    IDENTITY = "identity"  # incoming shape passes through
    FLATTEN_PLACEHOLDER = "flatten_placeholder"  # fixed, unmodeled Scalar


# Activation names accepted for Dense/SpatialConv; "None" disables the activation
ACTIVATIONS = ("ReLU", "Sigmoid", "Tanh", "LeakyReLU", "ELU", "None")

# Sentinel meaning "no activation"
NO_ACTIVATION = "None"


@dataclass(frozen=True)
class LayerTypeDescriptor:
    """Immutable description of one layer kind."""
    kind: LayerKind
    defaults: Tuple[Tuple[str, Any], ...]  # canonical field order
    transfer: ShapeTransfer
    transfer_field: Optional[str] = None  # setting read by *_FROM_SETTING rules
    auto_field: Optional[str] = None  # input-size setting filled at append time
    has_activation: bool = False

    @property
    def default_settings(self) -> Dict[str, Any]:
        """Fresh copy of the default settings template."""
        return dict(self.defaults)

    @property
    def field_names(self) -> List[str]:
        """Setting names in canonical order."""
        return [name for name, _ in self.defaults]

    def knows_field(self, name: str) -> bool:
        return any(name == field for field, _ in self.defaults)


class LayerCatalog:
    """
    Registry of layer descriptors, one per LayerKind.
    Descriptors are constant data registered once at construction.
    """

    def __init__(self):
        self._descriptors: Dict[LayerKind, LayerTypeDescriptor] = {}
        self._register_default_layers()

    def _register_default_layers(self):
        """Register the built-in layer kinds."""

        # Fully connected
        self._register(LayerTypeDescriptor(
            kind=LayerKind.DENSE,
            defaults=(
                ("inFeatures", None),
                ("outFeatures", 128),
                ("bias", True),
                ("activation", "ReLU"),
            ),
            transfer=ShapeTransfer.SCALAR_FROM_SETTING,
            transfer_field="outFeatures",
            auto_field="inFeatures",
            has_activation=True,
        ))

        # 2D convolution; spatial extent is not tracked, only channels
        self._register(LayerTypeDescriptor(
            kind=LayerKind.SPATIAL_CONV,
            defaults=(
                ("inChannels", None),
                ("outChannels", 32),
                ("kernelSize", 3),
                ("stride", 1),
                ("padding", 1),
                ("bias", True),
                ("activation", "ReLU"),
            ),
            transfer=ShapeTransfer.SPATIAL_FROM_SETTING,
            transfer_field="outChannels",
            auto_field="inChannels",
            has_activation=True,
        ))

        self._register(LayerTypeDescriptor(
            kind=LayerKind.SPATIAL_BATCH_NORM,
            defaults=(
                ("numFeatures", None),
                ("eps", 1e-5),
                ("momentum", 0.1),
                ("affine", True),
                ("trackRunningStats", True),
            ),
            transfer=ShapeTransfer.IDENTITY,
            auto_field="numFeatures",
        ))

        self._register(LayerTypeDescriptor(
            kind=LayerKind.DROPOUT,
            defaults=(
                ("p", 0.5),
                ("inplace", False),
            ),
            transfer=ShapeTransfer.IDENTITY,
        ))

        self._register(LayerTypeDescriptor(
            kind=LayerKind.MULTI_HEAD_ATTENTION,
            defaults=(
                ("embedDim", None),
                ("numHeads", 8),
                ("dropout", 0.1),
                ("bias", True),
                ("addBiasKv", False),
                ("addZeroAttn", False),
                ("kdim", None),
                ("vdim", None),
            ),
            transfer=ShapeTransfer.SCALAR_FROM_SETTING,
            transfer_field="embedDim",
            auto_field="embedDim",
        ))

        # Pooling keeps the channel count; height/width reduction is not modeled
        self._register(LayerTypeDescriptor(
            kind=LayerKind.SPATIAL_MAX_POOL,
            defaults=(
                ("kernelSize", 2),
                ("stride", 2),
                ("padding", 0),
                ("dilation", 1),
                ("returnIndices", False),
                ("ceilMode", False),
            ),
            transfer=ShapeTransfer.IDENTITY,
        ))

        self._register(LayerTypeDescriptor(
            kind=LayerKind.FLATTEN,
            defaults=(
                ("startDim", 1),
                ("endDim", -1),
            ),
            transfer=ShapeTransfer.FLATTEN_PLACEHOLDER,
        ))

    def _register(self, descriptor: LayerTypeDescriptor):
        if descriptor.kind in self._descriptors:
            raise ValueError(f"Layer kind {descriptor.kind.value} already registered")
        self._descriptors[descriptor.kind] = descriptor

    def describe(self, kind: Union[LayerKind, str]) -> LayerTypeDescriptor:
        """
        Look up the descriptor for a layer kind.

        Args:
            kind: LayerKind member or its wire identifier (e.g. "Dense")

        Returns:
            The kind's descriptor

        Raises:
            UnknownLayerKind: if the kind is not in the catalog
        """
        return self._descriptors[LayerKind.parse(kind)]

    def kinds(self) -> List[LayerKind]:
        """All registered kinds in declaration order."""
        return list(self._descriptors)

    def __contains__(self, kind) -> bool:
        try:
            LayerKind.parse(kind)
        except UnknownLayerKind:
            return False
        return True

    def __iter__(self) -> Iterator[LayerTypeDescriptor]:
        return iter(self._descriptors.values())

    def __len__(self) -> int:
        return len(self._descriptors)


# Global catalog instance
_global_catalog = LayerCatalog()


def get_catalog() -> LayerCatalog:
    """Get the global layer catalog."""
    return _global_catalog


def describe(kind: Union[LayerKind, str]) -> LayerTypeDescriptor:
    """Describe a layer kind using the global catalog."""
    return _global_catalog.describe(kind)
