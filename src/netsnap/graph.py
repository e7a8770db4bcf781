"""Layer graph: an immutable, append-ordered sequence of layer instances.

Every mutation returns a new LayerGraph and leaves the receiver untouched, so
a reader holding a snapshot never observes a partially applied change.
Input-size fields are inferred once, when a layer is appended; later edits,
removals and input dimension changes do not re-run inference.
"""

import copy
import warnings
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union

from .config import DEFAULT_INPUT_DIMENSION
from .errors import InvalidSettings, LayerNotFound, UnmodeledShapeWarning
from .layers.catalog import ACTIVATIONS, LayerKind, describe
from .shapes import Scalar, Shape, derive_auto_field, propagate

LayerId = int


@dataclass(frozen=True)
class LayerInstance:
    """A single layer in the graph. Settings and placement are read-only private copies."""
    id: LayerId
    kind: LayerKind
    settings: Mapping[str, Any]
    placement: Optional[Mapping[str, Any]] = None  # owned by the editor UI, never read here

    def __post_init__(self):
        object.__setattr__(self, "settings", _frozen_copy(self.settings))
        if self.placement is not None:
            object.__setattr__(self, "placement", _frozen_copy(self.placement))

    def with_settings(self, patch: Mapping[str, Any]) -> "LayerInstance":
        """Copy of this layer with patch merged into its settings."""
        settings = dict(self.settings)
        settings.update(patch)
        return replace(self, settings=settings)


@dataclass(frozen=True)
class LayerGraph:
    """Snapshot of a linear network: ordered layers plus the network's input feature count."""
    layers: Tuple[LayerInstance, ...] = ()
    input_dimension: int = DEFAULT_INPUT_DIMENSION
    next_id: LayerId = 0  # ids are never reused, even after removal

    def __len__(self) -> int:
        return len(self.layers)

    def __iter__(self) -> Iterator[LayerInstance]:
        return iter(self.layers)

    @property
    def last(self) -> Optional[LayerInstance]:
        return self.layers[-1] if self.layers else None

    def index_of(self, layer_id: LayerId) -> int:
        """Position of a layer in execution order."""
        for index, layer in enumerate(self.layers):
            if layer.id == layer_id:
                return index
        raise LayerNotFound(layer_id)

    def get(self, layer_id: LayerId) -> LayerInstance:
        return self.layers[self.index_of(layer_id)]

    def output_shape(self) -> Shape:
        """Shape produced by the last layer (or the input shape when empty)."""
        return propagate(self.layers, self.input_dimension)

    def append(self,
               kind: Union[LayerKind, str],
               placement: Optional[Dict[str, Any]] = None,
               warn_on_unmodeled: bool = True) -> "LayerGraph":
        """
        Append a layer built from the catalog defaults.

        The new layer's input-size field is filled from the output shape of
        the current last layer, or from Scalar(input_dimension) when the graph
        is empty. The appended instance is ``result.last``.

        Args:
            kind: Layer kind to append
            placement: Opaque editor metadata stored alongside the layer
            warn_on_unmodeled: Warn when the input size comes from a placeholder shape

        Returns:
            New graph with the layer appended
        """
        descriptor = describe(kind)
        incoming = self.output_shape()

        settings = descriptor.default_settings
        patch = derive_auto_field(descriptor.kind, incoming)
        settings.update(patch)

        if patch and warn_on_unmodeled and isinstance(incoming, Scalar) and incoming.unmodeled:
            warnings.warn(
                f"{descriptor.kind.value} input size set to placeholder value {incoming.n}; "
                f"the size after Flatten is not computed, adjust it manually",
                UnmodeledShapeWarning,
                stacklevel=2,
            )

        layer = LayerInstance(
            id=self.next_id,
            kind=descriptor.kind,
            settings=settings,
            placement=placement,
        )
        return replace(self, layers=self.layers + (layer,), next_id=self.next_id + 1)

    def update_settings(self,
                        layer_id: LayerId,
                        patch: Mapping[str, Any],
                        strict: bool = False) -> "LayerGraph":
        """
        Merge patch into a layer's settings; only the named keys change.

        Unknown keys are stored as given unless ``strict`` is set, in which case
        keys outside the kind's template and unsupported activation names are
        rejected. Value types are never checked. Other layers are not touched.

        Raises:
            LayerNotFound: if no layer has this id
            InvalidSettings: in strict mode, for unknown keys or activations
        """
        index = self.index_of(layer_id)
        layer = self.layers[index]

        if strict:
            _validate_patch(layer.kind, patch)

        layers = list(self.layers)
        layers[index] = layer.with_settings(patch)
        return replace(self, layers=tuple(layers))

    def remove(self, layer_id: LayerId) -> "LayerGraph":
        """
        Delete a layer. Later layers keep their settings as they are, even if
        their input size no longer matches the new predecessor.

        Raises:
            LayerNotFound: if no layer has this id
        """
        index = self.index_of(layer_id)
        return replace(self, layers=self.layers[:index] + self.layers[index + 1:])

    def set_input_dimension(self, n: int) -> "LayerGraph":
        """Replace the network input size. Existing layers are not re-inferred."""
        return replace(self, input_dimension=n)


def _validate_patch(kind: LayerKind, patch: Mapping[str, Any]):
    descriptor = describe(kind)
    unknown = [name for name in patch if not descriptor.knows_field(name)]
    if unknown:
        raise InvalidSettings(
            f"{kind.value} has no setting(s) {', '.join(sorted(unknown))}; "
            f"expected one of {', '.join(descriptor.field_names)}"
        )
    if "activation" in patch and descriptor.has_activation:
        activation = patch["activation"]
        if activation is not None and activation not in ACTIVATIONS:
            raise InvalidSettings(
                f"Unsupported activation {activation!r}; expected one of {', '.join(ACTIVATIONS)}"
            )


def _frozen_copy(mapping: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(copy.deepcopy(dict(mapping)))
