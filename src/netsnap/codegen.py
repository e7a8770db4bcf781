"""PyTorch source generation from model IR."""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .errors import InvalidSettings, UnknownLayerKind, UnsupportedLayerKind
from .ir import IRLayer, ModelIR
from .layers.catalog import ACTIVATIONS, NO_ACTIVATION, LayerKind, describe

# Prefix of activation components declared after Dense/SpatialConv layers
ACTIVATION_PREFIX = "act"

INDENT = "    "


@dataclass(frozen=True)
class LayerTemplate:
    """How one layer kind is declared and applied in generated source."""
    prefix: str  # component name is <prefix><index>
    constructor: str
    arguments: Tuple[Tuple[str, str], ...]  # (setting name, keyword argument) in emission order
    threaded: bool = True  # False: execution line is emitted commented out

    def name(self, index: int) -> str:
        return f"{self.prefix}{index}"


TEMPLATES: Dict[LayerKind, LayerTemplate] = {
    LayerKind.DENSE: LayerTemplate(
        prefix="fc",
        constructor="nn.Linear",
        arguments=(
            ("inFeatures", "in_features"),
            ("outFeatures", "out_features"),
            ("bias", "bias"),
        ),
    ),
    LayerKind.SPATIAL_CONV: LayerTemplate(
        prefix="conv",
        constructor="nn.Conv2d",
        arguments=(
            ("inChannels", "in_channels"),
            ("outChannels", "out_channels"),
            ("kernelSize", "kernel_size"),
            ("stride", "stride"),
            ("padding", "padding"),
            ("bias", "bias"),
        ),
    ),
    LayerKind.SPATIAL_BATCH_NORM: LayerTemplate(
        prefix="bn",
        constructor="nn.BatchNorm2d",
        arguments=(
            ("numFeatures", "num_features"),
            ("eps", "eps"),
            ("momentum", "momentum"),
            ("affine", "affine"),
            ("trackRunningStats", "track_running_stats"),
        ),
    ),
    LayerKind.DROPOUT: LayerTemplate(
        prefix="dropout",
        constructor="nn.Dropout",
        arguments=(
            ("p", "p"),
            ("inplace", "inplace"),
        ),
    ),
    # Called as attn(query, key, value) and returns a tuple, so it cannot be
    # threaded like the other layers; the call is left for the user to wire up.
    LayerKind.MULTI_HEAD_ATTENTION: LayerTemplate(
        prefix="mha",
        constructor="nn.MultiheadAttention",
        arguments=(
            ("embedDim", "embed_dim"),
            ("numHeads", "num_heads"),
            ("dropout", "dropout"),
            ("bias", "bias"),
            ("addBiasKv", "add_bias_kv"),
            ("addZeroAttn", "add_zero_attn"),
            ("kdim", "kdim"),
            ("vdim", "vdim"),
        ),
        threaded=False,
    ),
    LayerKind.SPATIAL_MAX_POOL: LayerTemplate(
        prefix="maxpool",
        constructor="nn.MaxPool2d",
        arguments=(
            ("kernelSize", "kernel_size"),
            ("stride", "stride"),
            ("padding", "padding"),
            ("dilation", "dilation"),
            ("returnIndices", "return_indices"),
            ("ceilMode", "ceil_mode"),
        ),
    ),
    LayerKind.FLATTEN: LayerTemplate(
        prefix="flatten",
        constructor="nn.Flatten",
        arguments=(
            ("startDim", "start_dim"),
            ("endDim", "end_dim"),
        ),
    ),
}


def render_value(value: Any) -> str:
    """Python literal for a setting value."""
    if isinstance(value, float) and not math.isfinite(value):
        return f"float('{value}')"
    return repr(value)


def activation_of(layer: IRLayer, index: Optional[int] = None) -> Optional[str]:
    """
    Activation class name for a layer, or None when it has no activation.

    Raises:
        InvalidSettings: if the name is not one of the supported activations
    """
    activation = layer.settings.get("activation")
    if activation is None or activation == NO_ACTIVATION:
        return None
    if activation not in ACTIVATIONS:
        where = f" at position {index}" if index is not None else ""
        raise InvalidSettings(
            f"Unsupported activation {activation!r}{where}; expected one of {', '.join(ACTIVATIONS)}"
        )
    return activation


class CodeGenerator:
    """
    Generates a self-contained PyTorch module definition from IR.

    Each layer at position i is declared as ``self.<prefix><i>`` in
    ``__init__`` and applied to ``x`` in ``forward``; an activation
    following Dense/SpatialConv is declared and applied as ``self.act<i>``.
    """

    def __init__(self, class_name: str = "NeuralNetwork"):
        self.class_name = class_name

    def _template_for(self, layer: IRLayer, index: int) -> Tuple[LayerKind, LayerTemplate]:
        try:
            kind = LayerKind.parse(layer.kind)
        except UnknownLayerKind:
            raise UnsupportedLayerKind(layer.kind, index) from None
        if kind not in TEMPLATES:
            raise UnsupportedLayerKind(layer.kind, index)
        return kind, TEMPLATES[kind]

    def declaration(self, layer: IRLayer, index: int) -> List[str]:
        """Statements declaring the layer (and its activation) in __init__."""
        kind, template = self._template_for(layer, index)
        args = ", ".join(
            f"{kwarg}={render_value(layer.settings[setting])}"
            for setting, kwarg in template.arguments
            if setting in layer.settings
        )
        lines = [f"self.{template.name(index)} = {template.constructor}({args})"]

        activation = activation_of(layer, index) if describe(kind).has_activation else None
        if activation is not None:
            lines.append(f"self.{ACTIVATION_PREFIX}{index} = nn.{activation}()")
        return lines

    def execution(self, layer: IRLayer, index: int) -> List[str]:
        """Statements applying the layer (and its activation) in forward()."""
        kind, template = self._template_for(layer, index)
        name = template.name(index)

        if not template.threaded:
            return [
                f"# {template.constructor} takes (query, key, value) and returns (output, weights);",
                f"# connect {name} by hand, e.g.:",
                f"# x, _ = self.{name}(x, x, x)",
            ]

        lines = [f"x = self.{name}(x)"]
        activation = activation_of(layer, index) if describe(kind).has_activation else None
        if activation is not None:
            lines.append(f"x = self.{ACTIVATION_PREFIX}{index}(x)")
        return lines

    def generate(self, ir: ModelIR) -> str:
        """
        Generate module source for the IR.

        Raises:
            UnsupportedLayerKind: if a layer's kind has no template
            InvalidSettings: if a Dense/SpatialConv activation is not a supported name
        """
        declarations: List[str] = []
        executions: List[str] = []
        for index, layer in enumerate(ir.layers):
            declarations.extend(self.declaration(layer, index))
            executions.extend(self.execution(layer, index))

        body = INDENT * 2
        out = [
            "import torch",
            "import torch.nn as nn",
            "",
            f"class {self.class_name}(nn.Module):",
            f"{INDENT}def __init__(self):",
            f"{body}super({self.class_name}, self).__init__()",
        ]
        out.extend(body + line for line in declarations)
        out.append("")
        out.append(f"{INDENT}def forward(self, x):")
        out.extend(body + line for line in executions)
        out.append(f"{body}return x")
        out.append("")
        out.append("# Create the model")
        out.append(f"model = {self.class_name}()")
        return "\n".join(out) + "\n"


def to_source(ir: ModelIR, class_name: str = "NeuralNetwork") -> str:
    """Generate PyTorch source for the IR."""
    return CodeGenerator(class_name=class_name).generate(ir)
