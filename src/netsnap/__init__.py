"""
NetSnap - Assemble sequential neural networks layer by layer.

Builds a linear layer graph with append-time dimension inference, exports it
as a JSON model description, and generates equivalent PyTorch source.
"""

__version__ = "0.1.0"

# Core imports
from .layers.catalog import LayerCatalog, LayerKind, LayerTypeDescriptor, describe, get_catalog
from .shapes import (
    FLATTEN_PLACEHOLDER_FEATURES,
    Scalar,
    Spatial,
    check_dimensions,
    derive_auto_field,
    output_shape,
)
from .graph import LayerGraph, LayerInstance
from .ir import IRLayer, ModelIR
from .serializer import to_ir, to_json, from_json, save_ir, load_ir, graph_from_ir
from .codegen import CodeGenerator, to_source
from .engine import create_executable_model, count_parameters
from .builder import NetworkBuilder
from .config import BuilderConfig

# Errors
from .errors import (
    NetSnapError,
    UnknownLayerKind,
    LayerNotFound,
    UnsupportedLayerKind,
    InvalidSettings,
    UnmodeledShapeWarning,
)


__all__ = [
    # Core functions
    'describe',
    'get_catalog',
    'output_shape',
    'derive_auto_field',
    'check_dimensions',
    'to_ir',
    'to_json',
    'from_json',
    'save_ir',
    'load_ir',
    'graph_from_ir',
    'to_source',
    'create_executable_model',
    'count_parameters',

    # Classes
    'LayerCatalog',
    'LayerKind',
    'LayerTypeDescriptor',
    'LayerGraph',
    'LayerInstance',
    'Scalar',
    'Spatial',
    'IRLayer',
    'ModelIR',
    'CodeGenerator',
    'NetworkBuilder',
    'BuilderConfig',

    # Errors
    'NetSnapError',
    'UnknownLayerKind',
    'LayerNotFound',
    'UnsupportedLayerKind',
    'InvalidSettings',
    'UnmodeledShapeWarning',

    # Constants
    'FLATTEN_PLACEHOLDER_FEATURES',

    # Version
    '__version__',
]
