"""
Layer kinds supported by the builder.
"""

from .catalog import (
    ACTIVATIONS,
    NO_ACTIVATION,
    LayerCatalog,
    LayerKind,
    LayerTypeDescriptor,
    ShapeTransfer,
    describe,
    get_catalog,
)

__all__ = [
    'ACTIVATIONS',
    'NO_ACTIVATION',
    'LayerCatalog',
    'LayerKind',
    'LayerTypeDescriptor',
    'ShapeTransfer',
    'describe',
    'get_catalog',
]
