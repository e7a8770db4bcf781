"""Error taxonomy for graph editing, serialization and code generation."""


class NetSnapError(Exception):
    """Base class for all netsnap errors."""


class UnknownLayerKind(NetSnapError, ValueError):
    """Raised when a kind tag is not part of the layer catalog."""

    def __init__(self, kind):
        self.kind = kind
        super().__init__(f"Unknown layer kind: {kind!r}")


class LayerNotFound(NetSnapError, KeyError):
    """Raised when an update or remove addresses a layer id that is not in the graph."""

    def __init__(self, layer_id):
        self.layer_id = layer_id
        super().__init__(f"Layer {layer_id!r} not found in graph")

    def __str__(self):
        return self.args[0]


class UnsupportedLayerKind(NetSnapError, ValueError):
    """Raised when the code generator has no template for an IR layer kind."""

    def __init__(self, kind, index=None):
        self.kind = kind
        self.index = index
        where = f" at position {index}" if index is not None else ""
        super().__init__(f"No code template for layer kind {kind!r}{where}")


class InvalidSettings(NetSnapError, ValueError):
    """Raised for settings rejected by strict validation or a malformed IR document."""


class UnmodeledShapeWarning(UserWarning):
    """Warned when an input size is filled from a placeholder shape rather than a computed one."""
