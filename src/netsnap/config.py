"""Builder configuration."""

import os
from dataclasses import dataclass


# Entry feature count of a flattened 28x28 MNIST image
DEFAULT_INPUT_DIMENSION = 784


@dataclass
class BuilderConfig:
    """Global configuration for a network-building session."""
    default_input_dimension: int = DEFAULT_INPUT_DIMENSION

    # Reject setting names the catalog does not know about in update_settings
    strict_settings: bool = False

    # Name of the generated nn.Module subclass
    class_name: str = "NeuralNetwork"

    # Warn when an auto field is filled from a placeholder shape (e.g. after Flatten)
    warn_on_unmodeled_shapes: bool = True

    # JSON indentation for exported IR documents
    indent: int = 2

    def __post_init__(self):
        if not isinstance(self.default_input_dimension, int) or self.default_input_dimension < 0:
            raise ValueError(
                f"default_input_dimension must be a non-negative integer, got {self.default_input_dimension!r}"
            )
        if not self.class_name.isidentifier():
            raise ValueError(f"class_name must be a valid Python identifier, got {self.class_name!r}")

    @classmethod
    def from_env(cls) -> "BuilderConfig":
        """Build a config from NETSNAP_* environment variables, falling back to defaults."""
        config = cls()
        if "NETSNAP_INPUT_DIMENSION" in os.environ:
            config.default_input_dimension = int(os.environ["NETSNAP_INPUT_DIMENSION"])
        if "NETSNAP_STRICT_SETTINGS" in os.environ:
            config.strict_settings = os.environ["NETSNAP_STRICT_SETTINGS"] == '1'
        if "NETSNAP_CLASS_NAME" in os.environ:
            config.class_name = os.environ["NETSNAP_CLASS_NAME"]
        config.__post_init__()
        return config
