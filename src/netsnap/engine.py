"""Instantiating generated model source as a live PyTorch module."""

from typing import Any, Dict, Union

import torch.nn as nn

from .codegen import to_source
from .ir import ModelIR

# Pseudo file name reported in tracebacks from generated code
GENERATED_FILENAME = "<netsnap-generated>"


def create_executable_model(ir_or_source: Union[ModelIR, str],
                            class_name: str = "NeuralNetwork") -> nn.Module:
    """
    Execute generated source and return the model it instantiates.

    Args:
        ir_or_source: Model IR (source is generated from it) or generated source text
        class_name: Module class name used when generating from IR

    Returns:
        The ``model`` object created by the source's final statement
    """
    if isinstance(ir_or_source, ModelIR):
        source = to_source(ir_or_source, class_name=class_name)
    else:
        source = ir_or_source

    namespace: Dict[str, Any] = {"__name__": "netsnap_generated"}
    exec(compile(source, GENERATED_FILENAME, "exec"), namespace)

    model = namespace.get("model")
    if not isinstance(model, nn.Module):
        raise RuntimeError("Generated source did not define a 'model' nn.Module")
    return model


def count_parameters(model: nn.Module, trainable_only: bool = True) -> int:
    """Total number of (trainable) parameter elements."""
    return sum(p.numel() for p in model.parameters() if p.requires_grad or not trainable_only)
