#!/usr/bin/env python3
"""
Simple usage example for NetSnap
Builds an MNIST classifier, exports it, and runs the generated model
"""

import torch
import netsnap


def example_mlp():
    """Fully connected classifier for flattened 28x28 images"""
    print("Example 1: MLP")
    print("-" * 40)

    builder = netsnap.NetworkBuilder()
    builder.append("Dense")
    builder.append("Dropout")
    head = builder.append("Dense")
    builder.update_settings(head.id, {"outFeatures": 10, "activation": "None"})

    print(builder.to_json())
    print(builder.to_source())

    model = netsnap.create_executable_model(builder.to_ir())
    model.eval()
    logits = model(torch.randn(4, 784))
    print(f"Output shape: {tuple(logits.shape)}")
    print(f"Parameters:   {netsnap.count_parameters(model):,}")
    print()


def example_conv():
    """Convolutional feature extractor; note the stale-size report after an edit"""
    print("Example 2: Conv stack")
    print("-" * 40)

    builder = netsnap.NetworkBuilder(netsnap.BuilderConfig(default_input_dimension=1))
    conv = builder.append("SpatialConv")
    builder.append("SpatialBatchNorm")
    builder.append("SpatialMaxPool")
    builder.append("Flatten")

    # Widening the conv leaves the batch norm's numFeatures behind
    builder.update_settings(conv.id, {"outChannels": 64})
    for issue in builder.validate():
        print(f"  stale: {issue}")

    path = builder.save("conv_model.json")
    print(f"Saved IR to {path}")
    print()


if __name__ == "__main__":
    example_mlp()
    example_conv()
