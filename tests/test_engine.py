import pytest
import torch
import torch.nn as nn

from netsnap import (
    InvalidSettings,
    LayerGraph,
    count_parameters,
    create_executable_model,
    to_ir,
    to_source,
)


def build(kinds, input_dimension=784):
    graph = LayerGraph(input_dimension=input_dimension)
    for kind in kinds:
        graph = graph.append(kind, warn_on_unmodeled=False)
    return graph


def test_mnist_model_runs():
    ir = to_ir(build(["Dense", "Dropout", "Dense"]))
    model = create_executable_model(ir)
    assert isinstance(model, nn.Module)
    assert type(model).__name__ == "NeuralNetwork"

    model.eval()
    out = model(torch.randn(2, 784))
    assert out.shape == (2, 128)
    # ReLU after every Dense
    assert (out >= 0).all()


def test_parameter_count_matches_declared_layers():
    model = create_executable_model(to_ir(build(["Dense"])))
    assert count_parameters(model) == 784 * 128 + 128


def test_conv_stack_runs_up_to_flatten():
    ir = to_ir(build(["SpatialConv", "SpatialBatchNorm", "SpatialMaxPool", "Flatten"], input_dimension=3))
    model = create_executable_model(ir)
    model.eval()
    out = model(torch.randn(1, 3, 8, 8))
    # 32 channels, 8x8 halved by pooling
    assert out.shape == (1, 32 * 4 * 4)


def test_attention_is_declared_but_not_applied():
    model = create_executable_model(to_ir(build(["Dense", "MultiHeadAttention"])))
    assert isinstance(model.mha1, nn.MultiheadAttention)
    assert model.mha1.embed_dim == 128
    model.eval()
    out = model(torch.randn(3, 784))
    assert out.shape == (3, 128)


def test_accepts_source_text():
    source = to_source(to_ir(build(["Dense"])), class_name="Tiny")
    model = create_executable_model(source)
    assert type(model).__name__ == "Tiny"


def test_rejects_source_without_model():
    with pytest.raises(RuntimeError):
        create_executable_model("import torch\n")


def test_crafted_activation_never_reaches_exec(tmp_path):
    marker = tmp_path / "marker"
    payload = f'ReLU(); open({str(marker)!r}, "w").write("x") #'
    graph = build(["Dense"])
    graph = graph.update_settings(graph.last.id, {"activation": payload})
    with pytest.raises(InvalidSettings):
        create_executable_model(to_ir(graph))
    assert not marker.exists()
