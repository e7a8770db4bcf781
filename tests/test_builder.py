import json
import warnings

import pytest

from netsnap import (
    BuilderConfig,
    InvalidSettings,
    LayerNotFound,
    NetworkBuilder,
    UnmodeledShapeWarning,
)


def test_mnist_session():
    builder = NetworkBuilder()
    dense = builder.append("Dense")
    dropout = builder.append("Dropout")

    assert dense.settings["inFeatures"] == 784
    assert [layer.id for layer in builder.layers] == [dense.id, dropout.id]

    data = json.loads(builder.to_json())
    assert data["inputDimension"] == 784
    assert [layer["kind"] for layer in data["layers"]] == ["Dense", "Dropout"]

    source = builder.to_source()
    assert source.index("self.fc0") < source.index("self.dropout1")


def test_snapshots_are_not_aliased():
    builder = NetworkBuilder()
    builder.append("Dense")
    snapshot = builder.graph
    builder.append("Dropout")
    builder.update_settings(snapshot.layers[0].id, {"outFeatures": 5})

    assert len(snapshot) == 1
    assert snapshot.layers[0].settings["outFeatures"] == 128


def test_failed_edit_keeps_current_snapshot():
    builder = NetworkBuilder()
    builder.append("Dense")
    snapshot = builder.graph
    with pytest.raises(LayerNotFound):
        builder.remove(12345)
    assert builder.graph is snapshot


def test_strict_config():
    builder = NetworkBuilder(BuilderConfig(strict_settings=True))
    layer = builder.append("Dense")
    snapshot = builder.graph
    with pytest.raises(InvalidSettings):
        builder.update_settings(layer.id, {"outFeature": 10})
    assert builder.graph is snapshot
    assert builder.update_settings(layer.id, {"outFeatures": 10}).settings["outFeatures"] == 10


def test_config_input_dimension_and_class_name():
    builder = NetworkBuilder(BuilderConfig(default_input_dimension=3, class_name="Net"))
    assert builder.append("SpatialConv").settings["inChannels"] == 3
    assert "class Net(nn.Module):" in builder.to_source()


def test_set_input_dimension():
    builder = NetworkBuilder()
    first = builder.append("Dense")
    builder.set_input_dimension(10)
    assert builder.input_dimension == 10
    assert builder.graph.get(first.id).settings["inFeatures"] == 784
    assert builder.to_ir().input_dimension == 10


def test_unmodeled_warning_follows_config():
    builder = NetworkBuilder()
    builder.append("Flatten")
    with pytest.warns(UnmodeledShapeWarning):
        builder.append("Dense")

    quiet = NetworkBuilder(BuilderConfig(warn_on_unmodeled_shapes=False))
    quiet.append("Flatten")
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        quiet.append("Dense")


def test_validate_warns_about_stale_fields():
    builder = NetworkBuilder()
    first = builder.append("Dense")
    builder.append("Dense")
    assert builder.validate() == []

    builder.remove(first.id)
    with pytest.warns(UserWarning, match="Dimension issue"):
        issues = builder.validate()
    assert len(issues) == 1
    assert builder.layers[0].settings["inFeatures"] == 128


def test_save_and_load(tmp_path):
    builder = NetworkBuilder()
    builder.append("SpatialConv")
    builder.append("Dense")
    path = builder.save(str(tmp_path / "net.json"))

    restored = NetworkBuilder.load(path)
    assert restored.to_json() == builder.to_json()
    assert restored.to_source() == builder.to_source()
    # Editing continues with fresh ids
    layer = restored.append("Dropout")
    assert layer.id == 2
