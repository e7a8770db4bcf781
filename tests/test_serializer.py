import json

import pytest

from netsnap import (
    InvalidSettings,
    LayerGraph,
    ModelIR,
    UnknownLayerKind,
    from_json,
    graph_from_ir,
    load_ir,
    save_ir,
    to_ir,
    to_json,
)


def build(kinds, input_dimension=784):
    graph = LayerGraph(input_dimension=input_dimension)
    for kind in kinds:
        graph = graph.append(kind)
    return graph


def test_mnist_scenario_ir():
    ir = to_ir(build(["Dense", "Dropout"]))
    assert ir.to_dict() == {
        "inputDimension": 784,
        "layers": [
            {
                "kind": "Dense",
                "settings": {"inFeatures": 784, "outFeatures": 128, "bias": True, "activation": "ReLU"},
            },
            {"kind": "Dropout", "settings": {"p": 0.5, "inplace": False}},
        ],
    }


def test_ir_drops_ids_and_placement():
    graph = LayerGraph().append("Dense", placement={"x": 1, "y": 2})
    data = to_ir(graph).to_dict()
    assert set(data["layers"][0]) == {"kind", "settings"}
    assert "placement" not in json.dumps(data)


def test_ir_keeps_unset_values_and_unknown_keys():
    graph = LayerGraph().append("MultiHeadAttention")
    graph = graph.update_settings(graph.last.id, {"custom": [1, 2]})
    settings = to_ir(graph).layers[0].settings
    assert settings["kdim"] is None
    assert settings["vdim"] is None
    assert settings["custom"] == [1, 2]
    assert '"kdim": null' in to_json(to_ir(graph))


def test_json_key_order_is_stable():
    text = to_json(to_ir(build(["SpatialConv"], input_dimension=3)))
    data = json.loads(text)
    assert list(data) == ["inputDimension", "layers"]
    assert list(data["layers"][0]) == ["kind", "settings"]
    assert list(data["layers"][0]["settings"]) == [
        "inChannels", "outChannels", "kernelSize", "stride", "padding", "bias", "activation",
    ]


def test_same_operations_give_identical_ir_regardless_of_ids():
    a = build(["Dense", "Dropout", "Dense"])
    # Same content reached through a different id history
    b = LayerGraph().append("Flatten")
    b = b.remove(b.last.id)
    for kind in ["Dense", "Dropout", "Dense"]:
        b = b.append(kind)

    assert [l.id for l in a.layers] != [l.id for l in b.layers]
    assert to_ir(a) == to_ir(b)
    assert to_json(to_ir(a)) == to_json(to_ir(b))


def test_save_and_load_file(tmp_path):
    ir = to_ir(build(["Dense", "Dropout"]))
    path = save_ir(ir, str(tmp_path / "out" / "model.json"))
    raw = (tmp_path / "out" / "model.json").read_text(encoding="utf-8")
    assert raw.startswith('{\n  "inputDimension": 784')
    assert load_ir(path) == ir


def test_from_json_rejects_malformed_documents():
    with pytest.raises(InvalidSettings):
        from_json("[]")
    with pytest.raises(InvalidSettings):
        from_json('{"layers": []}')
    with pytest.raises(InvalidSettings):
        from_json('{"inputDimension": 1, "layers": [{"settings": {}}]}')
    with pytest.raises(InvalidSettings):
        from_json('{"inputDimension": 1, "layers": [{"kind": "Dense", "settings": []}]}')


def test_from_json_keeps_unknown_kinds():
    ir = from_json('{"inputDimension": 4, "layers": [{"kind": "Conv3d", "settings": {}}]}')
    assert ir.layers[0].kind == "Conv3d"


def test_graph_from_ir_restores_settings_verbatim():
    graph = build(["Dense", "Dense"])
    graph = graph.update_settings(graph.layers[0].id, {"outFeatures": 10})
    ir = to_ir(graph)

    restored = graph_from_ir(ir)
    assert to_ir(restored) == ir
    # Stale field is restored, not re-inferred
    assert restored.layers[1].settings["inFeatures"] == 128
    assert restored.next_id == 2
    assert restored.append("Dense").last.settings["inFeatures"] == 128


def test_graph_from_ir_unknown_kind():
    ir = ModelIR.from_dict({"inputDimension": 4, "layers": [{"kind": "Conv3d"}]})
    with pytest.raises(UnknownLayerKind):
        graph_from_ir(ir)


def test_kind_summary():
    ir = to_ir(build(["Dense", "Dropout", "Dense"]))
    assert ir.kind_summary() == {"Dense": 2, "Dropout": 1}


def test_equal_graphs_give_identical_json_regardless_of_update_order():
    a = LayerGraph().append("Dropout")
    a = a.update_settings(a.last.id, {"x": 1}).update_settings(a.last.id, {"y": 2})
    b = LayerGraph().append("Dropout")
    b = b.update_settings(b.last.id, {"y": 2}).update_settings(b.last.id, {"x": 1})
    b = b.update_settings(b.last.id, {"p": 0.5})

    assert a == b
    assert to_json(to_ir(a)) == to_json(to_ir(b))
    assert list(to_ir(a).layers[0].settings) == ["p", "inplace", "x", "y"]


def test_json_key_order_of_loaded_documents_is_canonical():
    text = '{"inputDimension": 4, "layers": [{"kind": "Dropout", "settings": {"z": 0, "inplace": true, "p": 0.1}}]}'
    ir = from_json(text)
    data = json.loads(to_json(ir))
    assert list(data["layers"][0]["settings"]) == ["p", "inplace", "z"]
    assert to_json(to_ir(graph_from_ir(ir))) == to_json(ir)


def test_ir_settings_are_detached_from_graph():
    graph = LayerGraph().append("Dropout")
    graph = graph.update_settings(graph.last.id, {"custom": [1]})
    ir = to_ir(graph)
    ir.layers[0].settings["custom"].append(2)
    assert graph.last.settings["custom"] == [1]


def test_to_json_rejects_non_finite_values():
    graph = LayerGraph().append("Dropout")
    graph = graph.update_settings(graph.last.id, {"p": float("nan")})
    with pytest.raises(InvalidSettings):
        to_json(to_ir(graph))
