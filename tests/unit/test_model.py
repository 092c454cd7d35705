from pathlib import Path

import pytest

from graphml_gen.io import load_model
from graphml_gen.model_view import build_graph, build_node_index
from graphml_gen.validate import ValidateConfig, validate_model, validate_model_issues
from graphml_gen.vocab import Arrow, LineType, Shape


SAMPLE = {
    "styles": {
        "node": {"fill_color": "#FFCC00", "width": 80},
        "edge": {"target_arrow": "delta"},
        "group": {"fill_color": "#EEEEEE"},
        "group_closed": {"closed_width": 90},
    },
    "nodes": [
        {
            "id": "api",
            "label": "API",
            "open": False,
            "children": [
                {"id": "handler", "label": "Handler", "style": {"shape": "ellipse"}},
            ],
        },
        {"id": "db"},
    ],
    "edges": [
        {"from": "handler", "to": "db", "style": {"line_type": "dashed"}},
    ],
}


def codes(model, cfg=None):
    return [iss.code for iss in validate_model_issues(model, cfg)]


def write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_load_single_file(tmp_path: Path):
    path = write(
        tmp_path / "model.yaml",
        "nodes:\n  - id: a\n    label: 'A: first'\nedges: []\n",
    )
    assert load_model(path) == {"nodes": [{"id": "a", "label": "A: first"}], "edges": []}


def test_load_directory_merges_parts_in_name_order(tmp_path: Path):
    write(tmp_path / "20_edges.yml", "edges:\n  - {from: a, to: b}\n")
    write(tmp_path / "10_nodes.yaml", "nodes:\n  - id: a\nstyles:\n  node: {width: 50}\n")
    write(tmp_path / "15_more.yaml", "nodes:\n  - id: b\nstyles:\n  edge: {smoothed: true}\n")
    write(tmp_path / "notes.txt", "ignored")

    model = load_model(tmp_path)
    assert [n["id"] for n in model["nodes"]] == ["a", "b"]
    assert model["edges"] == [{"from": "a", "to": "b"}]
    assert model["styles"] == {"node": {"width": 50}, "edge": {"smoothed": True}}


def test_load_directory_rejects_conflicting_scalars(tmp_path: Path):
    write(tmp_path / "a.yaml", "styles:\n  node: {width: 50}\n")
    write(tmp_path / "b.yaml", "styles:\n  node: {width: 60}\n")
    with pytest.raises(ValueError, match="merge conflict"):
        load_model(tmp_path)


def test_load_errors(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_model(tmp_path / "missing.yaml")
    with pytest.raises(TypeError, match="mapping"):
        load_model(write(tmp_path / "list.yaml", "- a\n- b\n"))
    with pytest.raises(ValueError, match="Failed to parse YAML"):
        load_model(write(tmp_path / "bad.yaml", "nodes: [a, b\n"))
    assert load_model(write(tmp_path / "empty.yaml", "")) == {}


def test_sample_model_is_valid():
    assert validate_model(SAMPLE) == ([], [])


def test_structural_errors():
    model = {
        "nodes": [
            {"id": "a"},
            {"id": "a"},
            {"label": "no id"},
            "not a mapping",
        ],
        "edges": [
            {"from": "a", "to": "ghost"},
            {"to": "a"},
        ],
        "extra": 1,
    }
    found = codes(model)
    assert "E_NODE_DUPLICATE_ID" in found
    assert "E_NODE_MISSING_ID" in found
    assert "W_SECTION_ITEM_NOT_MAPPING" in found
    assert "E_EDGE_UNKNOWN_NODE" in found
    assert "E_EDGE_MISSING_ENDPOINT" in found
    assert "W_MODEL_UNKNOWN_SECTION" in found

    errors, warnings = validate_model(model)
    assert any("'ghost'" in e for e in errors)
    assert any("'extra'" in w for w in warnings)


def test_style_errors():
    model = {
        "styles": {"node": {"width": 0}, "edge": "red", "shadow": {}},
        "nodes": [
            {"id": "a", "style": {"colour": "#000000"}},
            {"id": "g", "open": "yes", "children": [{"id": "b"}], "style": {"insets": -2}},
            {"id": "c", "open": True},
        ],
    }
    issues = validate_model_issues(model)
    by_path = {iss.path: iss.code for iss in issues}
    assert by_path["/styles/node"] == "E_STYLE_INVALID"
    assert by_path["/styles/edge"] == "E_STYLE_NOT_MAPPING"
    assert by_path["/styles/shadow"] == "W_STYLES_UNKNOWN_SECTION"
    assert by_path["/nodes/0/style"] == "E_STYLE_INVALID"
    assert by_path["/nodes/1/open"] == "E_NODE_OPEN_NOT_BOOL"
    assert by_path["/nodes/1/style"] == "E_STYLE_INVALID"
    assert by_path["/nodes/2/open"] == "W_NODE_OPEN_WITHOUT_CHILDREN"


def test_config_ignores_and_escalates():
    model = {"nodes": [{"id": "a", "open": True}], "extra": 1}
    cfg = ValidateConfig(ignore={"W_MODEL_UNKNOWN_SECTION"}, escalate={"W_NODE_OPEN_WITHOUT_CHILDREN"})
    issues = validate_model_issues(model, cfg)
    assert [(i.severity, i.code) for i in issues] == [("error", "W_NODE_OPEN_WITHOUT_CHILDREN")]


def test_node_index_includes_children():
    index = build_node_index(SAMPLE)
    assert sorted(index) == ["api", "db", "handler"]


def test_build_graph_and_renderer():
    graph, renderer = build_graph(SAMPLE)
    api = graph.find_node("api")
    handler = graph.find_node("handler")
    db = graph.find_node("db")
    assert handler.parent is api
    assert [n.data for n in graph.roots] == ["api", "db"]

    assert renderer.node_label(api) == "API"
    assert renderer.node_label(db) == "db"
    assert renderer.is_group_open(api) is False

    handler_style = renderer.node_style(handler)
    assert handler_style.shape is Shape.ELLIPSE
    assert handler_style.fill_color == "#FFCC00"
    assert handler_style.width == 80.0
    assert renderer.node_style(db).shape is Shape.RECTANGLE

    edge = graph.edges[0]
    edge_style = renderer.edge_style(edge)
    assert edge_style.line_type is LineType.DASHED
    assert edge_style.target_arrow is Arrow.DELTA

    groups = renderer.group_styles(api)
    assert groups.open_style.fill_color == "#EEEEEE"
    assert groups.closed_style.closed_width == 90.0
    assert groups.open_style.closed_width == 50.0


def test_build_graph_rejects_unknown_endpoints():
    with pytest.raises(ValueError, match="'ghost'"):
        build_graph({"nodes": [{"id": "a"}], "edges": [{"from": "a", "to": "ghost"}]})
