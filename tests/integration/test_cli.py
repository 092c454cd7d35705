from pathlib import Path

import pytest
from lxml import etree

from graphml_gen.cli import main
from graphml_gen.constants import NS_GRAPHML, NS_Y


NS = {"g": NS_GRAPHML, "y": NS_Y}

MODEL = """\
styles:
  node: {fill_color: "#FFCC00", width: 80}
  edge: {target_arrow: delta}
nodes:
  - id: api
    label: API
    open: true
    children:
      - {id: handler, label: Handler, style: {shape: ellipse}}
      - {id: auth, label: Auth}
  - id: db
    label: Database
edges:
  - {from: handler, to: db}
  - {from: auth, to: handler, style: {line_type: dashed}}
"""


@pytest.mark.integration
def test_cli_renders_a_model(tmp_path: Path):
    model = tmp_path / "system.yaml"
    model.write_text(MODEL, encoding="utf-8")

    main(["--model", str(model)])

    out = tmp_path / "system.graphml"
    root = etree.parse(str(out)).getroot()

    group = root.xpath("g:graph/g:node", namespaces=NS)[0]
    assert group.get("yfiles.foldertype") == "group"
    group_id = group.get("id")

    inner = root.xpath("g:graph/g:node/g:graph/g:node", namespaces=NS)
    assert [n.xpath(".//y:NodeLabel", namespaces=NS)[0].text for n in inner] == ["Handler", "Auth"]
    assert all(n.get("id").startswith(group_id + "::") for n in inner)

    shapes = [s.get("type") for s in root.xpath("//y:ShapeNode/y:Shape", namespaces=NS)]
    assert shapes == ["ellipse", "rectangle", "rectangle"]

    edges = root.xpath("//g:edge", namespaces=NS)
    assert len(edges) == 2
    line_types = [e.xpath(".//y:LineStyle", namespaces=NS)[0].get("type") for e in edges]
    assert line_types == ["line", "dashed"]


@pytest.mark.integration
def test_cli_writes_to_the_requested_path(tmp_path: Path):
    model = tmp_path / "system.yaml"
    model.write_text(MODEL, encoding="utf-8")
    out = tmp_path / "build" / "diagram.graphml"

    main(["--model", str(model), "--out", str(out), "--verbose"])

    assert out.exists()
    assert not (tmp_path / "system.graphml").exists()


@pytest.mark.integration
def test_cli_fails_on_invalid_model(tmp_path: Path, capsys):
    model = tmp_path / "broken.yaml"
    model.write_text("nodes:\n  - id: a\nedges:\n  - {from: a, to: ghost}\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["--model", str(model)])

    assert excinfo.value.code == 2
    assert "error: edge.to references unknown node id 'ghost'" in capsys.readouterr().err
    assert not (tmp_path / "broken.graphml").exists()


@pytest.mark.integration
def test_cli_strict_fails_on_warnings(tmp_path: Path, capsys):
    model = tmp_path / "warn.yaml"
    model.write_text("nodes:\n  - id: a\nnotes: hello\n", encoding="utf-8")

    main(["--model", str(model)])
    assert "warning: model has unknown top-level key 'notes'" in capsys.readouterr().err

    with pytest.raises(SystemExit) as excinfo:
        main(["--model", str(model), "--strict"])
    assert excinfo.value.code == 2
