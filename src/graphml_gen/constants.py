# src/graphml_gen/constants.py
from __future__ import annotations

NS_GRAPHML = "http://graphml.graphdrawing.org/xmlns"
NS_XSI = "http://www.w3.org/2001/XMLSchema-instance"
NS_Y = "http://www.yworks.com/xml/graphml"
NS_YED = "http://www.yworks.com/xml/yed/3"

SCHEMA_LOCATION = (
    "http://graphml.graphdrawing.org/xmlns "
    "http://www.yworks.com/xml/schema/graphml/1.1/ygraphml.xsd"
)

NSMAP: dict[str | None, str] = {
    None: NS_GRAPHML,
    "xsi": NS_XSI,
    "y": NS_Y,
    "yed": NS_YED,
}

# Attribute-key ids registered in the document prologue. yEd resolves data
# blocks through these ids, so they must not change.
ID_RESOURCES = "d0"
ID_PORT_GRAPHICS = "d1"
ID_PORT_GEOMETRY = "d2"
ID_PORT_USER_DATA = "d3"
ID_NODE_URL = "d4"
ID_NODE_DESCRIPTION = "d5"
ID_NODE_GRAPHICS = "d6"
ID_GRAPH_DESCRIPTION = "d7"
ID_EDGE_URL = "d8"
ID_EDGE_DESCRIPTION = "d9"
ID_EDGE_GRAPHICS = "d10"

# Written in this order, attributes in this order.
KEY_DECLARATIONS: tuple[dict[str, str], ...] = (
    {"for": "graphml", "id": ID_RESOURCES, "yfiles.type": "resources"},
    {"for": "port", "id": ID_PORT_GRAPHICS, "yfiles.type": "portgraphics"},
    {"for": "port", "id": ID_PORT_GEOMETRY, "yfiles.type": "portgeometry"},
    {"for": "port", "id": ID_PORT_USER_DATA, "yfiles.type": "portuserdata"},
    {"attr.name": "url", "attr.type": "string", "for": "node", "id": ID_NODE_URL},
    {
        "attr.name": "description",
        "attr.type": "string",
        "for": "node",
        "id": ID_NODE_DESCRIPTION,
    },
    {"for": "node", "id": ID_NODE_GRAPHICS, "yfiles.type": "nodegraphics"},
    {
        "attr.name": "Description",
        "attr.type": "string",
        "for": "graph",
        "id": ID_GRAPH_DESCRIPTION,
    },
    {"attr.name": "url", "attr.type": "string", "for": "edge", "id": ID_EDGE_URL},
    {
        "attr.name": "description",
        "attr.type": "string",
        "for": "edge",
        "id": ID_EDGE_DESCRIPTION,
    },
    {"for": "edge", "id": ID_EDGE_GRAPHICS, "yfiles.type": "edgegraphics"},
)

ROOT_GRAPH_ID = "G"
EDGE_DEFAULT = "directed"

# Identifier formats.
NODE_ID_PREFIX = "n"
EDGE_ID_PREFIX = "e"
SCOPE_SEPARATOR = "::"
# A group's nested graph is "<groupId>:".
GROUP_GRAPH_SUFFIX = ":"

# Top-level sections of a YAML graph model.
MODEL_SECTIONS: tuple[str, ...] = ("nodes", "edges")
STYLE_SECTIONS: tuple[str, ...] = (
    "node",
    "edge",
    "group",
    "group_open",
    "group_closed",
)

# Files merged when --model points at a directory.
MODEL_FILE_SUFFIXES: tuple[str, ...] = (".yaml", ".yml")
