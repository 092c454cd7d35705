from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Optional, Tuple

from .constants import MODEL_SECTIONS, STYLE_SECTIONS
from .styles import EdgeStyle, GroupStyle, GroupStyles, NodeStyle

Severity = Literal["error", "warning"]

# Style section -> factory of the style its block is applied to.
STYLE_FACTORIES: dict[str, Callable[[], Any]] = {
    "node": NodeStyle,
    "edge": EdgeStyle,
    "group": GroupStyles,
    "group_open": GroupStyle,
    "group_closed": GroupStyle,
}


@dataclass(frozen=True)
class ValidationIssue:
    """Structured validation issue for callers that want more than strings."""

    severity: Severity
    code: str
    message: str
    path: str = ""
    hint: Optional[str] = None


@dataclass(frozen=True)
class ValidateConfig:
    """Validation configuration.

    The CLI uses the `validate_model()` wrapper, which returns
    `(errors, warnings)` as lists of strings.
    """

    # Rule controls
    ignore: set[str] = field(default_factory=set)
    escalate: set[str] = field(default_factory=set)

    # Try every style block against the style it configures.
    check_styles: bool = True


def style_error(factory: Callable[[], Any], block: dict[str, Any]) -> Optional[str]:
    """Return why `block` can't be applied to a fresh style, or None."""
    try:
        factory().update(**block)
    except (TypeError, ValueError) as e:
        return str(e)
    return None


def validate_model_issues(
    model: dict[str, Any], cfg: Optional[ValidateConfig] = None
) -> list[ValidationIssue]:
    """Return structured validation issues.

    This is the canonical validator. `validate_model()` is a strings-only
    wrapper for the CLI.
    """

    cfg = cfg or ValidateConfig()
    issues: list[ValidationIssue] = []

    def emit(
        severity: Severity,
        code: str,
        message: str,
        path: str = "",
        hint: Optional[str] = None,
    ) -> None:
        if code in cfg.ignore:
            return
        final_severity: Severity = (
            "error" if (severity == "warning" and code in cfg.escalate) else severity
        )
        issues.append(
            ValidationIssue(
                severity=final_severity,
                code=code,
                message=message,
                path=path,
                hint=hint,
            )
        )

    def check_style(kind: str, block: Any, path: str, owner: str) -> None:
        if block is None:
            return
        if not isinstance(block, dict):
            emit(
                "error",
                "E_STYLE_NOT_MAPPING",
                f"{owner} style must be a mapping of field names to values",
                path=path,
            )
            return
        if not cfg.check_styles:
            return
        reason = style_error(STYLE_FACTORIES[kind], block)
        if reason is not None:
            emit(
                "error",
                "E_STYLE_INVALID",
                f"{owner} style is invalid: {reason}",
                path=path,
                hint="see the field names of the matching style class in graphml_gen.styles",
            )

    for key in model:
        if key not in MODEL_SECTIONS and key != "styles":
            emit(
                "warning",
                "W_MODEL_UNKNOWN_SECTION",
                f"model has unknown top-level key {key!r}; ignoring",
                path=f"/{key}",
            )

    # --- styles --- #

    styles = model.get("styles") or {}
    if not isinstance(styles, dict):
        emit("error", "E_STYLES_NOT_MAPPING", "model.styles must be a mapping", path="/styles")
        styles = {}

    for kind, block in styles.items():
        if kind not in STYLE_SECTIONS:
            emit(
                "warning",
                "W_STYLES_UNKNOWN_SECTION",
                f"model.styles has unknown section {kind!r}; ignoring",
                path=f"/styles/{kind}",
                hint=f"known sections: {', '.join(STYLE_SECTIONS)}",
            )
            continue
        check_style(kind, block, f"/styles/{kind}", f"default {kind}")

    # --- nodes --- #

    node_ids: dict[str, str] = {}

    def check_nodes(items: Any, path: str) -> None:
        if not isinstance(items, list):
            emit("error", "E_SECTION_NOT_LIST", f"{path} must be a list", path=path)
            return

        for j, item in enumerate(items):
            item_path = f"{path}/{j}"
            if not isinstance(item, dict):
                emit(
                    "warning",
                    "W_SECTION_ITEM_NOT_MAPPING",
                    "node list contains a non-mapping item; skipping",
                    path=item_path,
                )
                continue

            node_id = item.get("id")
            if not isinstance(node_id, str) or not node_id:
                emit(
                    "error",
                    "E_NODE_MISSING_ID",
                    "node item missing string `id`",
                    path=f"{item_path}/id",
                )
                continue

            if node_id in node_ids:
                emit(
                    "error",
                    "E_NODE_DUPLICATE_ID",
                    f"duplicate node id {node_id!r} (also at {node_ids[node_id]})",
                    path=f"{item_path}/id",
                )
            else:
                node_ids[node_id] = item_path

            label = item.get("label")
            if label is not None and not isinstance(label, str):
                emit(
                    "warning",
                    "W_NODE_LABEL_NOT_STRING",
                    f"node {node_id!r} has a non-string label; it is rendered with str()",
                    path=f"{item_path}/label",
                )

            children = item.get("children")
            is_group = bool(children)
            if children is not None:
                check_nodes(children, f"{item_path}/children")

            open_ = item.get("open")
            if open_ is not None:
                if not isinstance(open_, bool):
                    emit(
                        "error",
                        "E_NODE_OPEN_NOT_BOOL",
                        f"node {node_id!r} has a non-boolean `open`",
                        path=f"{item_path}/open",
                    )
                elif not is_group:
                    emit(
                        "warning",
                        "W_NODE_OPEN_WITHOUT_CHILDREN",
                        f"node {node_id!r} sets `open` but has no children; ignoring",
                        path=f"{item_path}/open",
                    )

            check_style(
                "group" if is_group else "node",
                item.get("style"),
                f"{item_path}/style",
                f"{'group' if is_group else 'node'} {node_id!r}",
            )

    check_nodes(model.get("nodes", []) or [], "/nodes")

    # --- edges --- #

    edges = model.get("edges", []) or []
    if not isinstance(edges, list):
        emit("error", "E_SECTION_NOT_LIST", "/edges must be a list", path="/edges")
        edges = []

    for k, edge in enumerate(edges):
        edge_path = f"/edges/{k}"
        if not isinstance(edge, dict):
            emit(
                "warning",
                "W_SECTION_ITEM_NOT_MAPPING",
                "edge list contains a non-mapping item; skipping",
                path=edge_path,
            )
            continue

        for end in ("from", "to"):
            ref = edge.get(end)
            if not isinstance(ref, str) or not ref:
                emit(
                    "error",
                    "E_EDGE_MISSING_ENDPOINT",
                    f"edge item missing string `{end}`",
                    path=f"{edge_path}/{end}",
                )
            elif ref not in node_ids:
                emit(
                    "error",
                    "E_EDGE_UNKNOWN_NODE",
                    f"edge.{end} references unknown node id {ref!r}",
                    path=f"{edge_path}/{end}",
                )

        check_style("edge", edge.get("style"), f"{edge_path}/style", f"edge #{k}")

    return issues


def validate_model(model: dict[str, Any]) -> Tuple[list[str], list[str]]:
    """Perform lightweight structural validation to keep the model renderable."""
    issues = validate_model_issues(model)
    errors = [iss.message for iss in issues if iss.severity == "error"]
    warnings = [iss.message for iss in issues if iss.severity == "warning"]
    return errors, warnings
