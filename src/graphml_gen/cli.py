# src/graphml_gen/cli.py
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .io import load_model
from .model_view import build_graph
from .validate import validate_model
from .writer import write_graphml


def _default_out(model_path: Path) -> Path:
    """`model.yaml` -> `model.graphml`; a model directory -> `<dir>/<dir name>.graphml`."""
    if model_path.is_dir():
        return model_path / f"{model_path.name}.graphml"
    return model_path.with_suffix(".graphml")


def main(argv: Optional[Sequence[str]] = None) -> None:
    """CLI entrypoint."""
    parser = argparse.ArgumentParser(
        description="Generate a yEd GraphML document from a YAML graph model."
    )
    parser.add_argument(
        "--model",
        type=Path,
        required=True,
        help="Path to a YAML graph model, or a directory of YAML parts merged by name.",
    )
    parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Output .graphml file (default: next to the model).",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help=(
            "Fail generation on validation warnings (e.g., unknown sections, "
            "non-mapping items). Errors always fail."
        ),
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log the writer's progress to stderr.",
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    model = load_model(args.model)

    errors, warnings = validate_model(model)
    for warning in warnings:
        print(f"warning: {warning}", file=sys.stderr)

    if errors or (args.strict and warnings):
        for error in errors:
            print(f"error: {error}", file=sys.stderr)
        raise SystemExit(2)

    out: Path = args.out if args.out is not None else _default_out(args.model)
    graph, renderer = build_graph(model)
    write_graphml(out, graph, renderer)


if __name__ == "__main__":
    main()
