#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
entitygen command line.

Generate Spring Boot entity/DTO/repository/service/controller sources from a
JSON schema, or reverse an existing Java model into a schema first.

  entitygen --root . generate product.json
  entitygen --root . from-model src/main/java/com/acme/Product.java
  entitygen preview product.json --artifact controller
"""
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .config import load_config
from .errors import AnalysisError, GenerationError, SchemaError
from .hub import EntityGenHub
from .model import ArtifactKind, GenerationResult, Schema, schema_from_dict, schema_to_dict
from .store import read_text

logger = logging.getLogger("entitygen")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_BAD_INPUT = 2


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_time=False, show_path=False)],
        force=True,
    )


def _read_file(raw: str) -> str:
    path = Path(raw).expanduser()
    try:
        return read_text(path)
    except OSError as e:
        raise SchemaError(f"Cannot read {path}: {e}") from e


def load_schemas(raw: str) -> List[Schema]:
    """One schema or a list of them from a JSON file."""
    try:
        data = json.loads(_read_file(raw))
    except ValueError as e:
        raise SchemaError(f"{raw} is not valid JSON: {e}") from e
    if isinstance(data, list):
        return [schema_from_dict(item) for item in data]
    return [schema_from_dict(data)]


def load_one_schema(raw: str) -> Schema:
    schemas = load_schemas(raw)
    if len(schemas) != 1:
        raise SchemaError(f"{raw} must hold exactly one schema object")
    return schemas[0]


def show_results(console: Console, results: Sequence[GenerationResult], title: str) -> None:
    t = Table(title=title)
    t.add_column("#", justify="right")
    t.add_column("Entity")
    t.add_column("Status")
    t.add_column("Written", justify="right")
    t.add_column("Message")
    for i, r in enumerate(results, start=1):
        status = "[green]ok[/green]" if r.success else f"[red]{r.error_kind or 'failed'}[/red]"
        written = sum(1 for a in r.artifacts if a.written)
        t.add_row(str(i), escape(r.entity_name or "-"), status, str(written), escape(r.message))
    console.print(t)


def run_generate(args: argparse.Namespace, hub: EntityGenHub, console: Console) -> int:
    schemas = load_schemas(args.schema)
    if len(schemas) == 1 and args.command == "generate":
        result = hub.generate(schemas[0], overwrite=args.overwrite)
        show_results(console, [result], "Generation")
        return EXIT_OK if result.success else EXIT_FAILED

    batch = hub.generate_batch(schemas, overwrite=args.overwrite)
    show_results(console, batch.results, "Batch generation")
    console.print(
        f"processed={batch.total_processed} success={batch.success_count} errors={batch.error_count}"
    )
    return EXIT_OK if batch.error_count == 0 else EXIT_FAILED


def run_from_model(args: argparse.Namespace, hub: EntityGenHub, console: Console) -> int:
    result = hub.generate_from_source(_read_file(args.model), overwrite=args.overwrite)
    show_results(console, [result], "Generation from model")
    return EXIT_OK if result.success else EXIT_FAILED


def run_analyze(args: argparse.Namespace, hub: EntityGenHub, console: Console) -> int:
    text = _read_file(args.model)
    try:
        schema = hub.analyze(text)
    except AnalysisError as e:
        console.print(f"[red]Analysis failed:[/red] {escape(str(e))}")
        return EXIT_FAILED
    console.out(json.dumps(schema_to_dict(schema), indent=2), highlight=False)
    return EXIT_OK


def run_validate(args: argparse.Namespace, hub: EntityGenHub, console: Console) -> int:
    result = hub.validate(load_one_schema(args.schema))
    for e in result.errors:
        console.print(f"[red]error[/red]   {escape(e)}", highlight=False)
    for w in result.warnings:
        console.print(f"[yellow]warning[/yellow] {escape(w)}", highlight=False)
    console.print("valid" if result.valid else "invalid")
    return EXIT_OK if result.valid else EXIT_FAILED


def run_preview(args: argparse.Namespace, hub: EntityGenHub, console: Console) -> int:
    schema = load_one_schema(args.schema)
    try:
        sources = hub.preview(schema)
    except GenerationError as e:
        console.print(f"[red]Generation failed:[/red] {escape(str(e))}")
        return EXIT_FAILED
    wanted = ArtifactKind(args.artifact).file_name(schema.canonical_name) if args.artifact else None
    for file_name, source in sources.items():
        if wanted and file_name != wanted:
            continue
        console.out(f"// ---- {file_name} ----", highlight=False)
        console.out(source, highlight=False)
    return EXIT_OK


def run_delete(args: argparse.Namespace, hub: EntityGenHub, console: Console) -> int:
    result = hub.delete(args.name, package=args.package)
    console.print(escape(result.message))
    return EXIT_OK if result.success else EXIT_FAILED


def run_list(args: argparse.Namespace, hub: EntityGenHub, console: Console) -> int:
    package = args.package or hub.config.default_package
    names = hub.list_generated(package)
    t = Table(title=f"Generated entities ({package})")
    t.add_column("#", justify="right")
    t.add_column("Entity")
    for i, name in enumerate(names, start=1):
        t.add_row(str(i), escape(name))
    console.print(t)
    return EXIT_OK


def run_catalog(args: argparse.Namespace, hub: EntityGenHub, console: Console) -> int:
    for title, items in (
        ("Supported types", hub.supported_types()),
        ("Validation rules", hub.supported_validation_rules()),
        ("Relationship types", hub.relationship_types()),
    ):
        t = Table(title=title)
        t.add_column("Name")
        for item in items:
            t.add_row(item)
        console.print(t)
    return EXIT_OK


COMMANDS = {
    "generate": run_generate,
    "batch": run_generate,
    "from-model": run_from_model,
    "analyze": run_analyze,
    "validate": run_validate,
    "preview": run_preview,
    "delete": run_delete,
    "list": run_list,
    "catalog": run_catalog,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="entitygen", description="Spring Boot entity generator")
    parser.add_argument("--root", default=".", help="Project root (sources go under src/main/java)")
    parser.add_argument("--package", help="Package for schemas without one (default from config)")
    parser.add_argument("--api-prefix", help="Controller path prefix (default /api)")
    parser.add_argument("--no-verify", action="store_true", help="Skip javalang syntax check of output")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate artifacts from a JSON schema (object or list)")
    gen.add_argument("schema")
    gen.add_argument("--overwrite", action="store_true")

    batch = sub.add_parser("batch", help="Generate a list of schemas")
    batch.add_argument("schema")
    batch.add_argument("--overwrite", action="store_true")

    fm = sub.add_parser("from-model", help="Analyze a Java model, then generate")
    fm.add_argument("model")
    fm.add_argument("--overwrite", action="store_true")

    an = sub.add_parser("analyze", help="Print the schema recovered from a Java model")
    an.add_argument("model")

    val = sub.add_parser("validate", help="Validate a JSON schema")
    val.add_argument("schema")

    pre = sub.add_parser("preview", help="Print generated sources without writing")
    pre.add_argument("schema")
    pre.add_argument("--artifact", choices=[k.value for k in ArtifactKind])

    de = sub.add_parser("delete", help="Remove the five generated files of an entity")
    de.add_argument("name")

    sub.add_parser("list", help="List generated entities")
    sub.add_parser("catalog", help="Show supported types, rules and relationships")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    console = Console()

    root = Path(args.root).expanduser().resolve()
    overrides: Dict[str, Any] = {
        "default_package": args.package,
        "api_prefix": args.api_prefix,
        "verify_syntax": False if args.no_verify else None,
    }
    hub = EntityGenHub(load_config(root, **overrides))
    logger.debug("Config: %s", hub.config)

    try:
        return COMMANDS[args.command](args, hub, console)
    except SchemaError as e:
        console.print(f"[red]Bad input:[/red] {escape(str(e))}", highlight=False)
        return EXIT_BAD_INPUT


if __name__ == "__main__":
    raise SystemExit(main())
