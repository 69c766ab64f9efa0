"""Code emission: turns artifacts and routes into C# source text.

The pipeline hands this module plain value tuples (``Declaration`` and
``RouteBinding``) which are rendered through the Jinja templates that ship
next to it.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from jinja2 import Environment, FileSystemLoader

from ..constants import CACHE_CONTROL_STATEMENT, ROUTE_PARAMETER_FORMAT, is_binary
from ..diagnostics import (
    FILE_PROCESSING_ERROR,
    ROUTE_GENERATION_ERROR,
    DiagnosticBag,
    DiagnosticSink,
)
from ..logging import get_logger
from ..models import FileArtifact, GlobalOptions, RouteDescriptor, RouteTable
from ..processing.transformer import file_extension
from ..routing import capitalize_first, safe_identifier

logger = get_logger("emit")

TEXT_MEMBER = "const string"
BYTES_MEMBER = "static readonly byte[]"

_TEMPLATES_DIR = Path(__file__).with_name("templates")


@dataclass(frozen=True)
class Declaration:
    """Everything needed to emit one embedded constant."""

    namespace: str
    visibility: str
    class_name: str
    scopes: Tuple[str, ...]
    member_name: str
    member_kind: str
    literal: str


@dataclass(frozen=True)
class RouteBinding:
    """Everything needed to emit one route handler."""

    route_name: str
    handler: str
    parameters: str
    cache_control_statement: str
    mime_expression: str
    class_name: str
    property_path: str
    binary: bool


@dataclass(frozen=True)
class EmittedSource:
    hint_name: str
    text: str


def member_path(relative_path: str) -> Tuple[Tuple[str, ...], str]:
    """Split a relative path into nested class scopes and the leaf member name."""
    parts = safe_identifier(relative_path, include_slashes=False).split("/")
    scopes = tuple(capitalize_first(part) for part in parts[:-1])
    return scopes, capitalize_first(parts[-1])


def declaration_for(artifact: FileArtifact, global_options: GlobalOptions) -> Declaration:
    scopes, member = member_path(artifact.relative_path)
    return Declaration(
        namespace=global_options.namespace,
        visibility=global_options.visibility,
        class_name=artifact.class_name,
        scopes=scopes,
        member_name=member,
        member_kind=BYTES_MEMBER if artifact.is_binary else TEXT_MEMBER,
        literal=artifact.content,
    )


def route_binding_for(route: RouteDescriptor) -> RouteBinding:
    scopes, member = member_path(route.relative_path)
    statement = (
        CACHE_CONTROL_STATEMENT.format(_escape_regular(route.cache_control))
        if route.cache_control
        else ""
    )
    return RouteBinding(
        route_name=route.route_name,
        handler=route.handler,
        parameters=ROUTE_PARAMETER_FORMAT if route.cache_control else "",
        cache_control_statement=statement,
        mime_expression=route.mime.expression,
        class_name=route.class_name,
        property_path=".".join(scopes + (member,)),
        binary=is_binary(file_extension(route.relative_path)),
    )


def render_declaration(declaration: Declaration) -> str:
    return _environment().get_template("declaration.cs.j2").render(declaration=declaration)


def render_route(binding: RouteBinding, namespace: str, visibility: str) -> str:
    template = _environment().get_template("route.cs.j2")
    return template.render(
        binding=binding,
        namespace=namespace,
        visibility=visibility,
        result_call="TypedResults.Bytes" if binding.binary else "TypedResults.Text",
    )


def render_route_table(table: RouteTable) -> str:
    return _environment().get_template("route_table.cs.j2").render(table=table)


@lru_cache(maxsize=1)
def _environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.globals["indent"] = _indent
    env.filters["csharp_string"] = _escape_regular
    return env


def emit_sources(
    artifacts: Sequence[FileArtifact],
    routes: Sequence[RouteDescriptor],
    route_table: Optional[RouteTable],
    global_options: GlobalOptions,
    diagnostics: DiagnosticSink | None = None,
) -> List[EmittedSource]:
    """Render every declaration and route; failures are reported per file.

    Two artifacts that map to the same declaration (same class and relative
    path) keep the first one and report the second.
    """
    bag = diagnostics if diagnostics is not None else DiagnosticBag()
    sources: List[EmittedSource] = []
    declared: Set[str] = set()

    for artifact in artifacts:
        try:
            safe = safe_identifier(artifact.relative_path, include_slashes=False)
            hint_name = f"{artifact.class_name}.{safe.replace('/', '_')}.g.cs"
            if hint_name in declared:
                bag.report(
                    FILE_PROCESSING_ERROR,
                    artifact.relative_path,
                    f"{hint_name} is already generated for another file",
                )
                continue
            declared.add(hint_name)
            sources.append(
                EmittedSource(
                    hint_name=hint_name,
                    text=render_declaration(declaration_for(artifact, global_options)),
                )
            )
        except Exception as exc:  # keep emitting the remaining files
            bag.report(FILE_PROCESSING_ERROR, artifact.relative_path, str(exc))

    for route in routes:
        try:
            safe = safe_identifier(route.relative_path, include_slashes=True)
            sources.append(
                EmittedSource(
                    hint_name=f"Routes.{route.class_name}.{safe}.g.cs",
                    text=render_route(
                        route_binding_for(route),
                        global_options.namespace,
                        global_options.visibility,
                    ),
                )
            )
        except Exception as exc:  # keep emitting the remaining routes
            bag.report(ROUTE_GENERATION_ERROR, route.relative_path, str(exc))

    if route_table is not None and len(route_table):
        sources.append(EmittedSource(hint_name="Routes.g.cs", text=render_route_table(route_table)))

    return sources


def write_sources(sources: Iterable[EmittedSource], out_dir: Path) -> Tuple[int, int]:
    """Write sources into ``out_dir``; unchanged files are left untouched.

    Returns ``(written, removed)``. Generated files from earlier runs that
    were not emitted this time are deleted.
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    written = 0
    expected = set()
    for source in sources:
        target = out_dir / source.hint_name
        expected.add(target.name)
        if target.exists() and target.read_text(encoding="utf-8") == source.text:
            continue
        target.write_text(source.text, encoding="utf-8")
        written += 1
        logger.debug("Wrote %s", target)

    removed = 0
    for stale in out_dir.glob("*.g.cs"):
        if stale.name not in expected:
            stale.unlink()
            removed += 1
            logger.debug("Removed stale %s", stale)
    return written, removed


def _indent(level: int) -> str:
    return "    " * level


def _escape_regular(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


__all__ = [
    "BYTES_MEMBER",
    "Declaration",
    "EmittedSource",
    "RouteBinding",
    "TEXT_MEMBER",
    "declaration_for",
    "emit_sources",
    "member_path",
    "render_declaration",
    "render_route",
    "render_route_table",
    "route_binding_for",
    "write_sources",
]
