"""Code-emission surface for generated C# sources."""

from .csharp import (
    Declaration,
    EmittedSource,
    RouteBinding,
    declaration_for,
    emit_sources,
    route_binding_for,
    write_sources,
)

__all__ = [
    "Declaration",
    "EmittedSource",
    "RouteBinding",
    "declaration_for",
    "emit_sources",
    "route_binding_for",
    "write_sources",
]
