"""Route derivation: names, MIME types, and route-table ordering."""

from __future__ import annotations

from typing import Iterable, Optional

from .constants import (
    DEFAULT_MIME_TYPE,
    DEFAULT_PRIORITY,
    EXTENSION_PRIORITIES,
    INDEX_FILES,
    INDEX_SUFFIXES,
    MIME_TYPES,
)
from .errors import RouteGenerationError
from .models import FileArtifact, GlobalOptions, MimeType, RouteDescriptor, RouteTable

_UNSAFE_CHARS = (".", "-", "{", "}", " ")


def safe_identifier(value: Optional[str], *, include_slashes: bool) -> str:
    """Replace characters that cannot appear in an identifier with underscores."""
    if not value:
        return ""
    result = value
    for char in _UNSAFE_CHARS:
        result = result.replace(char, "_")
    if include_slashes:
        result = result.replace("/", "_").replace("\\", "_")
    return result


def capitalize_first(value: str) -> str:
    if not value:
        return ""
    return value[0].upper() + value[1:]


def handler_name(relative_path: str) -> str:
    return "Map" + capitalize_first(safe_identifier(relative_path, include_slashes=True))


class RouteModel:
    """Derives route descriptors from artifacts and orders them into a table."""

    @staticmethod
    def name_from_path(relative_path: str, extension: str, remove_extension: bool) -> str:
        route_name = relative_path.replace("\\", "/")
        if route_name in INDEX_FILES:
            return ""
        for suffix in INDEX_SUFFIXES:
            if route_name.endswith(suffix):
                return route_name[: -len(suffix)]
        if remove_extension and extension and route_name.lower().endswith(extension.lower()):
            return route_name[: -len(extension)]
        return route_name

    @staticmethod
    def mime(extension: str) -> MimeType:
        content_type, expression = MIME_TYPES.get(extension.lower(), DEFAULT_MIME_TYPE)
        return MimeType(content_type=content_type, expression=expression)

    @staticmethod
    def priority(extension: str) -> int:
        return EXTENSION_PRIORITIES.get(extension.lower(), DEFAULT_PRIORITY)

    def describe(self, artifact: FileArtifact, global_options: GlobalOptions) -> RouteDescriptor:
        relative_path = artifact.relative_path.replace("\\", "/")
        handler = handler_name(relative_path)
        if not relative_path or not handler.isidentifier():
            raise RouteGenerationError(
                relative_path, f"cannot derive a handler name from '{relative_path}'"
            )
        cache_control = artifact.cache_control or global_options.cache_control or ""
        return RouteDescriptor(
            route_name=self.name_from_path(
                relative_path, artifact.extension, artifact.remove_route_extension
            ),
            handler=handler,
            mime=self.mime(artifact.extension),
            cache_control=cache_control,
            priority=self.priority(artifact.extension),
            depth=relative_path.count("/"),
            class_name=artifact.class_name,
            relative_path=relative_path,
        )

    @staticmethod
    def build_table(
        descriptors: Iterable[RouteDescriptor], global_options: GlobalOptions
    ) -> RouteTable:
        # sorted() is stable, so equal (priority, depth) keep their collection order.
        ordered = sorted(descriptors, key=lambda route: (route.priority, route.depth))
        return RouteTable(
            namespace=global_options.namespace,
            visibility=global_options.visibility,
            routes=tuple(ordered),
        )


__all__ = ["RouteModel", "capitalize_first", "handler_name", "safe_identifier"]
