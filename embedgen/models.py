"""Core data models shared across embedgen components."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, Optional, Tuple

from .constants import is_binary

if TYPE_CHECKING:
    from .sources import SourceFile


@dataclass(frozen=True)
class GlobalOptions:
    """Process-wide options resolved once per build."""

    namespace: str
    visibility: str
    routes: bool
    cache_control: Optional[str]
    minify: bool
    project_dir: Optional[str]


class MinifyOverride(enum.Enum):
    """Per-file minification override merged with the global flag."""

    INHERIT = "inherit"
    FORCE_ON = "on"
    FORCE_OFF = "off"

    def resolve(self, global_flag: bool) -> bool:
        if self is MinifyOverride.FORCE_ON:
            return True
        if self is MinifyOverride.FORCE_OFF:
            return False
        return global_flag


@dataclass(frozen=True)
class FileOptions:
    """Options attached to a single input file."""

    class_name: Optional[str]
    remove_route_extension: bool
    cache_control: Optional[str]
    minify: MinifyOverride
    file: "SourceFile"

    @property
    def included(self) -> bool:
        """Files without a class name do not take part in the build."""
        return self.class_name is not None


@dataclass(frozen=True)
class FileArtifact:
    """Embeddable form of one input file. Compared by value for cache reuse."""

    class_name: str
    relative_path: str
    extension: str
    content: str
    remove_route_extension: bool
    cache_control: Optional[str]
    should_minify: bool

    @property
    def is_binary(self) -> bool:
        return is_binary(self.extension)


@dataclass(frozen=True)
class MimeType:
    """Content type plus the expression generated handlers use for it."""

    content_type: str
    expression: str


@dataclass(frozen=True)
class RouteDescriptor:
    """HTTP GET route derived from a routing-enabled artifact."""

    route_name: str
    handler: str
    mime: MimeType
    cache_control: str
    priority: int
    depth: int
    class_name: str
    relative_path: str


@dataclass(frozen=True)
class RouteTable:
    """Ordered route registrations for one build."""

    namespace: str
    visibility: str
    routes: Tuple[RouteDescriptor, ...]

    @property
    def registrations(self) -> Tuple[str, ...]:
        return tuple(route.handler for route in self.routes)

    def __iter__(self) -> Iterator[RouteDescriptor]:
        return iter(self.routes)

    def __len__(self) -> int:
        return len(self.routes)
