"""Build-time compiler that embeds static assets as code constants and routes."""

from .config import resolve_file, resolve_global
from .graph import BuildResult, IncrementalGraph
from .models import (
    FileArtifact,
    FileOptions,
    GlobalOptions,
    MimeType,
    MinifyOverride,
    RouteDescriptor,
    RouteTable,
)
from .processing import ContentTransformer, TemplateInliner
from .routing import RouteModel
from .sources import BuildConfig, InMemoryFile, LocalFile

__version__ = "0.1.0"

__all__ = [
    "BuildConfig",
    "BuildResult",
    "ContentTransformer",
    "FileArtifact",
    "FileOptions",
    "GlobalOptions",
    "IncrementalGraph",
    "InMemoryFile",
    "LocalFile",
    "MimeType",
    "MinifyOverride",
    "RouteDescriptor",
    "RouteModel",
    "RouteTable",
    "TemplateInliner",
    "resolve_file",
    "resolve_global",
]
