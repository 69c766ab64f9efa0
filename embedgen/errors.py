"""Exception hierarchy shared by the pipeline stages."""

from __future__ import annotations


class EmbedgenError(RuntimeError):
    """Base for all embedgen-specific errors."""


class ConfigError(EmbedgenError):
    """Raised when the project configuration file cannot be parsed."""


class FileProcessingError(EmbedgenError):
    """Raised when an input file (or one of its templates) cannot be turned into an artifact."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class TemplateDepthError(FileProcessingError):
    """Raised when template inclusion nests deeper than the configured limit."""

    def __init__(self, path: str, max_depth: int) -> None:
        super().__init__(
            path,
            f"template inclusion exceeded maximum depth of {max_depth} (possible include cycle)",
        )
        self.max_depth = max_depth


class RouteGenerationError(EmbedgenError):
    """Raised when a route cannot be derived from an artifact."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


__all__ = [
    "ConfigError",
    "EmbedgenError",
    "FileProcessingError",
    "RouteGenerationError",
    "TemplateDepthError",
]
