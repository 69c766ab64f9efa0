"""Diagnostic descriptors and the collecting sink used during a build."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import List, Optional, Protocol

from .logging import get_logger


@dataclass(frozen=True)
class DiagnosticDescriptor:
    """Static description of a warning the pipeline can report."""

    code: str
    title: str
    message_format: str
    severity: str = "warning"


FILE_PROCESSING_ERROR = DiagnosticDescriptor(
    code="EMB001",
    title="Error processing file",
    message_format="Error processing file '{0}': {1}",
)

ROUTE_GENERATION_ERROR = DiagnosticDescriptor(
    code="EMB002",
    title="Error generating route",
    message_format="Error generating route for file '{0}': {1}",
)


@dataclass(frozen=True)
class Diagnostic:
    """One reported problem, tied to the file it concerns."""

    descriptor: DiagnosticDescriptor
    path: str
    details: str

    @property
    def code(self) -> str:
        return self.descriptor.code

    @property
    def message(self) -> str:
        return self.descriptor.message_format.format(self.path, self.details)

    def __str__(self) -> str:
        return f"{self.descriptor.severity} {self.code}: {self.message}"


class DiagnosticSink(Protocol):
    """Anything that accepts diagnostics from the pipeline."""

    def report(self, descriptor: DiagnosticDescriptor, path: str, details: str) -> None:
        ...


class DiagnosticBag:
    """Thread-safe sink that records diagnostics.

    Reports are passed on to ``forward_to`` when one is given; otherwise
    they are logged as warnings.
    """

    def __init__(self, forward_to: Optional[DiagnosticSink] = None) -> None:
        self._items: List[Diagnostic] = []
        self._lock = threading.Lock()
        self._forward_to = forward_to
        self.logger = get_logger("diagnostics")

    def report(self, descriptor: DiagnosticDescriptor, path: str, details: str) -> None:
        diagnostic = Diagnostic(descriptor=descriptor, path=path, details=details)
        with self._lock:
            self._items.append(diagnostic)
        if self._forward_to is not None:
            self._forward_to.report(descriptor, path, details)
        else:
            self.logger.warning("%s: %s", diagnostic.code, diagnostic.message)

    @property
    def items(self) -> List[Diagnostic]:
        with self._lock:
            return list(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


__all__ = [
    "Diagnostic",
    "DiagnosticBag",
    "DiagnosticDescriptor",
    "DiagnosticSink",
    "FILE_PROCESSING_ERROR",
    "ROUTE_GENERATION_ERROR",
]
