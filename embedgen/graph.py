"""Incremental build graph: options -> artifacts -> routes -> route table."""

from __future__ import annotations

import hashlib
import json
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from functools import partial
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Set, Tuple

from .config import resolve_file, resolve_global
from .diagnostics import (
    FILE_PROCESSING_ERROR,
    ROUTE_GENERATION_ERROR,
    Diagnostic,
    DiagnosticBag,
    DiagnosticSink,
)
from .errors import FileProcessingError, RouteGenerationError
from .logging import get_logger
from .models import FileArtifact, FileOptions, GlobalOptions, RouteDescriptor, RouteTable
from .processing import ContentTransformer
from .routing import RouteModel
from .sources import BuildConfig, SourceFile, fingerprint_bytes, fingerprint_path
from .stores import ArtifactStore, MemoCache

GLOBAL_OPTIONS = "global_options"
FILE_OPTIONS = "file_options"
ARTIFACT = "artifact"
ROUTE = "route"
ROUTE_TABLE = "route_table"

Dependencies = Tuple[Tuple[str, str], ...]


@dataclass(frozen=True)
class ArtifactKey:
    """Everything an artifact is derived from, compared by value."""

    path: str
    digest: str
    class_name: str
    remove_route_extension: bool
    cache_control: Optional[str]
    minify: str
    global_options: GlobalOptions

    def fingerprint(self) -> str:
        payload = asdict(self)
        encoded = json.dumps(payload, sort_keys=True).encode("utf-8")
        return hashlib.sha256(encoded).hexdigest()


@dataclass(frozen=True)
class ArtifactEntry:
    artifact: FileArtifact
    dependencies: Dependencies


@dataclass
class BuildResult:
    """Outputs of one pass through the graph."""

    global_options: GlobalOptions
    artifacts: Tuple[FileArtifact, ...]
    routes: Tuple[RouteDescriptor, ...]
    route_table: Optional[RouteTable]
    diagnostics: List[Diagnostic] = field(default_factory=list)
    stats: Dict[str, Dict[str, int]] = field(default_factory=dict)

    def computed(self, node: str) -> int:
        return self.stats.get(node, {}).get("computed", 0)

    def reused(self, node: str) -> int:
        return self.stats.get(node, {}).get("reused", 0)


class IncrementalGraph:
    """Runs the pipeline, recomputing only derivations whose inputs changed.

    Keep one instance alive across builds to benefit from the in-memory
    cache; pass an ``ArtifactStore`` to carry artifacts across processes.
    """

    def __init__(
        self,
        *,
        transformer: ContentTransformer | None = None,
        route_model: RouteModel | None = None,
        cache: MemoCache | None = None,
        store: ArtifactStore | None = None,
        max_workers: int | None = None,
    ) -> None:
        self.transformer = transformer or ContentTransformer()
        self.route_model = route_model or RouteModel()
        self.cache = cache or MemoCache()
        self.store = store
        self.max_workers = max_workers
        self.logger = get_logger("graph")

    def run(
        self,
        files: Sequence[SourceFile],
        config: BuildConfig,
        diagnostics: DiagnosticSink | None = None,
    ) -> BuildResult:
        bag = DiagnosticBag(forward_to=diagnostics)
        self.cache.begin_build()
        self.logger.debug("Starting build with %d input files", len(files))

        global_options = self.cache.get_or_compute(
            GLOBAL_OPTIONS,
            "",
            _freeze(config.global_properties),
            partial(resolve_global, dict(config.global_properties)),
        )

        options: List[FileOptions] = []
        for source in files:
            metadata = config.for_file(source.path)
            file_options = self.cache.get_or_compute(
                FILE_OPTIONS,
                source.path,
                (source, _freeze(metadata)),
                partial(resolve_file, dict(metadata), source),
            )
            if file_options.included:
                options.append(file_options)

        built = self._build_artifacts(options, global_options, bag)
        artifacts = tuple(artifact for _, artifact in built)

        routes: Tuple[RouteDescriptor, ...] = ()
        route_table: Optional[RouteTable] = None
        if global_options.routes:
            routes = self._build_routes(built, global_options, bag)
            if routes:
                route_table = self.cache.get_or_compute(
                    ROUTE_TABLE,
                    "",
                    (routes, global_options),
                    partial(self.route_model.build_table, routes, global_options),
                )

        pruned = self.cache.prune_untouched()
        if pruned:
            self.logger.debug("Pruned %d stale cache entries", pruned)
        if self.store is not None:
            self.store.prune(option.file.path for option in options)
            self.store.persist()

        stats = self.cache.stats()
        self.logger.info(
            "Built %d artifacts (%d recomputed), %d routes",
            len(artifacts),
            stats.get(ARTIFACT, {}).get("computed", 0),
            len(routes),
        )
        return BuildResult(
            global_options=global_options,
            artifacts=artifacts,
            routes=routes,
            route_table=route_table,
            diagnostics=bag.items,
            stats=stats,
        )

    # ------------------------------------------------------------------
    # Artifacts

    def _build_artifacts(
        self,
        options: Sequence[FileOptions],
        global_options: GlobalOptions,
        bag: DiagnosticSink,
    ) -> Tuple[Tuple[str, FileArtifact], ...]:
        if not options:
            return ()
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(self._artifact_or_report, file_options, global_options, bag)
                for file_options in options
            ]
            # Collect in input order; this is the barrier before route aggregation.
            results = [future.result() for future in futures]
        return tuple(
            (file_options.file.path, artifact)
            for file_options, artifact in zip(options, results)
            if artifact is not None
        )

    def _artifact_or_report(
        self,
        file_options: FileOptions,
        global_options: GlobalOptions,
        bag: DiagnosticSink,
    ) -> Optional[FileArtifact]:
        path = file_options.file.path
        try:
            return self._artifact(file_options, global_options)
        except FileProcessingError as exc:
            bag.report(FILE_PROCESSING_ERROR, path, exc.reason)
        except Exception as exc:  # one bad file never fails the build
            self.logger.debug("Unexpected error processing %s", path, exc_info=True)
            bag.report(FILE_PROCESSING_ERROR, path, str(exc) or exc.__class__.__name__)
        return None

    def _artifact(self, file_options: FileOptions, global_options: GlobalOptions) -> FileArtifact:
        source = file_options.file
        try:
            data = source.read_bytes()
        except OSError as exc:
            raise FileProcessingError(source.path, exc.strerror or str(exc)) from exc

        key = ArtifactKey(
            path=source.path,
            digest=fingerprint_bytes(data),
            class_name=file_options.class_name or "",
            remove_route_extension=file_options.remove_route_extension,
            cache_control=file_options.cache_control,
            minify=file_options.minify.value,
            global_options=global_options,
        )
        entry = self.cache.get_or_compute(
            ARTIFACT,
            source.path,
            key,
            partial(self._compute_artifact, file_options, global_options, key),
            is_valid=_dependencies_current,
        )
        return entry.artifact

    def _compute_artifact(
        self,
        file_options: FileOptions,
        global_options: GlobalOptions,
        key: ArtifactKey,
    ) -> ArtifactEntry:
        fingerprint = key.fingerprint()
        if self.store is not None:
            stored = self.store.get(key.path, fingerprint=fingerprint)
            if stored is not None and _dependencies_current(stored):
                self.cache.record(ARTIFACT, "restored")
                self.logger.debug("Restored artifact for %s from store", key.path)
                return ArtifactEntry(artifact=stored.artifact, dependencies=stored.dependencies)

        includes: Set[Path] = set()
        artifact = self.transformer.transform(
            file_options, global_options, on_include=includes.add
        )
        dependencies = tuple(
            sorted((str(path), fingerprint_path(path)) for path in includes)
        )
        if self.store is not None:
            self.store.store(
                key.path,
                fingerprint=fingerprint,
                artifact=artifact,
                dependencies=dependencies,
            )
        return ArtifactEntry(artifact=artifact, dependencies=dependencies)

    # ------------------------------------------------------------------
    # Routes

    def _build_routes(
        self,
        built: Sequence[Tuple[str, FileArtifact]],
        global_options: GlobalOptions,
        bag: DiagnosticSink,
    ) -> Tuple[RouteDescriptor, ...]:
        routes: List[RouteDescriptor] = []
        owners: Dict[str, str] = {}
        for path, artifact in built:
            try:
                descriptor = self.cache.get_or_compute(
                    ROUTE,
                    path,
                    (artifact, global_options),
                    partial(self.route_model.describe, artifact, global_options),
                )
            except RouteGenerationError as exc:
                bag.report(ROUTE_GENERATION_ERROR, path, exc.reason)
                continue
            except Exception as exc:  # one bad route never fails the build
                self.logger.debug("Route generation failed for %s", path, exc_info=True)
                bag.report(ROUTE_GENERATION_ERROR, path, str(exc) or exc.__class__.__name__)
                continue
            owner = owners.get(descriptor.handler)
            if owner is not None:
                bag.report(
                    ROUTE_GENERATION_ERROR,
                    path,
                    f"handler {descriptor.handler} is already generated for '{owner}'",
                )
                continue
            owners[descriptor.handler] = path
            routes.append(descriptor)
        return tuple(routes)



def _freeze(values: Mapping[str, str]) -> Tuple[Tuple[str, str], ...]:
    return tuple(sorted((str(key), str(value)) for key, value in values.items()))


def _dependencies_current(entry: object) -> bool:
    dependencies = getattr(entry, "dependencies", ())
    return all(fingerprint_path(Path(path)) == digest for path, digest in dependencies)


__all__ = ["ArtifactEntry", "ArtifactKey", "BuildResult", "IncrementalGraph"]
