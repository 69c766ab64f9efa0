"""Turns one input file into its embeddable artifact."""

from __future__ import annotations

import os
import time
from pathlib import Path, PurePath
from typing import Callable, List, Optional

from ..constants import (
    ENCODING_CHARS,
    HASH_TOKEN,
    TIME_TOKEN,
    is_binary,
    is_minifiable,
    is_text_processable,
)
from ..errors import FileProcessingError
from ..models import FileArtifact, FileOptions, GlobalOptions, MinifyOverride
from .inliner import TemplateInliner
from .minify import minify


def generate_identifier(seconds: int) -> str:
    """Encode a Unix timestamp in base 16 over ``ENCODING_CHARS``, most significant digit first."""
    base = len(ENCODING_CHARS)
    digits: List[str] = []
    while seconds > 0:
        seconds, remainder = divmod(seconds, base)
        digits.append(ENCODING_CHARS[remainder])
    return "".join(reversed(digits))


def escape_string_literal(content: str) -> str:
    """Return ``content`` as a C# verbatim string literal."""
    return '@"' + content.replace('"', '""') + '"'


def encode_bytes(data: bytes) -> str:
    """Return ``data`` as a C# byte-array initializer."""
    return "new byte[] { " + ", ".join(str(value) for value in data) + " }"


def file_extension(path: str) -> str:
    return PurePath(path.replace("\\", "/")).suffix.lower()


def relative_filename(path: str, project_dir: Optional[str]) -> str:
    """Path of ``path`` below ``project_dir`` with forward slashes, else its bare name."""
    normalized = path.replace("\\", "/")
    if project_dir:
        root = project_dir.replace("\\", "/").rstrip("/") + "/"
        if normalized.startswith(root):
            return normalized[len(root) :]
    return normalized.rsplit("/", 1)[-1]


class ContentTransformer:
    """Reads, rewrites, minifies and escapes input files."""

    def __init__(
        self,
        *,
        inliner: TemplateInliner | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.inliner = inliner or TemplateInliner()
        self._clock = clock

    def transform(
        self,
        file_options: FileOptions,
        global_options: GlobalOptions,
        *,
        on_include: Optional[Callable[[Path], None]] = None,
    ) -> FileArtifact:
        if file_options.class_name is None:
            raise ValueError("file options without a class name cannot be transformed")

        path = file_options.file.path
        extension = file_extension(path)
        minifiable = is_minifiable(extension)
        should_minify = file_options.minify.resolve(global_options.minify) and minifiable
        # A per-file "off" only clears the flag; global minify still applies to content.
        minify_content = minifiable and (
            file_options.minify is MinifyOverride.FORCE_ON or global_options.minify
        )

        if is_binary(extension):
            content = encode_bytes(self._read_bytes(file_options))
        else:
            text = self._read_text(file_options)
            if is_text_processable(extension):
                text = self._substitute_tokens(text)
                text = self.inliner.inline(
                    text,
                    Path(path).parent,
                    on_include=on_include,
                    source=path,
                )
            if minify_content:
                text = minify(text, extension)
            content = escape_string_literal(text)

        return FileArtifact(
            class_name=file_options.class_name,
            relative_path=relative_filename(path, global_options.project_dir),
            extension=extension,
            content=content,
            remove_route_extension=file_options.remove_route_extension,
            cache_control=file_options.cache_control,
            should_minify=should_minify,
        )

    def _substitute_tokens(self, text: str) -> str:
        seconds = int(self._clock())
        if TIME_TOKEN in text:
            text = text.replace(TIME_TOKEN, str(seconds))
        if HASH_TOKEN in text:
            text = text.replace(HASH_TOKEN, generate_identifier(seconds))
        return text

    @staticmethod
    def _read_bytes(file_options: FileOptions) -> bytes:
        try:
            return file_options.file.read_bytes()
        except OSError as exc:
            raise FileProcessingError(file_options.file.path, _describe(exc)) from exc

    @staticmethod
    def _read_text(file_options: FileOptions) -> str:
        try:
            return file_options.file.read_text()
        except (OSError, UnicodeDecodeError) as exc:
            raise FileProcessingError(file_options.file.path, _describe(exc)) from exc


def _describe(exc: BaseException) -> str:
    if isinstance(exc, OSError) and exc.strerror:
        name = os.path.basename(exc.filename) if exc.filename else ""
        return f"{exc.strerror}: {name}" if name else exc.strerror
    return str(exc)


__all__ = [
    "ContentTransformer",
    "encode_bytes",
    "escape_string_literal",
    "file_extension",
    "generate_identifier",
    "relative_filename",
]
