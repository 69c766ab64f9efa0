"""Recursive ``{MAGIC_FILE path}`` inclusion."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Callable, Optional

from ..constants import INCLUDE_PATTERN, MAX_INCLUDE_DEPTH
from ..errors import FileProcessingError, TemplateDepthError
from ..logging import get_logger

_INCLUDE_RE = re.compile(INCLUDE_PATTERN)


class TemplateInliner:
    """Replaces inclusion directives with the contents of the referenced files.

    Paths are resolved against the directory of the file that contains the
    directive; absolute paths are used as-is. A directive whose target does
    not exist is left untouched. Included content is scanned again, relative
    to its own directory, until no directives remain or ``max_depth`` nested
    inclusions have been followed.
    """

    def __init__(self, *, max_depth: int = MAX_INCLUDE_DEPTH) -> None:
        self.max_depth = max_depth
        self.logger = get_logger("inliner")

    def inline(
        self,
        content: str,
        base_dir: Path,
        *,
        on_include: Optional[Callable[[Path], None]] = None,
        source: str = "",
    ) -> str:
        return self._inline(content, Path(base_dir), on_include, source or str(base_dir), 0)

    def _inline(
        self,
        content: str,
        base_dir: Path,
        on_include: Optional[Callable[[Path], None]],
        source: str,
        depth: int,
    ) -> str:
        if not content:
            return content

        def _replace(match: re.Match[str]) -> str:
            reference = match.group("file")
            candidate = Path(reference)
            target = candidate if candidate.is_absolute() else base_dir / candidate
            # Missing targets are reported too, so creating one later invalidates the cache.
            if on_include is not None:
                on_include(target)
            if not target.is_file():
                self.logger.debug("Include target %s not found; leaving directive", target)
                return match.group(0)
            if depth >= self.max_depth:
                raise TemplateDepthError(source, self.max_depth)
            try:
                included = target.read_text(encoding="utf-8-sig")
            except (OSError, UnicodeDecodeError) as exc:
                raise FileProcessingError(str(target), f"could not read included template: {exc}") from exc
            return self._inline(included, target.parent, on_include, source, depth + 1)

        return _INCLUDE_RE.sub(_replace, content)


__all__ = ["TemplateInliner"]
