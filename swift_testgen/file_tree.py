from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from .errors import DiscoveryError
from .models import SourceFile

logger = logging.getLogger(__name__)

IGNORED_DIRS = (".build", ".git", ".swiftpm", "DerivedData", "Pods", "Carthage")


def _walk_swift_files(
    root: Path,
    extension: str,
    ignore_dirs: Iterable[str],
) -> list[Path]:
    if not root.is_dir():
        raise DiscoveryError(f"Source directory does not exist: {root}")

    ignored = set(ignore_dirs)
    found: list[Path] = []

    def _on_error(exc: OSError) -> None:
        logger.warning("Skipping unreadable directory %s: %s", exc.filename, exc.strerror)

    for dir_path, dir_names, file_names in os.walk(root, onerror=_on_error):
        dir_names[:] = [d for d in dir_names if d not in ignored]
        for name in file_names:
            if name.endswith(extension):
                found.append(Path(dir_path) / name)
    return found


def collect_swift_files(
    source_root: Path,
    extension: str = ".swift",
    ignore_dirs: Iterable[str] = IGNORED_DIRS,
) -> list[SourceFile]:
    """
    Recursively find source files below ``source_root``, sorted by relative path.

    A missing or unreadable root yields an empty list; discovery never aborts a run.
    """
    source_root = source_root.resolve()
    try:
        paths = _walk_swift_files(source_root, extension, ignore_dirs)
    except DiscoveryError as exc:
        logger.warning("%s", exc)
        return []

    files = [SourceFile(path=p, rel_path=p.relative_to(source_root)) for p in paths]
    files.sort(key=lambda f: f.rel_path.as_posix())
    return files
