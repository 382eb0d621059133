"""
Workspace scanning for the SCSS Language Server.

Indexes the stylesheets of a workspace into the symbol cache so that
declarations living in files that were never opened can still be found.
"""

import fnmatch
import logging
import os
from pathlib import Path
from typing import List, Optional

from feuille.cache import SymbolCache
from feuille.parser import parse_symbols
from feuille.settings import Settings
from feuille.utils import STYLESHEET_SUFFIX

logger = logging.getLogger("feuille")


def _exclude_names(patterns: List[str]) -> List[str]:
    """Reduce `**/name` style patterns to the directory names they match."""
    names = []
    for pattern in patterns:
        name = pattern.replace("\\", "/").rstrip("/").split("/")[-1]
        if name and name != "**":
            names.append(name)
    return names


def _is_excluded(name: str, excluded: List[str]) -> bool:
    return any(fnmatch.fnmatch(name, pattern) for pattern in excluded)


def find_stylesheets(root: str, settings: Optional[Settings] = None) -> List[str]:
    """
    Find the stylesheets below a workspace root.

    Args:
        root: The workspace root directory.
        settings: Client settings (depth, excluded directories and limit).

    Returns:
        Absolute paths of the stylesheets, sorted, at most `scanner_limit`.
    """
    settings = settings or Settings()
    excluded = _exclude_names(settings.scanner_exclude)
    root_path = Path(root).resolve()
    found: List[str] = []

    for dirpath, dirnames, filenames in os.walk(root_path):
        depth = len(Path(dirpath).relative_to(root_path).parts)
        if depth >= settings.scanner_depth:
            dirnames[:] = []
        else:
            dirnames[:] = sorted(d for d in dirnames if not _is_excluded(d, excluded))

        for filename in sorted(filenames):
            if not filename.endswith(STYLESHEET_SUFFIX):
                continue
            if _is_excluded(filename, excluded):
                continue
            found.append(str(Path(dirpath) / filename))
            if len(found) >= settings.scanner_limit:
                logger.warning(
                    "Stopped scanning %s after %d stylesheets", root, len(found)
                )
                return found
    return found


def scan_file(
    path: str,
    cache: SymbolCache,
    root: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> bool:
    """
    Index a single stylesheet into the cache.

    Returns:
        True if the file was read and indexed, False otherwise.
    """
    settings = settings or Settings()
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        level = logging.WARNING if settings.show_errors else logging.DEBUG
        logger.log(level, "Could not read %s: %s", path, e)
        return False
    cache.set(path, parse_symbols(text, path, root, settings))
    logger.debug("Indexed stylesheet: %s", path)
    return True


def scan_workspace(
    root: str, cache: SymbolCache, settings: Optional[Settings] = None
) -> int:
    """
    Index every stylesheet of a workspace, following imports if enabled.

    Returns:
        The number of indexed stylesheets.
    """
    settings = settings or Settings()
    pending = find_stylesheets(root, settings)
    seen = set()
    indexed = 0

    while pending and indexed < settings.scanner_limit:
        path = pending.pop(0)
        if path in seen:
            continue
        seen.add(path)
        if not scan_file(path, cache, root, settings):
            continue
        indexed += 1
        if settings.scan_imported_files:
            symbols = cache.get(path)
            pending.extend(p for p in symbols.imports if p not in seen)

    logger.info("Indexed %d stylesheets in %s", indexed, root)
    return indexed
