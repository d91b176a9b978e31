"""
checks.py

Responsibility: grep-style pattern presence checks over files and trees.

Patterns are Python regular expressions searched line by line, so `.*`
never crosses a newline (same as `grep`). Missing files and directories
are treated as "no match" rather than errors; prerequisite checks decide
separately whether a path must exist.
"""

from __future__ import annotations

import fnmatch
import logging
import os
import re
from pathlib import Path
from typing import Iterator, NamedTuple

_log = logging.getLogger("agentcheck.checks")


class Match(NamedTuple):
    path: Path
    lineno: int
    line: str


def _compile(pattern: str | re.Pattern[str], ignore_case: bool) -> re.Pattern[str]:
    if isinstance(pattern, re.Pattern):
        return pattern
    return re.compile(pattern, re.IGNORECASE if ignore_case else 0)


def _read_lines(path: Path) -> list[str]:
    try:
        return path.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError as e:
        _log.debug("Unreadable file %s: %s", path, e)
        return []


def iter_files(root: str | Path, include: str = "*") -> list[Path]:
    """
    Return files under root whose name matches `include`, in deterministic
    (relative path) order.
    """
    root_path = Path(root)
    if root_path.is_file():
        return [root_path] if fnmatch.fnmatch(root_path.name, include) else []
    files: list[Path] = []
    for dirpath, _dirs, filenames in os.walk(root_path):
        for name in filenames:
            if fnmatch.fnmatch(name, include):
                files.append(Path(dirpath) / name)
    files.sort(key=lambda p: str(p.relative_to(root_path)).replace(os.sep, "/"))
    return files


def _iter_matches(path: Path, regex: re.Pattern[str]) -> Iterator[Match]:
    for i, line in enumerate(_read_lines(path), start=1):
        if regex.search(line):
            yield Match(path, i, line)


def file_contains(path: str | Path, pattern: str | re.Pattern[str], *, ignore_case: bool = False) -> bool:
    p = Path(path)
    if not p.is_file():
        _log.debug("file_contains: %s does not exist", p)
        return False
    regex = _compile(pattern, ignore_case)
    return next(_iter_matches(p, regex), None) is not None


def tree_matches(
    root: str | Path,
    pattern: str | re.Pattern[str],
    include: str = "*",
    *,
    ignore_case: bool = False,
) -> list[Match]:
    regex = _compile(pattern, ignore_case)
    out: list[Match] = []
    for path in iter_files(root, include):
        out.extend(_iter_matches(path, regex))
    return out


def tree_contains(
    root: str | Path,
    pattern: str | re.Pattern[str],
    include: str = "*",
    *,
    ignore_case: bool = False,
) -> bool:
    root_path = Path(root)
    if not root_path.exists():
        _log.debug("tree_contains: %s does not exist", root_path)
        return False
    regex = _compile(pattern, ignore_case)
    for path in iter_files(root_path, include):
        if next(_iter_matches(path, regex), None) is not None:
            return True
    return False


def literal(text: str) -> str:
    """Escape a fixed string for use as a pattern (grep -F)."""
    return re.escape(text)
