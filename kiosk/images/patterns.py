from __future__ import annotations

from fnmatch import fnmatchcase
from typing import Iterable


def to_posix(path: str) -> str:
    """Normalize a relative path to forward slashes without a leading './' or '/'."""
    p = path.replace("\\", "/")
    while p.startswith("./"):
        p = p[2:]
    return p.lstrip("/")

def _match_segment(name: str, pat: str) -> bool:
    # Shell globs never let a wildcard match a leading dot.
    if name.startswith(".") and not pat.startswith("."):
        return False
    return fnmatchcase(name, pat)

def _match_parts(names: list[str], pats: list[str]) -> bool:
    if not pats:
        return not names
    head = pats[0]
    if head == "**":
        rest = pats[1:]
        for i in range(len(names) + 1):
            if any(n.startswith(".") for n in names[:i]):
                break
            if _match_parts(names[i:], rest):
                return True
        return False
    if not names:
        return False
    return _match_segment(names[0], head) and _match_parts(names[1:], pats[1:])

def matches(relative_path: str, patterns: Iterable[str]) -> bool:
    names = to_posix(relative_path).split("/")
    for pattern in patterns:
        if not pattern:
            continue
        if _match_parts(names, to_posix(pattern).split("/")):
            return True
    return False

def filter_directory(relative_paths: Iterable[str], patterns: Iterable[str]) -> set[str]:
    pats = list(patterns)
    return {to_posix(p) for p in relative_paths if matches(p, pats)}
