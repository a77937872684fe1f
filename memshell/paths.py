"""
Pure path helpers for the virtual filesystem.

None of these functions look at the tree; they only manipulate path strings
and segment lists. Resolution against actual directories lives in
``VirtualFileSystem.resolve_absolute``.
"""

from typing import List, Sequence

ROOT = '/'
SEPARATOR = '/'


def tokenize(path: str) -> List[str]:
    """Split a path into its segments, dropping empty ones.

    Leading, trailing and repeated separators all disappear, so the root
    path tokenizes to an empty list.

    Examples:
        tokenize('/a//b/')     # ['a', 'b']
        tokenize('/')          # []
        tokenize('../x')       # ['..', 'x']
    """
    return [segment for segment in path.split(SEPARATOR) if segment]


def rebuild(segments: Sequence[str]) -> str:
    """Join segments into an absolute path string.

    An empty segment list rebuilds to the empty string, not to the root;
    callers that may end up at the root must special-case it.
    """
    return ''.join(SEPARATOR + segment for segment in segments)


def is_path_like(s: str) -> bool:
    """Return True if ``s`` is a path rather than a bare name."""
    return SEPARATOR in s


def is_absolute(path: str) -> bool:
    return path.startswith(ROOT)


def parent_path(path: str, current_dir: str = ROOT) -> str:
    """Return the path of the directory that contains ``path``.

    Absolute paths yield an absolute parent (the root when nothing is left).
    Relative paths stay relative; a bare name has no relative prefix, so
    its parent is ``current_dir``, the directory it would be created in.
    """
    segments = tokenize(path)[:-1]
    if is_absolute(path):
        return rebuild(segments) or ROOT
    if segments:
        return SEPARATOR.join(segments)
    return current_dir


def leaf_name(path: str) -> str:
    """Return the last segment of ``path`` (empty for the root)."""
    segments = tokenize(path)
    return segments[-1] if segments else ''
