"""Canonical node identifiers for file paths."""

from __future__ import annotations

import os
from collections.abc import Iterable


class PathNormalizer:
    """Maps raw paths to canonical node ids.

    With ``relative=True`` ids are relative to *context*; otherwise they are
    absolute. Relative inputs are always resolved against *context* (never the
    process cwd), which makes :meth:`normalize` idempotent in both modes.
    The empty path stays empty: it is the "no issuer" marker.
    """

    def __init__(self, context: str, *, relative: bool = True, ignore: Iterable[str] = ()) -> None:
        self._context = os.path.abspath(context)
        self._relative = relative
        self._ignore = tuple(s for s in ignore if s)

    @property
    def context(self) -> str:
        return self._context

    @property
    def relative(self) -> bool:
        return self._relative

    def normalize(self, path: str | os.PathLike[str] | None, *, relative: bool | None = None) -> str:
        if not path:
            return ""
        abs_path = self.to_absolute(path)
        use_relative = self._relative if relative is None else relative
        if use_relative:
            return os.path.relpath(abs_path, self._context).replace(os.sep, "/")
        return abs_path

    def to_absolute(self, path: str | os.PathLike[str]) -> str:
        raw = os.fspath(path)
        if not os.path.isabs(raw):
            raw = os.path.join(self._context, raw)
        return os.path.normpath(raw)

    def is_ignored(self, path: str | None) -> bool:
        """True when *path* contains an ignored fragment such as ``node_modules``."""
        if not path:
            return False
        return any(fragment in path for fragment in self._ignore)
