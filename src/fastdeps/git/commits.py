"""Changed-file retrieval from git for a two-point commit range."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from fastdeps.config.schema import RangeOrder
from fastdeps.errors import ConfigurationError, GitError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ChangedFile:
    filename: str       # absolute path
    status: str = "M"   # git --name-status letter (A, M, D, R, C, ...)


@dataclass(slots=True)
class ChangeSet:
    base: str
    head: str
    files: list[ChangedFile] = field(default_factory=list)

    @property
    def commit_range(self) -> list[str]:
        return [self.base, self.head]

    @property
    def filenames(self) -> list[str]:
        return [f.filename for f in self.files]


def resolve_commit_range(
    commit_range: Sequence[str],
    head: str | None = None,
    *,
    order: RangeOrder = RangeOrder.OLDEST_FIRST,
) -> tuple[str, str]:
    """Turn a configured commit range into ``(base, head)``.

    - ``[]``: ``(head~1, head)``, with *head* the current commit id
    - ``[c]``: ``(c~1, c)``, the changes introduced by ``c``
    - ``[c1, c2, ...]``: the first two ids, split according to *order*
    """
    if not commit_range:
        if not head:
            raise ConfigurationError("An empty commit range needs the current HEAD commit id")
        return f"{head}~1", head
    if len(commit_range) == 1:
        commit = commit_range[0]
        return f"{commit}~1", commit
    if len(commit_range) > 2:
        logger.warning("Commit range has %d entries; only the first two are used", len(commit_range))
    first, second = commit_range[0], commit_range[1]
    if RangeOrder(order) is RangeOrder.NEWEST_FIRST:
        return second, first
    return first, second


def parse_name_status(output: str, root: Path) -> list[ChangedFile]:
    """Parse ``git diff --name-status -z`` output into absolute paths."""
    tokens = output.split("\0")
    files: list[ChangedFile] = []
    i = 0
    while i < len(tokens):
        status = tokens[i]
        if not status:
            i += 1
            continue
        if status[0] in ("R", "C"):
            # Rename/copy records carry the old and the new path; the new one changed.
            if i + 2 >= len(tokens):
                break
            path = tokens[i + 2]
            i += 3
        else:
            if i + 1 >= len(tokens):
                break
            path = tokens[i + 1]
            i += 2
        files.append(ChangedFile(filename=str(root / path), status=status[0]))
    return files


class GitClient:
    """Minimal async git wrapper. Any failure raises :class:`GitError`."""

    def __init__(self, cwd: str | Path) -> None:
        self._cwd = Path(cwd)

    async def _run(self, *args: str) -> str:
        cmd = ["git", *args]
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(self._cwd),
            )
        except FileNotFoundError as exc:
            raise GitError("'git' executable not found. Install it or add it to PATH.", command=cmd) from exc
        stdout_bytes, stderr_bytes = await proc.communicate()
        stdout = (stdout_bytes or b"").decode("utf-8", errors="replace")
        stderr = (stderr_bytes or b"").decode("utf-8", errors="replace")
        if proc.returncode != 0:
            raise GitError(
                f"{' '.join(cmd)} exited with code {proc.returncode}: {stderr.strip()}",
                command=cmd,
                returncode=proc.returncode,
                stderr=stderr,
            )
        return stdout

    async def head(self) -> str:
        return (await self._run("rev-parse", "HEAD")).strip()

    async def toplevel(self) -> Path:
        return Path((await self._run("rev-parse", "--show-toplevel")).strip())

    async def diff_files(self, base: str, head: str) -> list[ChangedFile]:
        root = await self.toplevel()
        output = await self._run("diff", "--name-status", "-z", base, head)
        return parse_name_status(output, root)

    async def collect_changes(
        self,
        commit_range: Sequence[str],
        *,
        order: RangeOrder = RangeOrder.OLDEST_FIRST,
    ) -> ChangeSet:
        head = await self.head() if not commit_range else None
        base, head = resolve_commit_range(commit_range, head, order=order)
        files = await self.diff_files(base, head)
        logger.info("Commit range %s..%s changed %d file(s)", base, head, len(files))
        return ChangeSet(base=base, head=head, files=files)
