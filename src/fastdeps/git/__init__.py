"""git integration."""

from fastdeps.git.commits import (
    ChangedFile,
    ChangeSet,
    GitClient,
    parse_name_status,
    resolve_commit_range,
)

__all__ = [
    "ChangeSet",
    "ChangedFile",
    "GitClient",
    "parse_name_status",
    "resolve_commit_range",
]
