"""Result outputs."""

from fastdeps.report.writer import (
    ImpactReport,
    PendingOutput,
    prepare_output,
    resolve_output_path,
    write_outputs,
)

__all__ = [
    "ImpactReport",
    "PendingOutput",
    "prepare_output",
    "resolve_output_path",
    "write_outputs",
]
