"""Output emission for the dependency table and the impact report.

Every output is prepared (serialised) before anything is written, so a
failing output never leaves the others half-written.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from fastdeps.analysis.impact import FileImpact
from fastdeps.config.schema import OutputTarget
from fastdeps.errors import SerializationError
from fastdeps.utils.io import dump_json, write_text_atomic

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ImpactReport:
    commit_range: list[str]
    changed_files: list[str]
    impacted: list[str]
    details: list[FileImpact] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "commit_range": list(self.commit_range),
            "changed_files": list(self.changed_files),
            "impacted": list(self.impacted),
        }

    def to_detailed_dict(self) -> dict[str, Any]:
        data = self.to_dict()
        data["details"] = [asdict(d) for d in self.details]
        return data


@dataclass(slots=True)
class PendingOutput:
    name: str
    payload: Any
    path: Path | None = None
    handler: Callable[[Any], None] | None = None
    text: str = ""


def resolve_output_path(target: str | os.PathLike[str], context: str) -> Path:
    """Output paths are relative to the analysis context, not the cwd."""
    path = Path(target)
    return path if path.is_absolute() else Path(context) / path


def prepare_output(name: str, target: OutputTarget, payload: Any, context: str) -> PendingOutput | None:
    if not target:
        return None
    if callable(target):
        return PendingOutput(name=name, payload=payload, handler=target)
    try:
        text = dump_json(payload)
    except (TypeError, ValueError) as exc:
        raise SerializationError(
            f"Cannot serialise the {name} output (circular dependency?): {exc}"
        ) from exc
    return PendingOutput(
        name=name,
        payload=payload,
        path=resolve_output_path(target, context),
        text=text,
    )


def write_outputs(pending: Iterable[PendingOutput | None]) -> list[str]:
    """Emit prepared outputs in order. Returns the names written."""
    written: list[str] = []
    for output in pending:
        if output is None:
            continue
        if output.handler is not None:
            output.handler(output.payload)
            logger.info("Delivered %s output to handler", output.name)
        elif output.path is not None:
            write_text_atomic(output.path, output.text)
            logger.info("Wrote %s output to %s", output.name, output.path)
        written.append(output.name)
    return written
