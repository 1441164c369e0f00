"""fastdeps error hierarchy."""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorCategory(StrEnum):
    """Category of error for classification and handling."""

    CONFIGURATION = "configuration"
    GRAPH = "graph"
    QUERY = "query"
    SERIALIZATION = "serialization"
    EXTERNAL_TOOL = "external_tool"
    INTERNAL = "internal"


class AnalyzerError(Exception):
    """Base error for all fastdeps exceptions."""

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory = ErrorCategory.INTERNAL,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.category = category
        self.details: dict[str, Any] = details or {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r}, category={self.category!r})"


class ConfigurationError(AnalyzerError):
    """Invalid configuration value."""

    def __init__(self, message: str, *, key: str | None = None) -> None:
        super().__init__(message, category=ErrorCategory.CONFIGURATION)
        self.key = key


class GraphStateError(AnalyzerError):
    """Graph used in the wrong lifecycle phase (e.g. queried before finalize)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, category=ErrorCategory.GRAPH)


class GraphFinalizedError(GraphStateError):
    """An edge arrived after the graph was finalized."""

    def __init__(self, issuer: str, dependency: str) -> None:
        super().__init__(
            f"Cannot record {issuer or '<entry>'} -> {dependency}: graph is finalized"
        )
        self.issuer = issuer
        self.dependency = dependency


class QueryModeError(AnalyzerError):
    """Ancestor queries need a flat reverse graph."""

    def __init__(self, mode: str) -> None:
        super().__init__(
            f"Ancestor search requires reverse mode, graph was built in {mode} mode",
            category=ErrorCategory.QUERY,
        )
        self.mode = mode


class SerializationError(AnalyzerError):
    """Dependency output could not be serialized."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, category=ErrorCategory.SERIALIZATION, **kwargs)


class CircularDependencyError(SerializationError):
    """Nested tree output contains a cycle."""

    def __init__(self, cycle: list[str]) -> None:
        chain = " -> ".join(cycle)
        super().__init__(
            "Dependency tree was built but cannot be serialized: "
            f"the project probably has a circular dependency ({chain})",
            details={"cycle": list(cycle)},
        )
        self.cycle = list(cycle)


class ExternalToolError(AnalyzerError):
    """An external command needed for the run failed."""

    def __init__(
        self,
        message: str,
        *,
        command: list[str] | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(
            message,
            category=ErrorCategory.EXTERNAL_TOOL,
            details={"command": command or [], "returncode": returncode, "stderr": stderr},
        )
        self.command = command or []
        self.returncode = returncode
        self.stderr = stderr


class GitError(ExternalToolError):
    """git invocation failed while collecting changed files."""
