"""End-to-end dependency analysis run.

Lifecycle::

    analyzer = DependencyAnalyzer(config)
    await analyzer.load_changes()          # git-impact mode only
    analyzer.on_resolve(issuer, path)      # once per resolved reference
    analyzer.add_edges(stylesheet_edges)   # extra pairs from import resolvers
    analyzer.finalize()
    analyzer.write_outputs()

``run()`` performs all of the above for an in-memory edge list.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable, Iterable
from dataclasses import dataclass, field

from fastdeps.analysis.impact import ImpactAnalyzer, merge_impacts
from fastdeps.config.modes import mode_overrides, resolve_modes
from fastdeps.config.schema import AnalyzerConfig
from fastdeps.discovery.edges_file import Edge
from fastdeps.errors import GraphStateError
from fastdeps.git.commits import ChangeSet, GitClient
from fastdeps.graph.entries import EntryRegistry
from fastdeps.graph.paths import PathNormalizer
from fastdeps.graph.query import AncestorFinder
from fastdeps.graph.recorder import DependencyGraph, FinalizeResult
from fastdeps.report.writer import ImpactReport, PendingOutput, prepare_output, write_outputs

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AnalysisResult:
    graph: FinalizeResult
    report: ImpactReport | None = None
    written: list[str] = field(default_factory=list)


class DependencyAnalyzer:
    """Owns one graph, its entry registry and the optional git change set."""

    def __init__(self, config: AnalyzerConfig) -> None:
        self.config = resolve_modes(config)
        for name, (before, after) in mode_overrides(config, self.config).items():
            logger.debug("Mode override: %s %r -> %r", name, before, after)

        self.normalizer = PathNormalizer(
            self.config.context,
            relative=self.config.relative_path,
            ignore=self.config.ignore,
        )
        self.entries = EntryRegistry.from_raw(self.config.entry, self.normalizer)
        self.graph = DependencyGraph(
            self.normalizer,
            tree=self.config.tree,
            reverse=self.config.reverse,
        )
        self.changes: ChangeSet | None = None
        self.skipped = 0
        self._sessions = 0

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def on_resolve(self, issuer: str | None, path: str | None) -> bool:
        """Discovery callback: *issuer* references *path*."""
        if issuer == path or self.normalizer.is_ignored(issuer) or self.normalizer.is_ignored(path):
            self.skipped += 1
            return False
        return self.graph.record(issuer, path)

    def add_edges(self, edges: Iterable[Edge]) -> int:
        """Record extra ``(issuer, dependency)`` pairs; returns how many were new."""
        return sum(1 for issuer, path in edges if self.on_resolve(issuer, path))

    async def consume(self, edges: AsyncIterable[Edge]) -> int:
        """Single mutator task for async discovery workers."""
        added = 0
        async for issuer, path in edges:
            if self.on_resolve(issuer, path):
                added += 1
        return added

    def begin_discovery(self) -> int:
        """Register one discovery pass (e.g. one compilation) feeding this graph."""
        self._sessions += 1
        return self._sessions

    def end_discovery(self) -> FinalizeResult | None:
        """Close a discovery pass; the last one to close finalizes the graph."""
        self._sessions -= 1
        if self._sessions > 0:
            return None
        self._sessions = 0
        return self.finalize()

    def finalize(self) -> FinalizeResult:
        result = self.graph.finalize()
        if self.skipped:
            logger.debug("Skipped %d self or ignored reference(s)", self.skipped)
        return result

    # ------------------------------------------------------------------
    # Impact analysis
    # ------------------------------------------------------------------

    async def load_changes(self, git: GitClient | None = None) -> ChangeSet | None:
        """Fetch changed files for the configured commit range (git mode only)."""
        git_info = self.config.analyze_git_info
        if not git_info.enable:
            return None
        client = git or GitClient(self.normalizer.context)
        self.changes = await client.collect_changes(git_info.commit_range, order=git_info.range_order)
        logger.info(
            "Changed files for %s: %s",
            "..".join(self.changes.commit_range),
            [self.normalizer.normalize(f) for f in self.changes.filenames],
        )
        return self.changes

    def finder(self) -> AncestorFinder:
        return AncestorFinder(self.graph, self.entries)

    def analyze_changes(self) -> ImpactReport:
        if self.changes is None:
            raise GraphStateError("No change set loaded; call load_changes() first")
        changed = [self.normalizer.normalize(f) for f in self.changes.filenames]
        details = ImpactAnalyzer(self.finder()).analyze_detailed(
            changed, self.config.analyze_git_info.target_files
        )
        return ImpactReport(
            commit_range=self.changes.commit_range,
            changed_files=changed,
            impacted=merge_impacts(details),
            details=details,
        )

    # ------------------------------------------------------------------
    # Outputs
    # ------------------------------------------------------------------

    def build_outputs(self) -> tuple[list[PendingOutput | None], ImpactReport | None]:
        """Serialise every configured output without writing anything."""
        if not self.graph.finalized:
            raise GraphStateError("Graph must be finalized before building outputs")
        output = self.config.output
        context = self.normalizer.context
        pending: list[PendingOutput | None] = []
        report: ImpactReport | None = None
        if self.config.analyze_git_info.enable:
            report = self.analyze_changes()
            pending.append(prepare_output("analyze_git_result", output.analyze_git_result, report.to_dict(), context))
        if output.dependencies:
            pending.append(prepare_output("dependencies", output.dependencies, self.graph.to_output(), context))
        return pending, report

    def write_outputs(self) -> AnalysisResult:
        pending, report = self.build_outputs()
        written = write_outputs(pending)
        return AnalysisResult(graph=self.graph.finalize(), report=report, written=written)

    async def run(self, edges: Iterable[Edge], *, git: GitClient | None = None) -> AnalysisResult:
        """Load changes, record *edges*, finalize and write all outputs."""
        await self.load_changes(git)
        self.add_edges(edges)
        self.finalize()
        return self.write_outputs()
