"""End-to-end tests for DependencyAnalyzer."""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from fastdeps.analyzer import DependencyAnalyzer
from fastdeps.config.schema import AnalyzerConfig, GitInfoConfig, OutputConfig
from fastdeps.errors import CircularDependencyError, GitError, GraphStateError
from fastdeps.git.commits import ChangedFile, ChangeSet, GitClient


def _git_stub(base: str, head: str, files: list[str]) -> MagicMock:
    client = MagicMock(spec=GitClient)
    client.collect_changes = AsyncMock(
        return_value=ChangeSet(base=base, head=head, files=[ChangedFile(f) for f in files])
    )
    return client


EDGES = [
    ("", "/p/src/main.js"),
    ("/p/src/main.js", "/p/src/app/page.js"),
    ("/p/src/app/page.js", "/p/src/lib/util.js"),
    ("/p/src/main.js", "/p/src/style.scss"),
    ("/p/src/style.scss", "/p/src/_vars.scss"),
]


class TestConstruction:
    def test_mode_gate_applied(self) -> None:
        a = DependencyAnalyzer(AnalyzerConfig(context="/p", tree=True, reverse=True))
        assert a.config.reverse is False
        assert a.graph.mode == "tree"

    def test_git_mode_forces_reverse(self) -> None:
        cfg = AnalyzerConfig(context="/p", tree=True, relative_path=False, analyze_git_info=GitInfoConfig(enable=True))
        a = DependencyAnalyzer(cfg)
        assert a.graph.mode == "reverse"
        assert a.normalizer.relative is True

    def test_entries_normalized(self) -> None:
        a = DependencyAnalyzer(AnalyzerConfig(context="/p", entry={"app": "/p/src/main.js"}))
        assert a.entries.as_list() == ["src/main.js"]


class TestDiscovery:
    def test_skips_self_and_ignored(self) -> None:
        a = DependencyAnalyzer(AnalyzerConfig(context="/p"))
        assert not a.on_resolve("/p/a.js", "/p/a.js")
        assert not a.on_resolve("/p/a.js", "/p/node_modules/react/index.js")
        assert a.on_resolve("/p/a.js", "/p/b.js")
        assert a.skipped == 2
        assert "node_modules/react/index.js" not in a.graph

    def test_stylesheet_edges_recorded_like_others(self) -> None:
        a = DependencyAnalyzer(AnalyzerConfig(context="/p"))
        added = a.add_edges([("/p/a.scss", "/p/_b.scss"), ("/p/a.scss", "/p/_b.scss")])
        assert added == 1
        a.finalize()
        assert a.graph.as_table() == {"a.scss": ["_b.scss"]}

    def test_discovery_sessions_finalize_on_last_close(self) -> None:
        a = DependencyAnalyzer(AnalyzerConfig(context="/p"))
        a.begin_discovery()
        a.begin_discovery()
        assert a.end_discovery() is None
        assert not a.graph.finalized
        result = a.end_discovery()
        assert result is not None and result.success
        assert a.graph.finalized

    @pytest.mark.asyncio
    async def test_consume_async_stream(self) -> None:
        a = DependencyAnalyzer(AnalyzerConfig(context="/p", reverse=True))
        queue: asyncio.Queue[tuple[str, str] | None] = asyncio.Queue()

        async def producer(worker: int) -> None:
            for i in range(50):
                await queue.put((f"/p/w{worker}.js", f"/p/dep{i % 5}.js"))

        async def drain() -> AsyncIterator[tuple[str, str]]:
            while True:
                item = await queue.get()
                if item is None:
                    return
                yield item

        consumer = asyncio.create_task(a.consume(drain()))
        await asyncio.gather(*(producer(w) for w in range(4)))
        await queue.put(None)
        added = await consumer
        assert added == 20
        a.finalize()
        assert a.graph.neighbors("dep0.js") == ["w0.js", "w1.js", "w2.js", "w3.js"]


class TestOutputs:
    @pytest.mark.asyncio
    async def test_flat_table_written(self, tmp_path: Path) -> None:
        cfg = AnalyzerConfig(context=str(tmp_path), output=OutputConfig(dependencies="deps.json"))
        edges = [(str(tmp_path / i), str(tmp_path / d)) if i else (i, str(tmp_path / d)) for i, d in
                 [("", "main.js"), ("main.js", "a.js"), ("a.js", "b.js")]]
        result = await DependencyAnalyzer(cfg).run(edges)
        assert result.written == ["dependencies"]
        assert json.loads((tmp_path / "deps.json").read_text()) == {"main.js": ["a.js"], "a.js": ["b.js"]}

    @pytest.mark.asyncio
    async def test_tree_handler(self) -> None:
        received: list[Any] = []
        cfg = AnalyzerConfig(context="/p", tree=True, output=OutputConfig(dependencies=received.append))
        await DependencyAnalyzer(cfg).run(EDGES)
        assert received == [{
            "src/main.js": {
                "src/app/page.js": {"src/lib/util.js": {}},
                "src/style.scss": {"src/_vars.scss": {}},
            }
        }]

    @pytest.mark.asyncio
    async def test_cycle_aborts_before_any_write(self, tmp_path: Path) -> None:
        cfg = AnalyzerConfig(
            context=str(tmp_path),
            tree=True,
            output=OutputConfig(dependencies="deps.json", analyze_git_result="git.json"),
        )
        edges = [("", "/x/a.js"), ("/x/a.js", "/x/b.js"), ("/x/b.js", "/x/a.js")]
        with pytest.raises(CircularDependencyError):
            await DependencyAnalyzer(cfg).run(edges)
        assert list(tmp_path.iterdir()) == []

    def test_outputs_require_finalize(self) -> None:
        with pytest.raises(GraphStateError):
            DependencyAnalyzer(AnalyzerConfig(context="/p")).build_outputs()


class TestImpact:
    @pytest.mark.asyncio
    async def test_git_impact_report(self) -> None:
        reports: list[Any] = []
        cfg = AnalyzerConfig(
            context="/p",
            entry="src/main.js",
            analyze_git_info=GitInfoConfig(enable=True, target_files=("src/app/*.js", "entry")),
            output=OutputConfig(dependencies=None, analyze_git_result=reports.append),
        )
        git = _git_stub("abc~1", "abc", ["/p/src/lib/util.js", "/p/src/_vars.scss", "/p/assets/logo.png"])
        result = await DependencyAnalyzer(cfg).run(EDGES, git=git)

        assert result.report is not None
        assert result.report.impacted == ["src/app/page.js", "src/main.js"]
        assert reports == [{
            "commit_range": ["abc~1", "abc"],
            "changed_files": ["src/lib/util.js", "src/_vars.scss", "assets/logo.png"],
            "impacted": ["src/app/page.js", "src/main.js"],
        }]
        git.collect_changes.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_git_failure_aborts_without_output(self, tmp_path: Path) -> None:
        cfg = AnalyzerConfig(
            context=str(tmp_path),
            analyze_git_info=GitInfoConfig(enable=True),
            output=OutputConfig(dependencies="deps.json", analyze_git_result="git.json"),
        )
        git = MagicMock(spec=GitClient)
        git.collect_changes = AsyncMock(side_effect=GitError("git diff failed"))
        with pytest.raises(GitError):
            await DependencyAnalyzer(cfg).run(EDGES, git=git)
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_git_disabled_skips_fetch(self) -> None:
        git = MagicMock(spec=GitClient)
        git.collect_changes = AsyncMock()
        a = DependencyAnalyzer(AnalyzerConfig(context="/p"))
        assert await a.load_changes(git) is None
        git.collect_changes.assert_not_awaited()

    def test_analyze_without_changes(self) -> None:
        a = DependencyAnalyzer(AnalyzerConfig(context="/p", analyze_git_info=GitInfoConfig(enable=True)))
        a.finalize()
        with pytest.raises(GraphStateError):
            a.analyze_changes()
