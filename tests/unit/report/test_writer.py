"""Tests for output preparation and writing."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from fastdeps.errors import SerializationError
from fastdeps.report.writer import ImpactReport, prepare_output, resolve_output_path, write_outputs


class TestResolveOutputPath:
    def test_relative_to_context(self) -> None:
        assert resolve_output_path("out/deps.json", "/proj") == Path("/proj/out/deps.json")

    def test_absolute_kept(self) -> None:
        assert resolve_output_path("/tmp/deps.json", "/proj") == Path("/tmp/deps.json")


class TestPrepareAndWrite:
    def test_path_target(self, tmp_path: Path) -> None:
        pending = prepare_output("dependencies", "deps.json", {"a.js": ["b.js"]}, str(tmp_path))
        assert pending is not None
        assert not (tmp_path / "deps.json").exists()  # nothing written yet
        assert write_outputs([pending]) == ["dependencies"]
        assert json.loads((tmp_path / "deps.json").read_text()) == {"a.js": ["b.js"]}

    def test_handler_target(self) -> None:
        received: list[Any] = []
        pending = prepare_output("analyze_git_result", received.append, {"impacted": []}, "/proj")
        write_outputs([pending])
        assert received == [{"impacted": []}]

    def test_disabled_target(self) -> None:
        assert prepare_output("dependencies", None, {}, "/proj") is None
        assert prepare_output("dependencies", "", {}, "/proj") is None
        assert write_outputs([None]) == []

    def test_self_referencing_payload(self) -> None:
        loop: dict[str, Any] = {}
        loop["a.js"] = loop
        with pytest.raises(SerializationError, match="circular"):
            prepare_output("dependencies", "deps.json", loop, "/proj")

    def test_creates_parent_dirs(self, tmp_path: Path) -> None:
        pending = prepare_output("dependencies", "nested/dir/deps.json", {}, str(tmp_path))
        write_outputs([pending])
        assert (tmp_path / "nested" / "dir" / "deps.json").exists()


class TestImpactReport:
    def test_to_dict(self) -> None:
        report = ImpactReport(commit_range=["a~1", "a"], changed_files=["x.js"], impacted=["main.js"])
        assert report.to_dict() == {
            "commit_range": ["a~1", "a"],
            "changed_files": ["x.js"],
            "impacted": ["main.js"],
        }
