"""Change-impact analysis."""

from fastdeps.analysis.impact import FileImpact, ImpactAnalyzer, merge_impacts

__all__ = ["FileImpact", "ImpactAnalyzer", "merge_impacts"]
