"""Statistical analysis of agent-supplied data points."""

from cognatus.analysis.engine import (
    build_report,
    classify_data_types,
    correlation_stats,
    descriptive_stats,
    hypothesis_tests,
    inferential_stats,
    parse_numeric_values,
    percentile,
    recommendations,
    regression_stats,
    t_critical,
)
from cognatus.analysis.report import (
    AnalysisReport,
    AnalysisType,
    DataType,
    HypothesisTestResult,
    StatResult,
    format_report,
    summarize_report,
)

__all__ = [
    "build_report",
    "classify_data_types",
    "correlation_stats",
    "descriptive_stats",
    "hypothesis_tests",
    "inferential_stats",
    "parse_numeric_values",
    "percentile",
    "recommendations",
    "regression_stats",
    "t_critical",
    "AnalysisReport",
    "AnalysisType",
    "DataType",
    "HypothesisTestResult",
    "StatResult",
    "format_report",
    "summarize_report",
]
