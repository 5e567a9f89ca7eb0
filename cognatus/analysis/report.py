"""Analysis report records and their text rendering."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class AnalysisType(str, Enum):
    DESCRIPTIVE = "descriptive"
    INFERENTIAL = "inferential"
    CORRELATION = "correlation"
    REGRESSION = "regression"
    COMPREHENSIVE = "comprehensive"


class DataType(str, Enum):
    NUMERIC = "numeric"
    BOOLEAN = "boolean"
    DATE = "date"
    MULTIVALUE = "multivalue"
    CATEGORICAL = "categorical"


@dataclass
class StatResult:
    """One computed metric with its qualitative reading."""
    metric: str
    value: float
    interpretation: str
    significance: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "metric": self.metric,
            "value": round(self.value, 3),
            "interpretation": self.interpretation,
            "significance": self.significance,
        }


@dataclass
class HypothesisTestResult:
    hypothesis: str
    test_type: str
    p_value: float
    significant: bool
    conclusion: str

    def to_dict(self) -> dict:
        return {
            "hypothesis": self.hypothesis,
            "test_type": self.test_type,
            "p_value": self.p_value,
            "significant": self.significant,
            "conclusion": self.conclusion,
        }


@dataclass
class AnalysisReport:
    """Result of one analysis call.

    Optional sections are None when the analysis type did not ask for them,
    and an empty list when they were asked for but the sample was too small.
    """
    analysis_type: AnalysisType
    dataset_summary: str
    sample_size: int
    data_types: set[DataType] = field(default_factory=set)
    descriptive_stats: list[StatResult] = field(default_factory=list)
    inferential_stats: Optional[list[StatResult]] = None
    correlations: Optional[list[StatResult]] = None
    regression: Optional[list[StatResult]] = None
    hypothesis_tests: Optional[list[HypothesisTestResult]] = None
    recommendations: list[str] = field(default_factory=list)

    def metric(self, name: str) -> Optional[StatResult]:
        """Find a descriptive, inferential, correlation or regression row by metric name."""
        sections = [
            self.descriptive_stats,
            self.inferential_stats or [],
            self.correlations or [],
            self.regression or [],
        ]
        for section in sections:
            for result in section:
                if result.metric == name:
                    return result
        return None

    def to_dict(self) -> dict:
        return {
            "analysis_type": self.analysis_type.value,
            "dataset_summary": self.dataset_summary,
            "sample_size": self.sample_size,
            "data_types": sorted(t.value for t in self.data_types),
            "descriptive_stats": [r.to_dict() for r in self.descriptive_stats],
            "inferential_stats": _section_dict(self.inferential_stats),
            "correlations": _section_dict(self.correlations),
            "regression": _section_dict(self.regression),
            "hypothesis_tests": _section_dict(self.hypothesis_tests),
            "recommendations": list(self.recommendations),
        }


def _section_dict(section: Optional[list]) -> Optional[list[dict]]:
    if section is None:
        return None
    return [r.to_dict() for r in section]


def _format_value(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.3f}"


def _format_rows(title: str, rows: list[StatResult]) -> list[str]:
    lines = [f"## {title}"]
    if not rows:
        lines.append("- Not enough data points for this analysis.")
        return lines
    for row in rows:
        line = f"- {row.metric}: {_format_value(row.value)} ({row.interpretation})"
        if row.significance:
            line += f" [{row.significance}]"
        lines.append(line)
    return lines


def format_report(report: AnalysisReport) -> str:
    """Render a report as sectioned plain text."""
    lines = [
        f"# Statistical Analysis ({report.analysis_type.value})",
        "",
        report.dataset_summary,
        "",
    ]
    lines += _format_rows("Descriptive Statistics", report.descriptive_stats)

    optional_sections = [
        ("Inferential Statistics", report.inferential_stats),
        ("Serial Correlation", report.correlations),
        ("Trend Regression", report.regression),
    ]
    for title, rows in optional_sections:
        if rows is not None:
            lines.append("")
            lines += _format_rows(title, rows)

    if report.hypothesis_tests is not None:
        lines += ["", "## Hypothesis Tests"]
        if not report.hypothesis_tests:
            lines.append("- Not enough data points for this analysis.")
        for test in report.hypothesis_tests:
            verdict = "significant" if test.significant else "not significant"
            lines.append(
                f"- {test.test_type}: {test.hypothesis} (p ≈ {test.p_value}, {verdict}). "
                f"{test.conclusion}"
            )

    lines += ["", "## Recommendations"]
    if report.recommendations:
        lines += [f"- {r}" for r in report.recommendations]
    else:
        lines.append("- No issues detected.")

    return "\n".join(lines)


def summarize_report(report: AnalysisReport) -> str:
    """One-line summary kept in the research state."""
    mean = report.metric("Mean")
    std_dev = report.metric("Standard deviation")
    parts = [f"{report.analysis_type.value} analysis of {report.sample_size} values"]
    if mean is not None and std_dev is not None:
        parts.append(f"mean={mean.value:.3f}, sd={std_dev.value:.3f}")
    significant = [t for t in report.hypothesis_tests or [] if t.significant]
    parts.append(f"{len(significant)} significant test(s)")
    parts.append(f"{len(report.recommendations)} recommendation(s)")
    return "; ".join(parts)
