"""Statistical analysis engine - descriptive, inferential, correlation, regression and tests.

Every function is a pure function of its inputs. Sub-computations whose sample-size
precondition is not met return an empty list so a partial report degrades gracefully;
only build_report raises, when no numeric value can be parsed at all.

The p-values and t-critical values are coarse table lookups rather than exact
Student's-t computations. Results are indicative, not publication grade.
"""

import math
import re
from typing import Iterable, Optional, Sequence

import numpy as np
from scipy import stats

from cognatus.analysis.report import (
    AnalysisReport,
    AnalysisType,
    DataType,
    HypothesisTestResult,
    StatResult,
)
from cognatus.errors import InsufficientDataError, ValidationError


SIGNIFICANCE_ALPHA = 0.05

# Two-sided t-critical values by degrees of freedom, per confidence level.
T_CRITICAL_TABLES = {
    0.90: {
        1: 6.314, 2: 2.920, 3: 2.353, 4: 2.132, 5: 2.015,
        6: 1.943, 7: 1.895, 8: 1.860, 9: 1.833, 10: 1.812,
        15: 1.753, 20: 1.725, 25: 1.708,
    },
    0.95: {
        1: 12.706, 2: 4.303, 3: 3.182, 4: 2.776, 5: 2.571,
        6: 2.447, 7: 2.365, 8: 2.306, 9: 2.262, 10: 2.228,
        15: 2.131, 20: 2.086, 25: 2.060,
    },
    0.99: {
        1: 63.657, 2: 9.925, 3: 5.841, 4: 4.604, 5: 4.032,
        6: 3.707, 7: 3.499, 8: 3.355, 9: 3.250, 10: 3.169,
        15: 2.947, 20: 2.845, 25: 2.787,
    },
}

# Normal approximation used once df >= 30.
Z_CRITICAL = {0.90: 1.645, 0.95: 1.96, 0.99: 2.576}

# (|t| lower bound, approximate p-value), checked in order
T_STAT_P_VALUES = [(3.0, 0.001), (2.5, 0.01), (2.0, 0.05), (1.5, 0.1)]
T_STAT_P_FLOOR = 0.2

# (|skew| + |excess kurtosis| lower bound, approximate p-value)
NORMALITY_P_VALUES = [(2.0, 0.01), (1.0, 0.05), (0.5, 0.1)]
NORMALITY_P_FLOOR = 0.5

SERIAL_T_THRESHOLD = 2.0

FLAT_SLOPE_TOLERANCE = 1e-12

NORMALITY_TEST = "Normality test (skewness/kurtosis)"
ONE_SAMPLE_T_TEST = "One-sample t-test"

_NON_NUMERIC_CHARS = re.compile(r"[^\d.\-\s]")
_NUMERIC_PATTERN = re.compile(r"^-?\d+(\.\d+)?$")
_BOOLEAN_PATTERN = re.compile(r"^(true|false|yes|no|y|n)$", re.IGNORECASE)
_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}")
_MULTIVALUE_PATTERN = re.compile(r"[,;]")


def parse_numeric_values(raw_points: Iterable[str]) -> list[float]:
    """Extract every number embedded in the raw data points.

    Characters other than digits, '.', '-' and whitespace are dropped, the rest
    is split on whitespace and tokens that are not valid floats are discarded.
    """
    values = []
    for point in raw_points:
        cleaned = _NON_NUMERIC_CHARS.sub("", str(point))
        for token in cleaned.split():
            try:
                values.append(float(token))
            except ValueError:
                continue
    return values


def classify_data_types(raw_points: Iterable[str]) -> set[DataType]:
    types = set()
    for point in raw_points:
        text = str(point).strip()
        if _NUMERIC_PATTERN.match(text):
            types.add(DataType.NUMERIC)
        elif _BOOLEAN_PATTERN.match(text):
            types.add(DataType.BOOLEAN)
        elif _DATE_PATTERN.match(text):
            types.add(DataType.DATE)
        elif _MULTIVALUE_PATTERN.search(text):
            types.add(DataType.MULTIVALUE)
        else:
            types.add(DataType.CATEGORICAL)
    return types


def percentile(sorted_values: Sequence[float], p: float) -> float:
    """Linear-interpolated percentile of an already sorted sequence, p in [0, 1]."""
    if not sorted_values:
        raise InsufficientDataError("Cannot compute a percentile of an empty sequence")
    if not 0 <= p <= 1:
        raise ValidationError(f"Percentile must be between 0 and 1, got {p}", field="p")

    index = p * (len(sorted_values) - 1)
    lower = math.floor(index)
    upper = math.ceil(index)
    weight = index - lower
    return sorted_values[lower] + (sorted_values[upper] - sorted_values[lower]) * weight


def _sample_std(values: Sequence[float]) -> float:
    return float(np.std(values, ddof=1))


def descriptive_stats(values: Sequence[float]) -> list[StatResult]:
    n = len(values)
    if n < 2:
        return []

    arr = np.asarray(values, dtype=float)
    ordered = sorted(arr.tolist())
    mean = float(np.mean(arr))
    std = _sample_std(arr)
    median = percentile(ordered, 0.5)
    value_range = ordered[-1] - ordered[0]
    iqr = percentile(ordered, 0.75) - percentile(ordered, 0.25)

    if n < 30:
        size_reading = "small sample"
    elif n < 100:
        size_reading = "medium sample"
    else:
        size_reading = "large sample"

    if std < 0.1 * mean:
        variability = "low variability"
    elif std < 0.3 * mean:
        variability = "moderate variability"
    else:
        variability = "high variability"

    if std == 0 or abs(mean - median) < 0.1 * std:
        shape = "symmetric distribution"
    else:
        shape = "skewed distribution"

    return [
        StatResult("Sample size", float(n), size_reading),
        StatResult("Mean", mean, "arithmetic average"),
        StatResult("Standard deviation", std, variability),
        StatResult("Median", median, shape),
        StatResult("Range", value_range, f"spread from {ordered[0]:g} to {ordered[-1]:g}"),
        StatResult("Interquartile range", iqr, "spread of the middle 50% of values"),
    ]


def t_critical(df: int, confidence_level: float = 0.95) -> float:
    """Tabulated t-critical value, nearest tabulated df below 30, normal beyond."""
    table = T_CRITICAL_TABLES.get(confidence_level)
    if table is None:
        raise ValidationError(
            f"Unsupported confidence level {confidence_level}; "
            f"use one of {', '.join(str(c) for c in T_CRITICAL_TABLES)}",
            field="confidence_level",
        )
    if df < 1:
        raise InsufficientDataError("At least one degree of freedom is required")
    if df >= 30:
        return Z_CRITICAL[confidence_level]
    if df in table:
        return table[df]
    nearest = min(table, key=lambda tabulated: abs(tabulated - df))
    return table[nearest]


def _relative_significance(value: float, std: float, high: float, moderate: float) -> str:
    # a constant sample has an exact mean
    if std == 0:
        return "high"
    if value < high * std:
        return "high"
    if value < moderate * std:
        return "moderate"
    return "low"


def inferential_stats(values: Sequence[float], confidence_level: float = 0.95) -> list[StatResult]:
    n = len(values)
    if n < 2:
        return []

    mean = float(np.mean(values))
    std = _sample_std(values)
    std_error = std / math.sqrt(n)
    margin = t_critical(n - 1, confidence_level) * std_error
    level_pct = f"{confidence_level * 100:g}%"

    return [
        StatResult(
            "Standard error",
            std_error,
            "precision of the sample mean",
            _relative_significance(std_error, std, 0.1, 0.3),
        ),
        StatResult(
            f"Margin of error ({level_pct} CI)",
            margin,
            f"{level_pct} confidence interval [{mean - margin:.3f}, {mean + margin:.3f}]",
            _relative_significance(margin, std, 0.2, 0.5),
        ),
    ]


def _pearson(x: np.ndarray, y: np.ndarray) -> Optional[float]:
    if np.ptp(x) == 0 or np.ptp(y) == 0:
        return None
    r = float(np.corrcoef(x, y)[0, 1])
    return max(-1.0, min(1.0, r))


def correlation_stats(values: Sequence[float]) -> list[StatResult]:
    """Lag-1 serial correlation of the sequence with itself shifted by one."""
    n = len(values)
    if n < 4:
        return []

    arr = np.asarray(values, dtype=float)
    pairs = n - 1
    r = _pearson(arr[:-1], arr[1:])
    if r is None:
        return []

    if r * r >= 1:
        t_stat = math.inf
    else:
        t_stat = r * math.sqrt((pairs - 2) / (1 - r * r))
    significant = abs(t_stat) > SERIAL_T_THRESHOLD

    if abs(r) < 0.3:
        strength = "weak"
    elif abs(r) < 0.7:
        strength = "moderate"
    else:
        strength = "strong"
    direction = "positive" if r >= 0 else "negative"

    return [
        StatResult(
            "Lag-1 serial correlation",
            r,
            f"{strength} {direction} serial correlation across {pairs} consecutive pairs",
            "significant" if significant else "not significant",
        ),
    ]


def _approximate_p(score: float, breakpoints: list[tuple[float, float]], floor: float) -> float:
    for bound, p_value in breakpoints:
        if score > bound:
            return p_value
    return floor


def hypothesis_tests(values: Sequence[float]) -> list[HypothesisTestResult]:
    n = len(values)
    if n < 2:
        return []

    arr = np.asarray(values, dtype=float)
    mean = float(np.mean(arr))
    std = _sample_std(arr)

    if std == 0:
        t_stat = math.inf if mean != 0 else 0.0
    else:
        t_stat = mean / (std / math.sqrt(n))
    p_value = _approximate_p(abs(t_stat), T_STAT_P_VALUES, T_STAT_P_FLOOR)
    significant = p_value < SIGNIFICANCE_ALPHA

    results = [
        HypothesisTestResult(
            hypothesis="Population mean equals 0",
            test_type=ONE_SAMPLE_T_TEST,
            p_value=p_value,
            significant=significant,
            conclusion=(
                f"Reject H0: mean {mean:.3f} differs from 0 (t={t_stat:.3f})"
                if significant
                else f"Fail to reject H0: no evidence the mean differs from 0 (t={t_stat:.3f})"
            ),
        )
    ]

    if 3 <= n <= 50 and std > 0:
        skewness = float(stats.skew(arr))
        excess_kurtosis = float(stats.kurtosis(arr))
        score = abs(skewness) + abs(excess_kurtosis)
        normal_p = _approximate_p(score, NORMALITY_P_VALUES, NORMALITY_P_FLOOR)
        non_normal = normal_p < SIGNIFICANCE_ALPHA
        results.append(
            HypothesisTestResult(
                hypothesis="Data follows a normal distribution",
                test_type=NORMALITY_TEST,
                p_value=normal_p,
                significant=non_normal,
                conclusion=(
                    f"Reject normality (skew={skewness:.3f}, kurtosis={excess_kurtosis:.3f})"
                    if non_normal
                    else f"No evidence against normality (skew={skewness:.3f}, kurtosis={excess_kurtosis:.3f})"
                ),
            )
        )

    return results


def regression_stats(values: Sequence[float]) -> list[StatResult]:
    """Least-squares trend of each value against its 1-based position."""
    n = len(values)
    if n < 4:
        return []

    y = np.asarray(values, dtype=float)
    x = np.arange(1, n + 1, dtype=float)
    slope, intercept = np.polyfit(x, y, 1)
    slope = float(slope)
    # polyfit leaves rounding noise on a flat series
    if abs(slope) < FLAT_SLOPE_TOLERANCE:
        slope = 0.0

    predicted = slope * x + float(intercept)
    ss_res = float(np.sum((y - predicted) ** 2))
    ss_tot = float(np.sum((y - y.mean()) ** 2))
    r_squared = 1.0 if ss_tot == 0 else max(0.0, 1 - ss_res / ss_tot)

    if abs(slope) < 0.1:
        magnitude = "minimal"
    elif abs(slope) < 1:
        magnitude = "moderate"
    else:
        magnitude = "strong"
    if slope > 0:
        trend = f"{magnitude} increasing trend per observation"
    elif slope < 0:
        trend = f"{magnitude} decreasing trend per observation"
    else:
        trend = f"{magnitude} trend, flat across observations"

    if r_squared > 0.7:
        fit, significance = "strong fit", "high"
    elif r_squared > 0.3:
        fit, significance = "moderate fit", "moderate"
    else:
        fit, significance = "weak fit", "low"

    return [
        StatResult("Trend slope", slope, trend, significance),
        StatResult(
            "R-squared",
            r_squared,
            f"{fit}: trend explains {r_squared * 100:.1f}% of variance",
            significance,
        ),
    ]


def recommendations(report: AnalysisReport, sample_size: int) -> list[str]:
    advice = []

    if sample_size < 30:
        advice.append(
            f"Sample size ({sample_size}) is below 30; collect more data to improve statistical power."
        )

    tests = report.hypothesis_tests or []
    if any(t.test_type == NORMALITY_TEST and t.significant for t in tests):
        advice.append(
            "Data deviates from normality; consider non-parametric tests or a transformation."
        )

    serial = report.metric("Lag-1 serial correlation")
    if serial is not None and abs(serial.value) > 0.5:
        advice.append(
            "Strong serial correlation; observations may not be independent, consider time-series methods."
        )

    mean = report.metric("Mean")
    std = report.metric("Standard deviation")
    if mean is not None and std is not None and std.value > abs(mean.value):
        advice.append(
            "High variability: standard deviation exceeds the magnitude of the mean; check for outliers or subgroups."
        )

    for row in report.inferential_stats or []:
        if row.metric.startswith("Margin of error") and row.significance == "low":
            advice.append("Confidence interval is wide relative to the spread; estimates are imprecise.")

    if any(t.significant for t in tests):
        advice.append(
            "Significant result found; replicate with an independent sample before drawing firm conclusions."
        )

    return advice


def build_report(
    raw_points: Sequence[str],
    analysis_type: AnalysisType = AnalysisType.COMPREHENSIVE,
    confidence_level: float = 0.95,
) -> AnalysisReport:
    """Parse the raw points and compute the sections the analysis type asks for."""
    analysis_type = AnalysisType(analysis_type)
    values = parse_numeric_values(raw_points)
    if not values:
        raise InsufficientDataError(
            f"No numeric values could be parsed from {len(raw_points)} data point(s)"
        )
    # fail fast on a bad level even when the sample is too small for intervals
    t_critical(1, confidence_level)

    data_types = classify_data_types(raw_points)
    summary = (
        f"{len(raw_points)} data point(s), {len(values)} numeric value(s) parsed; "
        f"data types: {', '.join(sorted(t.value for t in data_types))}"
    )
    report = AnalysisReport(
        analysis_type=analysis_type,
        dataset_summary=summary,
        sample_size=len(values),
        data_types=data_types,
        descriptive_stats=descriptive_stats(values),
    )

    comprehensive = analysis_type == AnalysisType.COMPREHENSIVE
    if comprehensive or analysis_type == AnalysisType.INFERENTIAL:
        report.inferential_stats = inferential_stats(values, confidence_level)
        report.hypothesis_tests = hypothesis_tests(values)
    if comprehensive or analysis_type == AnalysisType.CORRELATION:
        report.correlations = correlation_stats(values)
    if comprehensive or analysis_type == AnalysisType.REGRESSION:
        report.regression = regression_stats(values)

    report.recommendations = recommendations(report, len(values))
    return report
