"""Research workflow - the scientific-method state machine.

One ResearchWorkflow owns one ResearchState. Every stage operation validates its
input, checks that the transition it implies is legal, and only then mutates the
state, so a rejected call leaves the state untouched.
"""

import logging
import math
import re
from typing import Optional, Sequence

from cognatus.analysis import AnalysisReport, AnalysisType, build_report, summarize_report
from cognatus.errors import HypothesisNotFoundError, InvalidTransitionError, ValidationError
from cognatus.workflow.state import (
    STAGE_TRANSITIONS,
    Hypothesis,
    ResearchState,
    Stage,
    generate_hypothesis_id,
)


SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

MIN_PROBLEM_STATEMENT_LENGTH = 10
MIN_LITERATURE_LENGTH = 20
MIN_HYPOTHESIS_LENGTH = 15
MIN_ANALYSIS_POINTS = 2

MAX_SEARCH_QUERIES = 3

STOP_WORDS = {
    "about", "above", "after", "again", "against", "among", "because", "been", "before",
    "being", "below", "between", "both", "cause", "causes", "could", "does", "doing",
    "during", "each", "effect", "effects", "from", "further", "have", "having", "here",
    "into", "itself", "might", "more", "most", "other", "over", "same", "should", "some",
    "such", "than", "that", "their", "them", "then", "there", "these", "they", "this",
    "those", "through", "under", "until", "very", "what", "when", "where", "which",
    "while", "whom", "whose", "with", "within", "without", "would", "your",
}

BREAKTHROUGH_TIERS = [
    (0.8, "breakthrough"),
    (0.6, "strong"),
    (0.4, "moderate"),
]
LOW_EVIDENCE_TIER = "low evidence"


def _require_text(value, field: str, min_length: int = 0) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", field=field)
    if len(value.strip()) < min_length:
        raise ValidationError(
            f"{field} must be at least {min_length} characters (got {len(value.strip())})",
            field=field,
        )
    return value


def _require_sequence(value, field: str, min_items: int) -> list:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise ValidationError(f"{field} must be a list", field=field)
    if len(value) < min_items:
        raise ValidationError(
            f"{field} requires at least {min_items} item(s) (got {len(value)})",
            field=field,
        )
    return list(value)


def extract_search_terms(text: str) -> list[str]:
    """Distinct lowercase tokens longer than four characters, stop words removed."""
    terms = []
    for token in re.findall(r"[a-z0-9]+", text.lower()):
        if len(token) > 4 and token not in STOP_WORDS and token not in terms:
            terms.append(token)
    return terms


def build_search_queries(statement: str) -> list[str]:
    terms = extract_search_terms(statement)[:2]
    queries = []
    if terms:
        base = " ".join(terms)
        queries += [f"{base} research", f"{base} study"]
    excerpt = statement[:50].strip()
    if excerpt and excerpt not in queries:
        queries.append(excerpt)
    return queries[:MAX_SEARCH_QUERIES]


class ResearchWorkflow:
    """Guides one research session through the seven fixed stages."""

    def __init__(
        self,
        confidence_level: float = 0.95,
        logger: Optional[logging.Logger] = None,
    ):
        self.state = ResearchState()
        self.confidence_level = confidence_level
        self.logger = logger or logging.getLogger("cognatus.workflow")

    def _log(self, message: str, level: str = "info") -> None:
        levels = {
            "info": logging.INFO,
            "success": SUCCESS,
            "warning": logging.WARNING,
            "error": logging.ERROR,
        }
        self.logger.log(levels[level], message)

    def _check_transition(self, target: Stage) -> None:
        allowed = STAGE_TRANSITIONS[self.state.current_stage]
        if target not in allowed:
            raise InvalidTransitionError(
                self.state.current_stage.value,
                target.value,
                [stage.value for stage in allowed],
            )

    def _transition_to(self, target: Stage) -> None:
        self._check_transition(target)
        self.state.current_stage = target
        self._log(f"Transitioned to {target.value}", "success")

    def _new_hypothesis(self, description: str) -> Hypothesis:
        return Hypothesis(id=generate_hypothesis_id(), description=description, evidence_score=0.0)

    @property
    def current_stage(self) -> Stage:
        return self.state.current_stage

    def observation(self, problem_statement: str) -> Stage:
        problem_statement = _require_text(
            problem_statement, "problem_statement", MIN_PROBLEM_STATEMENT_LENGTH
        )
        self._check_transition(Stage.LITERATURE_REVIEW)

        self.state.problem_statement = problem_statement
        self._log(f"Observation recorded: {problem_statement}")
        self._transition_to(Stage.LITERATURE_REVIEW)
        return self.state.current_stage

    def literature_review(self, literature: str, auto_search: bool = False) -> list[str]:
        """Record a literature entry.

        Returns advisory search queries derived from the problem statement when
        auto_search is set; nothing is actually searched.
        """
        literature = _require_text(literature, "literature", MIN_LITERATURE_LENGTH)
        self._check_transition(Stage.HYPOTHESIS_FORMATION)

        self.state.literature.append(literature)
        self._log(f"Literature added ({len(self.state.literature)} total)")

        queries = []
        if auto_search:
            if self.state.problem_statement:
                queries = build_search_queries(self.state.problem_statement)
                self._log(f"Suggested {len(queries)} search queries")
            else:
                self._log("Auto search skipped: no problem statement recorded", "warning")

        self._transition_to(Stage.HYPOTHESIS_FORMATION)
        return queries

    def hypothesis_formation(self, hypothesis: str) -> Hypothesis:
        hypothesis = _require_text(hypothesis, "hypothesis", MIN_HYPOTHESIS_LENGTH)
        self._check_transition(Stage.EXPERIMENT_DESIGN)

        new_hypothesis = self._new_hypothesis(hypothesis)
        self.state.hypotheses.append(new_hypothesis)
        self._log(f"Hypothesis formed [{new_hypothesis.id}]: {hypothesis}")
        self._transition_to(Stage.EXPERIMENT_DESIGN)
        return new_hypothesis

    def hypothesis_generation(self, hypotheses: Sequence[str]) -> list[Hypothesis]:
        """Add competing hypotheses and stay in hypothesis formation."""
        hypotheses = _require_sequence(hypotheses, "hypotheses", 1)
        for index, description in enumerate(hypotheses):
            _require_text(description, f"hypotheses[{index}]", MIN_HYPOTHESIS_LENGTH)
        self._check_transition(Stage.HYPOTHESIS_FORMATION)

        created = [self._new_hypothesis(description) for description in hypotheses]
        self.state.hypotheses.extend(created)
        self._log(f"Generated {len(created)} new hypotheses")
        self._transition_to(Stage.HYPOTHESIS_FORMATION)
        return created

    def experiment_design(self, experiment: str) -> Stage:
        experiment = _require_text(experiment, "experiment")
        self._check_transition(Stage.DATA_COLLECTION)

        self.state.experiments.append(experiment)
        self._log(f"Experiment designed: {experiment}")
        self._transition_to(Stage.DATA_COLLECTION)
        return self.state.current_stage

    def data_collection(self, data: str) -> Stage:
        data = _require_text(data, "data")
        self._check_transition(Stage.ANALYSIS)

        self.state.data.append(data)
        self._log(f"Data collected: {data}")
        self._transition_to(Stage.ANALYSIS)
        return self.state.current_stage

    def analysis(self, data: Sequence[str]) -> AnalysisReport:
        data = _require_sequence(data, "data", MIN_ANALYSIS_POINTS)
        self._check_transition(Stage.CONCLUSION)

        report = build_report(
            [str(point) for point in data],
            AnalysisType.COMPREHENSIVE,
            self.confidence_level,
        )
        self.state.analysis = summarize_report(report)
        self._log(f"Analysis performed: {self.state.analysis}")
        for recommendation in report.recommendations:
            self._log(recommendation, "warning")
        self._transition_to(Stage.CONCLUSION)
        return report

    def conclusion(self, conclusion: str) -> int:
        """Append a conclusion; only legal once the workflow has reached its final stage."""
        conclusion = _require_text(conclusion, "conclusion")
        if self.state.current_stage != Stage.CONCLUSION:
            raise InvalidTransitionError(
                self.state.current_stage.value,
                Stage.CONCLUSION.value,
                [stage.value for stage in STAGE_TRANSITIONS[self.state.current_stage]],
            )

        self.state.conclusions.append(conclusion)
        self._log(f"Conclusion drawn: {conclusion}", "success")
        return len(self.state.conclusions)

    def score_hypothesis(self, hypothesis_id: str, score: float) -> Hypothesis:
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            raise ValidationError("score must be a number", field="score")
        if math.isnan(score) or not 0 <= score <= 1:
            raise ValidationError(f"score must be between 0 and 1 (got {score})", field="score")

        hypothesis = self.state.find_hypothesis(hypothesis_id)
        if hypothesis is None:
            raise HypothesisNotFoundError(hypothesis_id)

        hypothesis.evidence_score = float(score)
        self._log(f"Hypothesis {hypothesis_id} scored with {score}")
        return hypothesis

    def check_for_breakthrough(self) -> dict:
        count = len(self.state.hypotheses)
        if count == 0:
            self._log("No hypotheses to check for breakthrough", "warning")
            return {
                "hypothesis_count": 0,
                "average_evidence_score": None,
                "tier": None,
                "message": "No hypotheses to check for breakthrough.",
            }

        average = sum(h.evidence_score for h in self.state.hypotheses) / count
        tier = LOW_EVIDENCE_TIER
        for threshold, name in BREAKTHROUGH_TIERS:
            if average >= threshold:
                tier = name
                break

        self._log(f"Average evidence score {average:.2f} ({tier})")
        return {
            "hypothesis_count": count,
            "average_evidence_score": round(average, 4),
            "tier": tier,
            "message": (
                f"Average evidence score across {count} hypotheses: {average:.2f} ({tier})."
            ),
        }

    def get_state(self) -> dict:
        state = self.state.to_dict()
        state["allowed_next_stages"] = [stage.value for stage in self.state.allowed_next_stages()]
        state["progress_percent"] = self.state.progress_percent()
        return state

    def suggest_search_queries(self, query: Optional[str] = None) -> list[str]:
        """Advisory queries from the given text, or from the problem statement."""
        source = query if query is not None else self.state.problem_statement
        if not source:
            raise ValidationError(
                "Provide a query or record a problem statement first", field="query"
            )
        source = _require_text(source, "query", 1)
        return build_search_queries(source)

    def analyze(
        self,
        data: Sequence[str],
        analysis_type: AnalysisType = AnalysisType.COMPREHENSIVE,
        confidence_level: Optional[float] = None,
    ) -> AnalysisReport:
        """Standalone analysis; does not touch the research state."""
        data = _require_sequence(data, "data", 1)
        try:
            analysis_type = AnalysisType(analysis_type)
        except ValueError:
            raise ValidationError(
                f"Unknown analysis type: {analysis_type}. "
                f"Use one of {', '.join(t.value for t in AnalysisType)}",
                field="analysis_type",
            ) from None
        if confidence_level is None:
            confidence_level = self.confidence_level

        report = build_report([str(point) for point in data], analysis_type, confidence_level)
        self._log(f"Standalone {analysis_type.value} analysis on {report.sample_size} values")
        return report
