"""Research tools - text-in/text-out handlers over one ResearchWorkflow.

Handlers never raise: every failure comes back as "Error in <operation>: <message>"
because the caller is usually an agent that can read text but not exceptions.
"""

import functools
import json
import logging
from typing import Optional

from cognatus.analysis import AnalysisType, format_report
from cognatus.errors import CognatusError
from cognatus.workflow import ResearchWorkflow


logger = logging.getLogger("cognatus.tools")


class ErrorText(str):
    """Tool reply text that reports a failure."""


def error_text(operation: str, error: Exception) -> ErrorText:
    message = error.message if isinstance(error, CognatusError) else str(error)
    return ErrorText(f"Error in {operation}: {message}")


def reports_errors(operation: str):
    """Turn any exception raised by a tool handler into an error payload."""
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> str:
            try:
                return await func(*args, **kwargs)
            except CognatusError as e:
                logger.warning(f"{operation} rejected: {e.message}")
                return error_text(operation, e)
            except Exception as e:
                logger.exception(f"Unexpected error in {operation}")
                return error_text(operation, e)
        return wrapper
    return decorator


class ResearchTools:
    """Tool handlers bound to a single research session."""

    def __init__(self, workflow: Optional[ResearchWorkflow] = None):
        self.workflow = workflow or ResearchWorkflow()

    def _stage_line(self) -> str:
        return f"Current stage: {self.workflow.current_stage.value}"

    @reports_errors("observation")
    async def observation(self, problem_statement: str) -> str:
        self.workflow.observation(problem_statement)
        return f"Observation recorded. {self._stage_line()}"

    @reports_errors("literature_review")
    async def literature_review(self, literature: str, auto_search: bool = False) -> str:
        queries = self.workflow.literature_review(literature, auto_search=auto_search)
        lines = [f"Literature added. {self._stage_line()}"]
        if queries:
            lines.append("Suggested search queries (not executed):")
            lines += [f"- {q}" for q in queries]
        return "\n".join(lines)

    @reports_errors("hypothesis_formation")
    async def hypothesis_formation(self, hypothesis: str) -> str:
        created = self.workflow.hypothesis_formation(hypothesis)
        return f"Hypothesis formed with ID {created.id}. {self._stage_line()}"

    @reports_errors("hypothesis_generation")
    async def hypothesis_generation(self, hypotheses: list[str]) -> str:
        created = self.workflow.hypothesis_generation(hypotheses)
        lines = [f"Generated {len(created)} hypotheses. {self._stage_line()}"]
        lines += [f"- {h.id}: {h.description}" for h in created]
        return "\n".join(lines)

    @reports_errors("experiment_design")
    async def experiment_design(self, experiment: str) -> str:
        self.workflow.experiment_design(experiment)
        return f"Experiment designed. {self._stage_line()}"

    @reports_errors("data_collection")
    async def data_collection(self, data: str) -> str:
        self.workflow.data_collection(data)
        return f"Data collected. {self._stage_line()}"

    @reports_errors("analysis")
    async def analysis(self, data: list[str]) -> str:
        report = self.workflow.analysis(data)
        return f"{format_report(report)}\n\nAnalysis recorded. {self._stage_line()}"

    @reports_errors("conclusion")
    async def conclusion(self, conclusion: str) -> str:
        count = self.workflow.conclusion(conclusion)
        return f"Conclusion drawn ({count} total). Research complete."

    @reports_errors("score_hypothesis")
    async def score_hypothesis(self, hypothesis_id: str, score: float) -> str:
        hypothesis = self.workflow.score_hypothesis(hypothesis_id, score)
        return f"Hypothesis {hypothesis.id} evidence score updated to {hypothesis.evidence_score}."

    @reports_errors("check_for_breakthrough")
    async def check_for_breakthrough(self) -> str:
        result = self.workflow.check_for_breakthrough()
        if result["tier"] is None:
            return result["message"]
        return json.dumps(result, indent=2)

    @reports_errors("get_state")
    async def get_state(self) -> str:
        return json.dumps(self.workflow.get_state(), indent=2, ensure_ascii=False)

    @reports_errors("literature_search")
    async def literature_search(self, query: Optional[str] = None) -> str:
        queries = self.workflow.suggest_search_queries(query)
        lines = ["Suggested search queries (advisory only, no search performed):"]
        lines += [f"- {q}" for q in queries]
        return "\n".join(lines)

    @reports_errors("data_analysis")
    async def data_analysis(
        self,
        data: list[str],
        analysis_type: str = AnalysisType.COMPREHENSIVE.value,
        confidence_level: Optional[float] = None,
    ) -> str:
        report = self.workflow.analyze(data, analysis_type, confidence_level)
        return format_report(report)

    def handlers(self) -> dict:
        """Map tool names to bound handlers."""
        return {
            "observation": self.observation,
            "literature_review": self.literature_review,
            "hypothesis_formation": self.hypothesis_formation,
            "hypothesis_generation": self.hypothesis_generation,
            "experiment_design": self.experiment_design,
            "data_collection": self.data_collection,
            "analysis": self.analysis,
            "conclusion": self.conclusion,
            "score_hypothesis": self.score_hypothesis,
            "check_for_breakthrough": self.check_for_breakthrough,
            "get_state": self.get_state,
            "literature_search": self.literature_search,
            "data_analysis": self.data_analysis,
        }
