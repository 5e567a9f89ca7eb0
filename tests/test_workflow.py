"""Tests for the research workflow state machine."""

import logging

import pytest

from cognatus.errors import (
    HypothesisNotFoundError,
    InsufficientDataError,
    InvalidTransitionError,
    ValidationError,
)
from cognatus.workflow import (
    PROGRESS_WEIGHTS,
    STAGE_TRANSITIONS,
    ResearchState,
    ResearchWorkflow,
    Stage,
    build_search_queries,
)
from cognatus.workflow.state import generate_hypothesis_id

from tests.conftest import HYPOTHESIS, LITERATURE, PROBLEM_STATEMENT, advance_to


class TestResearchState:
    """Tests for the state record."""

    def test_initial_stage(self):
        """A new workflow starts at observation with empty collections."""
        state = ResearchState()
        assert state.current_stage == Stage.OBSERVATION
        assert state.problem_statement is None
        assert state.hypotheses == []
        assert state.analysis is None

    def test_progress_weights_sum_to_100(self):
        assert sum(PROGRESS_WEIGHTS.values()) == 100

    def test_progress_percent(self):
        state = ResearchState(problem_statement="Something worth studying", literature=["entry"])
        assert state.progress_percent() == 30

    def test_transition_table_is_complete(self):
        assert set(STAGE_TRANSITIONS) == set(Stage)
        assert STAGE_TRANSITIONS[Stage.CONCLUSION] == ()

    def test_hypothesis_ids_are_unique(self):
        ids = {generate_hypothesis_id() for _ in range(2000)}
        assert len(ids) == 2000


class TestStageTransitions:
    """Tests for transition legality."""

    def test_main_path(self, workflow):
        advance_to(workflow, Stage.CONCLUSION)
        assert workflow.current_stage == Stage.CONCLUSION

    @pytest.mark.parametrize("target", list(Stage))
    def test_each_stage_reachable(self, workflow, target):
        advance_to(workflow, target)
        assert workflow.current_stage == target

    def test_hypothesis_generation_self_loop(self, workflow):
        advance_to(workflow, Stage.HYPOTHESIS_FORMATION)
        workflow.hypothesis_generation([HYPOTHESIS, "Dough temperature is the dominant factor."])
        assert workflow.current_stage == Stage.HYPOTHESIS_FORMATION
        workflow.hypothesis_generation(["Flour protein content modulates rise speed."])
        assert workflow.current_stage == Stage.HYPOTHESIS_FORMATION
        workflow.hypothesis_formation(HYPOTHESIS)
        assert workflow.current_stage == Stage.EXPERIMENT_DESIGN
        assert len(workflow.state.hypotheses) == 4

    @pytest.mark.parametrize("operation, args", [
        ("literature_review", (LITERATURE,)),
        ("hypothesis_formation", (HYPOTHESIS,)),
        ("hypothesis_generation", ([HYPOTHESIS],)),
        ("experiment_design", ("Controlled proofing",)),
        ("data_collection", ("Rise heights",)),
        ("analysis", (["1", "2", "3"],)),
        ("conclusion", ("Humidity matters",)),
    ])
    def test_invalid_from_observation(self, workflow, operation, args):
        """Anything but observation is rejected at the start, without mutation."""
        before = workflow.get_state()

        with pytest.raises(InvalidTransitionError) as exc_info:
            getattr(workflow, operation)(*args)

        assert workflow.get_state() == before
        assert exc_info.value.current_stage == "observation"
        assert exc_info.value.allowed == ["literature_review"]

    def test_no_re_observation(self, workflow):
        advance_to(workflow, Stage.LITERATURE_REVIEW)
        with pytest.raises(InvalidTransitionError):
            workflow.observation("A completely different problem statement")
        assert workflow.state.problem_statement == PROBLEM_STATEMENT

    def test_error_names_allowed_stages(self, workflow):
        advance_to(workflow, Stage.HYPOTHESIS_FORMATION)
        with pytest.raises(InvalidTransitionError) as exc_info:
            workflow.data_collection("too early")
        error = exc_info.value
        assert error.current_stage == "hypothesis_formation"
        assert error.target_stage == "analysis"
        assert error.allowed == ["experiment_design", "hypothesis_formation"]
        assert "experiment_design" in str(error)

    def test_conclusion_is_terminal(self, workflow):
        advance_to(workflow, Stage.CONCLUSION)
        assert workflow.get_state()["allowed_next_stages"] == []
        with pytest.raises(InvalidTransitionError):
            workflow.experiment_design("Run it again")

    def test_repeated_conclusions_append(self, workflow):
        advance_to(workflow, Stage.CONCLUSION)
        assert workflow.conclusion("Humidity speeds up fermentation") == 1
        assert workflow.conclusion("Temperature was a confound") == 2
        assert workflow.current_stage == Stage.CONCLUSION


class TestValidation:
    """Tests for stage input validation."""

    def test_short_problem_statement(self, workflow):
        with pytest.raises(ValidationError) as exc_info:
            workflow.observation("too short")
        assert exc_info.value.field == "problem_statement"
        assert workflow.current_stage == Stage.OBSERVATION

    def test_short_literature(self, workflow):
        advance_to(workflow, Stage.LITERATURE_REVIEW)
        with pytest.raises(ValidationError):
            workflow.literature_review("brief note")

    def test_short_hypothesis(self, workflow):
        advance_to(workflow, Stage.HYPOTHESIS_FORMATION)
        with pytest.raises(ValidationError):
            workflow.hypothesis_formation("humidity helps")

    def test_empty_hypothesis_generation(self, workflow):
        advance_to(workflow, Stage.HYPOTHESIS_FORMATION)
        with pytest.raises(ValidationError):
            workflow.hypothesis_generation([])

    def test_generation_rejects_short_entries(self, workflow):
        advance_to(workflow, Stage.HYPOTHESIS_FORMATION)
        with pytest.raises(ValidationError):
            workflow.hypothesis_generation([HYPOTHESIS, "too short"])
        assert workflow.state.hypotheses == []

    def test_generation_rejects_plain_string(self, workflow):
        advance_to(workflow, Stage.HYPOTHESIS_FORMATION)
        with pytest.raises(ValidationError):
            workflow.hypothesis_generation(HYPOTHESIS)

    def test_experiment_and_data_have_no_minimum(self, workflow):
        advance_to(workflow, Stage.EXPERIMENT_DESIGN)
        workflow.experiment_design("x")
        workflow.data_collection("")
        assert workflow.current_stage == Stage.ANALYSIS

    def test_analysis_needs_two_points(self, workflow):
        advance_to(workflow, Stage.ANALYSIS)
        with pytest.raises(ValidationError):
            workflow.analysis(["42"])
        assert workflow.current_stage == Stage.ANALYSIS

    def test_analysis_needs_numbers(self, workflow):
        advance_to(workflow, Stage.ANALYSIS)
        with pytest.raises(InsufficientDataError):
            workflow.analysis(["abc", "def"])
        assert workflow.current_stage == Stage.ANALYSIS
        assert workflow.state.analysis is None


class TestStageOperations:
    """Tests for what each stage records."""

    def test_observation_sets_problem_statement(self, workflow):
        workflow.observation(PROBLEM_STATEMENT)
        assert workflow.state.problem_statement == PROBLEM_STATEMENT
        assert workflow.state.literature == []

    def test_hypothesis_starts_unscored(self, workflow):
        advance_to(workflow, Stage.HYPOTHESIS_FORMATION)
        hypothesis = workflow.hypothesis_formation(HYPOTHESIS)
        assert hypothesis.evidence_score == 0
        assert workflow.state.hypotheses == [hypothesis]

    def test_analysis_stores_summary(self, workflow):
        advance_to(workflow, Stage.ANALYSIS)
        report = workflow.analysis(["4.1", "3.9", "5.2", "4.8", "5.0"])
        assert report.sample_size == 5
        assert workflow.state.analysis is not None
        assert "\n" not in workflow.state.analysis
        assert workflow.state.data == ["Rise heights in cm after 4 hours"]

    def test_append_only_prefixes(self, workflow):
        """Earlier entries survive every later call unchanged and in order."""
        advance_to(workflow, Stage.HYPOTHESIS_FORMATION)
        literature_before = list(workflow.state.literature)
        workflow.hypothesis_generation([HYPOTHESIS])
        hypotheses_before = [h.id for h in workflow.state.hypotheses]
        workflow.hypothesis_generation(["Dough temperature is the dominant factor."])
        workflow.hypothesis_formation("Salt concentration slows the rise noticeably.")

        assert workflow.state.literature[:len(literature_before)] == literature_before
        ids = [h.id for h in workflow.state.hypotheses]
        assert ids[:len(hypotheses_before)] == hypotheses_before
        assert len(ids) == 3

        workflow.experiment_design("first")
        workflow.data_collection("readings")
        workflow.analysis(["1", "2"])
        workflow.conclusion("one")
        workflow.conclusion("two")
        assert workflow.state.experiments == ["first"]
        assert workflow.state.conclusions == ["one", "two"]

    def test_progress_over_full_run(self, workflow):
        assert workflow.get_state()["progress_percent"] == 0
        advance_to(workflow, Stage.CONCLUSION)
        assert workflow.get_state()["progress_percent"] == 90
        workflow.conclusion("Done")
        assert workflow.get_state()["progress_percent"] == 100

    def test_get_state_is_read_only(self, workflow):
        advance_to(workflow, Stage.EXPERIMENT_DESIGN)
        snapshot = workflow.get_state()
        snapshot["literature"].append("tampered")
        snapshot["hypotheses"][0]["evidence_score"] = 1.0
        assert "tampered" not in workflow.state.literature
        assert workflow.state.hypotheses[0].evidence_score == 0


class TestSearchQueries:
    """Tests for advisory literature search queries."""

    def test_auto_search_suggestions(self, workflow):
        advance_to(workflow, Stage.LITERATURE_REVIEW)
        queries = workflow.literature_review(LITERATURE, auto_search=True)
        assert queries == [
            "sourdough bread research",
            "sourdough bread study",
            PROBLEM_STATEMENT[:50].strip(),
        ]

    def test_no_suggestions_without_auto_search(self, workflow):
        advance_to(workflow, Stage.LITERATURE_REVIEW)
        assert workflow.literature_review(LITERATURE) == []

    def test_stop_words_and_short_tokens_skipped(self):
        queries = build_search_queries("Which effects would those tiny plants have on soil chemistry")
        assert queries[0] == "plants chemistry research"

    def test_statement_without_terms(self):
        assert build_search_queries("Is it hot?") == ["Is it hot?"]

    def test_suggest_from_explicit_query(self, workflow):
        queries = workflow.suggest_search_queries("protein folding kinetics")
        assert queries[0] == "protein folding research"
        assert workflow.current_stage == Stage.OBSERVATION

    def test_suggest_without_source(self, workflow):
        with pytest.raises(ValidationError):
            workflow.suggest_search_queries()


class TestHypothesisScoring:
    """Tests for evidence scoring and breakthrough checks."""

    @pytest.fixture
    def scored_workflow(self, workflow):
        advance_to(workflow, Stage.HYPOTHESIS_FORMATION)
        workflow.hypothesis_generation([HYPOTHESIS, "Dough temperature is the dominant factor."])
        return workflow

    @pytest.mark.parametrize("score", [-0.1, 1.01, 5, float("nan"), float("inf")])
    def test_out_of_range_score(self, scored_workflow, score):
        hypothesis_id = scored_workflow.state.hypotheses[0].id
        with pytest.raises(ValidationError):
            scored_workflow.score_hypothesis(hypothesis_id, score)

    def test_non_numeric_score(self, scored_workflow):
        hypothesis_id = scored_workflow.state.hypotheses[0].id
        with pytest.raises(ValidationError):
            scored_workflow.score_hypothesis(hypothesis_id, "0.5")
        with pytest.raises(ValidationError):
            scored_workflow.score_hypothesis(hypothesis_id, True)

    def test_unknown_hypothesis(self, scored_workflow):
        with pytest.raises(HypothesisNotFoundError) as exc_info:
            scored_workflow.score_hypothesis("hyp_missing", 0.5)
        assert exc_info.value.hypothesis_id == "hyp_missing"

    def test_scoring_is_idempotent(self, scored_workflow):
        hypothesis_id = scored_workflow.state.hypotheses[1].id
        scored_workflow.score_hypothesis(hypothesis_id, 0.7)
        first = scored_workflow.get_state()
        scored_workflow.score_hypothesis(hypothesis_id, 0.7)
        assert scored_workflow.get_state() == first

    def test_scoring_keeps_stage(self, scored_workflow):
        scored_workflow.score_hypothesis(scored_workflow.state.hypotheses[0].id, 1)
        assert scored_workflow.current_stage == Stage.HYPOTHESIS_FORMATION

    def test_no_hypotheses(self, workflow):
        result = workflow.check_for_breakthrough()
        assert result["tier"] is None
        assert "No hypotheses" in result["message"]

    @pytest.mark.parametrize("scores, tier", [
        ((0.9, 0.9), "breakthrough"),
        ((0.8, 0.8), "breakthrough"),
        ((0.7, 0.5), "strong"),
        ((0.4, 0.4), "moderate"),
        ((0.1, 0.1), "low evidence"),
        ((0.0, 0.0), "low evidence"),
    ])
    def test_breakthrough_tiers(self, scored_workflow, scores, tier):
        for hypothesis, score in zip(scored_workflow.state.hypotheses, scores):
            scored_workflow.score_hypothesis(hypothesis.id, score)
        result = scored_workflow.check_for_breakthrough()
        assert result["tier"] == tier
        assert result["hypothesis_count"] == 2


class TestStandaloneAnalysis:
    """Tests for analysis outside the stage flow."""

    def test_does_not_touch_state(self, workflow):
        before = workflow.get_state()
        report = workflow.analyze(["1", "2", "3", "4"], "regression")
        assert report.regression
        assert workflow.get_state() == before

    def test_unknown_type(self, workflow):
        with pytest.raises(ValidationError):
            workflow.analyze(["1", "2"], "bayesian")

    def test_uses_workflow_confidence_level(self):
        workflow = ResearchWorkflow(confidence_level=0.99)
        report = workflow.analyze(["1", "2", "3", "4", "5"], "inferential")
        assert report.inferential_stats[1].metric == "Margin of error (99% CI)"


class TestLogging:
    """Tests for operation status lines."""

    def test_transition_logged_as_success(self, workflow, caplog):
        with caplog.at_level(logging.INFO, logger="cognatus.workflow"):
            workflow.observation(PROBLEM_STATEMENT)

        levels = {record.getMessage(): record.levelname for record in caplog.records}
        assert levels["Transitioned to literature_review"] == "SUCCESS"
        assert any(message.startswith("Observation recorded") for message in levels)

    def test_custom_logger(self, caplog):
        workflow = ResearchWorkflow(logger=logging.getLogger("test.session"))
        with caplog.at_level(logging.INFO, logger="test.session"):
            workflow.check_for_breakthrough()
        assert caplog.records[0].levelname == "WARNING"
