"""Research state - stages, transition table, hypotheses and progress."""

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Stage(str, Enum):
    OBSERVATION = "observation"
    LITERATURE_REVIEW = "literature_review"
    HYPOTHESIS_FORMATION = "hypothesis_formation"
    EXPERIMENT_DESIGN = "experiment_design"
    DATA_COLLECTION = "data_collection"
    ANALYSIS = "analysis"
    CONCLUSION = "conclusion"


STAGE_TRANSITIONS: dict[Stage, tuple[Stage, ...]] = {
    Stage.OBSERVATION: (Stage.LITERATURE_REVIEW,),
    Stage.LITERATURE_REVIEW: (Stage.HYPOTHESIS_FORMATION,),
    Stage.HYPOTHESIS_FORMATION: (Stage.EXPERIMENT_DESIGN, Stage.HYPOTHESIS_FORMATION),
    Stage.EXPERIMENT_DESIGN: (Stage.DATA_COLLECTION,),
    Stage.DATA_COLLECTION: (Stage.ANALYSIS,),
    Stage.ANALYSIS: (Stage.CONCLUSION,),
    Stage.CONCLUSION: (),
}

# Weighted completion, sums to 100
PROGRESS_WEIGHTS = {
    "problem_statement": 15,
    "literature": 15,
    "hypotheses": 20,
    "experiments": 15,
    "data": 15,
    "analysis": 10,
    "conclusions": 10,
}


def _base36(number: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if number == 0:
        return "0"
    encoded = ""
    while number:
        number, remainder = divmod(number, 36)
        encoded = digits[remainder] + encoded
    return encoded


def generate_hypothesis_id() -> str:
    """Millisecond timestamp in base 36 plus a random suffix."""
    return f"hyp_{_base36(int(time.time() * 1000))}{uuid.uuid4().hex[:12]}"


@dataclass
class Hypothesis:
    id: str
    description: str
    evidence_score: float = 0.0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "description": self.description,
            "evidence_score": self.evidence_score,
        }


@dataclass
class ResearchState:
    """Current state of one research session."""
    current_stage: Stage = Stage.OBSERVATION
    problem_statement: Optional[str] = None
    literature: list[str] = field(default_factory=list)
    hypotheses: list[Hypothesis] = field(default_factory=list)
    experiments: list[str] = field(default_factory=list)
    data: list[str] = field(default_factory=list)
    analysis: Optional[str] = None
    conclusions: list[str] = field(default_factory=list)

    def allowed_next_stages(self) -> list[Stage]:
        return list(STAGE_TRANSITIONS[self.current_stage])

    def find_hypothesis(self, hypothesis_id: str) -> Optional[Hypothesis]:
        for hypothesis in self.hypotheses:
            if hypothesis.id == hypothesis_id:
                return hypothesis
        return None

    def progress_percent(self) -> int:
        completed = {
            "problem_statement": self.problem_statement is not None,
            "literature": bool(self.literature),
            "hypotheses": bool(self.hypotheses),
            "experiments": bool(self.experiments),
            "data": bool(self.data),
            "analysis": self.analysis is not None,
            "conclusions": bool(self.conclusions),
        }
        return sum(weight for key, weight in PROGRESS_WEIGHTS.items() if completed[key])

    def to_dict(self) -> dict:
        return {
            "current_stage": self.current_stage.value,
            "problem_statement": self.problem_statement,
            "literature": list(self.literature),
            "hypotheses": [h.to_dict() for h in self.hypotheses],
            "experiments": list(self.experiments),
            "data": list(self.data),
            "analysis": self.analysis,
            "conclusions": list(self.conclusions),
        }
