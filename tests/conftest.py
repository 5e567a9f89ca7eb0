"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from cognatus.tools import ResearchTools
from cognatus.workflow import ResearchWorkflow, Stage


PROBLEM_STATEMENT = "Why does sourdough bread rise faster in humid kitchens during summer?"
LITERATURE = "Yeast activity increases with temperature and humidity according to baking studies."
HYPOTHESIS = "Higher ambient humidity accelerates yeast fermentation in sourdough."


def advance_to(workflow: ResearchWorkflow, stage: Stage) -> ResearchWorkflow:
    """Drive a fresh workflow forward along the main path until it reaches stage."""
    steps = [
        (Stage.LITERATURE_REVIEW, lambda: workflow.observation(PROBLEM_STATEMENT)),
        (Stage.HYPOTHESIS_FORMATION, lambda: workflow.literature_review(LITERATURE)),
        (Stage.EXPERIMENT_DESIGN, lambda: workflow.hypothesis_formation(HYPOTHESIS)),
        (Stage.DATA_COLLECTION, lambda: workflow.experiment_design("Proof dough at 40% vs 80% RH")),
        (Stage.ANALYSIS, lambda: workflow.data_collection("Rise heights in cm after 4 hours")),
        (Stage.CONCLUSION, lambda: workflow.analysis(["4.1", "3.9", "5.2", "4.8", "5.0"])),
    ]
    for reached, step in steps:
        if workflow.current_stage == stage:
            break
        step()
        assert workflow.current_stage == reached
    return workflow


@pytest.fixture
def workflow():
    """Fresh research workflow at the observation stage."""
    return ResearchWorkflow()


@pytest.fixture
def tools(workflow):
    """Tool handlers bound to the workflow fixture."""
    return ResearchTools(workflow)


@pytest.fixture
def rising_series():
    """Strictly increasing measurements."""
    return [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0]


@pytest.fixture
def sample_points():
    """Raw data points as an agent would send them."""
    return [
        "Trial 1: 12.5 cm",
        "Trial 2: 13.1 cm",
        "Trial 3: 11.8 cm",
        "Trial 4: 12.9 cm",
        "Trial 5: 13.4 cm",
    ]
