from dataclasses import dataclass

from agent_router.config.constants import ComplexityLevel
from tests.test_routing_case.data import PLANNER_QUERY


@dataclass(frozen=True)
class ComplexityCase:
    query: str
    expected_level: ComplexityLevel
    expected_score: float
    requires_multiple_steps: bool = False
    requires_external_data: bool = False
    requires_synthesis: bool = False


TEST_CASES = [
    ComplexityCase(
        query="What is 2+2?",
        expected_level=ComplexityLevel.SIMPLE,
        expected_score=0.16,
    ),
    ComplexityCase(
        query="What is the latest price of GPU compute?",
        expected_level=ComplexityLevel.MODERATE,
        expected_score=0.41,
        requires_external_data=True,
    ),
    ComplexityCase(
        query="Evaluate the pros and cons of microservices",
        expected_level=ComplexityLevel.SIMPLE,
        expected_score=0.29,
        requires_synthesis=True,
    ),
    ComplexityCase(
        query=PLANNER_QUERY,
        expected_level=ComplexityLevel.COMPLEX,
        expected_score=0.65,
        requires_multiple_steps=True,
    ),
    ComplexityCase(
        # Exactly on the simple/moderate boundary
        query=" ".join(["word"] * 15),
        expected_level=ComplexityLevel.SIMPLE,
        expected_score=0.3,
    ),
    ComplexityCase(
        query=" ".join(["word"] * 15) + "?",
        expected_level=ComplexityLevel.MODERATE,
        expected_score=0.4,
    ),
    ComplexityCase(
        query="",
        expected_level=ComplexityLevel.SIMPLE,
        expected_score=0.0,
    ),
]
