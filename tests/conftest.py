import pytest
import sys
from pathlib import Path
from typing import Dict, Optional

# Add src to sys.path so we can import evaluation_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from evaluation_toolkit.builder.layout import BlockKind, MeasurementOracle
from evaluation_toolkit.core.models import Category, Document, Question


class FakeOracle(MeasurementOracle):
    """
    Deterministic oracle for layout tests.

    Heights come from a lookup keyed by block text; unknown blocks measure
    ``default`` per non-empty block. Blocks listed in ``failing`` raise.
    """

    def __init__(
        self,
        heights: Optional[Dict[str, float]] = None,
        default: float = 20,
        heading: float = 25,
        failing: tuple = (),
        fallback_height: float = 30,
    ):
        super().__init__(fallback_height=fallback_height)
        self.heights = heights or {}
        self.default = default
        self.heading = heading
        self.failing = failing
        self.calls = []

    def _measure(self, block: str, width: float, kind: BlockKind) -> float:
        self.calls.append((block, width, kind))
        if block in self.failing:
            raise ValueError(f"cannot lay out {block!r}")
        if kind is BlockKind.SECTION_HEADING:
            return self.heading
        if block in self.heights:
            return self.heights[block]
        return self.default if block else 0


# Common test fixtures
@pytest.fixture
def fake_oracle():
    """Oracle with fixed heights (20 per block, 25 per heading)."""
    return FakeOracle()


@pytest.fixture
def make_oracle():
    """Factory for FakeOracle with custom heights."""
    return FakeOracle


@pytest.fixture
def question_factory():
    """Factory to create questions with sensible defaults."""
    def _create(
        question_id: str,
        section: str = "Ex.1",
        answer: str = "",
        prompt: Optional[str] = None,
        points: float = 2,
        order_index: int = 0,
        text: Optional[str] = None,
    ) -> Question:
        return Question(
            id=question_id,
            section_name=section,
            prompt_text=text if text is not None else f"Question {question_id}",
            model_answer=answer,
            student_prompt=prompt,
            points=points,
            order_index=order_index,
        )
    return _create


@pytest.fixture
def sample_document(question_factory) -> Document:
    """Two sections, four questions, one with a student prompt."""
    return Document(
        id="photosynthesis-quiz",
        title="Photosynthesis Quiz",
        category_id="bio",
        questions=(
            question_factory("q1", "Vocabulary", answer="<p>Chlorophyll</p>", points=1),
            question_factory("q2", "Vocabulary", answer="<p>Stomata let <b>CO2</b> in.</p>"),
            question_factory(
                "q3", "Diagram",
                answer="<ul><li>Light</li><li>Water</li><li>CO2</li></ul>",
                prompt="<p>Label the leaf: ____ ____ ____</p>",
                points=3,
            ),
            question_factory("q4", "", answer="<p>Glucose and oxygen.</p>", points=1.5),
        ),
    )


@pytest.fixture
def sample_category() -> Category:
    return Category(id="bio", name="Biology", color="#16a34a")


@pytest.fixture
def sample_image(tmp_path: Path):
    """Create a simple test image."""
    from PIL import Image

    img = Image.new("RGB", (200, 100), color="white")
    img_path = tmp_path / "sample.png"
    img.save(img_path)
    return img_path
