"""
Module: questions

Purpose:
    Provides the Question dataclass - one graded question of an evaluation.
    Carries the plain-text prompt, the teacher's model answer and an
    optional pre-filled student prompt (both formatted content).

Key Functions:
    - Question.resolved_section: Section name with the "Other" fallback
    - Question.has_student_prompt: Whether the student copy shows a prompt
    - Question.to_dict() / Question.from_dict(): Serialization

Dependencies:
    - dataclasses (std)
    - math (std)

Used By:
    - core.models.documents.Document
    - core.utils.serialization
    - builder.layout (flattener, sizer, renderer)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional

# Section used for questions with an empty or missing section name
OTHER_SECTION = "Other"

# Points given to questions stored without a value
DEFAULT_POINTS = 2


def resolve_section_name(name: Optional[str]) -> str:
    """Return the section name, or the "Other" sentinel when blank."""
    if name is None or not name.strip():
        return OTHER_SECTION
    return name


@dataclass(frozen=True)
class Question:
    """
    A single graded question (immutable).

    Attributes:
        id: Unique identifier
        section_name: Label grouping questions, e.g. "Exercise 1"
        prompt_text: Plain-text question shown on both copies
        model_answer: Teacher's answer as formatted content (HTML)
        student_prompt: Pre-filled student content (HTML) or None.
            None means the student copy gets ruled lines instead; an empty
            string is still a prompt and suppresses the lines.
        points: Point value, >= 0
        order_index: Position in the stored document

    Example:
        >>> q = Question(id="q1", section_name="Ex.1", prompt_text="Solve 2x=6",
        ...              model_answer="<p>x = 3</p>")
        >>> q.has_student_prompt
        False
    """

    id: str
    section_name: str
    prompt_text: str
    model_answer: str = ""
    student_prompt: Optional[str] = None
    points: float = DEFAULT_POINTS
    order_index: int = 0

    def __post_init__(self) -> None:
        """Validate question on construction."""
        if not self.id:
            raise ValueError("question id must not be empty")
        if isinstance(self.points, bool) or not isinstance(self.points, (int, float)):
            raise ValueError(f"points must be a number: {self.points!r}")
        if not math.isfinite(self.points) or self.points < 0:
            raise ValueError(f"points must be >= 0: {self.points}")

    @property
    def resolved_section(self) -> str:
        return resolve_section_name(self.section_name)

    @property
    def has_student_prompt(self) -> bool:
        return self.student_prompt is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "section_name": self.section_name,
            "question_text": self.prompt_text,
            "teacher_answer": self.model_answer,
            "student_prompt": self.student_prompt,
            "points": self.points,
            "order_index": self.order_index,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Question":
        points = data.get("points")
        return cls(
            id=str(data["id"]),
            section_name=data.get("section_name") or "",
            prompt_text=data.get("question_text", ""),
            model_answer=data.get("teacher_answer") or "",
            student_prompt=data.get("student_prompt"),
            points=DEFAULT_POINTS if points is None else points,
            order_index=data.get("order_index", 0),
        )
