"""
Module: documents

Purpose:
    Provides the Document dataclass - a complete evaluation - and the
    derived Section view. Sections are never stored: they are computed from
    the questions' section names in first-occurrence order.

Key Functions:
    - Document.sections: Derived sections (cached)
    - Document.total_points: Sum of all question points
    - Document.to_dict() / Document.from_dict(): Serialization

Dependencies:
    - dataclasses (std)
    - functools (std)
    - .questions.Question

Used By:
    - core.utils.serialization
    - storage.repository
    - builder.layout.flattener
    - builder.controller
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Any, Optional

from .questions import Question


@dataclass(frozen=True)
class Section:
    """
    Questions sharing a section name (derived, immutable).

    Attributes:
        name: Resolved section name ("Other" for blank names)
        questions: Member questions in document order
    """

    name: str
    questions: tuple[Question, ...]

    @property
    def points(self) -> float:
        """Sum of member question points. Always calculated."""
        return sum(q.points for q in self.questions)

    @property
    def question_count(self) -> int:
        return len(self.questions)


@dataclass(frozen=True)
class Document:
    """
    A test document (immutable).

    Attributes:
        id: Unique identifier
        title: Title printed in the banner and footer
        category_id: Reference to a Category (may be empty)
        questions: Questions in stored order
        created_at: Optional ISO timestamp

    Invariants:
        - sections and total_points are always calculated from questions
        - question ids are unique

    Example:
        >>> doc = Document(id="d1", title="Algebra", category_id="maths",
        ...                questions=(q1, q2))
        >>> [s.name for s in doc.sections]
        ['Ex.1', 'Ex.2']
    """

    id: str
    title: str
    category_id: str = ""
    questions: tuple[Question, ...] = ()
    created_at: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate document on construction."""
        if not self.id:
            raise ValueError("document id must not be empty")
        if not isinstance(self.title, str):
            raise ValueError(f"document title must be a string: {self.title!r}")
        seen: set[str] = set()
        for question in self.questions:
            if question.id in seen:
                raise ValueError(f"duplicate question id: {question.id!r}")
            seen.add(question.id)

    # ─────────────────────────────────────────────────────────────────────────
    # Calculated Properties (NEVER stored)
    # ─────────────────────────────────────────────────────────────────────────

    @cached_property
    def sections(self) -> tuple[Section, ...]:
        """
        Group questions by section name in first-occurrence order.

        Questions keep their document order inside each section. Sections
        only exist through their questions, so none is ever empty.
        """
        grouped: dict[str, list[Question]] = {}
        for question in self.questions:
            grouped.setdefault(question.resolved_section, []).append(question)
        return tuple(Section(name, tuple(qs)) for name, qs in grouped.items())

    @property
    def total_points(self) -> float:
        return sum(q.points for q in self.questions)

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def is_empty(self) -> bool:
        return not self.questions

    def get_question(self, question_id: str) -> Optional[Question]:
        """Find a question by id."""
        return next((q for q in self.questions if q.id == question_id), None)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "category_id": self.category_id,
            "questions": [q.to_dict() for q in self.questions],
        }
        if self.created_at is not None:
            data["created_at"] = self.created_at
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Document":
        questions = [Question.from_dict(q) for q in data.get("questions", [])]
        # sorted() is stable: equal order_index keeps stored order
        questions.sort(key=lambda q: q.order_index)
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            category_id=data.get("category_id") or "",
            questions=tuple(questions),
            created_at=data.get("created_at"),
        )
