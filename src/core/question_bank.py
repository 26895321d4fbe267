"""
In-memory question bank feeding new mock sessions.
"""

import logging
from collections import Counter
from typing import Iterable

from src.models.question import BankQuestion, Question

logger = logging.getLogger(__name__)


class QuestionBank:
    """Questions keyed by ID, in insertion order, with how often each was practiced."""

    def __init__(self, questions: Iterable[Question] = ()):
        self._questions: dict[str, Question] = {}
        self._practice: Counter[str] = Counter()
        self.add_many(questions)

    def add_many(self, questions: Iterable[Question]) -> int:
        added = 0
        for question in questions:
            if question.id not in self._questions:
                added += 1
            self._questions[question.id] = question
        if added:
            logger.info(f"Question bank: {added} added, {len(self._questions)} total")
        return added

    def replace(self, questions: Iterable[Question]) -> None:
        self._questions.clear()
        self._practice.clear()
        self.add_many(questions)

    def get(self, question_id: str) -> Question | None:
        return self._questions.get(question_id)

    def all(self) -> list[Question]:
        return list(self._questions.values())

    def record_practice(self, question_ids: Iterable[str]) -> None:
        """Count one practice for each distinct ID; IDs not in the bank are ignored."""
        practiced = {qid for qid in question_ids if qid in self._questions}
        self._practice.update(practiced)
        if practiced:
            logger.debug(f"Question bank: practice recorded for {sorted(practiced)}")

    def practice_count(self, question_id: str) -> int:
        return self._practice[question_id]

    def with_practice(self) -> list[BankQuestion]:
        """All questions with their practice counts."""
        return [
            BankQuestion(**question.model_dump(), practice_count=self._practice[question.id])
            for question in self._questions.values()
        ]

    def __len__(self) -> int:
        return len(self._questions)
