"""
Per-question-type graders for quiz submissions.
"""
from typing import Dict, Optional, Protocol

from lms.models.enums import QuestionType
from lms.models.quiz import Question


class Grader(Protocol):
    def grade(self, question: Question, answer: Optional[str]) -> bool:
        ...


class OptionChoiceGrader:
    """MCQ / true-false: the answer must be the id of a correct option."""

    def grade(self, question: Question, answer: Optional[str]) -> bool:
        if not answer:
            return False
        return any(
            option.id == answer and option.is_correct and option.deleted_at is None
            for option in question.options
        )


class TextAnswerGrader:
    """Short-answer / fill-blank: case-insensitive match against accepted answers."""

    def grade(self, question: Question, answer: Optional[str]) -> bool:
        if answer is None:
            return False
        normalized = answer.strip().lower()
        if not normalized:
            return False
        accepted = question.accepted_answers or []
        return any(normalized == str(candidate).strip().lower() for candidate in accepted)


class GraderRegistry:
    """
    Maps question types to graders.

    Question types without a grader are scored as incorrect.
    """

    def __init__(self, graders: Optional[Dict[str, Grader]] = None):
        self._graders: Dict[str, Grader] = dict(graders or {})

    def register(self, question_type: str, grader: Grader) -> None:
        self._graders[QuestionType(question_type).value] = grader

    def grade(self, question: Question, answer: Optional[str]) -> bool:
        grader = self._graders.get(question.question_type)
        if grader is None:
            return False
        return grader.grade(question, answer)


def default_registry(enable_text_grading: bool = False) -> GraderRegistry:
    registry = GraderRegistry()
    choice = OptionChoiceGrader()
    registry.register(QuestionType.MCQ, choice)
    registry.register(QuestionType.TRUE_FALSE, choice)
    if enable_text_grading:
        text = TextAnswerGrader()
        registry.register(QuestionType.SHORT_ANSWER, text)
        registry.register(QuestionType.FILL_BLANK, text)
    return registry
