"""
models/submission_model.py

A student's one and only answer sheet, plus the grade records derived from it.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

NO_ANSWER = "No answer"


class GradeResult(BaseModel):
    """Output of the MCQ auto-grader."""

    score: int = Field(0, ge=0)
    total_mcqs: int = Field(0, ge=0)
    open_ended_answers: Dict[str, str] = Field(default_factory=dict)


class GradeChange(BaseModel):
    """Outcome of marking one open-ended answer."""

    model_config = ConfigDict(populate_by_name=True)

    updated_score: int = Field(..., alias="updatedScore", ge=0)
    previous_grade: Optional[bool] = Field(None, alias="previousGrade")
    new_grade: bool = Field(..., alias="newGrade")
    score_change: int = Field(..., alias="scoreChange")


class Submission(BaseModel):
    """
    Stored submission record.

    Only score and open_answer_grades change after creation, and only through
    open-answer grading.

    Attributes:
        token:              Student token (User.id). One submission per token.
        student_name:       "First Last" snapshot taken at submission time.
        answers:            Raw answers, {question.id: answer}.
        open_ended_answers: {question.id: answer or "No answer"} for open-ended questions.
        open_answer_grades: Teacher verdicts, {question.id: bool}.
        score:              MCQ score plus open answers marked correct.
        total_mcqs:         Number of multiple-choice questions at submission time.
        submitted_at:       ISO-8601 UTC timestamp.
    """

    model_config = ConfigDict(populate_by_name=True)

    token: str = Field(..., min_length=1)
    student_name: str = Field(..., alias="studentName")
    answers: Dict[str, Any] = Field(default_factory=dict)
    open_ended_answers: Dict[str, str] = Field(default_factory=dict, alias="openEndedAnswers")
    open_answer_grades: Dict[str, bool] = Field(default_factory=dict, alias="openAnswerGrades")
    score: int = Field(0, ge=0)
    total_mcqs: int = Field(0, alias="totalMCQs", ge=0)
    submitted_at: str = Field(..., alias="submittedAt")

    def answer_for(self, question_id: str) -> Optional[Any]:
        """Submitted answer, or None when missing or blank."""
        answer = self.answers.get(question_id)
        if answer is None or answer == "":
            return None
        return answer
