"""
services/exam_service.py

Quiz grading and result reporting.

grade_submission() and score_change() are pure functions. The remaining
functions read or update the store, each with at most one write.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError as ModelValidationError

from classroom_quiz.errors import (
    DuplicateSubmissionError, NotFoundError, StoreError, ValidationError,
)
from classroom_quiz.models.question_model import Question
from classroom_quiz.models.submission_model import NO_ANSWER, GradeChange, GradeResult, Submission
from classroom_quiz.models.user_model import User
from classroom_quiz.services.record_store import QUESTIONS, SUBMISSIONS, JsonRecordStore

logger = logging.getLogger(__name__)


def load_questions(store: JsonRecordStore) -> List[Question]:
    raw = store.read(QUESTIONS).get("questions", [])
    try:
        return [Question.model_validate(q) for q in raw]
    except ModelValidationError as e:
        logger.warning(f"questions.json has an invalid question: {e}")
        raise StoreError("Question bank is corrupt.") from e


def _is_blank(answer: Any) -> bool:
    return answer is None or answer == ""


# ── Auto-grading ──────────────────────────────────────────────────────────────

def grade_submission(
    questions: List[Question],
    answers: Mapping[str, Any],
) -> GradeResult:
    """
    Grade the multiple-choice part of an answer sheet.

    An MCQ is correct when the submitted answer equals question.correct_answer,
    case-insensitively. Missing answers are wrong. Open-ended answers are only
    collected here; a teacher grades them later.

    Args:
        questions: Question bank.
        answers:   {question.id: answer}

    Returns:
        GradeResult with score, total_mcqs and {question.id: answer or "No answer"}
        for every open-ended question.
    """
    score = 0
    total_mcqs = 0
    open_ended: Dict[str, str] = {}

    for q in questions:
        answer = answers.get(q.id)
        if q.is_multiple_choice:
            total_mcqs += 1
            if not _is_blank(answer) and str(answer).lower() == q.correct_answer.lower():
                score += 1
        else:
            open_ended[q.id] = NO_ANSWER if _is_blank(answer) else str(answer)

    return GradeResult(score=score, total_mcqs=total_mcqs, open_ended_answers=open_ended)


def _submissions(data: dict) -> List[Submission]:
    return [Submission.model_validate(s) for s in data.get("submissions", [])]


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def submit(
    store: JsonRecordStore,
    questions: List[Question],
    student: User,
    answers,
) -> Submission:
    """
    Grade and store a student's answers. A token may submit only once.

    Raises:
        ValidationError:          answers missing or not an object.
        DuplicateSubmissionError: the student already submitted.
    """
    if answers is None:
        raise ValidationError("Token and answers required")
    if not isinstance(answers, Mapping):
        raise ValidationError("answers must be an object keyed by question id")

    answers = {str(k): v for k, v in answers.items()}
    grade = grade_submission(questions, answers)

    def _insert(data: dict) -> Submission:
        if any(s.token == student.id for s in _submissions(data)):
            logger.warning(f"Duplicate submission rejected for {student.full_name}")
            raise DuplicateSubmissionError("You have already submitted your answers.")
        submission = Submission(
            token=student.id,
            student_name=student.full_name,
            answers=answers,
            open_ended_answers=grade.open_ended_answers,
            open_answer_grades={},
            score=grade.score,
            total_mcqs=grade.total_mcqs,
            submitted_at=_timestamp(),
        )
        data.setdefault("submissions", []).append(submission.model_dump(by_alias=True, mode="json"))
        return submission

    submission = store.update(SUBMISSIONS, _insert)
    logger.info(f"Submission from {student.full_name}: {grade.score}/{grade.total_mcqs} MCQ")
    return submission


# ── Open-answer grading ─────────────────────────────────────────────────────

def score_change(previous: Optional[bool], new: bool) -> int:
    """
    Score delta for re-grading one open-ended answer.

    ungraded -> True: +1, False -> True: +1, True -> False: -1, anything else: 0.
    Marking the same verdict twice never counts twice.
    """
    if new and not previous:
        return 1
    if not new and previous:
        return -1
    return 0


def find_open_question(
    questions: List[Question],
    question_text: Optional[str] = None,
    question_id: Optional[str] = None,
) -> Question:
    """
    Locate an open-ended question by id, or by text when no id is given.

    Raises:
        ValidationError: neither given, or the text matches several questions.
        NotFoundError:   no open-ended question matches.
    """
    open_questions = [q for q in questions if q.is_open_ended]

    if question_id:
        for q in open_questions:
            if q.id == str(question_id):
                return q
        raise NotFoundError("Open-ended question not found.")

    if not question_text:
        raise ValidationError("questionText or questionId required")
    matches = [q for q in open_questions if q.text == question_text]
    if not matches:
        raise NotFoundError("Open-ended question not found.")
    if len(matches) > 1:
        raise ValidationError("Several open-ended questions share this text; send questionId instead.")
    return matches[0]


def _same_name(a: str, b: str) -> bool:
    return a.strip().lower() == b.strip().lower()


def mark_open_answer(
    store: JsonRecordStore,
    questions: List[Question],
    student_name,
    is_correct,
    question_text: Optional[str] = None,
    question_id: Optional[str] = None,
) -> GradeChange:
    """
    Record a teacher's verdict on one open-ended answer and adjust the score.

    Grades are keyed by question id. The score never drops below 0.

    Args:
        store:         Record store.
        questions:     Question bank.
        student_name:  Submission's studentName (case-insensitive).
        is_correct:    Verdict, must be a bool.
        question_text: Text of the open-ended question.
        question_id:   Id of the open-ended question, preferred over the text.

    Returns:
        GradeChange with the updated score, previous grade (None if ungraded),
        new grade and the applied delta.
    """
    if not isinstance(student_name, str) or not student_name.strip():
        raise ValidationError("studentName required")
    if not isinstance(is_correct, bool):
        raise ValidationError("isCorrect must be true or false")

    question = find_open_question(questions, question_text, question_id)

    def _mark(data: dict) -> GradeChange:
        records = data.get("submissions", [])
        for idx, raw in enumerate(records):
            submission = Submission.model_validate(raw)
            if not _same_name(submission.student_name, student_name):
                continue

            previous = submission.open_answer_grades.get(question.id)
            delta = score_change(previous, is_correct)
            submission.open_answer_grades[question.id] = is_correct
            submission.score = max(0, submission.score + delta)
            records[idx] = submission.model_dump(by_alias=True, mode="json")
            return GradeChange(
                updated_score=submission.score,
                previous_grade=previous,
                new_grade=is_correct,
                score_change=delta,
            )
        raise NotFoundError("Submission not found for this student.")

    change = store.update(SUBMISSIONS, _mark)
    logger.info(
        f"Open answer {question.id} for {student_name.strip()} marked {is_correct} "
        f"({change.score_change:+d}, score {change.updated_score})"
    )
    return change


# ── Result views ──────────────────────────────────────────────────────────────

def find_submission(store: JsonRecordStore, token: str) -> Optional[Submission]:
    for submission in _submissions(store.read(SUBMISSIONS)):
        if submission.token == token:
            return submission
    return None


def has_submitted(store: JsonRecordStore, token: str) -> bool:
    return find_submission(store, token) is not None


def student_results(store: JsonRecordStore, questions: List[Question], student: User) -> Dict[str, object]:
    """
    A student's graded answer sheet, answer key included.

    Raises:
        NotFoundError: the student has not submitted.
    """
    submission = find_submission(store, student.id)
    if submission is None:
        raise NotFoundError("No submission found for this student.")

    results = []
    for q in questions:
        results.append({
            "id": q.id,
            "text": q.text,
            "choices": q.choices,
            "correctAnswer": q.correct_answer,
            "studentAnswer": submission.answer_for(q.id),
            "type": q.type.value,
            "grade": submission.open_answer_grades.get(q.id) if q.is_open_ended else None,
        })

    return {
        "studentName": submission.student_name,
        "submittedAt": submission.submitted_at,
        "score": submission.score,
        "totalMCQs": submission.total_mcqs,
        "results": results,
    }


def teacher_results(store: JsonRecordStore) -> List[Dict[str, object]]:
    return [
        {
            "studentName": s.student_name,
            "correctCount": s.score,
            "totalQuestions": s.total_mcqs,
        }
        for s in _submissions(store.read(SUBMISSIONS))
    ]


def teacher_open_questions(store: JsonRecordStore, questions: List[Question]) -> List[Dict[str, object]]:
    """
    Open-ended answers of every submission, keyed by question text.

    Raises:
        NotFoundError: nobody has submitted yet.
    """
    submissions = _submissions(store.read(SUBMISSIONS))
    if not submissions:
        raise NotFoundError("No submissions yet.")

    open_questions = [q for q in questions if q.is_open_ended]
    response = []
    for s in submissions:
        answers = {}
        grades = {}
        for q in open_questions:
            answers[q.text] = s.open_ended_answers.get(q.id, NO_ANSWER)
            if q.id in s.open_answer_grades:
                grades[q.text] = s.open_answer_grades[q.id]
        response.append({"studentName": s.student_name, "answers": answers, "grades": grades})
    return response
