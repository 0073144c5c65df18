"""
api/routes.py — FastAPI endpoints
"""

from typing import Any, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel, ConfigDict, Field

from classroom_quiz.errors import DuplicateSubmissionError, ValidationError
from classroom_quiz.models.user_model import Role
from classroom_quiz.services import exam_service
from classroom_quiz.services.identity_service import require_user, resolve_identity
from classroom_quiz.services.record_store import JsonRecordStore
from classroom_quiz.services.session_clock import SessionClock

router = APIRouter()

# ── Pydantic request bodies ──────────────────────────────────────────────────
# Every field is optional here; missing fields are reported by the services
# as 400 rather than FastAPI's 422.

class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SignInBody(_Body):
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")


class StartSessionBody(_Body):
    token: Optional[str] = None
    end_time: Optional[Any] = Field(None, alias="endTime")


class SubmitBody(_Body):
    token: Optional[str] = None
    answers: Optional[Any] = None


class MarkOpenAnswerBody(_Body):
    token: Optional[str] = None
    student_name: Optional[str] = Field(None, alias="studentName")
    question_text: Optional[str] = Field(None, alias="questionText")
    question_id: Optional[Any] = Field(None, alias="questionId")
    is_correct: Optional[Any] = Field(None, alias="isCorrect")


# ── Helpers ───────────────────────────────────────────────────────────────────

def _store(request: Request) -> JsonRecordStore:
    return request.app.state.store


def _clock(request: Request) -> SessionClock:
    return request.app.state.clock


def _teacher(request: Request, token):
    return require_user(_store(request), token, Role.TEACHER, "Invalid teacher token.")


def _student(request: Request, token):
    return require_user(_store(request), token, Role.STUDENT, "Invalid student token.")


# ── Endpoints ─────────────────────────────────────────────────────────────────

@router.get("/health")
def health_check():
    return {"status": "healthy"}


@router.post("/signin")
def signin(body: SignInBody, request: Request):
    user = resolve_identity(_store(request), body.first_name, body.last_name)
    return {"token": user.id, "role": user.role.value}


@router.post("/session/start")
def start_session(body: StartSessionBody, request: Request):
    teacher = require_user(_store(request), body.token, Role.TEACHER, "Only teacher can start quiz")
    session = _clock(request).start_session(teacher, body.end_time)
    return {"message": "Quiz started", "startTime": session.start_time, "endTime": session.end_time}


@router.get("/session/status")
def session_status(request: Request):
    status = _clock(request).query_status()
    return {"testStarted": status.open, "remainingTimeMs": status.remaining_ms}


@router.get("/questions")
def get_questions(request: Request):
    remaining = _clock(request).gate()
    questions = exam_service.load_questions(_store(request))
    return {
        "remainingTimeMs": remaining,
        "questions": [q.public_dict() for q in questions],
    }


@router.post("/submit")
def submit_answers(body: SubmitBody, request: Request):
    if not body.token or body.answers is None:
        raise ValidationError("Token and answers required")

    student = _student(request, body.token)
    store = _store(request)
    if exam_service.has_submitted(store, student.id):
        raise DuplicateSubmissionError("You have already submitted your answers.")
    if request.app.state.enforce_submit_window:
        _clock(request).gate()

    submission = exam_service.submit(store, exam_service.load_questions(store), student, body.answers)
    return {
        "message": "Answers submitted successfully!",
        "score": submission.score,
        "totalMCQs": submission.total_mcqs,
    }


@router.get("/results")
def get_results(request: Request, token: Optional[str] = None):
    student = _student(request, token)
    store = _store(request)
    return exam_service.student_results(store, exam_service.load_questions(store), student)


@router.get("/submission/check")
def check_submission(request: Request, token: Optional[str] = None):
    if not token:
        raise ValidationError("Token required")
    return {"submitted": exam_service.has_submitted(_store(request), token)}


@router.get("/teacher/results")
def teacher_results(request: Request, token: Optional[str] = None):
    _teacher(request, token)
    return {"results": exam_service.teacher_results(_store(request))}


@router.get("/teacher/open-questions")
def teacher_open_questions(request: Request, token: Optional[str] = None):
    _teacher(request, token)
    store = _store(request)
    return {"openQuestions": exam_service.teacher_open_questions(store, exam_service.load_questions(store))}


@router.post("/teacher/mark-open-answer")
def mark_open_answer(body: MarkOpenAnswerBody, request: Request):
    _teacher(request, body.token)
    store = _store(request)
    change = exam_service.mark_open_answer(
        store,
        exam_service.load_questions(store),
        body.student_name,
        body.is_correct,
        question_text=body.question_text,
        question_id=body.question_id,
    )
    return change.model_dump(by_alias=True)
