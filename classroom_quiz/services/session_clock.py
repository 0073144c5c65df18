"""
services/session_clock.py

The single global quiz window.

sessions.json keeps an explicit "current" session and an append-only
"history" of every session ever started. Starting a session replaces
current and appends to history; nothing is deleted.
"""

import logging
import time
from typing import List, Optional

from pydantic import ValidationError as ModelValidationError

from classroom_quiz.errors import AuthorizationError, GateError, GateReason, StoreError, ValidationError
from classroom_quiz.models.session_state import QuizSession, SessionStatus
from classroom_quiz.models.user_model import Role, User
from classroom_quiz.services.record_store import SESSIONS, JsonRecordStore

logger = logging.getLogger(__name__)

HOUR_MS = 60 * 60 * 1000


def now_ms() -> int:
    return int(time.time() * 1000)


def parse_end_time(value) -> int:
    """endTime as sent by the client: an int, or a string holding one."""
    if isinstance(value, bool):
        raise ValidationError("endTime must be an integer timestamp in milliseconds")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ValidationError("endTime must be an integer timestamp in milliseconds")


def _parse(raw) -> QuizSession:
    try:
        return QuizSession.model_validate(raw)
    except ModelValidationError as e:
        logger.warning(f"sessions.json has an invalid session: {e}")
        raise StoreError("Session log is corrupt.") from e


class SessionClock:
    """
    Session start/status/gate over the sessions collection.

    Args:
        store:            Record store.
        duration_ms:      Length of a session when the teacher sends no endTime.
        require_end_time: If True, startSession without endTime is rejected.
    """

    def __init__(self, store: JsonRecordStore, duration_ms: int = HOUR_MS, require_end_time: bool = False):
        self.store = store
        self.duration_ms = duration_ms
        self.require_end_time = require_end_time

    def current(self) -> Optional[QuizSession]:
        data = self.store.read(SESSIONS)
        if "current" in data:
            return _parse(data["current"]) if data["current"] else None
        # Legacy layout: {"sessions": [...]}, the last one is current.
        legacy = data.get("sessions") or []
        return _parse(legacy[-1]) if legacy else None

    def history(self) -> List[QuizSession]:
        data = self.store.read(SESSIONS)
        return [_parse(s) for s in data.get("history", data.get("sessions", []))]

    def start_session(self, teacher: User, end_time=None, now: Optional[int] = None) -> QuizSession:
        """
        Open a new session, superseding the current one.

        Args:
            teacher:  Caller, must have role teacher.
            end_time: Absolute end in epoch ms. Defaults to now + duration_ms
                      unless require_end_time is set.
            now:      Start instant, defaults to the wall clock.
        """
        if teacher.role is not Role.TEACHER:
            raise AuthorizationError("Only teacher can start quiz")

        start = now_ms() if now is None else now
        if end_time is None or end_time == "":
            if self.require_end_time:
                raise ValidationError("endTime required")
            end = start + self.duration_ms
        else:
            end = parse_end_time(end_time)
        if end <= start:
            raise ValidationError("endTime must be in the future")

        session = QuizSession(start_time=start, end_time=end)
        record = session.model_dump(by_alias=True)

        def _append(data: dict) -> None:
            history = data.get("history")
            if history is None:
                history = list(data.pop("sessions", []))
            history.append(record)
            data["history"] = history
            data["current"] = record

        self.store.update(SESSIONS, _append)
        logger.info(f"Session started by {teacher.full_name}: {start} -> {end}")
        return session

    def query_status(self, now: Optional[int] = None) -> SessionStatus:
        now = now_ms() if now is None else now
        session = self.current()
        if session is None or not session.is_open(now):
            return SessionStatus(open=False, remaining_ms=0)
        return SessionStatus(open=True, remaining_ms=session.remaining_ms(now))

    def gate(self, now: Optional[int] = None) -> int:
        """
        Check that the quiz window is open.

        Returns:
            Milliseconds left in the current session.

        Raises:
            GateError(NOT_STARTED): no session, or now before startTime.
            GateError(ENDED):       now after endTime.
        """
        now = now_ms() if now is None else now
        session = self.current()
        if session is None or now < session.start_time:
            raise GateError(GateReason.NOT_STARTED)
        if now > session.end_time:
            raise GateError(GateReason.ENDED)
        return session.end_time - now
