"""
services/identity_service.py

Sign-in and token lookup.

A person is identified at sign-in by case-insensitive (firstName, lastName).
The role is decided once, on first sign-in, from the teacher roster and
never recomputed afterwards.
"""

import logging
import uuid
from typing import List, Optional

from pydantic import ValidationError as ModelValidationError

from classroom_quiz.errors import AuthorizationError, StoreError, ValidationError
from classroom_quiz.models.user_model import Role, Teacher, User, names_match
from classroom_quiz.services.record_store import TEACHERS, USERS, JsonRecordStore

logger = logging.getLogger(__name__)


def _clean(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def load_teachers(store: JsonRecordStore) -> List[Teacher]:
    raw = store.read(TEACHERS).get("teachers", [])
    try:
        return [Teacher.model_validate(t) for t in raw]
    except ModelValidationError as e:
        logger.warning(f"teachers.json has an invalid entry: {e}")
        raise StoreError("Teacher roster is corrupt.") from e


def _users(data: dict) -> List[User]:
    return [User.model_validate(u) for u in data.get("users", [])]


def resolve_identity(store: JsonRecordStore, first_name, last_name) -> User:
    """
    Sign a person in and return their user record.

    Args:
        store:      Record store.
        first_name: First name, required.
        last_name:  Last name, required.

    Returns:
        The existing user on re-sign-in (same token, same role), otherwise a
        newly persisted user with a fresh uuid4 token.

    Raises:
        ValidationError: either name is missing or blank.
    """
    first_name, last_name = _clean(first_name), _clean(last_name)
    if not first_name or not last_name:
        raise ValidationError("First name and last name are required")

    is_teacher = any(
        names_match(t.first_name, t.last_name, first_name, last_name)
        for t in load_teachers(store)
    )

    def _sign_in(data: dict) -> User:
        for user in _users(data):
            if user.matches(first_name, last_name):
                return user
        user = User(
            id=str(uuid.uuid4()),
            first_name=first_name,
            last_name=last_name,
            role=Role.TEACHER if is_teacher else Role.STUDENT,
        )
        data.setdefault("users", []).append(user.model_dump(by_alias=True, mode="json"))
        logger.info(f"New {user.role.value} signed in: {user.full_name}")
        return user

    return store.update(USERS, _sign_in)


def find_user(store: JsonRecordStore, token: str, role: Optional[Role] = None) -> Optional[User]:
    """User owning token (and holding role, when given), or None."""
    for user in _users(store.read(USERS)):
        if user.id == token:
            if role is not None and user.role is not role:
                return None
            return user
    return None


def require_user(store: JsonRecordStore, token, role: Role, message: str) -> User:
    """
    Resolve a bearer token to a user with the given role.

    Raises:
        ValidationError:    token missing.
        AuthorizationError: unknown token or wrong role (message is reported).
    """
    token = _clean(token)
    if not token:
        label = "Teacher token" if role is Role.TEACHER else "Token"
        raise ValidationError(f"{label} required")
    user = find_user(store, token, role)
    if user is None:
        logger.warning(f"Rejected token for role {role.value}")
        raise AuthorizationError(message)
    return user
