import pytest

from classroom_quiz.errors import AuthorizationError, StoreError, ValidationError
from classroom_quiz.models.user_model import Role
from classroom_quiz.services.identity_service import find_user, require_user, resolve_identity
from conftest import write_json


def test_teacher_matched_case_insensitively(store):
    user = resolve_identity(store, "ada", "LOVELACE")
    assert user.role is Role.TEACHER


def test_unknown_person_is_student(store):
    user = resolve_identity(store, "Bob", "Smith")
    assert user.role is Role.STUDENT
    assert user.full_name == "Bob Smith"


@pytest.mark.parametrize("first,last", [
    ("Bob", "Smith"),
    ("Ada", "Lovelace"),
    ("  grace ", "HOPPER"),
])
def test_repeated_sign_in_is_idempotent(store, first, last):
    first_user = resolve_identity(store, first, last)
    again = resolve_identity(store, first.upper(), last.lower())
    assert again.id == first_user.id
    assert again.role is first_user.role
    assert len(store.read("users")["users"]) == 1


def test_role_is_sticky_when_roster_changes(store, data_dir):
    student = resolve_identity(store, "Bob", "Smith")
    write_json(data_dir, "teachers", {"teachers": [{"firstName": "Bob", "lastName": "Smith"}]})
    again = resolve_identity(store, "Bob", "Smith")
    assert again.role is Role.STUDENT
    assert again.id == student.id


def test_distinct_people_get_distinct_tokens(store):
    a = resolve_identity(store, "Bob", "Smith")
    b = resolve_identity(store, "Bob", "Jones")
    assert a.id != b.id


@pytest.mark.parametrize("first,last", [("", "Smith"), ("Bob", None), ("   ", "Smith"), (None, None)])
def test_missing_names_are_rejected(store, first, last):
    with pytest.raises(ValidationError):
        resolve_identity(store, first, last)
    assert store.read("users") == {}


def test_corrupt_roster_is_reported(store, data_dir):
    write_json(data_dir, "teachers", {"teachers": [{"firstName": "Ada"}]})
    with pytest.raises(StoreError):
        resolve_identity(store, "Ada", "Lovelace")


def test_find_user_filters_by_role(store):
    student = resolve_identity(store, "Bob", "Smith")
    assert find_user(store, student.id) == student
    assert find_user(store, student.id, Role.STUDENT) == student
    assert find_user(store, student.id, Role.TEACHER) is None
    assert find_user(store, "nope") is None


def test_require_user(store):
    teacher = resolve_identity(store, "Ada", "Lovelace")
    assert require_user(store, teacher.id, Role.TEACHER, "denied") == teacher

    with pytest.raises(ValidationError):
        require_user(store, "", Role.TEACHER, "denied")
    with pytest.raises(AuthorizationError, match="denied"):
        require_user(store, teacher.id, Role.STUDENT, "denied")
    with pytest.raises(AuthorizationError):
        require_user(store, "unknown-token", Role.TEACHER, "denied")
