"""
models/user_model.py

People known to the quiz: the teacher roster and signed-in users.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    TEACHER = "teacher"
    STUDENT = "student"


def names_match(first_a: str, last_a: str, first_b: str, last_b: str) -> bool:
    """Case-insensitive (firstName, lastName) equality."""
    return first_a.lower() == first_b.lower() and last_a.lower() == last_b.lower()


class Teacher(BaseModel):
    """Roster entry in teachers.json, provisioned out of band."""

    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")


class User(BaseModel):
    """
    A signed-in person.

    Attributes:
        id:         Opaque token issued at first sign-in, used as a bearer credential.
        first_name: First name as typed at first sign-in.
        last_name:  Last name as typed at first sign-in.
        role:       Decided once at first sign-in and never recomputed.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., min_length=1)
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    role: Role

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def matches(self, first_name: str, last_name: str) -> bool:
        return names_match(self.first_name, self.last_name, first_name, last_name)
