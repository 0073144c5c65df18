from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple-choice"
    OPEN_ENDED = "open-ended"


class Question(BaseModel):
    """
    Quiz question (read-only reference data from questions.json).
    Pydantic v2 model, camelCase aliases on the wire.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Question identifier, the key used in submitted answers"
    )
    text: str = Field(
        ...,
        description="Question text shown to students"
    )
    type: QuestionType = Field(
        QuestionType.MULTIPLE_CHOICE,
        description="multiple-choice (auto-graded) or open-ended (teacher-graded)"
    )
    choices: Optional[List[str]] = Field(
        None,
        description="Answer choices, multiple-choice only"
    )
    correct_answer: Optional[str] = Field(
        None,
        alias="correctAnswer",
        description="Answer key, multiple-choice only. Compared case-insensitively."
    )

    @field_validator('id', mode='before')
    @classmethod
    def coerce_id(cls, v):
        """Numeric ids in questions.json are accepted and kept as strings."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @model_validator(mode='after')
    def validate_answer_key(self) -> 'Question':
        """
        Choices and answer key are present iff the question is multiple-choice.
        """
        if self.is_multiple_choice:
            if not self.choices or len(self.choices) < 2:
                raise ValueError(f"Question {self.id}: multiple-choice needs at least 2 choices.")
            if not self.correct_answer:
                raise ValueError(f"Question {self.id}: multiple-choice needs a correctAnswer.")
        elif self.choices is not None or self.correct_answer is not None:
            raise ValueError(f"Question {self.id}: open-ended questions take no choices or correctAnswer.")
        return self

    @property
    def is_multiple_choice(self) -> bool:
        return self.type is QuestionType.MULTIPLE_CHOICE

    @property
    def is_open_ended(self) -> bool:
        return self.type is QuestionType.OPEN_ENDED

    def public_dict(self) -> dict:
        """Question as sent to students: the answer key is stripped."""
        return self.model_dump(by_alias=True, mode="json", exclude={"correct_answer"}, exclude_none=True)
