"""
models/session_state.py

Quiz session window and its derived status.
Pydantic BaseModel so sessions.json round-trips with validation.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class QuizSession(BaseModel):
    """
    One timed quiz window.

    Attributes:
        start_time: Opening instant, epoch milliseconds.
        end_time:   Closing instant, epoch milliseconds. Always after start_time.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    start_time: int = Field(..., alias="startTime", ge=0)
    end_time: int = Field(..., alias="endTime", ge=0)

    @model_validator(mode='after')
    def validate_window(self) -> 'QuizSession':
        if self.end_time <= self.start_time:
            raise ValueError(
                f"endTime ({self.end_time}) must be after startTime ({self.start_time})."
            )
        return self

    def is_open(self, now: int) -> bool:
        return self.start_time <= now <= self.end_time

    def remaining_ms(self, now: int) -> int:
        return self.end_time - now if self.is_open(now) else 0


class SessionStatus(BaseModel):
    open: bool = False
    remaining_ms: int = 0
