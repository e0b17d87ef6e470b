"""
Validated input schema for answer submissions.
"""
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import InvalidSubmission


class AssessmentSubmission(BaseModel):
    """Submission payload: `{promptText, transcript, level, recordingDurationSeconds}`."""
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    prompt_text: str = Field(..., alias="promptText", description="Question the learner answered")
    transcript: str = Field("", description="Final speech-to-text transcript; may be empty")
    level: int = Field(..., ge=1, le=4, description="Difficulty level 1-4")
    recording_duration_seconds: float = Field(
        0.0, alias="recordingDurationSeconds", ge=0, description="Seconds recorded"
    )

    @field_validator("prompt_text")
    @classmethod
    def prompt_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("prompt text must not be blank")
        return value


def parse_submission(payload: Dict[str, Any]) -> AssessmentSubmission:
    """
    Validate a raw submission payload.

    Raises:
        InvalidSubmission: If the payload does not match the schema
    """
    try:
        return AssessmentSubmission.model_validate(payload)
    except ValidationError as e:
        raise InvalidSubmission(f"Invalid submission: {e.errors()}") from e
