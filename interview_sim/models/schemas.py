"""Request/response shapes of the turn protocol."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as SchemaError

from interview_sim.models.errors import ValidationError
from interview_sim.models.interview_state import (
    MAX_DURATION_MINUTES,
    MIN_DURATION_MINUTES,
    DifficultyLevel,
    InterviewConfig,
    InterviewRole,
)


class StartInterviewRequest(BaseModel):  # Every field optional, defaulted on its own
    role: Optional[InterviewRole] = None
    difficulty: Optional[DifficultyLevel] = None
    duration: Optional[int] = Field(default=None, ge=MIN_DURATION_MINUTES, le=MAX_DURATION_MINUTES)

    def to_config(self) -> InterviewConfig:
        defaults = InterviewConfig()
        return InterviewConfig(
            role=self.role or defaults.role,
            difficulty=self.difficulty or defaults.difficulty,
            duration=self.duration if self.duration is not None else defaults.duration,
        )


class StartInterviewResponse(BaseModel):
    interviewId: str
    message: str
    firstQuestion: str


class ProcessAnswerRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    interviewId: str = Field(min_length=1)
    transcript: str = Field(min_length=1)


class ProcessAnswerResponse(BaseModel):
    transcript: str
    nextQuestion: str
    isComplete: bool = False


class TranscribeAudioResponse(BaseModel):
    transcript: str
    confidence: Optional[float] = None


def parse_request(model, payload):
    """Validate a JSON payload, turning pydantic errors into ValidationError."""
    try:
        return model.model_validate(payload or {})
    except SchemaError as exc:
        details = [
            f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}"
            for err in exc.errors()
        ]
        raise ValidationError("Validation failed", details=details) from exc
