"""Interview session model and the client-side lifecycle state machine."""
import copy
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

MIN_DURATION_MINUTES = 5
MAX_DURATION_MINUTES = 120


def now_ms() -> int:
    return int(time.time() * 1000)


class Speaker(str, Enum):
    AI = "AI"
    CANDIDATE = "Candidate"


class InterviewRole(str, Enum):
    FRONTEND = "Frontend Developer"
    BACKEND = "Backend Developer"
    FULLSTACK = "Full Stack Developer"
    DEVOPS = "DevOps Engineer"
    MOBILE = "Mobile Developer"
    DATA = "Data Engineer"


class DifficultyLevel(str, Enum):
    JUNIOR = "Junior"
    MID = "Mid Level"
    SENIOR = "Senior"


class InterviewStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    PAUSED = "paused"
    COMPLETED = "completed"
    ERROR = "error"


class SessionStateError(RuntimeError):
    """Raised when an event is not allowed in the session's current status."""


@dataclass(frozen=True)
class ConversationEntry:
    speaker: Speaker
    text: str
    timestamp: int

    def __post_init__(self):
        if not isinstance(self.text, str) or not self.text.strip():
            raise ValueError("Conversation entry text must be non-empty")
        object.__setattr__(self, "speaker", Speaker(self.speaker))

    def to_dict(self) -> Dict[str, Any]:
        return {"speaker": self.speaker.value, "text": self.text, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConversationEntry":
        return cls(speaker=Speaker(data["speaker"]), text=data["text"], timestamp=int(data["timestamp"]))


@dataclass(frozen=True)
class InterviewConfig:
    role: InterviewRole = InterviewRole.FULLSTACK
    difficulty: DifficultyLevel = DifficultyLevel.MID
    duration: int = 30  # minutes

    def __post_init__(self):
        object.__setattr__(self, "role", InterviewRole(self.role))
        object.__setattr__(self, "difficulty", DifficultyLevel(self.difficulty))
        if not MIN_DURATION_MINUTES <= int(self.duration) <= MAX_DURATION_MINUTES:
            raise ValueError(
                f"duration must be between {MIN_DURATION_MINUTES} and {MAX_DURATION_MINUTES} minutes"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {"role": self.role.value, "difficulty": self.difficulty.value, "duration": self.duration}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InterviewConfig":
        return cls(
            role=InterviewRole(data["role"]),
            difficulty=DifficultyLevel(data["difficulty"]),
            duration=int(data["duration"]),
        )


@dataclass
class InterviewSession:
    id: Optional[str] = None
    config: InterviewConfig = field(default_factory=InterviewConfig)
    status: InterviewStatus = InterviewStatus.NOT_STARTED
    history: List[ConversationEntry] = field(default_factory=list)
    current_question: str = ""
    start_time: Optional[int] = None
    end_time: Optional[int] = None
    questions_answered: int = 0

    @property
    def duration_ms(self) -> Optional[int]:
        if self.start_time is None or self.end_time is None:
            return None
        return self.end_time - self.start_time

    def elapsed_ms(self, now: Optional[int] = None) -> int:
        if self.start_time is None:
            return 0
        end = self.end_time if self.end_time is not None else (now if now is not None else now_ms())
        return max(0, end - self.start_time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "config": self.config.to_dict(),
            "status": self.status.value,
            "conversationHistory": [e.to_dict() for e in self.history],
            "currentQuestion": self.current_question,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "questionsAnswered": self.questions_answered,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InterviewSession":
        return cls(
            id=data.get("id"),
            config=InterviewConfig.from_dict(data["config"]),
            status=InterviewStatus(data["status"]),
            history=[ConversationEntry.from_dict(e) for e in data.get("conversationHistory") or []],
            current_question=data.get("currentQuestion") or "",
            start_time=data.get("startTime"),
            end_time=data.get("endTime"),
            questions_answered=int(data.get("questionsAnswered") or 0),
        )


class InterviewStateMachine:
    """Owns one InterviewSession and applies lifecycle events to it.

    Callers only ever see deep copies via ``session``; every mutation is
    written through ``storage`` (anything with ``save``/``load``/``clear``).
    """

    def __init__(self, storage=None, clock: Callable[[], int] = now_ms):
        self._storage = storage
        self._clock = clock
        self._session = storage.load() if storage is not None else InterviewSession()

    @property
    def session(self) -> InterviewSession:
        return copy.deepcopy(self._session)

    @property
    def status(self) -> InterviewStatus:
        return self._session.status

    @property
    def interview_id(self) -> Optional[str]:
        return self._session.id

    def _require(self, *allowed: InterviewStatus, event: str):
        if self._session.status not in allowed:
            raise SessionStateError(
                f"Cannot {event} interview while {self._session.status.value}"
            )

    def _commit(self):
        if self._storage is not None:
            self._storage.save(self._session)

    def start(self, config: InterviewConfig, interview_id: str, first_question: str) -> InterviewSession:
        """Open the session with the id and greeting returned by the backend."""
        self._require(InterviewStatus.NOT_STARTED, event="start")
        if not interview_id:
            raise ValueError("interview_id is required to start an interview")
        now = self._clock()
        greeting = ConversationEntry(Speaker.AI, first_question, now)
        self._session = InterviewSession(
            id=interview_id,
            config=config,
            status=InterviewStatus.IN_PROGRESS,
            history=[greeting],
            current_question=first_question,
            start_time=now,
        )
        logger.info("Interview started interview_id=%s role=%s", interview_id, config.role.value)
        self._commit()
        return self.session

    def pause(self) -> InterviewSession:
        self._require(InterviewStatus.IN_PROGRESS, event="pause")
        self._session.status = InterviewStatus.PAUSED
        self._commit()
        return self.session

    def resume(self) -> InterviewSession:
        self._require(InterviewStatus.PAUSED, event="resume")
        self._session.status = InterviewStatus.IN_PROGRESS
        self._commit()
        return self.session

    def answer_processed(self, answer: str, next_question: str, is_complete: bool) -> InterviewSession:
        """Record one turn: the candidate's answer and the interviewer's reply.

        A paused session still records a turn the backend already accepted and stays paused.
        """
        if self._session.status not in (InterviewStatus.IN_PROGRESS, InterviewStatus.PAUSED):
            raise SessionStateError("No active session")
        now = self._clock()
        candidate = ConversationEntry(Speaker.CANDIDATE, answer, now)
        interviewer = ConversationEntry(Speaker.AI, next_question, now)
        self._session.history.extend([candidate, interviewer])
        self._session.questions_answered += 1
        self._session.current_question = next_question
        if is_complete:
            self._session.status = InterviewStatus.COMPLETED
            self._session.end_time = now
            logger.info("Interview completed interview_id=%s answers=%d",
                        self._session.id, self._session.questions_answered)
        self._commit()
        return self.session

    def end(self) -> InterviewSession:
        self._require(InterviewStatus.IN_PROGRESS, InterviewStatus.PAUSED, event="end")
        self._session.status = InterviewStatus.COMPLETED
        self._session.end_time = self._clock()
        logger.info("Interview ended interview_id=%s", self._session.id)
        self._commit()
        return self.session

    def mark_error(self) -> InterviewSession:
        """The backend no longer knows this session; only reset() leaves ERROR."""
        self._require(InterviewStatus.IN_PROGRESS, InterviewStatus.PAUSED, event="fail")
        self._session.status = InterviewStatus.ERROR
        logger.warning("Interview marked as error interview_id=%s", self._session.id)
        self._commit()
        return self.session

    def reset(self) -> InterviewSession:
        self._session = InterviewSession()
        if self._storage is not None:
            self._storage.clear()
        return self.session
