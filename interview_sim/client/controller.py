"""Client-side orchestration of the interview: API calls feeding the state machine."""
import logging
from typing import Optional

from interview_sim.client.api_client import ApiClient, ApiError
from interview_sim.models.interview_state import (
    InterviewConfig,
    InterviewSession,
    InterviewStateMachine,
    InterviewStatus,
    SessionStateError,
)
from interview_sim.models.schemas import ProcessAnswerResponse

logger = logging.getLogger(__name__)


class InterviewController:
    def __init__(self, api: ApiClient, machine: InterviewStateMachine):
        self.api = api
        self.machine = machine

    @property
    def session(self) -> InterviewSession:
        return self.machine.session

    def start(self, config: Optional[InterviewConfig] = None) -> InterviewSession:
        """Ask the backend for a session, then open it locally with the greeting."""
        if self.machine.status != InterviewStatus.NOT_STARTED:
            raise SessionStateError("An interview is already in progress; reset it first")
        config = config or InterviewConfig()
        response = self.api.start_interview(config)
        return self.machine.start(config, response.interviewId, response.firstQuestion)

    def answer(self, transcript: str) -> Optional[ProcessAnswerResponse]:
        """Send one answer. Returns None when the response arrived for a session we no longer hold."""
        interview_id = self.machine.interview_id
        if not interview_id or self.machine.status != InterviewStatus.IN_PROGRESS:
            raise SessionStateError("No active interview session")
        text = (transcript or "").strip()
        if not text:
            raise ValueError("No speech detected. Please try again.")

        try:
            response = self.api.process_answer(interview_id, text)
        except ApiError as exc:
            if exc.not_found and self.machine.interview_id == interview_id:
                self.machine.mark_error()
            raise

        if self.machine.interview_id != interview_id or self.machine.status not in (
                InterviewStatus.IN_PROGRESS, InterviewStatus.PAUSED):
            logger.warning("Discarding stale answer response interview_id=%s", interview_id)
            return None
        self.machine.answer_processed(text, response.nextQuestion, response.isComplete)
        return response

    def transcribe_and_answer(self, audio_bytes: bytes, mime_type: str = "audio/webm",
                              filename: str = "recording.webm") -> Optional[ProcessAnswerResponse]:
        interview_id = self.machine.interview_id
        if not interview_id:
            raise SessionStateError("No active interview session")
        result = self.api.transcribe_audio(interview_id, audio_bytes, mime_type, filename)
        return self.answer(result.transcript)

    def pause(self) -> InterviewSession:
        return self.machine.pause()

    def resume(self) -> InterviewSession:
        return self.machine.resume()

    def end(self) -> InterviewSession:
        return self.machine.end()

    def reset(self) -> InterviewSession:
        return self.machine.reset()
