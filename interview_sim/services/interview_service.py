"""Server half of the turn protocol: start sessions and process answers."""
import logging
import uuid

from interview_sim.config import settings
from interview_sim.models.errors import InternalError, NotFound, PayloadTooLarge, UnsupportedMedia, ValidationError
from interview_sim.models.interview_state import ConversationEntry, InterviewConfig, Speaker, now_ms
from interview_sim.models.schemas import (
    ProcessAnswerRequest,
    ProcessAnswerResponse,
    StartInterviewRequest,
    StartInterviewResponse,
    TranscribeAudioResponse,
)
from interview_sim.prompts.system_prompts import COMPLETION_MARKERS, GREETING_TEMPLATE
from interview_sim.services.audio import resolve_audio_type
from interview_sim.services.session_store import ServerSession, SessionStore

logger = logging.getLogger(__name__)


def is_interview_complete(text: str) -> bool:
    lowered = (text or "").lower()
    return any(marker in lowered for marker in COMPLETION_MARKERS)


def build_greeting(config: InterviewConfig) -> str:
    return GREETING_TEMPLATE.format(difficulty=config.difficulty.value, role=config.role.value)


class InterviewService:
    def __init__(self, store: SessionStore, gateway, clock=now_ms):
        self.store = store
        self.gateway = gateway
        self._clock = clock

    def require_session(self, interview_id: str) -> ServerSession:
        session = self.store.get(interview_id) if interview_id else None
        if session is None:
            raise NotFound("Session not found", details={"interviewId": interview_id})
        return session

    def start_interview(self, request: StartInterviewRequest) -> StartInterviewResponse:
        config = request.to_config()
        interview_id = uuid.uuid4().hex
        first_question = build_greeting(config)
        self.store.put(interview_id, ServerSession(
            config=config,
            history=[ConversationEntry(Speaker.AI, first_question, self._clock())],
        ))
        logger.info("Interview started interview_id=%s role=%s difficulty=%s duration=%d",
                    interview_id, config.role.value, config.difficulty.value, config.duration)
        return StartInterviewResponse(
            interviewId=interview_id,
            message="Interview started",
            firstQuestion=first_question,
        )

    def process_answer(self, request: ProcessAnswerRequest) -> ProcessAnswerResponse:
        interview_id, transcript = request.interviewId, request.transcript
        self.require_session(interview_id)

        with self.store.session_lock(interview_id):
            # re-read under the lock; the store may hand out copies
            session = self.require_session(interview_id)
            logger.info("Processing answer interview_id=%s transcript_length=%d",
                        interview_id, len(transcript))
            candidate = ConversationEntry(Speaker.CANDIDATE, transcript, self._clock())
            snapshot = tuple(session.history) + (candidate,)
            try:
                next_question = self.gateway.generate_next_question(snapshot, transcript, session.config)
            except Exception as exc:
                logger.exception("Question generation failed interview_id=%s", interview_id)
                raise InternalError("Processing failed") from exc

            next_question = (next_question or "").strip()
            if not next_question:
                raise InternalError("Processing failed", details="empty question from gateway")
            session.history.extend([candidate, ConversationEntry(Speaker.AI, next_question, self._clock())])
            self.store.put(interview_id, session)

        is_complete = is_interview_complete(next_question)
        logger.info("Next question generated interview_id=%s is_complete=%s turns=%d",
                    interview_id, is_complete, len(session.history))
        return ProcessAnswerResponse(transcript=transcript, nextQuestion=next_question, isComplete=is_complete)

    def transcribe(self, interview_id: str, audio_bytes: bytes, mime_type: str,
                   filename: str = "") -> TranscribeAudioResponse:
        self.require_session(interview_id)
        if not audio_bytes:
            raise ValidationError("No audio file provided")
        if len(audio_bytes) > settings.MAX_AUDIO_BYTES:
            raise PayloadTooLarge("Audio file too large", details={"maxBytes": settings.MAX_AUDIO_BYTES})
        resolved = resolve_audio_type(mime_type, filename, audio_bytes, settings.ALLOWED_AUDIO_TYPES)
        if resolved is None:
            raise UnsupportedMedia(
                "Invalid file type. Only audio files are allowed.",
                details={"mimeType": mime_type, "allowed": list(settings.ALLOWED_AUDIO_TYPES)},
            )

        logger.info("Transcribing audio interview_id=%s mime_type=%s bytes=%d",
                    interview_id, resolved, len(audio_bytes))
        try:
            transcript = (self.gateway.transcribe_audio(audio_bytes, resolved) or "").strip()
        except Exception as exc:
            logger.exception("Transcription failed interview_id=%s", interview_id)
            raise InternalError("Transcription failed") from exc
        logger.info("Transcription complete interview_id=%s transcript_length=%d",
                    interview_id, len(transcript))
        return TranscribeAudioResponse(transcript=transcript, confidence=1.0 if transcript else 0.0)
