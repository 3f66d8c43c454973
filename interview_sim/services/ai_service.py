"""Gemini gateway for question generation and audio transcription."""
import logging
import time
from typing import Optional, Protocol, Sequence

from google import genai
from google.genai import types
from google.genai.errors import ClientError
from google.genai.types import HttpOptions

from interview_sim.config import settings
from interview_sim.models.interview_state import ConversationEntry, InterviewConfig, Speaker
from interview_sim.prompts.system_prompts import (
    CLOSING_SENTENCE,
    FALLBACK_QUESTION,
    FALLBACK_TRANSCRIPT,
    QUESTION_PROMPT,
    TRANSCRIBE_INSTRUCTION,
)

logger = logging.getLogger(__name__)


class QuestionGenerator(Protocol):
    def generate_next_question(self, history: Sequence[ConversationEntry], latest_answer: str,
                               config: InterviewConfig) -> str: ...


class Transcriber(Protocol):
    def transcribe_audio(self, audio_bytes: bytes, mime_type: str) -> str: ...


def format_history(history: Sequence[ConversationEntry]) -> str:
    lines = []
    for entry in history:
        who = "Candidate" if entry.speaker == Speaker.CANDIDATE else "Interviewer"
        lines.append(f"{who}: {entry.text}")
    return "\n\n".join(lines)


def build_question_prompt(history: Sequence[ConversationEntry], latest_answer: str,
                          config: InterviewConfig) -> str:
    return QUESTION_PROMPT.format(
        role=config.role.value,
        difficulty=config.difficulty.value,
        closing=CLOSING_SENTENCE,
        conversation=format_history(history),
        answer=latest_answer,
    )


class GeminiService:
    """Wraps the Gemini client.

    Generation failures never reach the caller: they are logged and masked
    with fixed fallback text.
    """

    rate_limit_delay = 0.9

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None,
                 timeout_seconds: Optional[float] = None, use_vertex: Optional[bool] = None,
                 client=None):
        self.api_key = api_key if api_key is not None else settings.API_KEY
        self.model = model or settings.GEMINI_MODEL
        self.timeout_seconds = timeout_seconds or settings.GEMINI_TIMEOUT_SECONDS
        self.use_vertex = (settings.USE_VERTEX == "1") if use_vertex is None else use_vertex
        self._client = client

    @property
    def configured(self) -> bool:
        return self._client is not None or self.use_vertex or bool(self.api_key)

    @property
    def mode(self) -> str:
        return "vertex" if self.use_vertex else "aistudio"

    def _get_client(self):
        if self._client is not None:
            return self._client
        if not self.configured:
            return None
        timeout_ms = int(self.timeout_seconds * 1000)
        if self.use_vertex:
            self._client = genai.Client(
                vertexai=True,
                project=settings.PROJECT_ID,
                location=settings.LOCATION,
                http_options=HttpOptions(api_version="v1", timeout=timeout_ms),
            )
            logger.info("Gemini client using Vertex AI (v1) via ADC")
        else:
            self._client = genai.Client(api_key=self.api_key, http_options=HttpOptions(timeout=timeout_ms))
            logger.info("Gemini client using AI Studio API key")
        return self._client

    def _generate(self, contents, temperature: float = 0.7, max_tokens: int = 300,
                  operation: str = "generate") -> Optional[str]:
        client = self._get_client()
        if client is None:
            logger.warning("Gemini not configured, skipping model call operation=%s", operation)
            return None

        last_error = None
        for attempt in (1, 2):
            try:
                resp = client.models.generate_content(
                    model=self.model,
                    contents=contents,
                    config=types.GenerateContentConfig(
                        temperature=temperature,
                        max_output_tokens=max_tokens,
                    ),
                )
                txt = (getattr(resp, "text", "") or "").strip()
                if txt:
                    return txt
                logger.warning("Gemini returned empty text operation=%s attempt=%d", operation, attempt)
                return None
            except ClientError as e:
                last_error = e
                if attempt == 1 and ("RESOURCE_EXHAUSTED" in str(e) or getattr(e, "code", None) == 429):
                    time.sleep(self.rate_limit_delay)
                    continue
                break
            except Exception as e:
                last_error = e
                break

        logger.error("Gemini call failed operation=%s error=%r", operation, last_error)
        return None

    def generate_next_question(self, history: Sequence[ConversationEntry], latest_answer: str,
                               config: InterviewConfig) -> str:
        prompt = build_question_prompt(history, latest_answer, config)
        question = self._generate(prompt, operation="generate_next_question")
        if not question:
            logger.warning("Using fallback question")
            return FALLBACK_QUESTION
        return question

    def transcribe_audio(self, audio_bytes: bytes, mime_type: str) -> str:
        contents = [
            types.Part.from_bytes(data=audio_bytes, mime_type=mime_type),
            TRANSCRIBE_INSTRUCTION,
        ]
        text = self._generate(contents, temperature=0.0, max_tokens=1000, operation="transcribe_audio")
        if text is None:
            logger.warning("Using fallback transcript mime_type=%s bytes=%d", mime_type, len(audio_bytes))
            return FALLBACK_TRANSCRIPT
        return text

    def ping(self) -> dict:
        """Round-trip a tiny prompt to check credentials and model access."""
        text = self._generate("Say OK.", temperature=0.1, max_tokens=10, operation="ping")
        return {
            "ok": bool(text),
            "model": self.model,
            "mode": self.mode,
            "configured": self.configured,
            "text": text or "",
        }
