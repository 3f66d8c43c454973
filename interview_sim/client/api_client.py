"""HTTP client for the interview backend, with retry and exponential backoff."""
import logging
import time
from typing import Any, Callable, Dict, Optional

import requests

from interview_sim.config import settings
from interview_sim.models.interview_state import InterviewConfig
from interview_sim.models.schemas import (
    ProcessAnswerResponse,
    StartInterviewResponse,
    TranscribeAudioResponse,
)

logger = logging.getLogger(__name__)

# 4xx statuses that are still worth another attempt
RETRYABLE_CLIENT_STATUSES = (408, 429)


class ApiError(Exception):
    """The backend answered with an error status."""

    def __init__(self, message: str, status_code: int, code: Optional[str] = None, details: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details

    @property
    def retryable(self) -> bool:
        return self.status_code >= 500 or self.status_code in RETRYABLE_CLIENT_STATUSES

    @property
    def not_found(self) -> bool:
        return self.status_code == 404


class TransportError(Exception):
    """Network failure or timeout before any response arrived."""


def backoff_delay(attempt: int, base_ms: int = settings.API_RETRY_DELAY_MS) -> float:
    """Seconds to wait after a failed ``attempt`` (1-based): base * 2^(attempt-1)."""
    return base_ms * (2 ** (attempt - 1)) / 1000.0


class ApiClient:
    def __init__(self, base_url: str = settings.API_BASE_URL, session: Optional[requests.Session] = None,
                 max_retries: int = settings.API_MAX_RETRIES, retry_delay_ms: int = settings.API_RETRY_DELAY_MS,
                 timeout: float = settings.API_TIMEOUT_SECONDS, sleep: Callable[[float], None] = time.sleep):
        self.base_url = base_url.rstrip("/")
        self.http = session or requests.Session()
        self.max_retries = max(1, max_retries)
        self.retry_delay_ms = retry_delay_ms
        self.timeout = timeout
        self._sleep = sleep

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    @staticmethod
    def _parse(resp: requests.Response) -> Dict[str, Any]:
        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not resp.ok:
            if not isinstance(data, dict):
                data = {}
            raise ApiError(
                data.get("error") or f"Server error: {resp.status_code}",
                resp.status_code,
                code=data.get("code"),
                details=data.get("details"),
            )
        return data

    def _send_once(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        try:
            resp = self.http.request(method, self._url(path), timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise TransportError(str(exc) or exc.__class__.__name__) from exc
        return self._parse(resp)

    def _request_with_retry(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_retries + 1):
            try:
                return self._send_once(method, path, **kwargs)
            except ApiError as exc:
                if not exc.retryable:
                    raise
                last_error = exc
            except TransportError as exc:
                last_error = exc

            if attempt < self.max_retries:
                delay = backoff_delay(attempt, self.retry_delay_ms)
                logger.warning("API request failed (attempt %d/%d) path=%s error=%s. Retrying in %.0fms",
                               attempt, self.max_retries, path, last_error, delay * 1000)
                self._sleep(delay)

        logger.error("API request failed after %d attempts path=%s", self.max_retries, path)
        raise last_error

    def start_interview(self, config: Optional[InterviewConfig] = None) -> StartInterviewResponse:
        body = config.to_dict() if config is not None else {}
        data = self._request_with_retry("POST", "/start-interview", json=body)
        return StartInterviewResponse.model_validate(data)

    def process_answer(self, interview_id: str, transcript: str) -> ProcessAnswerResponse:
        data = self._request_with_retry(
            "POST", "/process-answer", json={"interviewId": interview_id, "transcript": transcript}
        )
        return ProcessAnswerResponse.model_validate(data)

    def transcribe_audio(self, interview_id: str, audio_bytes: bytes, mime_type: str = "audio/webm",
                         filename: str = "recording.webm") -> TranscribeAudioResponse:
        """Single attempt: uploads are not retried."""
        data = self._send_once(
            "POST",
            "/transcribe-audio",
            data={"interviewId": interview_id},
            files={"audio": (filename, audio_bytes, mime_type)},
        )
        return TranscribeAudioResponse.model_validate(data)

    def check_health(self) -> Dict[str, str]:
        try:
            resp = self.http.get(self._url("/"), timeout=self.timeout)
            return {"status": "ok" if resp.ok else "error"}
        except requests.RequestException:
            return {"status": "error"}
