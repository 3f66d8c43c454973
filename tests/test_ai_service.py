from types import SimpleNamespace
from unittest import mock

from google.genai.errors import ClientError

from interview_sim.models.interview_state import (
    ConversationEntry,
    DifficultyLevel,
    InterviewConfig,
    InterviewRole,
    Speaker,
)
from interview_sim.prompts.system_prompts import CLOSING_SENTENCE, FALLBACK_QUESTION, FALLBACK_TRANSCRIPT
from interview_sim.services.ai_service import GeminiService, build_question_prompt, format_history

CONFIG = InterviewConfig(InterviewRole.DATA, DifficultyLevel.JUNIOR, 30)
HISTORY = [
    ConversationEntry(Speaker.AI, "Tell me about yourself.", 1),
    ConversationEntry(Speaker.CANDIDATE, "I build pipelines.", 2),
]


def _service(client):
    service = GeminiService(api_key="test-key", model="gemini-test", client=client)
    service.rate_limit_delay = 0
    return service


def _client_returning(*results):
    client = mock.MagicMock()
    client.models.generate_content.side_effect = list(results)
    return client


def test_history_is_serialized_in_order():
    assert format_history(HISTORY) == "Interviewer: Tell me about yourself.\n\nCandidate: I build pipelines."


def test_prompt_substitutes_role_difficulty_and_closing():
    prompt = build_question_prompt(HISTORY, "I build pipelines.", CONFIG)
    assert "Junior level technical interview for a Data Engineer position" in prompt
    assert CLOSING_SENTENCE in prompt
    assert "1-2 sentences maximum" in prompt
    assert "Never give hints" in prompt
    assert "Candidate's latest answer: I build pipelines." in prompt
    assert build_question_prompt(HISTORY, "I build pipelines.", CONFIG) == prompt


def test_generate_returns_model_text():
    client = _client_returning(SimpleNamespace(text="  What is a window function?  "))
    question = _service(client).generate_next_question(HISTORY, "I build pipelines.", CONFIG)
    assert question == "What is a window function?"
    kwargs = client.models.generate_content.call_args.kwargs
    assert kwargs["model"] == "gemini-test"
    assert "Data Engineer" in kwargs["contents"]


def test_generate_falls_back_on_error():
    client = _client_returning(RuntimeError("boom"))
    assert _service(client).generate_next_question(HISTORY, "x", CONFIG) == FALLBACK_QUESTION


def test_generate_falls_back_on_empty_text():
    client = _client_returning(SimpleNamespace(text=""))
    assert _service(client).generate_next_question(HISTORY, "x", CONFIG) == FALLBACK_QUESTION


def test_generate_retries_once_when_rate_limited():
    rate_limited = ClientError(429, {"error": {"code": 429, "message": "quota", "status": "RESOURCE_EXHAUSTED"}})
    client = _client_returning(rate_limited, SimpleNamespace(text="Explain partitioning?"))
    assert _service(client).generate_next_question(HISTORY, "x", CONFIG) == "Explain partitioning?"
    assert client.models.generate_content.call_count == 2


def test_missing_api_key_uses_fallback_without_client():
    service = GeminiService(api_key="", use_vertex=False)
    with mock.patch("interview_sim.services.ai_service.genai.Client") as client_cls:
        assert service.generate_next_question(HISTORY, "x", CONFIG) == FALLBACK_QUESTION
        client_cls.assert_not_called()
    assert service.configured is False


def test_client_gets_timeout_from_settings():
    service = GeminiService(api_key="k", use_vertex=False, timeout_seconds=12)
    with mock.patch("interview_sim.services.ai_service.genai.Client") as client_cls:
        service._get_client()
    http_options = client_cls.call_args.kwargs["http_options"]
    assert http_options.timeout == 12000


def test_transcribe_sends_audio_and_instruction():
    client = _client_returning(SimpleNamespace(text="hello world"))
    assert _service(client).transcribe_audio(b"OggS...", "audio/ogg") == "hello world"
    contents = client.models.generate_content.call_args.kwargs["contents"]
    assert contents[1].startswith("Transcribe this audio exactly as spoken")


def test_transcribe_falls_back_on_error():
    client = _client_returning(TimeoutError("slow"))
    assert _service(client).transcribe_audio(b"RIFF", "audio/wav") == FALLBACK_TRANSCRIPT


def test_ping_reports_model():
    client = _client_returning(SimpleNamespace(text="OK"))
    result = _service(client).ping()
    assert result["ok"] is True
    assert result["model"] == "gemini-test"
