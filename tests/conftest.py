import pytest

from interview_sim.app import create_app
from interview_sim.services.session_store import InMemorySessionStore


class FakeGateway:
    """Scripted stand-in for the Gemini gateway."""

    def __init__(self, questions=None, transcript="I have 5 years of experience."):
        self.questions = list(questions or [])
        self.transcript = transcript
        self.calls = []
        self.transcribe_calls = []

    def generate_next_question(self, history, latest_answer, config):
        self.calls.append((tuple(history), latest_answer, config))
        if self.questions:
            return self.questions.pop(0)
        return f"Question {len(self.calls)}: how would you design a rate limiter?"

    def transcribe_audio(self, audio_bytes, mime_type):
        self.transcribe_calls.append((audio_bytes, mime_type))
        return self.transcript

    def ping(self):
        return {"ok": True, "model": "fake", "mode": "test", "configured": True, "text": "OK"}


class FakeClock:
    def __init__(self, start=1_700_000_000_000, step=1000):
        self.now = start
        self.step = step

    def __call__(self):
        self.now += self.step
        return self.now


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def app(store, gateway):
    app = create_app(store=store, gateway=gateway)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def clock():
    return FakeClock()
