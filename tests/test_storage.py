import json

from interview_sim.client.storage import LocalSessionStorage
from interview_sim.models.interview_state import (
    ConversationEntry,
    InterviewConfig,
    InterviewRole,
    InterviewSession,
    InterviewStatus,
    Speaker,
)


def _session(status):
    return InterviewSession(
        id="interview-1",
        config=InterviewConfig(role=InterviewRole.DEVOPS),
        status=status,
        history=[
            ConversationEntry(Speaker.AI, "Hello!", 1000),
            ConversationEntry(Speaker.CANDIDATE, "Hi.", 2000),
            ConversationEntry(Speaker.AI, "What is Kubernetes?", 3000),
        ],
        current_question="What is Kubernetes?",
        start_time=1000,
        end_time=4000 if status == InterviewStatus.COMPLETED else None,
        questions_answered=1,
    )


def test_paused_session_round_trips(tmp_path):
    storage = LocalSessionStorage(tmp_path)
    session = _session(InterviewStatus.PAUSED)
    storage.save(session)
    assert storage.load() == session


def test_in_progress_session_round_trips(tmp_path):
    storage = LocalSessionStorage(tmp_path)
    session = _session(InterviewStatus.IN_PROGRESS)
    storage.save(session)
    assert storage.load() == session


def test_completed_session_is_discarded(tmp_path):
    storage = LocalSessionStorage(tmp_path)
    storage.save(_session(InterviewStatus.COMPLETED))
    assert storage.load() == InterviewSession()


def test_error_session_is_discarded(tmp_path):
    storage = LocalSessionStorage(tmp_path)
    storage.save(_session(InterviewStatus.ERROR))
    assert storage.load() == InterviewSession()


def test_missing_and_corrupt_slots_load_default(tmp_path):
    storage = LocalSessionStorage(tmp_path)
    assert storage.load() == InterviewSession()
    storage.path.write_text("{not json", encoding="utf-8")
    assert storage.load() == InterviewSession()


def test_slot_uses_camel_case_shape(tmp_path):
    storage = LocalSessionStorage(tmp_path)
    storage.save(_session(InterviewStatus.PAUSED))
    data = json.loads(storage.path.read_text(encoding="utf-8"))
    assert data["status"] == "paused"
    assert data["questionsAnswered"] == 1
    assert data["conversationHistory"][1] == {"speaker": "Candidate", "text": "Hi.", "timestamp": 2000}
    assert data["config"] == {"role": "DevOps Engineer", "difficulty": "Mid Level", "duration": 30}


def test_clear_removes_slot(tmp_path):
    storage = LocalSessionStorage(tmp_path)
    storage.save(_session(InterviewStatus.PAUSED))
    storage.clear()
    assert not storage.path.exists()
    storage.clear()
