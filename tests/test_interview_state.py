import pytest

from interview_sim.client.storage import LocalSessionStorage
from interview_sim.models.interview_state import (
    ConversationEntry,
    DifficultyLevel,
    InterviewConfig,
    InterviewRole,
    InterviewSession,
    InterviewStateMachine,
    InterviewStatus,
    SessionStateError,
    Speaker,
)

GREETING = "Hello! Tell me about yourself."


def _started(clock, storage=None):
    machine = InterviewStateMachine(storage, clock=clock)
    machine.start(InterviewConfig(InterviewRole.BACKEND, DifficultyLevel.SENIOR, 45), "abc123", GREETING)
    return machine


def test_new_machine_is_not_started():
    session = InterviewStateMachine().session
    assert session == InterviewSession()
    assert session.id is None
    assert session.status == InterviewStatus.NOT_STARTED


def test_start_sets_id_config_and_greeting(clock):
    machine = _started(clock)
    session = machine.session
    assert session.id == "abc123"
    assert session.status == InterviewStatus.IN_PROGRESS
    assert session.config.role == InterviewRole.BACKEND
    assert session.start_time is not None
    assert session.end_time is None
    assert [e.speaker for e in session.history] == [Speaker.AI]
    assert session.current_question == GREETING
    assert session.questions_answered == 0


def test_start_twice_is_rejected(clock):
    machine = _started(clock)
    with pytest.raises(SessionStateError):
        machine.start(InterviewConfig(), "other", GREETING)


def test_answer_round_appends_two_entries(clock):
    machine = _started(clock)
    session = machine.answer_processed("I have 5 years of experience.", "What is a B-tree?", False)
    assert len(session.history) == 3
    assert session.history[1] == ConversationEntry(Speaker.CANDIDATE, "I have 5 years of experience.",
                                                   session.history[1].timestamp)
    assert session.history[2].text == "What is a B-tree?"
    assert session.questions_answered == 1
    assert session.current_question == "What is a B-tree?"
    assert session.status == InterviewStatus.IN_PROGRESS


def test_questions_answered_tracks_candidate_entries(clock):
    machine = _started(clock)
    for i in range(4):
        machine.answer_processed(f"answer {i}", f"question {i}", False)
    session = machine.session
    candidates = [e for e in session.history if e.speaker == Speaker.CANDIDATE]
    assert session.questions_answered == len(candidates) == 4
    assert len(session.history) == 2 * 4 + 1


def test_completion_flag_completes_session(clock):
    machine = _started(clock)
    session = machine.answer_processed("done", "That concludes our technical interview.", True)
    assert session.status == InterviewStatus.COMPLETED
    assert session.end_time is not None
    assert session.duration_ms == session.end_time - session.start_time


def test_pause_and_resume_keep_history(clock):
    machine = _started(clock)
    machine.answer_processed("a", "q", False)
    before = machine.session.history
    assert machine.pause().status == InterviewStatus.PAUSED
    assert machine.resume().status == InterviewStatus.IN_PROGRESS
    assert machine.session.history == before


def test_answer_recorded_while_paused_stays_paused(clock):
    machine = _started(clock)
    machine.pause()
    session = machine.answer_processed("a", "q", False)
    assert session.status == InterviewStatus.PAUSED
    assert session.questions_answered == 1
    assert session.current_question == "q"


def test_answer_after_completion_is_rejected(clock):
    machine = _started(clock)
    machine.end()
    with pytest.raises(SessionStateError, match="No active session"):
        machine.answer_processed("a", "q", False)


def test_answer_without_session_is_rejected():
    with pytest.raises(SessionStateError, match="No active session"):
        InterviewStateMachine().answer_processed("a", "q", False)


def test_end_from_paused_sets_end_time_once(clock):
    machine = _started(clock)
    machine.pause()
    session = machine.end()
    assert session.status == InterviewStatus.COMPLETED
    end_time = session.end_time
    with pytest.raises(SessionStateError):
        machine.end()
    assert machine.session.end_time == end_time


def test_completed_only_allows_reset(clock):
    machine = _started(clock)
    machine.end()
    for event in (machine.pause, machine.resume, machine.mark_error):
        with pytest.raises(SessionStateError):
            event()
    with pytest.raises(SessionStateError):
        machine.answer_processed("a", "q", False)
    assert machine.reset() == InterviewSession()


def test_mark_error_then_reset(clock):
    machine = _started(clock)
    assert machine.mark_error().status == InterviewStatus.ERROR
    with pytest.raises(SessionStateError):
        machine.resume()
    assert machine.reset().status == InterviewStatus.NOT_STARTED


def test_snapshots_are_read_only_copies(clock):
    machine = _started(clock)
    snapshot = machine.session
    snapshot.history.append(ConversationEntry(Speaker.CANDIDATE, "sneaky", 1))
    snapshot.questions_answered = 99
    assert len(machine.session.history) == 1
    assert machine.session.questions_answered == 0


def test_empty_entry_text_is_rejected():
    with pytest.raises(ValueError):
        ConversationEntry(Speaker.AI, "   ", 1)


def test_empty_answer_is_rejected_without_mutation(clock):
    machine = _started(clock)
    with pytest.raises(ValueError):
        machine.answer_processed("", "q", False)
    assert machine.session.questions_answered == 0


@pytest.mark.parametrize("duration", [4, 121])
def test_config_duration_bounds(duration):
    with pytest.raises(ValueError):
        InterviewConfig(duration=duration)


def test_every_mutation_is_persisted(tmp_path, clock):
    storage = LocalSessionStorage(tmp_path)
    machine = _started(clock, storage)
    assert storage.load() == machine.session
    machine.answer_processed("a", "q", False)
    assert storage.load() == machine.session
    machine.pause()
    assert storage.load().status == InterviewStatus.PAUSED

    restored = InterviewStateMachine(storage, clock=clock)
    assert restored.session == machine.session

    machine.reset()
    assert not storage.path.exists()
