"""Interview turn-protocol API routes."""
from flask import Blueprint, current_app, g, jsonify, request

from interview_sim.models.errors import ValidationError
from interview_sim.models.schemas import ProcessAnswerRequest, StartInterviewRequest, parse_request

interview_bp = Blueprint('interview', __name__)


def _service():
    return current_app.extensions["interview_service"]


@interview_bp.route('/start-interview', methods=['POST'])
def start_interview():
    """Open a server-side session and return the greeting."""
    g.operation = "start_interview"
    payload = parse_request(StartInterviewRequest, request.get_json(silent=True))
    response = _service().start_interview(payload)
    g.interview_id = response.interviewId
    return jsonify(response.model_dump()), 200


@interview_bp.route('/process-answer', methods=['POST'])
def process_answer():
    """Record the candidate's answer and return the next question."""
    g.operation = "process_answer"
    data = request.get_json(silent=True) or {}
    if isinstance(data, dict):
        g.interview_id = data.get("interviewId")
    payload = parse_request(ProcessAnswerRequest, data)
    response = _service().process_answer(payload)
    return jsonify(response.model_dump()), 200


@interview_bp.route('/transcribe-audio', methods=['POST'])
def transcribe_audio():
    """Transcribe an uploaded recording through the gateway."""
    g.operation = "transcribe_audio"
    interview_id = (request.form.get("interviewId") or "").strip()
    g.interview_id = interview_id or None
    service = _service()
    service.require_session(interview_id)

    if "audio" not in request.files:
        raise ValidationError("No audio file provided")
    blob = request.files["audio"]
    audio_bytes = blob.read() or b""
    response = service.transcribe(
        interview_id,
        audio_bytes,
        blob.mimetype or "",
        filename=getattr(blob, "filename", "") or "",
    )
    return jsonify(response.model_dump()), 200
