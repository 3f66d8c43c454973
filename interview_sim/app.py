import logging
import os
import socket
import sys
import traceback

from flask import Flask, g, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from interview_sim.config import settings
from interview_sim.models.errors import InterviewError, InternalError
from interview_sim.routes.debug_routes import debug_bp
from interview_sim.routes.interview_routes import interview_bp
from interview_sim.services.ai_service import GeminiService
from interview_sim.services.interview_service import InterviewService
from interview_sim.services.session_store import InMemorySessionStore

logger = logging.getLogger(__name__)


def configure_logging(level: str = settings.LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _error_response(body: dict, status: int, exc: BaseException):
    if not settings.is_production():
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return jsonify(body), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(InterviewError)
    def handle_interview_error(exc: InterviewError):
        log = logger.error if exc.status_code >= 500 else logger.warning
        log("Request failed operation=%s interview_id=%s status=%d error=%s",
            g.get("operation"), g.get("interview_id"), exc.status_code, exc.message)
        return _error_response(exc.to_dict(), exc.status_code, exc)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        logger.warning("HTTP error operation=%s interview_id=%s status=%s error=%s",
                       g.get("operation"), g.get("interview_id"), exc.code, exc.name)
        code = exc.name.upper().replace(" ", "_")
        return jsonify({"error": exc.description or exc.name, "code": code}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.exception("Unhandled error operation=%s interview_id=%s",
                         g.get("operation"), g.get("interview_id"))
        return _error_response(InternalError("Internal server error").to_dict(), 500, exc)


def create_app(store=None, gateway=None) -> Flask:
    """Build the Flask app; store and gateway are injectable for tests."""
    app = Flask(__name__)
    CORS(app, origins="*", send_wildcard=True, methods=["GET", "POST", "OPTIONS"],
         allow_headers=["Content-Type"])
    # multipart overhead on top of the audio limit; the exact limit is checked per file
    app.config["MAX_CONTENT_LENGTH"] = settings.MAX_AUDIO_BYTES + 1024 * 1024

    if gateway is None:
        settings.validate_config()
        gateway = GeminiService()
    if store is None:
        store = InMemorySessionStore(ttl_seconds=settings.SESSION_TTL_SECONDS)
    app.extensions["interview_service"] = InterviewService(store, gateway)

    # Register blueprints at the root and under /api
    app.register_blueprint(interview_bp)
    app.register_blueprint(interview_bp, url_prefix="/api", name="interview_api")
    app.register_blueprint(debug_bp)
    register_error_handlers(app)

    @app.route("/")
    def root():
        return "AI Interviewer Backend is running"

    return app


app = create_app()


def _pick_port(default_port: int) -> int:
    env_port = os.getenv("PORT")
    base = default_port
    for a in sys.argv[1:]:
        if a.startswith("--port="):
            try:
                base = int(a.split("=", 1)[1])
            except ValueError:
                logger.warning("Ignoring invalid %s", a)
            break
    else:
        if env_port:
            try:
                base = int(env_port)
            except ValueError:
                logger.warning("Ignoring invalid PORT=%s", env_port)
    for p in range(base, base + 20):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            try:
                s.bind(("0.0.0.0", p))
                return p
            except OSError:
                continue
    return base


def main() -> None:
    configure_logging()
    port = _pick_port(settings.PORT)
    logger.info("Server running on port %d", port)
    app.run(host="0.0.0.0", port=port, debug=False)


if __name__ == "__main__":
    main()
