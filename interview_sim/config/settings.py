import logging
import os
from pathlib import Path
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load environment variables
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(dotenv_path=env_path)

# Google Gemini Configuration
PROJECT_ID = os.getenv("GOOGLE_CLOUD_PROJECT", "")
LOCATION = os.getenv("GOOGLE_CLOUD_LOCATION", "us-central1")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
USE_VERTEX = os.getenv("USE_VERTEX_AI", "0")
GEMINI_TIMEOUT_SECONDS = float(os.getenv("GEMINI_TIMEOUT_SECONDS", "20"))

# API Configuration
API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")

# Server Configuration
APP_ENV = os.getenv("APP_ENV", "production")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
PORT = int(os.getenv("PORT", "5000"))
SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", str(24 * 60 * 60)))

# Audio upload limits
MAX_AUDIO_BYTES = 10 * 1024 * 1024  # 10 MB
ALLOWED_AUDIO_TYPES = ("audio/webm", "audio/mp3", "audio/wav", "audio/ogg")

# Client Configuration
API_BASE_URL = os.getenv("INTERVIEW_API_URL", "http://localhost:5000")
API_MAX_RETRIES = int(os.getenv("API_MAX_RETRIES", "3"))
API_RETRY_DELAY_MS = int(os.getenv("API_RETRY_DELAY_MS", "1000"))
API_TIMEOUT_SECONDS = float(os.getenv("API_TIMEOUT_SECONDS", "30"))
CLIENT_HOME = Path(os.getenv("INTERVIEW_SIM_HOME", str(Path.home() / ".interview_sim")))


def is_production() -> bool:
    return APP_ENV.lower() == "production"


def validate_config() -> bool:
    """Check the Gemini credentials; a missing key only degrades generation."""
    if USE_VERTEX != "1" and not API_KEY:
        logger.warning(
            "GEMINI_API_KEY/GOOGLE_API_KEY not set and USE_VERTEX_AI!=1; "
            "question generation will use fallback text"
        )
        return False
    return True
