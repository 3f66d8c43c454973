"""Local persistence slot for the client's interview session."""
import json
import logging
import os
from pathlib import Path
from typing import Optional, Union

from interview_sim.config import settings
from interview_sim.models.interview_state import InterviewSession, InterviewStatus

logger = logging.getLogger(__name__)

STORAGE_KEY = "ai-interview-session"
RESTORABLE_STATUSES = (InterviewStatus.IN_PROGRESS, InterviewStatus.PAUSED)


class LocalSessionStorage:
    """One JSON file per key under ``directory``.

    Only in-progress or paused sessions are restored; anything else loads as
    a fresh default session. I/O errors are logged, never raised.
    """

    def __init__(self, directory: Optional[Union[str, Path]] = None, key: str = STORAGE_KEY):
        self.directory = Path(directory) if directory is not None else settings.CLIENT_HOME
        self.key = key

    @property
    def path(self) -> Path:
        return self.directory / f"{self.key}.json"

    def save(self, session: InterviewSession) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(".json.tmp")
            tmp.write_text(json.dumps(session.to_dict()), encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as e:
            logger.error("Failed to save session path=%s error=%s", self.path, e)

    def load(self) -> InterviewSession:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return InterviewSession()
        except OSError as e:
            logger.error("Failed to read session path=%s error=%s", self.path, e)
            return InterviewSession()

        try:
            session = InterviewSession.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            logger.error("Failed to load session path=%s error=%s", self.path, e)
            return InterviewSession()

        if session.status not in RESTORABLE_STATUSES:
            logger.info("Discarding stored session status=%s", session.status.value)
            return InterviewSession()
        return session

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error("Failed to clear session path=%s error=%s", self.path, e)
