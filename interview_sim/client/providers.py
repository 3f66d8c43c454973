"""Pluggable speech capabilities used by the console client."""
from typing import Callable, Protocol


class SpeechToText(Protocol):
    def listen(self, prompt: str = "") -> str: ...


class TextToSpeech(Protocol):
    def speak(self, text: str) -> None: ...


class KeyboardInput:
    """Reads the candidate's answer from the terminal."""

    def __init__(self, reader: Callable[[str], str] = input):
        self._reader = reader

    def listen(self, prompt: str = "") -> str:
        return self._reader(prompt)


class ConsoleSpeaker:
    def __init__(self, writer: Callable[[str], None] = print, prefix: str = "Interviewer: "):
        self._writer = writer
        self.prefix = prefix

    def speak(self, text: str) -> None:
        self._writer(f"{self.prefix}{text}")

