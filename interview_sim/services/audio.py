"""Audio upload checks: mime normalization and byte-signature sniffing."""
from typing import Iterable, Optional

_ALIASES = {
    "audio/mpeg": "audio/mp3",
    "audio/x-wav": "audio/wav",
    "audio/wave": "audio/wav",
    "video/webm": "audio/webm",
}

_SIGNATURE_TYPES = {
    "mp3": "audio/mp3",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
    "opus": "audio/ogg",
    "webm": "audio/webm",
}


def detect_audio_signature_prefix(b: bytes) -> str:
    if not b:
        return "empty"
    head = b[:64]
    if head.startswith(b"ID3") or head[:2] in (b"\xff\xfb", b"\xff\xf3", b"\xff\xf2"):
        return "mp3"
    if head[:4] == b"RIFF":
        return "wav"
    if head[:4] == b"OggS":
        return "ogg"
    if b"OpusHead" in head:
        return "opus"
    if b"\x1A\x45\xDF\xA3" in head:
        return "webm"
    return "unknown"


def normalize_mime(mime_type: Optional[str]) -> str:
    """'audio/webm;codecs=opus' -> 'audio/webm'; known aliases folded."""
    base = (mime_type or "").split(";", 1)[0].strip().lower()
    return _ALIASES.get(base, base)


def resolve_audio_type(mime_type: Optional[str], filename: Optional[str], data: bytes,
                       allowed: Iterable[str]) -> Optional[str]:
    """Return the allowed mime type for an upload, or None if it is not audio we accept."""
    allowed = tuple(allowed)
    mime = normalize_mime(mime_type)
    if mime in allowed:
        return mime
    name = (filename or "").lower()
    for ext in ("webm", "mp3", "wav", "ogg"):
        if name.endswith("." + ext) and f"audio/{ext}" in allowed and mime in ("", "application/octet-stream"):
            return f"audio/{ext}"
    if mime in ("", "application/octet-stream"):
        sniffed = _SIGNATURE_TYPES.get(detect_audio_signature_prefix(data))
        if sniffed in allowed:
            return sniffed
    return None
