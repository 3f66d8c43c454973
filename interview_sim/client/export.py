"""Transcript exporters (JSON and PDF) for a finished session."""
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from interview_sim.models.interview_state import InterviewSession


def format_duration(ms: int) -> str:
    total_seconds = ms // 1000
    return f"{total_seconds // 60}:{total_seconds % 60:02d}"


def format_timestamp(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M:%S")


def transcript_payload(session: InterviewSession, include_metadata: bool = True) -> Dict[str, Any]:
    data: Dict[str, Any] = {"conversationHistory": [e.to_dict() for e in session.history]}
    if include_metadata:
        data["metadata"] = {
            "role": session.config.role.value,
            "difficulty": session.config.difficulty.value,
            "questionsAnswered": session.questions_answered,
            "startTime": session.start_time,
            "endTime": session.end_time,
            "duration": session.duration_ms,
        }
    return data


def export_json(session: InterviewSession, include_metadata: bool = True) -> str:
    return json.dumps(transcript_payload(session, include_metadata), indent=2)


def _latin1(text: str) -> str:  # core PDF fonts are latin-1 only
    return text.encode("latin-1", "replace").decode("latin-1")


def export_pdf(session: InterviewSession, include_metadata: bool = True,
               include_timestamps: bool = False) -> bytes:
    pdf = FPDF()
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    pdf.set_font("helvetica", "B", 20)
    pdf.cell(0, 12, "AI Interview Transcript", new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    pdf.set_font("helvetica", "", 10)
    if include_metadata:
        lines = [
            f"Role: {session.config.role.value}",
            f"Difficulty: {session.config.difficulty.value}",
            f"Questions Answered: {session.questions_answered}",
        ]
        if session.duration_ms is not None:
            lines.append(f"Duration: {format_duration(session.duration_ms)}")
        if session.start_time and include_timestamps:
            lines.append(f"Started: {format_timestamp(session.start_time)}")
        for line in lines:
            pdf.cell(0, 6, _latin1(line), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.ln(4)

    headers = ["#", "Speaker", "Message"]
    widths = [10, 25, 155]
    if include_timestamps:
        headers.append("Time")
        widths = [10, 25, 115, 40]

    pdf.set_font("helvetica", "", 9)
    with pdf.table(col_widths=widths, text_align="LEFT") as table:
        heading = table.row()
        for h in headers:
            heading.cell(h)
        for index, entry in enumerate(session.history, start=1):
            row = table.row()
            row.cell(str(index))
            row.cell(entry.speaker.value)
            row.cell(_latin1(entry.text))
            if include_timestamps:
                row.cell(format_timestamp(entry.timestamp))

    return bytes(pdf.output())


def export_transcript(session: InterviewSession, path: Union[str, Path], fmt: Optional[str] = None,
                      include_metadata: bool = True, include_timestamps: bool = False) -> Path:
    """Write the transcript to ``path``; format from ``fmt`` or the file suffix."""
    path = Path(path)
    fmt = (fmt or path.suffix.lstrip(".")).lower()
    if fmt == "json":
        path.write_text(export_json(session, include_metadata), encoding="utf-8")
    elif fmt == "pdf":
        path.write_bytes(export_pdf(session, include_metadata, include_timestamps))
    else:
        raise ValueError(f"Unsupported export format: {fmt}")
    return path
