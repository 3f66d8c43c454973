"""Terminal client: run an interview against the backend with typed answers."""
import argparse
import logging
import sys
from typing import List, Optional

from interview_sim.client.api_client import ApiClient, ApiError, TransportError
from interview_sim.client.controller import InterviewController
from interview_sim.client.export import export_transcript, format_duration
from interview_sim.client.providers import ConsoleSpeaker, KeyboardInput
from interview_sim.client.storage import LocalSessionStorage
from interview_sim.config import settings
from interview_sim.models.interview_state import (
    DifficultyLevel,
    InterviewConfig,
    InterviewRole,
    InterviewStateMachine,
    InterviewStatus,
)

logger = logging.getLogger(__name__)

COMMANDS = {"/pause", "/resume", "/end", "/quit"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Practice a technical interview from the terminal.")
    parser.add_argument("--url", default=settings.API_BASE_URL, help="backend base URL")
    parser.add_argument("--role", choices=[r.value for r in InterviewRole], default=InterviewRole.FULLSTACK.value)
    parser.add_argument("--difficulty", choices=[d.value for d in DifficultyLevel],
                        default=DifficultyLevel.MID.value)
    parser.add_argument("--duration", type=int, default=30, help="minutes (5-120)")
    parser.add_argument("--export", metavar="PATH", help="write the transcript to a .json or .pdf file")
    parser.add_argument("--fresh", action="store_true", help="discard a saved in-progress interview")
    parser.add_argument("--storage-dir", default=None, help="where the local session slot lives")
    return parser


def run(controller: InterviewController, listener, speaker, writer=print) -> InterviewStatus:
    """Loop until the interview completes or the candidate ends/quits."""
    speaker.speak(controller.session.current_question)
    while True:
        status = controller.machine.status
        if status in (InterviewStatus.COMPLETED, InterviewStatus.ERROR):
            return status

        prompt = "(paused) " if status == InterviewStatus.PAUSED else "You: "
        line = listener.listen(prompt).strip()
        if line == "/quit":
            return controller.machine.status
        if line == "/end":
            controller.end()
            return InterviewStatus.COMPLETED
        if line == "/pause" and status == InterviewStatus.IN_PROGRESS:
            controller.pause()
            writer("Interview paused. Type /resume to continue.")
            continue
        if line == "/resume" and status == InterviewStatus.PAUSED:
            controller.resume()
            speaker.speak(controller.session.current_question)
            continue
        if status == InterviewStatus.PAUSED or line in COMMANDS:
            continue
        if not line:
            writer("No speech detected. Please try again.")
            continue

        try:
            response = controller.answer(line)
        except ApiError as exc:
            writer(f"Error: {exc.message}")
            continue
        except TransportError as exc:
            writer(f"Backend unreachable: {exc}")
            continue
        if response is not None:
            speaker.speak(response.nextQuestion)


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    args = build_parser().parse_args(argv)

    storage = LocalSessionStorage(args.storage_dir)
    machine = InterviewStateMachine(storage)
    controller = InterviewController(ApiClient(args.url), machine)
    if args.fresh:
        controller.reset()

    try:
        if machine.status == InterviewStatus.NOT_STARTED:
            config = InterviewConfig(role=args.role, difficulty=args.difficulty, duration=args.duration)
            controller.start(config)
        else:
            print(f"Resuming interview {machine.interview_id}")
    except ValueError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2
    except (ApiError, TransportError) as exc:
        print(f"Failed to start interview: {exc}", file=sys.stderr)
        return 1

    try:
        status = run(controller, KeyboardInput(), ConsoleSpeaker())
    except (EOFError, KeyboardInterrupt):
        print()
        status = controller.machine.status

    session = controller.session
    if status == InterviewStatus.COMPLETED:
        duration = format_duration(session.duration_ms or 0)
        print(f"Interview completed: {session.questions_answered} answers in {duration}")
        if args.export:
            path = export_transcript(session, args.export)
            print(f"Transcript written to {path}")
    elif status == InterviewStatus.ERROR:
        print("The backend lost this interview session; start a new one with --fresh.")
        return 1
    else:
        print("Interview saved; run again to resume.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
