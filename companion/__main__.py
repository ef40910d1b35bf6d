"""
Companion chat tool

This module is the entry point of the companion chat. It runs an interactive
terminal chat backed by the local crisis/sentiment pipeline (optionally using
the reply proxy), answers a single message, or starts the proxy server.

Usage:
    1. Chat mode: `companion` (add `--remote` to use the proxy).
    2. One-shot mode: `companion --message "..."`.
    3. Server mode: `companion --serve`.
"""

import argparse
import dataclasses
import logging
import random
import sys
import time
from collections.abc import Callable
from pathlib import Path

from dotenv import load_dotenv
from halo import Halo

from companion.config import AppConfig, reload_settings
from companion.conversation.escalation import CRISIS_RESOURCES
from companion.conversation.exercises import ExerciseKind, run_exercise
from companion.conversation.pipeline import TurnProcessor, create_turn_processor
from companion.conversation.timeline import color_txt, print_timeline
from companion.domain import Sender, TurnOutcome
from companion.export import (
    EXPORT_FORMATS,
    ExportError,
    default_export_path,
    save_timeline_to_csv,
    save_transcript_json,
    save_transcript_pdf,
)
from companion.runtime.phase_contract import PHASE_EXPORT
from companion.runtime.phase_timing import PhaseTimer
from companion.utils.logger import configure_logging, get_logger

HELP_TEXT = (
    "Commands: /breathe, /ground, /timeline, /export [json|pdf|csv], "
    "/dismiss, /help, /quit"
)

logger: logging.Logger = get_logger("companion")


def render_message(sender: Sender, text: str) -> str:
    """Formats one chat line with a colored sender label."""
    match sender:
        case Sender.USER:
            label = color_txt(" You ", "black", "blue")
        case Sender.BOT:
            label = color_txt(" Companion ", "black", "green")
    return f"{label} {text}"


def render_crisis_panel() -> None:
    print(color_txt(" Crisis support ", "white", "red"))
    for line in CRISIS_RESOURCES:
        print(f"  {line}")
    print("  Type /dismiss to hide this panel.")


def run_turn(
    processor: TurnProcessor,
    text: str,
    *,
    delay_seconds: float = 0.0,
    sleep: Callable[[float], None] = time.sleep,
) -> TurnOutcome:
    """Processes one message and prints the reply."""
    if delay_seconds > 0.0:
        sleep(delay_seconds)
    if processor.remote_enabled:
        with Halo(text="Companion is typing...", spinner="dots", text_color="green"):
            outcome = processor.process(text)
    else:
        outcome = processor.process(text)
    print(render_message(Sender.BOT, outcome.reply))
    if outcome.is_crisis:
        render_crisis_panel()
    return outcome


def export_session(
    processor: TurnProcessor,
    export_format: str,
    file_path: Path,
) -> Path:
    """Writes the session in one export format."""
    timer = PhaseTimer(logger, scope=f"export {export_format}")
    with timer.phase(PHASE_EXPORT):
        match export_format:
            case "json":
                return save_transcript_json(processor.session.transcript, file_path)
            case "pdf":
                return save_transcript_pdf(processor.session, file_path)
            case "csv":
                return save_timeline_to_csv(processor.session.timeline, file_path)
    raise ValueError(f"Unsupported export format {export_format!r}.")


def handle_command(
    command_line: str,
    processor: TurnProcessor,
    settings: AppConfig,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Runs one slash command; returns False when the chat should end."""
    command, _, argument = command_line.strip().partition(" ")
    command = command.lower()
    if command in ("/quit", "/exit"):
        return False
    if command in ("/breathe", "/ground"):
        kind = ExerciseKind.BREATHING if command == "/breathe" else ExerciseKind.GROUNDING
        for entry in run_exercise(processor.session, kind, sleep=sleep):
            print(render_message(Sender.BOT, entry.text))
    elif command == "/timeline":
        print_timeline(processor.session.timeline)
    elif command == "/dismiss":
        processor.session.dismiss_crisis_overlay()
        print("Crisis panel hidden.")
    elif command == "/export":
        export_format = (argument.strip().lower() or "json")
        if export_format not in EXPORT_FORMATS:
            print(f"Unknown export format {export_format!r}. Choose one of: {', '.join(EXPORT_FORMATS)}.")
            return True
        file_path = default_export_path(settings.export.folder, export_format)
        try:
            saved = export_session(processor, export_format, file_path)
        except (ExportError, OSError) as err:
            logger.error("Export failed: %s", err, exc_info=True)
            print("Export failed; see the log for details.")
        else:
            print(f"Saved {export_format.upper()} export to {saved}")
    else:
        print(HELP_TEXT)
    return True


def chat_loop(
    processor: TurnProcessor,
    settings: AppConfig,
    *,
    input_fn: Callable[[str], str] = input,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Interactive chat until /quit or end of input."""
    greeting = processor.open_session()
    if greeting is not None:
        print(render_message(Sender.BOT, greeting.text))
    print(HELP_TEXT)
    while True:
        try:
            raw = input_fn("> ")
        except (EOFError, KeyboardInterrupt):
            print()
            break
        text = raw.strip()
        if not text:
            continue
        if text.startswith("/"):
            if not handle_command(text, processor, settings, sleep=sleep):
                break
            continue
        run_turn(
            processor,
            text,
            delay_seconds=settings.response_delay_seconds,
            sleep=sleep,
        )


def _apply_overrides(settings: AppConfig, args: argparse.Namespace) -> AppConfig:
    remote = settings.remote
    if args.remote or args.remote_url:
        remote = dataclasses.replace(
            remote,
            enabled=True,
            endpoint_url=args.remote_url or remote.endpoint_url,
        )
    server = settings.server
    if args.host or args.port:
        server = dataclasses.replace(
            server,
            host=args.host or server.host,
            port=args.port or server.port,
        )
    return dataclasses.replace(settings, remote=remote, server=server)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Companion chat with crisis-aware replies")
    parser.add_argument("--serve", action="store_true", help="Run the /api/chat proxy server")
    parser.add_argument("--host", type=str, help="Server bind host (with --serve)")
    parser.add_argument("--port", type=int, help="Server bind port (with --serve)")
    parser.add_argument("--remote", action="store_true", help="Fetch replies from the proxy")
    parser.add_argument("--remote-url", type=str, help="Proxy endpoint URL (implies --remote)")
    parser.add_argument("--message", type=str, help="Answer one message and exit")
    parser.add_argument("--seed", type=int, help="Seed for neutral reply selection")
    parser.add_argument("--export-json", type=str, help="Write the transcript as JSON on exit")
    parser.add_argument("--export-pdf", type=str, help="Write the transcript as PDF on exit")
    parser.add_argument(
        "--log-level",
        type=str,
        choices=("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
        help="Logging level (overrides LOG_LEVEL)",
    )
    return parser


def main() -> None:
    """
    Main function to handle the command line interface logic.
    """
    load_dotenv()
    args: argparse.Namespace = _build_parser().parse_args()
    configure_logging(args.log_level)
    settings = _apply_overrides(reload_settings(), args)

    if args.serve:
        from companion.server import serve

        serve(settings)
        sys.exit(0)

    rng = random.Random(args.seed) if args.seed is not None else None
    processor = create_turn_processor(settings, rng=rng)

    if args.message is not None:
        if not args.message.strip():
            logger.error("Empty message provided.")
            sys.exit(1)
        processor.open_session()
        print(render_message(Sender.USER, args.message.strip()))
        run_turn(processor, args.message)
    else:
        chat_loop(processor, settings)

    exit_code = 0
    for export_format, target in (("json", args.export_json), ("pdf", args.export_pdf)):
        if not target:
            continue
        try:
            saved = export_session(processor, export_format, Path(target))
            logger.info("Transcript exported to %s", saved)
        except (ExportError, OSError) as err:
            logger.error("Failed to export transcript: %s", err, exc_info=True)
            exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
