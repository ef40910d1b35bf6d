"""Behavior tests for CLI argument dispatch and exit semantics."""

import json
from dataclasses import replace
from pathlib import Path

import pytest

import companion.__main__ as cli
import companion.server as server_module
from companion.config import get_settings
from companion.conversation.escalation import ESCALATION_MESSAGE
from companion.conversation.pipeline import TurnProcessor
from companion.conversation.responses import GREETING_MESSAGE, POSITIVE_MESSAGE
from companion.domain import RemoteReply, SafetyFlags, Sender


def _no_sleep(_: float) -> None:
    return None


def test_cli_message_prints_reply_and_exits_zero(run_cli) -> None:
    """`--message` answers once and exits successfully."""
    code, output = run_cli(["--message", "I am so happy and excited today"])

    assert code == 0
    assert POSITIVE_MESSAGE in output


def test_cli_crisis_message_shows_crisis_panel(run_cli) -> None:
    code, output = run_cli(["--message", "I want to kill myself"])

    assert code == 0
    assert ESCALATION_MESSAGE in output
    assert "Crisis support" in output


def test_cli_exits_with_error_for_blank_message(run_cli) -> None:
    code, _ = run_cli(["--message", "   "])

    assert code == 1


def test_cli_export_json_writes_transcript(run_cli, tmp_path: Path) -> None:
    """The exported transcript holds greeting, user message and reply."""
    target = tmp_path / "out.json"

    code, _ = run_cli(["--message", "I feel sad and lonely", "--export-json", str(target)])

    records = json.loads(target.read_text(encoding="utf-8"))
    assert code == 0
    assert [record["sender"] for record in records] == ["bot", "user", "bot"]
    assert records[0]["text"] == GREETING_MESSAGE
    assert records[1]["emotion"] == "sadness"


def test_cli_export_failure_exits_one(run_cli, tmp_path: Path) -> None:
    taken = tmp_path / "taken"
    taken.mkdir()

    code, _ = run_cli(["--message", "hello", "--export-json", str(taken)])

    assert code == 1


def test_cli_log_level_flag_overrides_environment_level(
    monkeypatch: pytest.MonkeyPatch, run_cli
) -> None:
    """`--log-level` should override LOG_LEVEL for the command invocation."""
    monkeypatch.setenv("LOG_LEVEL", "ERROR")
    configured_levels: list[str | int | None] = []

    def _capture_log_level(level: str | int | None = None) -> int:
        configured_levels.append(level)
        return 0

    monkeypatch.setattr(cli, "configure_logging", _capture_log_level)

    run_cli(["--message", "hello", "--log-level", "DEBUG"])

    assert configured_levels[-1] == "DEBUG"


def test_cli_serve_dispatches_to_server_with_overrides(
    monkeypatch: pytest.MonkeyPatch, run_cli
) -> None:
    """`--serve` starts the proxy with host and port overrides applied."""
    captured = {}
    monkeypatch.setattr(server_module, "serve", lambda settings: captured.setdefault("settings", settings))

    code, _ = run_cli(["--serve", "--host", "0.0.0.0", "--port", "8088"])

    assert code == 0
    assert captured["settings"].server.host == "0.0.0.0"
    assert captured["settings"].server.port == 8088


def test_remote_url_flag_enables_remote(monkeypatch: pytest.MonkeyPatch) -> None:
    args = cli._build_parser().parse_args(["--remote-url", "http://proxy/api/chat"])

    settings = cli._apply_overrides(get_settings(), args)

    assert settings.remote.enabled is True
    assert settings.remote.endpoint_url == "http://proxy/api/chat"


def test_chat_loop_runs_turns_and_commands(processor: TurnProcessor, capsys) -> None:
    """The loop greets, answers messages, runs commands and stops on /quit."""
    inputs = iter(["I am so happy and excited today", "", "/timeline", "/quit", "never read"])
    settings = get_settings()

    cli.chat_loop(processor, settings, input_fn=lambda _: next(inputs), sleep=_no_sleep)

    output = capsys.readouterr().out
    assert GREETING_MESSAGE in output
    assert POSITIVE_MESSAGE in output
    assert "Joy" in output
    assert processor.session.turn_count == 1
    assert next(inputs) == "never read"


def test_chat_loop_stops_at_end_of_input(processor: TurnProcessor) -> None:
    def _eof(_: str) -> str:
        raise EOFError

    cli.chat_loop(processor, get_settings(), input_fn=_eof, sleep=_no_sleep)

    assert processor.session.turn_count == 0


def test_handle_command_runs_grounding_exercise(processor: TurnProcessor, capsys) -> None:
    keep_going = cli.handle_command("/ground", processor, get_settings(), sleep=_no_sleep)

    assert keep_going is True
    assert len(processor.session.transcript.by_sender(Sender.BOT)) == 5
    assert "5-4-3-2-1" in capsys.readouterr().out


def test_handle_command_dismisses_crisis_panel(processor: TurnProcessor) -> None:
    processor.process("I want to kill myself")

    cli.handle_command("/dismiss", processor, get_settings())

    assert processor.session.crisis_overlay_visible is False
    assert processor.session.crisis_flagged is True


@pytest.mark.parametrize(("export_format", "magic"), [("json", b"["), ("pdf", b"%PDF"), ("csv", b"Time")])
def test_handle_command_exports_into_configured_folder(
    processor: TurnProcessor, tmp_path: Path, export_format: str, magic: bytes
) -> None:
    processor.process("I feel sad and lonely")
    base = get_settings()
    settings = replace(base, export=replace(base.export, folder=tmp_path))

    cli.handle_command(f"/export {export_format}", processor, settings)

    files = list(tmp_path.iterdir())
    assert len(files) == 1
    assert files[0].suffix == f".{export_format}"
    assert files[0].read_bytes().startswith(magic)


def test_handle_command_rejects_unknown_export_format(
    processor: TurnProcessor, tmp_path: Path, capsys
) -> None:
    base = get_settings()
    settings = replace(base, export=replace(base.export, folder=tmp_path))

    cli.handle_command("/export docx", processor, settings)

    assert "Unknown export format" in capsys.readouterr().out
    assert list(tmp_path.iterdir()) == []


def test_handle_command_prints_help_for_unknown_commands(processor: TurnProcessor, capsys) -> None:
    cli.handle_command("/what", processor, get_settings())

    assert cli.HELP_TEXT in capsys.readouterr().out


def test_run_turn_uses_spinner_for_remote_replies(session, monkeypatch: pytest.MonkeyPatch) -> None:
    """Remote turns show the typing spinner while waiting."""
    spinners: list[str] = []

    class _RecordingHalo:
        def __init__(self, *args, **kwargs):
            spinners.append(kwargs.get("text"))

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            return False

    monkeypatch.setattr(cli, "Halo", _RecordingHalo)

    processor = TurnProcessor(
        session,
        remote=lambda text: RemoteReply("remote hello", SafetyFlags()),
    )

    outcome = cli.run_turn(processor, "hi", delay_seconds=0.4, sleep=_no_sleep)

    assert outcome.reply == "remote hello"
    assert spinners == ["Companion is typing..."]
