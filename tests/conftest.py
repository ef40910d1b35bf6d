import contextlib
import io
import logging
import random
import sys
from collections.abc import Generator, Sequence
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import companion.__main__ as companion_main  # noqa: E402
import companion.config as config  # noqa: E402
from companion.conversation.pipeline import TurnProcessor  # noqa: E402
from companion.conversation.responses import ResponseSelector  # noqa: E402
from companion.conversation.session import SessionState  # noqa: E402


@pytest.fixture
def run_cli(monkeypatch):
    """Run the companion CLI with a custom argv list."""

    def _run_cli(args: Sequence[str]) -> tuple[int, str]:
        monkeypatch.setattr(sys, "argv", ["companion", *args])
        monkeypatch.setattr(companion_main, "load_dotenv", lambda: None)
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stdout):
            try:
                companion_main.main()
            except SystemExit as exc:
                return exc.code, stdout.getvalue()
        raise AssertionError("CLI did not exit as expected")

    return _run_cli


@pytest.fixture(autouse=True)
def _silence_halo(monkeypatch):
    """Replace Halo spinners with a no-op context manager for tests."""

    class _DummyHalo:
        def __init__(self, *args, **kwargs):
            self.text = kwargs.get("text")

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            return False

    monkeypatch.setattr("companion.__main__.Halo", _DummyHalo, raising=False)


@pytest.fixture(autouse=True)
def _reset_settings() -> Generator[None, None, None]:
    """Keeps global settings stable across tests."""
    config.reload_settings()
    yield
    config.reload_settings()


@pytest.fixture
def session() -> SessionState:
    return SessionState.create()


@pytest.fixture
def processor(session: SessionState) -> TurnProcessor:
    """Local-only processor with deterministic neutral replies."""
    return TurnProcessor(session, selector=ResponseSelector(rng=random.Random(7)))


@pytest.fixture
def caplog_info(caplog):
    caplog.set_level(logging.INFO)
    return caplog
