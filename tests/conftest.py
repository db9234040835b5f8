"""Pytest configuration and fakes standing in for the Gemini client."""
import base64
import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Callable, List

import pytest

# Ensure repository root is on sys.path for module resolution
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import snapsheet.core.config as config
from snapsheet.core.config import Settings, build_context
from snapsheet.core.models import SourceImage

CONFIG_KEYS = [
    "GEMINI_API_KEY",
    "API_KEY",
    "GEMINI_MODEL",
    "SNAPSHEET_COLUMNS",
    "SNAPSHEET_PROMPT_FILE",
    "SNAPSHEET_REQUEST_DELAY",
    "SNAPSHEET_STATUS_RESET_DELAY",
    "SNAPSHEET_MAX_RETRIES",
]


class FakeRateLimitError(Exception):
    """Mimics the SDK error raised for HTTP 429 responses."""

    def __init__(self, message: str = "Resource has been exhausted", code: int = 429) -> None:
        super().__init__(message)
        self.code = code


class FakeModels:
    """Records calls and answers from a queue or a per-image handler.

    An outcome may be a string (returned as ``response.text``), ``None`` (no
    text), or an exception instance (raised).
    """

    def __init__(self, outcomes: Any) -> None:
        self.outcomes = outcomes if callable(outcomes) else list(outcomes)
        self.calls: List[dict] = []

    def generate_content(self, model: str, contents: list) -> SimpleNamespace:
        self.calls.append({"model": model, "contents": contents})
        if callable(self.outcomes):
            outcome = self.outcomes(contents[0].inline_data.data)
        else:
            outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return SimpleNamespace(text=outcome)


class FakeClient:
    def __init__(self, outcomes: Any) -> None:
        self.models = FakeModels(outcomes)


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_image(name: str, payload: bytes | None = None, mime_type: str = "image/jpeg") -> SourceImage:
    raw = payload if payload is not None else name.encode("utf-8")
    return SourceImage(file_name=name, base64_data=base64.b64encode(raw).decode("ascii"), mime_type=mime_type)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer secrets and environment out of the tests."""

    for key in CONFIG_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("SNAPSHEET_SECRET_FILE", str(tmp_path / "no-secrets.env"))
    monkeypatch.setattr(config, "_SECRET_ENV_LOADED", False)


@pytest.fixture
def sleeps() -> List[float]:
    """Collects every delay requested through the context instead of sleeping."""

    return []


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_context(sleeps: List[float], clock: FakeClock) -> Callable[..., config.ExtractionContext]:
    """Build an ExtractionContext around a FakeClient."""

    def _make(outcomes: Any, columns=("Date", "Total"), **overrides: Any) -> config.ExtractionContext:
        settings = Settings(api_key="test-key", columns=tuple(columns), **overrides)
        return build_context(settings, client=FakeClient(outcomes), sleep=sleeps.append, clock=clock)

    return _make
