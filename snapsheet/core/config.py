"""Settings and the explicit context object shared by the extraction stack."""
from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional, Sequence, Tuple

from snapsheet.core.errors import ConfigurationError, MissingCredentialsError
from snapsheet.core.utils import get_config_value, load_env_file
from snapsheet.extraction.prompts import PromptTemplate, load_prompt_template

logger = logging.getLogger(__name__)

DEFAULT_SECRET_FILE = Path("secrets") / "gemini.env"
DEFAULT_MODEL = "gemini-2.5-flash-image"

# Rewards statement layout the table was originally built around.
DEFAULT_COLUMNS: Tuple[str, ...] = (
    "日期",
    "兑换第三方奖賞积分所得",
    "推广",
    "Travel Guru会员计划",
    "汇丰Pulse银联双币卡额外奖赏",
    "最红自主奖赏",
    "基本消费",
    "您已赚取",
)

_SECRET_ENV_LOADED = False


def _ensure_secret_env() -> None:
    """Load credentials from a local secrets file once per process."""

    global _SECRET_ENV_LOADED
    if _SECRET_ENV_LOADED:
        return

    _SECRET_ENV_LOADED = True
    secret_location = os.getenv("SNAPSHEET_SECRET_FILE")
    path = Path(secret_location).expanduser() if secret_location else DEFAULT_SECRET_FILE
    load_env_file(path)


def parse_columns(raw: str) -> Tuple[str, ...]:
    """Parse a column list given either as a JSON array or comma-separated text."""

    text = raw.strip()
    if not text:
        return ()
    if text.startswith("["):
        try:
            values = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"SNAPSHEET_COLUMNS is not valid JSON: {exc}") from exc
        if not isinstance(values, list):
            raise ConfigurationError("SNAPSHEET_COLUMNS must be a JSON list of names")
        names = [str(value).strip() for value in values]
    else:
        names = [part.strip() for part in text.split(",")]

    columns: list[str] = []
    for name in names:
        if name and name not in columns:
            columns.append(name)
    return tuple(columns)


def _float_setting(key: str, default: float) -> float:
    raw = get_config_value(key, "")
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}") from exc
    if value < 0:
        raise ConfigurationError(f"{key} must not be negative")
    return value


def _int_setting(key: str, default: int) -> int:
    raw = get_config_value(key, "")
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}") from exc
    if value < 0:
        raise ConfigurationError(f"{key} must not be negative")
    return value


@dataclass(frozen=True)
class Settings:
    """Startup configuration for one process."""

    api_key: str
    model: str = DEFAULT_MODEL
    columns: Tuple[str, ...] = DEFAULT_COLUMNS
    prompt: PromptTemplate = field(default_factory=load_prompt_template)
    request_delay: float = 5.0
    status_reset_delay: float = 4.0
    max_retries: int = 5


def load_settings(require_api_key: bool = True) -> Settings:
    """Read settings from Streamlit secrets, the environment, and the secrets file.

    A missing API key is fatal unless ``require_api_key`` is False, which the
    dashboard uses to render a warning instead of crashing.
    """

    _ensure_secret_env()
    api_key = get_config_value("GEMINI_API_KEY") or get_config_value("API_KEY")
    if not api_key and require_api_key:
        raise MissingCredentialsError(
            "GEMINI_API_KEY is not set. Export it or add it to "
            f"{os.getenv('SNAPSHEET_SECRET_FILE') or DEFAULT_SECRET_FILE}."
        )

    columns = parse_columns(get_config_value("SNAPSHEET_COLUMNS")) or DEFAULT_COLUMNS
    prompt_file = get_config_value("SNAPSHEET_PROMPT_FILE")
    prompt = load_prompt_template(Path(prompt_file) if prompt_file else None)

    settings = Settings(
        api_key=api_key,
        model=get_config_value("GEMINI_MODEL", DEFAULT_MODEL) or DEFAULT_MODEL,
        columns=columns,
        prompt=prompt,
        request_delay=_float_setting("SNAPSHEET_REQUEST_DELAY", 5.0),
        status_reset_delay=_float_setting("SNAPSHEET_STATUS_RESET_DELAY", 4.0),
        max_retries=_int_setting("SNAPSHEET_MAX_RETRIES", 5),
    )
    logger.debug(
        "Loaded settings for model %s with %d columns (prompt %s)",
        settings.model,
        len(settings.columns),
        settings.prompt.version,
    )
    return settings


@dataclass
class ExtractionContext:
    """Everything the client and the orchestrator share, built once at startup."""

    client: Any
    model: str
    columns: Tuple[str, ...]
    prompt: PromptTemplate
    request_delay: float = 5.0
    status_reset_delay: float = 4.0
    max_retries: int = 5
    sleep: Callable[[float], None] = time.sleep
    clock: Callable[[], float] = time.monotonic


def create_model_client(api_key: str) -> Any:
    """Return a Gemini client bound to ``api_key``."""

    from google import genai

    return genai.Client(api_key=api_key)


def build_context(
    settings: Settings,
    client: Optional[Any] = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
    columns: Optional[Sequence[str]] = None,
) -> ExtractionContext:
    """Create the shared model handle and bundle it with the settings."""

    if client is None:
        if not settings.api_key:
            raise MissingCredentialsError("Cannot create a Gemini client without an API key.")
        client = create_model_client(settings.api_key)

    return ExtractionContext(
        client=client,
        model=settings.model,
        columns=tuple(columns) if columns is not None else settings.columns,
        prompt=settings.prompt,
        request_delay=settings.request_delay,
        status_reset_delay=settings.status_reset_delay,
        max_retries=settings.max_retries,
        sleep=sleep,
        clock=clock,
    )
