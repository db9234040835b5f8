"""Tests for settings loading and context construction."""
import pytest

import snapsheet.core.config as config
from snapsheet.core.config import DEFAULT_COLUMNS, build_context, load_settings, parse_columns
from snapsheet.core.errors import ConfigurationError, MissingCredentialsError


def test_missing_api_key_is_fatal():
    with pytest.raises(MissingCredentialsError, match="GEMINI_API_KEY"):
        load_settings()


def test_missing_api_key_allowed_when_not_required():
    settings = load_settings(require_api_key=False)

    assert settings.api_key == ""
    assert settings.columns == DEFAULT_COLUMNS


def test_defaults_match_original_timing(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "key")

    settings = load_settings()

    assert settings.model == config.DEFAULT_MODEL
    assert settings.request_delay == 5.0
    assert settings.status_reset_delay == 4.0
    assert settings.max_retries == 5
    assert len(settings.columns) == 8


def test_api_key_fallback_variable(monkeypatch):
    monkeypatch.setenv("API_KEY", "legacy-key")

    assert load_settings().api_key == "legacy-key"


def test_secret_file_is_loaded_once(tmp_path, monkeypatch):
    secret_file = tmp_path / "gemini.env"
    secret_file.write_text(
        "\n".join(["# local secrets", "GEMINI_API_KEY=from-file", "GEMINI_MODEL='gemini-test'"]),
        encoding="utf-8",
    )
    monkeypatch.setenv("SNAPSHEET_SECRET_FILE", str(secret_file))
    monkeypatch.setattr(config, "_SECRET_ENV_LOADED", False)
    # load_env_file writes to os.environ directly; register the keys so monkeypatch restores them.
    monkeypatch.setenv("GEMINI_MODEL", "")
    monkeypatch.delenv("GEMINI_MODEL")
    monkeypatch.setenv("GEMINI_API_KEY", "")
    monkeypatch.delenv("GEMINI_API_KEY")

    settings = load_settings()

    assert settings.api_key == "from-file"
    assert settings.model == "gemini-test"


def test_environment_wins_over_secret_file(tmp_path, monkeypatch):
    secret_file = tmp_path / "gemini.env"
    secret_file.write_text("GEMINI_API_KEY=from-file\n", encoding="utf-8")
    monkeypatch.setenv("SNAPSHEET_SECRET_FILE", str(secret_file))
    monkeypatch.setenv("GEMINI_API_KEY", "from-env")

    assert load_settings().api_key == "from-env"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ('["Date", "Total"]', ("Date", "Total")),
        ("Date, Total ,Points", ("Date", "Total", "Points")),
        ("Date,,Date,Total", ("Date", "Total")),
        ("", ()),
    ],
)
def test_parse_columns(raw, expected):
    assert parse_columns(raw) == expected


def test_parse_columns_rejects_bad_json():
    with pytest.raises(ConfigurationError):
        parse_columns('["Date", ')


def test_columns_and_timing_overrides(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "key")
    monkeypatch.setenv("SNAPSHEET_COLUMNS", '["Merchant", "Amount"]')
    monkeypatch.setenv("SNAPSHEET_REQUEST_DELAY", "0.5")
    monkeypatch.setenv("SNAPSHEET_MAX_RETRIES", "2")

    settings = load_settings()

    assert settings.columns == ("Merchant", "Amount")
    assert settings.request_delay == 0.5
    assert settings.max_retries == 2


@pytest.mark.parametrize("key, value", [("SNAPSHEET_REQUEST_DELAY", "soon"), ("SNAPSHEET_MAX_RETRIES", "-1")])
def test_invalid_numbers_are_configuration_errors(monkeypatch, key, value):
    monkeypatch.setenv("GEMINI_API_KEY", "key")
    monkeypatch.setenv(key, value)

    with pytest.raises(ConfigurationError):
        load_settings()


def test_prompt_file_override(tmp_path, monkeypatch):
    prompt_file = tmp_path / "prompt.txt"
    prompt_file.write_text(
        "Read the card.\n---columns---\nUse only {columns}.\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("GEMINI_API_KEY", "key")
    monkeypatch.setenv("SNAPSHEET_PROMPT_FILE", str(prompt_file))

    prompt = load_settings().prompt

    assert prompt.version == "file:prompt.txt"
    assert prompt.render(["Name"]) == 'Read the card.\n\nUse only ["Name"].'
    assert prompt.render() == "Read the card."


def test_build_context_creates_client_once(monkeypatch):
    created = []
    monkeypatch.setattr(config, "create_model_client", lambda api_key: created.append(api_key) or object())
    settings = config.Settings(api_key="key", columns=("A",))

    context = build_context(settings)

    assert created == ["key"]
    assert context.columns == ("A",)
    assert context.request_delay == 5.0


def test_build_context_without_key_fails():
    with pytest.raises(MissingCredentialsError):
        build_context(config.Settings(api_key=""))
