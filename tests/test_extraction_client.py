"""Tests for the Gemini extraction client and its rate-limit handling."""
import base64

import pytest

from conftest import FakeRateLimitError
from snapsheet.core.errors import MalformedResponseError, RateLimitedError
from snapsheet.extraction.client import ExtractionClient, backoff_delay, is_rate_limit_error

IMAGE = base64.b64encode(b"fake-receipt").decode("ascii")
COLUMNS = ["Date", "Total"]


def test_extract_sends_image_and_prompt(make_context):
    context = make_context(['{"Date": "2024-01-02", "Total": 5}'])
    client = ExtractionClient(context)

    record = client.extract(IMAGE, COLUMNS, mime_type="image/png")

    assert record == {"Date": "2024-01-02", "Total": 5}
    call = context.client.models.calls[0]
    assert call["model"] == context.model
    image_part, prompt = call["contents"]
    assert image_part.inline_data.mime_type == "image/png"
    assert image_part.inline_data.data == b"fake-receipt"
    assert '["Date", "Total"]' in prompt


def test_prompt_lists_normalization_rules(make_context):
    client = ExtractionClient(make_context([]))

    prompt = client.build_prompt()

    assert "YYYY-MM-DD" in prompt
    assert '"RewardCash"' in prompt and '"HKD"' in prompt
    assert "Do not include Markdown" in prompt
    assert "EXACT keys" not in prompt


def test_prompt_with_columns_forbids_new_keys(make_context):
    client = ExtractionClient(make_context([]))

    prompt = client.build_prompt(["日期", "您已赚取"])

    assert '["日期", "您已赚取"]' in prompt
    assert "Do NOT create new keys." in prompt


def test_returned_keys_stay_within_columns(make_context):
    context = make_context(['```json\n{"Date": "2024-01-02", "Shop": "Kiosk"}\n```'])

    record = ExtractionClient(context).extract(IMAGE, COLUMNS)

    assert set(record) <= set(COLUMNS)
    assert record == {"Date": "2024-01-02", "Total": None}


def test_backoff_sequence_then_success(make_context, sleeps):
    context = make_context([FakeRateLimitError()] * 5 + ['{"Total": 1}'])

    record = ExtractionClient(context).extract(IMAGE, COLUMNS)

    assert record == {"Date": None, "Total": 1}
    assert sleeps == [4.0, 8.0, 16.0, 32.0, 64.0]


def test_sixth_rate_limit_is_final(make_context, sleeps):
    context = make_context([FakeRateLimitError() for _ in range(6)] + ['{"Total": 1}'])

    with pytest.raises(RateLimitedError) as excinfo:
        ExtractionClient(context).extract(IMAGE, COLUMNS)

    assert sleeps == [4.0, 8.0, 16.0, 32.0, 64.0]
    assert len(context.client.models.calls) == 6
    assert excinfo.value.attempts == 6
    assert isinstance(excinfo.value.__cause__, FakeRateLimitError)


def test_other_errors_propagate_without_retry(make_context, sleeps):
    boom = PermissionError("API key not valid")
    context = make_context([boom])

    with pytest.raises(PermissionError) as excinfo:
        ExtractionClient(context).extract(IMAGE, COLUMNS)

    assert excinfo.value is boom
    assert sleeps == []
    assert len(context.client.models.calls) == 1


def test_malformed_answer_is_not_retried(make_context, sleeps):
    context = make_context(["Sorry, I cannot read this.", '{"Total": 1}'])

    with pytest.raises(MalformedResponseError):
        ExtractionClient(context).extract(IMAGE, COLUMNS)

    assert sleeps == []
    assert len(context.client.models.calls) == 1


def test_empty_answer_is_malformed(make_context):
    context = make_context([None])

    with pytest.raises(MalformedResponseError, match="No data returned"):
        ExtractionClient(context).extract(IMAGE, COLUMNS)


def test_max_retries_comes_from_context(make_context, sleeps):
    context = make_context([FakeRateLimitError()] * 3, max_retries=2)

    with pytest.raises(RateLimitedError):
        ExtractionClient(context).extract(IMAGE, COLUMNS)

    assert sleeps == [4.0, 8.0]


class _StatusError(Exception):
    def __init__(self, status):
        super().__init__("quota")
        self.status = status


@pytest.mark.parametrize(
    "exc, expected",
    [
        (FakeRateLimitError(), True),
        (_StatusError(429), True),
        (_StatusError("RESOURCE_EXHAUSTED"), True),
        (RuntimeError("429 Too Many Requests"), True),
        (_StatusError("PERMISSION_DENIED"), False),
        (FakeRateLimitError("Bad request", code=400), False),
        (ValueError("broken"), False),
    ],
)
def test_is_rate_limit_error(exc, expected):
    assert is_rate_limit_error(exc) is expected


def test_backoff_delay_doubles_from_four_seconds():
    assert [backoff_delay(attempt) for attempt in range(1, 6)] == [4, 8, 16, 32, 64]
