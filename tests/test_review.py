from __future__ import annotations


import pytest

from devotional.services import review as review_module
from devotional.services.llm_providers import ProviderError
from devotional.services.review import (
    ReviewGenerationError,
    build_prompt,
    filter_records_by_date_range,
    generate_ai_review,
    get_month_range,
    get_week_range,
    prepare_review_data,
)
from devotional.utils import parse_timestamp

from tests.factories import make_check_in, make_devotion


def _local(value: str):
    return parse_timestamp(value)


def test_week_starts_on_monday() -> None:
    # 2024-01-03 is a Wednesday.
    start, end = get_week_range(_local("2024-01-03T12:00:00"))

    assert start == _local("2024-01-01T00:00:00")
    assert end == _local("2024-01-07T23:59:59.999999")


def test_sunday_belongs_to_the_previous_monday() -> None:
    start, _ = get_week_range(_local("2024-01-07T22:00:00"))
    assert start == _local("2024-01-01T00:00:00")

    start, _ = get_week_range(_local("2024-01-08T00:00:00"))
    assert start == _local("2024-01-08T00:00:00")


def test_month_range_handles_leap_february() -> None:
    start, end = get_month_range(_local("2024-02-10T08:00:00"))

    assert start == _local("2024-02-01T00:00:00")
    assert end == _local("2024-02-29T23:59:59.999999")


def test_filter_is_inclusive() -> None:
    start, end = _local("2024-01-01T00:00:00"), _local("2024-01-07T23:59:59.999999")
    records = [
        make_check_in("before", "2023-12-31T23:59:59.999999"),
        make_check_in("first", "2024-01-01T00:00:00"),
        make_check_in("last", "2024-01-07T23:59:59.999999"),
        make_check_in("after", "2024-01-08T00:00:00"),
    ]

    kept = filter_records_by_date_range(records, start, end)

    assert [r.id for r in kept] == ["first", "last"]


def test_prepare_review_data_filters_both_kinds() -> None:
    devotions = [
        make_devotion("in", "2024-01-02T07:00:00"),
        make_devotion("out", "2023-12-31T07:00:00"),
    ]
    check_ins = [make_check_in("in", "2024-01-05T07:00:00"), make_check_in("out", "2024-01-09T07:00:00")]

    data = prepare_review_data(devotions, check_ins, "week", _local("2024-01-03T12:00:00"))

    assert [d.id for d in data.devotion_records] == ["in"]
    assert [c.id for c in data.check_in_records] == ["in"]
    assert data.period == "week"


def test_prepare_review_data_rejects_unknown_period() -> None:
    with pytest.raises(ValueError):
        prepare_review_data([], [], "year")


def test_prompt_lists_entries() -> None:
    data = prepare_review_data(
        [
            make_devotion(
                "d1",
                "2024-01-02T07:00:00",
                scripture=[
                    {"reference": "Psalm 46:10", "text": "Be still"},
                    {"reference": "Psalm 46:10", "text": "Cease striving", "version": "nasb"},
                ],
                observation="God is near",
                prayer_text="Help me rest",
            ),
        ],
        [make_check_in("c1", "2024-01-03T07:00:00", mood="🙏", note="thankful")],
        "week",
        _local("2024-01-03T12:00:00"),
    )

    prompt = build_prompt(data)

    assert prompt.startswith("Please put together my weekly review (2024-01-01 to 2024-01-07):")
    assert "## Devotions (1)" in prompt
    assert "### 1. 2024-01-02" in prompt
    assert "Scripture: Psalm 46:10: Be still\nPsalm 46:10: Cease striving" in prompt
    assert "Observation: God is near" in prompt
    assert "Application:" not in prompt
    assert "Prayer: Help me rest" in prompt
    assert "- 2024-01-03, mood: 🙏, note: thankful" in prompt
    assert "5. What to keep paying attention to next week" in prompt


def test_prompt_notes_empty_periods() -> None:
    data = prepare_review_data([], [], "month", _local("2024-02-10T08:00:00"))

    prompt = build_prompt(data)

    assert "## Devotions: none this month" in prompt
    assert "## Check-ins: none this month" in prompt


def test_no_credentials_returns_instructions_with_prompt() -> None:
    data = prepare_review_data([], [], "week", _local("2024-01-03T12:00:00"))

    result = generate_ai_review(data)

    assert result.provider is None
    assert "GEMINI_API_KEY" in result.review
    assert result.review.endswith(build_prompt(data))


def test_first_configured_provider_is_used(settings, monkeypatch) -> None:
    settings.OPENAI_API_KEY = "o"
    settings.COHERE_API_KEY = "c"
    used = []

    class _StubProvider:
        def __init__(self, name):
            self.name = name

        def generate(self, prompt):
            used.append(self.name)
            return f"review from {self.name}"

    monkeypatch.setattr(review_module, "get_provider", lambda name: _StubProvider(name))
    data = prepare_review_data([], [], "week", _local("2024-01-03T12:00:00"))

    result = generate_ai_review(data)

    assert (result.provider, result.review) == ("openai", "review from openai")
    assert used == ["openai"]


def test_provider_failure_is_wrapped(monkeypatch) -> None:
    class _Failing:
        def generate(self, prompt):
            raise ProviderError("quota exceeded")

    monkeypatch.setattr(review_module, "get_provider", lambda name: _Failing())
    data = prepare_review_data([], [], "week", _local("2024-01-03T12:00:00"))

    with pytest.raises(ReviewGenerationError, match=r"Failed to generate AI review \(cohere\): quota exceeded"):
        generate_ai_review(data, "cohere")


def test_explicit_provider_without_key_is_an_error() -> None:
    data = prepare_review_data([], [], "week", _local("2024-01-03T12:00:00"))

    with pytest.raises(ReviewGenerationError, match="GEMINI_API_KEY"):
        generate_ai_review(data, "gemini")
