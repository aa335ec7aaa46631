"""
Weekly / monthly AI review of devotion and check-in records.
"""
from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Iterable, List, Optional, Tuple, TypeVar

from django.utils import timezone

from ..schemas import CheckInRecord, DevotionRecord, ReviewPeriod
from ..utils import local_datetime, parse_timestamp
from .llm_providers import (
    PROVIDER_PRIORITY,
    ProviderError,
    ReviewConfigurationError,
    get_provider,
    select_provider_name,
)


logger = logging.getLogger(__name__)

R = TypeVar("R")


class ReviewGenerationError(RuntimeError):
    pass


@dataclass
class ReviewData:
    devotion_records: List[DevotionRecord]
    check_in_records: List[CheckInRecord]
    period: ReviewPeriod
    start_date: datetime
    end_date: datetime


@dataclass
class ReviewResult:
    review: str
    provider: Optional[str]


# -------------------------
# Date ranges
# -------------------------

def _day_bounds(start_day, end_day) -> Tuple[datetime, datetime]:
    tz = timezone.get_current_timezone()
    start = timezone.make_aware(datetime.combine(start_day, time.min), tz)
    end = timezone.make_aware(datetime.combine(end_day, time.max), tz)
    return start, end


def get_week_range(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Monday 00:00 through Sunday 23:59:59.999999 (local) of the week containing ``now``."""
    today = local_datetime(now).date()
    monday = today - timedelta(days=today.weekday())
    return _day_bounds(monday, monday + timedelta(days=6))


def get_month_range(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """First day 00:00 through last day 23:59:59.999999 (local) of ``now``'s month."""
    today = local_datetime(now).date()
    last_day = calendar.monthrange(today.year, today.month)[1]
    return _day_bounds(today.replace(day=1), today.replace(day=last_day))


def filter_records_by_date_range(records: Iterable[R], start: datetime, end: datetime) -> List[R]:
    """Records whose timestamp falls within [start, end]."""
    return [r for r in records if start <= parse_timestamp(r.date) <= end]


def prepare_review_data(
    devotion_records: Iterable[DevotionRecord],
    check_in_records: Iterable[CheckInRecord],
    period: ReviewPeriod,
    now: Optional[datetime] = None,
) -> ReviewData:
    if period == "week":
        start, end = get_week_range(now)
    elif period == "month":
        start, end = get_month_range(now)
    else:
        raise ValueError(f"Unknown review period {period!r}; use 'week' or 'month'.")

    return ReviewData(
        devotion_records=filter_records_by_date_range(devotion_records, start, end),
        check_in_records=filter_records_by_date_range(check_in_records, start, end),
        period=period,
        start_date=start,
        end_date=end,
    )


# -------------------------
# Prompt
# -------------------------

def _short_date(value) -> str:
    return local_datetime(value).date().isoformat()


def build_prompt(data: ReviewData) -> str:
    label = data.period
    lines: List[str] = [
        f"Please put together my {label}ly review "
        f"({_short_date(data.start_date)} to {_short_date(data.end_date)}):",
        "",
    ]

    if data.devotion_records:
        lines += [f"## Devotions ({len(data.devotion_records)})", ""]
        for index, record in enumerate(data.devotion_records, start=1):
            scriptures = "\n".join(f"{p.reference}: {p.text}" for p in record.scripture)
            lines.append(f"### {index}. {_short_date(record.date)}")
            lines.append(f"Scripture: {scriptures}")
            if record.observation:
                lines.append(f"Observation: {record.observation}")
            if record.application:
                lines.append(f"Application: {record.application}")
            if record.prayer_text:
                lines.append(f"Prayer: {record.prayer_text}")
            lines.append("")
    else:
        lines += [f"## Devotions: none this {label}", ""]

    if data.check_in_records:
        lines += [f"## Check-ins ({len(data.check_in_records)})", ""]
        for check_in in data.check_in_records:
            line = f"- {_short_date(check_in.date)}"
            if check_in.mood:
                line += f", mood: {check_in.mood}"
            if check_in.note:
                line += f", note: {check_in.note}"
            lines.append(line)
    else:
        lines += [f"## Check-ins: none this {label}", ""]

    lines += [
        "",
        f"Based on these records, please write a {label}ly review covering:",
        f"1. The main devotional focus and themes of this {label}",
        f"2. What God has been saying this {label}",
        f"3. Growth and change over this {label}",
        "4. Things to be thankful for",
        f"5. What to keep paying attention to next {label}",
        "",
        "Please answer in a warm, encouraging tone.",
    ]
    return "\n".join(lines)


def missing_credentials_message(prompt: str) -> str:
    return (
        "No AI API key is configured yet.\n\n"
        "Google Gemini is recommended (free and stable):\n\n"
        "1. Google Gemini (recommended)\n"
        "   - Create a key at https://makersuite.google.com/app/apikey\n"
        "   - Set GEMINI_API_KEY=your_api_key_here in the environment\n"
        "   - Restart the server\n\n"
        "Other options:\n\n"
        "2. Hugging Face (free)\n"
        "   - Create a token at https://huggingface.co/settings/tokens\n"
        "   - Set HUGGINGFACE_API_KEY=your_key\n\n"
        "3. Cohere (free monthly quota)\n"
        "   - Sign up at https://cohere.com/\n"
        "   - Set COHERE_API_KEY=your_key\n\n"
        "4. OpenAI (trial credit)\n"
        "   - Sign up at https://platform.openai.com/\n"
        "   - Set OPENAI_API_KEY=your_key\n\n"
        "Here is the prepared data:\n\n"
        f"{prompt}"
    )


def generate_ai_review(data: ReviewData, provider: Optional[str] = None) -> ReviewResult:
    """
    Generate the review text.

    Without an explicit provider the first configured one in priority order
    (Gemini > Hugging Face > OpenAI > Cohere) is used; when none is
    configured the result is an instructional message, not an error.

    Raises:
        ReviewGenerationError: The provider is unknown, unconfigured or failed.
    """
    prompt = build_prompt(data)

    if provider is None:
        provider = select_provider_name()
        if provider is None:
            logger.info("No review provider configured (checked %s)", ", ".join(PROVIDER_PRIORITY))
            return ReviewResult(review=missing_credentials_message(prompt), provider=None)

    try:
        text = get_provider(provider).generate(prompt)
    except (ValueError, ReviewConfigurationError, ProviderError) as e:
        logger.error("AI review generation failed (%s): %s", provider, e)
        raise ReviewGenerationError(f"Failed to generate AI review ({provider}): {e}") from e

    return ReviewResult(review=text, provider=provider)
