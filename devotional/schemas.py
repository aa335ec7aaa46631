from datetime import date, datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .utils import parse_timestamp


ReviewPeriod = Literal["week", "month"]
ProviderName = Literal["gemini", "huggingface", "openai", "cohere"]


def _as_passage_list(value: Any) -> Any:
    # Older records carry a single {"reference", "text"} object.
    if isinstance(value, (dict, ScripturePassage)):
        return [value]
    return value


# -------------------------
# Records
# -------------------------

class ScripturePassage(BaseModel):
    reference: str
    text: str
    version: Optional[str] = None


class DevotionRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    date: datetime
    scripture: List[ScripturePassage]
    observation: str = ""
    application: str = ""
    prayer_text: str = Field(default="", alias="prayerText")

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, v):
        return parse_timestamp(v)

    @field_validator("scripture", mode="before")
    @classmethod
    def _parse_scripture(cls, v):
        return _as_passage_list(v)


class CheckInRecord(BaseModel):
    id: str
    date: datetime
    mood: Optional[str] = None
    note: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, v):
        return parse_timestamp(v)


def dump_record(record: BaseModel) -> dict:
    """JSON-ready dict using the stored field names (prayerText, ...)."""
    return record.model_dump(mode="json", by_alias=True, exclude_none=True)


# -------------------------
# API payloads
# -------------------------

class DevotionRecordIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    date: Optional[datetime] = None
    scripture: List[ScripturePassage]
    observation: str = ""
    application: str = ""
    prayer_text: str = Field(default="", alias="prayerText")

    @field_validator("scripture", mode="before")
    @classmethod
    def _parse_scripture(cls, v):
        return _as_passage_list(v)


class CheckInIn(BaseModel):
    mood: Optional[str] = None
    note: Optional[str] = None


class DevotionRecordsOut(BaseModel):
    records: List[DevotionRecord]
    cloud_synced: bool = False
    warning: Optional[str] = None


class CheckInRecordsOut(BaseModel):
    records: List[CheckInRecord]
    cloud_synced: bool = False
    warning: Optional[str] = None


class MoodOptionOut(BaseModel):
    value: str
    label: str


class CalendarDayOut(BaseModel):
    date: date
    is_current_month: bool
    is_today: bool
    status: Literal["checked", "unchecked", "future"]
    mood: Optional[str] = None


class BookOut(BaseModel):
    id: str
    name: str
    chapters: int


class ReviewIn(BaseModel):
    period: ReviewPeriod
    provider: Optional[ProviderName] = None
    date: Optional[datetime] = None


class ReviewOut(BaseModel):
    period: ReviewPeriod
    start_date: datetime
    end_date: datetime
    devotion_count: int
    check_in_count: int
    provider: Optional[str] = None
    review: str


class SessionOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    phase: str
    prayer_ends_at: Optional[datetime] = None
    scripture: List[ScripturePassage]
    observation: str
    application: str
    prayer_text: str = Field(alias="prayerText")


class SessionJournalIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    observation: Optional[str] = None
    application: Optional[str] = None
    prayer_text: Optional[str] = Field(default=None, alias="prayerText")
