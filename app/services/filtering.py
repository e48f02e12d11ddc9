"""
Client-side filtering of resource lists.

Filters never reorder: the result keeps the relative order of the input.
Every active filter must match (logical AND); an empty FilterSpec keeps everything.
"""

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from app.core.errors import ValidationFailure

EVENT_SEARCH_FIELDS = ("title", "description")
VENUE_SEARCH_FIELDS = ("name", "address")
TITLE_SEARCH_FIELDS = ("title",)

# Category values that stand for "no filter"
ANY_VALUES = ("", "all")

_CLOCK_FORMATS = ("%H:%M", "%H:%M:%S", "%I:%M %p", "%I:%M%p", "%I %p")

class DateBucket(str, Enum):
    ANY = "any"
    UPCOMING = "upcoming"
    PAST = "past"
    TODAY = "today"
    THIS_WEEK = "this-week"
    THIS_MONTH = "this-month"

    @classmethod
    def parse(cls, value: Optional[str]) -> "DateBucket":
        key = (value or "").strip().lower()
        aliases = {"": cls.ANY, "all": cls.ANY, "week": cls.THIS_WEEK, "month": cls.THIS_MONTH}
        if key in aliases:
            return aliases[key]
        try:
            return cls(key)
        except ValueError:
            raise ValidationFailure(f"Unknown date filter '{value}'")

@dataclass
class FilterSpec:
    """What to keep from a list"""
    query: str = ""
    text_fields: Sequence[str] = TITLE_SEARCH_FIELDS
    categories: Mapping[str, Optional[str]] = field(default_factory=dict)
    date_bucket: DateBucket = DateBucket.ANY

    @property
    def active_categories(self) -> dict:
        active = {}
        for name, value in self.categories.items():
            value = (value or "").strip()
            if value.lower() not in ANY_VALUES:
                active[name] = value
        return active

    @property
    def is_empty(self) -> bool:
        return (
            not self.query.strip()
            and not self.active_categories
            and self.date_bucket is DateBucket.ANY
        )

def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)

def _parse_clock(value: Optional[str]) -> Optional[time]:
    text = (value or "").strip().upper()
    if not text:
        return None
    for fmt in _CLOCK_FORMATS:
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    return None

def parse_event_instant(date_value: Any, time_value: Optional[str] = None) -> Optional[datetime]:
    """Combine an event's date and time into a local naive datetime.

    A date-only value is joined with its time when the time parses, otherwise
    with midnight. A full timestamp is used as is; aware timestamps are
    converted to local time. Returns None when the date cannot be read.
    """
    if isinstance(date_value, datetime):
        instant = date_value
    elif isinstance(date_value, date):
        return datetime.combine(date_value, _parse_clock(time_value) or time.min)
    else:
        text = str(date_value or "").strip()
        if not text:
            return None
        try:
            day = date.fromisoformat(text)
        except ValueError:
            try:
                instant = datetime.fromisoformat(text.replace("Z", "+00:00"))
            except ValueError:
                return None
        else:
            return datetime.combine(day, _parse_clock(time_value) or time.min)

    if instant.tzinfo is not None:
        instant = instant.astimezone().replace(tzinfo=None)
    return instant

def item_instant(item: Any) -> Optional[datetime]:
    return parse_event_instant(_field(item, "date"), _field(item, "time"))

def add_months(moment: datetime, months: int) -> datetime:
    """Calendar month arithmetic; the day is clamped to the target month's length"""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)

def in_date_bucket(instant: Optional[datetime], bucket: DateBucket, now: datetime) -> bool:
    if bucket is DateBucket.ANY:
        return True
    if instant is None:
        return False
    if bucket is DateBucket.UPCOMING:
        return instant >= now
    if bucket is DateBucket.PAST:
        return instant < now
    if bucket is DateBucket.TODAY:
        return instant.date() == now.date()
    if bucket is DateBucket.THIS_WEEK:
        return now <= instant <= now + timedelta(days=7)
    if bucket is DateBucket.THIS_MONTH:
        return now <= instant <= add_months(now, 1)
    return True

def matches_text(item: Any, query: str, fields: Sequence[str]) -> bool:
    needle = query.strip().lower()
    if not needle:
        return True
    return any(needle in str(_field(item, name) or "").lower() for name in fields)

def matches(item: Any, spec: FilterSpec, now: datetime) -> bool:
    if not matches_text(item, spec.query, spec.text_fields):
        return False
    for name, value in spec.active_categories.items():
        if _field(item, name) != value:
            return False
    return in_date_bucket(item_instant(item), spec.date_bucket, now)

def filter_items(items: Iterable[Any], spec: FilterSpec, now: Optional[datetime] = None) -> List[Any]:
    """Keep the items matching spec, in their original order"""
    items = list(items)
    if spec.is_empty:
        return items
    if now is None:
        now = datetime.now()
    return [item for item in items if matches(item, spec, now)]

def distinct_values(items: Iterable[Any], name: str) -> List[Any]:
    """Distinct non-empty values of a field in first-seen order, for filter menus"""
    values = []
    for item in items:
        value = _field(item, name)
        if value and value not in values:
            values.append(value)
    return values

def sort_by_instant(items: Iterable[Any]) -> List[Any]:
    """Soonest first; items without a readable date go last"""
    return sorted(items, key=lambda item: (item_instant(item) is None, item_instant(item) or datetime.min))
