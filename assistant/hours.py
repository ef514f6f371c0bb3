"""Opening hours of the business, evaluated in the shop's local timezone."""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any, Mapping
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = "Asia/Jakarta"
# A week plus one day covers every weekday even when today is already past closing.
LOOKAHEAD_DAYS = 8


@dataclass
class HoursStatus:
    is_open: bool
    is_weekend: bool
    is_holiday: bool
    local_time: datetime
    next_open: datetime | None = None

    def describe(self) -> str:
        when = self.local_time.strftime("%A %H:%M %Z")
        if self.is_open:
            return f"The shop is currently open ({when})."
        reason = "a holiday" if self.is_holiday else "outside business hours"
        text = f"The shop is currently closed ({when}, {reason}). Orders can still be taken; "
        if self.next_open is None:
            return text + "tell the customer they will be processed on the next business day."
        reopens = self.next_open.strftime("%A %d %B %H:%M")
        return text + f"tell the customer the shop opens again on {reopens} and the order will be processed then."


def _parse_time(value: str) -> time:
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


@dataclass
class BusinessHours:
    timezone: str = DEFAULT_TIMEZONE
    weekday_start: str = "09:00"
    weekday_end: str = "18:00"
    weekends_enabled: bool = False
    weekend_start: str | None = None
    weekend_end: str | None = None
    holidays: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> "BusinessHours":
        if not raw:
            return cls()
        weekdays = raw.get("weekdays", {})
        weekends = raw.get("weekends", {})
        return cls(
            timezone=raw.get("timezone", DEFAULT_TIMEZONE),
            weekday_start=weekdays.get("start", "09:00"),
            weekday_end=weekdays.get("end", "18:00"),
            weekends_enabled=bool(weekends.get("enabled", False)),
            weekend_start=weekends.get("start"),
            weekend_end=weekends.get("end"),
            holidays=tuple(str(d) for d in raw.get("holidays", [])),
        )

    def _window(self, day: date) -> tuple[str, str] | None:
        """Opening and closing time for the given local date, or None if closed all day."""
        if day.isoformat() in self.holidays:
            return None
        if day.weekday() >= 5:
            if self.weekends_enabled and self.weekend_start and self.weekend_end:
                return self.weekend_start, self.weekend_end
            return None
        return self.weekday_start, self.weekday_end

    def _local_now(self, now: datetime | None) -> datetime:
        tz = ZoneInfo(self.timezone)
        return now.astimezone(tz) if now else datetime.now(tz=tz)

    def status(self, now: datetime | None = None) -> HoursStatus:
        local = self._local_now(now)
        window = self._window(local.date())
        is_open = window is not None and self._in_range(local.time(), *window)

        return HoursStatus(
            is_open=is_open,
            is_weekend=local.weekday() >= 5,
            is_holiday=local.date().isoformat() in self.holidays,
            local_time=local,
            next_open=None if is_open else self.next_open(local),
        )

    def next_open(self, now: datetime | None = None) -> datetime | None:
        """The next opening time strictly after now, or None if nothing opens within a week."""
        local = self._local_now(now)
        for offset in range(LOOKAHEAD_DAYS):
            day = local.date() + timedelta(days=offset)
            window = self._window(day)
            if window is None:
                continue
            opens = datetime.combine(day, _parse_time(window[0]), tzinfo=local.tzinfo)
            if opens > local:
                return opens
        return None

    def time_until_open(self, now: datetime | None = None) -> timedelta | None:
        """Zero while open, otherwise the wait until next_open()."""
        local = self._local_now(now)
        if self.status(local).is_open:
            return timedelta(0)
        opens = self.next_open(local)
        return opens - local if opens else None

    @staticmethod
    def _in_range(current: time, start: str, end: str) -> bool:
        """start <= current <= end; a range with end before start runs past midnight."""
        opens, closes = _parse_time(start), _parse_time(end)
        if opens <= closes:
            return opens <= current <= closes
        return current >= opens or current <= closes
