"""
Admission: may this (date, time) be booked at all, independent of table availability.

Rules are evaluated in priority order: special period closure/override, weekly opening
hours, then cut-off lead time. The validator is a pure function of its inputs; callers
pass "now" explicitly (restaurant-local, naive) so results never depend on the wall clock.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from booking_engine.core.constants import DEFAULT_MODIFICATION_CUTOFF_HOURS
from booking_engine.services.availability.conflicts import DEFAULT_DURATION_MINUTES
from booking_engine.services.availability.types import (
    ADMISSIBLE,
    AdmissionReason,
    AdmissionResult,
    AvailabilityRules,
    CutOffTime,
    OpeningHours,
    SpecialPeriod,
)
from booking_engine.services.availability.windows import (
    minutes_until,
    slot_datetime,
    time_in_range,
    weekday_index,
    window_for,
)


def _reject(reason: AdmissionReason) -> AdmissionResult:
    return AdmissionResult(admissible=False, reason=reason)


def covering_special_period(periods, day: date) -> SpecialPeriod | None:
    """Closed periods win over open ones; among open periods the most recently started one."""
    covering = [p for p in periods if p.covers(day)]
    if not covering:
        return None
    closed = [p for p in covering if not p.is_open]
    if closed:
        return closed[0]
    return max(covering, key=lambda p: p.start_date)


def opening_hours_for(hours, day_of_week: int) -> OpeningHours | None:
    for row in hours:
        if row.day_of_week == day_of_week:
            return row
    return None


def applicable_cut_off(cut_off_times, day_of_week: int) -> CutOffTime | None:
    """An enabled row for this weekday beats an enabled every-day row."""
    enabled = [c for c in cut_off_times if c.is_enabled]
    for c in enabled:
        if c.day_of_week == day_of_week:
            return c
    for c in enabled:
        if c.day_of_week is None:
            return c
    return None


async def load_rules(store, restaurant_id: int) -> AvailabilityRules:
    """Fetch a restaurant's rules from the storage collaborator (three sequential reads)."""
    return AvailabilityRules(
        opening_hours=tuple(await store.get_opening_hours(restaurant_id)),
        special_periods=tuple(await store.get_special_periods(restaurant_id)),
        cut_off_times=tuple(await store.get_cut_off_times(restaurant_id)),
    )


class AdmissionValidator:
    """Stateless; one instance can be shared by the request path and tests."""

    def is_admissible(
        self,
        rules: AvailabilityRules,
        candidate_date: date,
        candidate_time: time,
        now: datetime,
    ) -> AdmissionResult:
        day_of_week = weekday_index(candidate_date)

        window: tuple[time, time] | None = None
        period = covering_special_period(rules.special_periods, candidate_date)
        if period is not None:
            if not period.is_open:
                return _reject(AdmissionReason.CLOSED_SPECIAL_PERIOD)
            if period.has_override_hours:
                window = (period.open_time, period.close_time)

        if window is None:
            hours = opening_hours_for(rules.opening_hours, day_of_week)
            if hours is None or not hours.is_open:
                return _reject(AdmissionReason.CLOSED_WEEKDAY)
            window = (hours.open_time, hours.close_time)

        if not time_in_range(candidate_time, *window):
            return _reject(AdmissionReason.OUTSIDE_HOURS)

        cut_off = applicable_cut_off(rules.cut_off_times, day_of_week)
        if cut_off is not None:
            # 24h is plain lead time like any other value, not "by the previous calendar day"
            if minutes_until(candidate_date, candidate_time, now) < cut_off.lead_minutes:
                return _reject(AdmissionReason.WITHIN_CUTOFF)

        return ADMISSIBLE


@dataclass(frozen=True)
class ModificationWindow:
    can_modify: bool
    can_cancel: bool
    deadline: datetime
    cut_off_hours: int
    is_started: bool = False
    is_past: bool = False

    def to_dict(self) -> dict:
        return {
            "can_modify": self.can_modify,
            "can_cancel": self.can_cancel,
            "deadline": self.deadline.isoformat(),
            "cut_off_hours": self.cut_off_hours,
            "is_started": self.is_started,
            "is_past": self.is_past,
        }


def modification_window(
    booking_date: date,
    start_time: time,
    cut_off_times,
    now: datetime,
    default_hours: int = DEFAULT_MODIFICATION_CUTOFF_HOURS,
    end_time: time | None = None,
    default_duration_minutes: int = DEFAULT_DURATION_MINUTES,
) -> ModificationWindow:
    """Whether a guest may still change or cancel an existing booking.

    Uses the restaurant's cut-off for the booking's weekday; falls back to default_hours
    when none is enabled. A booking that has started (or ended) can no longer be changed.
    """
    cut_off = applicable_cut_off(cut_off_times, weekday_index(booking_date))
    if cut_off is None:
        lead = timedelta(hours=default_hours)
        hours = default_hours
    else:
        lead = timedelta(minutes=cut_off.lead_minutes)
        hours = cut_off.hours
    start = slot_datetime(booking_date, start_time)
    end = slot_datetime(booking_date, time()) + timedelta(
        minutes=window_for(start_time, end_time, default_duration_minutes).end
    )
    deadline = start - lead
    is_started = now >= start
    allowed = now < deadline and not is_started
    return ModificationWindow(
        can_modify=allowed,
        can_cancel=allowed,
        deadline=deadline,
        cut_off_hours=hours,
        is_started=is_started,
        is_past=now > end,
    )
