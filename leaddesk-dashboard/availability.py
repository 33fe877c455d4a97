import re
from datetime import date

DAY_FORMAT = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# 48 half-hour slots: 00:00, 00:30, ... 23:30
TIME_SLOTS = [f"{i // 2:02d}:{(i % 2) * 30:02d}" for i in range(48)]


def time_slots() -> list[str]:
    return list(TIME_SLOTS)


def toggle_time_slot(availability: dict, day: str, time: str, checked: bool) -> dict:
    """Return a copy of `availability` with `time` added to or removed from `day`."""
    slots = list(availability.get(day, []))
    if checked and time not in slots:
        slots.append(time)
    elif not checked and time in slots:
        slots.remove(time)
    return {**availability, day: sorted(slots)}


def validate_availability(availability) -> dict:
    """
    Check a {"YYYY-MM-DD": ["HH:MM", ...]} map against the half-hour grid.
    Returns a cleaned copy with de-duplicated, sorted slots.
    Raises ValueError on any violation.
    """
    if not isinstance(availability, dict):
        raise ValueError("availability must be an object of day -> time slots")

    cleaned = {}
    for day, times in availability.items():
        if not isinstance(day, str) or not DAY_FORMAT.match(day):
            raise ValueError(f"Invalid day '{day}'. Expected YYYY-MM-DD.")
        try:
            date.fromisoformat(day)
        except ValueError:
            raise ValueError(f"Invalid day '{day}'. Not a calendar date.")

        if not isinstance(times, list):
            raise ValueError(f"Time slots for {day} must be a list")
        for slot in times:
            if slot not in TIME_SLOTS:
                raise ValueError(f"Invalid time slot '{slot}' on {day}. Use 30-minute steps like 09:00 or 09:30.")

        cleaned[day] = sorted(set(times))
    return cleaned
