"""
Lead, lawyer and meeting records as the admin panel sees them.

Raw DynamoDB items are written by the intake pipeline and are not always
complete, so every mapper fills in defaults rather than failing.
"""
import csv
import io
from datetime import datetime, timezone
from decimal import Decimal
from urllib.parse import urlencode

CALENDAR_BASE_URL = "https://calendar.google.com/calendar/render"
DEFAULT_SPECIALTY = "General Practice"
UNKNOWN_LAWYER = "Unknown"
NO_TRANSCRIPT = "No transcript available."

SORT_KEYS = {"name", "created_at", "language", "amount"}

CSV_COLUMNS = [
    "id",
    "name",
    "email",
    "whatsapp",
    "language",
    "amount",
    "created_at",
    "assigned_to",
    "status",
]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_iso(value) -> str:
    """Best-effort ISO-8601 for whatever the intake pipeline stored."""
    if value is None or value == "":
        return ""
    if isinstance(value, (int, float, Decimal)):
        # Epoch milliseconds, as written by Date.now()
        try:
            return datetime.fromtimestamp(float(value) / 1000, tz=timezone.utc).isoformat()
        except (ValueError, OverflowError, OSError):
            return ""
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return ""
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).isoformat()


def _text(item: dict, key: str, default: str = "") -> str:
    value = item.get(key)
    if value is None or value == "":
        return default
    return str(value)


def to_lead(item: dict) -> dict:
    return {
        "id": _text(item, "id"),
        "name": _text(item, "name"),
        "email": _text(item, "email"),
        "whatsapp": _text(item, "whatsapp"),
        "language": _text(item, "language"),
        "amount": _text(item, "amount"),
        "created_at": _to_iso(item.get("created_at")),
        "voice_transcript": _text(item, "voice_transcript"),
        "status": _text(item, "status", "New"),
        "assignedTo": item.get("assignedTo") or None,
        "lead_type": item.get("lead_type"),
        "client_id": item.get("client_id"),
        "ticket_id": item.get("ticket_id"),
        "lead_source": item.get("lead_source"),
        "calendar_status": item.get("calendar_status"),
        "meeting_link": item.get("meeting_link"),
        "start_time": item.get("start_time"),
        "end_time": item.get("end_time"),
        "tags": list(item.get("tags") or []),
    }


def is_contactable(lead: dict) -> bool:
    return bool(lead["email"] or lead["whatsapp"])


def to_lawyer(item: dict) -> dict:
    availability = item.get("availability") or {}
    return {
        "id": _text(item, "id"),
        "name": _text(item, "name"),
        "avatarUrl": _text(item, "avatarUrl"),
        "specialty": _text(item, "specialty", DEFAULT_SPECIALTY),
        "email": _text(item, "email"),
        "availability": {day: list(times) for day, times in availability.items()},
    }


def to_meeting(item: dict) -> dict:
    now = _now_iso()
    return {
        "id": _text(item, "id"),
        "userName": _text(item, "name", "N/A"),
        "userContact": {
            "email": _text(item, "email"),
            "phone": _text(item, "whatsapp"),
        },
        "meetingLink": _text(item, "meeting_link"),
        "startTime": _text(item, "start_time", now),
        "endTime": _text(item, "end_time", now),
        "voiceTranscript": _text(item, "voice_transcript", NO_TRANSCRIPT),
    }


def lawyer_name(lawyer_id: str | None, lawyers_by_id: dict) -> str | None:
    if not lawyer_id:
        return None
    lawyer = lawyers_by_id.get(lawyer_id)
    return lawyer["name"] if lawyer else UNKNOWN_LAWYER


def filter_leads(
    leads: list[dict],
    query: str = "",
    language: str = "",
    assigned: str = "",
) -> list[dict]:
    """
    Narrow the lead table the way the panel's search box and dropdowns do.
    `assigned` is "yes", "no" or empty for either.
    """
    needle = query.strip().lower()
    language = language.strip().lower()
    assigned = assigned.strip().lower()

    result = []
    for lead in leads:
        if needle:
            haystack = " ".join(
                (lead["name"], lead["email"], lead["whatsapp"], lead["voice_transcript"])
            ).lower()
            if needle not in haystack:
                continue
        if language and lead["language"].lower() != language:
            continue
        if assigned == "yes" and not lead["assignedTo"]:
            continue
        if assigned == "no" and lead["assignedTo"]:
            continue
        result.append(lead)
    return result


def _amount_key(value: str) -> float:
    cleaned = "".join(ch for ch in value if ch.isdigit() or ch == ".")
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def sort_leads(leads: list[dict], key: str = "created_at", descending: bool = True) -> list[dict]:
    if key not in SORT_KEYS:
        raise ValueError(f"Cannot sort by '{key}'. Must be one of: {', '.join(sorted(SORT_KEYS))}")

    if key == "amount":
        return sorted(leads, key=lambda lead: _amount_key(lead["amount"]), reverse=descending)
    if key == "created_at":
        return sorted(leads, key=lambda lead: lead["created_at"], reverse=descending)
    return sorted(leads, key=lambda lead: lead[key].lower(), reverse=descending)


def leads_to_csv(leads: list[dict], lawyers_by_id: dict | None = None) -> str:
    lawyers_by_id = lawyers_by_id or {}
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=CSV_COLUMNS, lineterminator="\n")
    writer.writeheader()
    for lead in leads:
        writer.writerow({
            "id": lead["id"],
            "name": lead["name"],
            "email": lead["email"],
            "whatsapp": lead["whatsapp"],
            "language": lead["language"],
            "amount": lead["amount"],
            "created_at": lead["created_at"],
            "assigned_to": lawyer_name(lead["assignedTo"], lawyers_by_id) or "",
            "status": lead["status"],
        })
    return buffer.getvalue()


def round_robin(leads: list[dict], lawyers: list[dict]) -> list[tuple[str, str]]:
    """
    Pair every unassigned lead with a lawyer, cycling through lawyers in id order.
    Returns (lead_id, lawyer_id) pairs.
    """
    if not lawyers:
        raise ValueError("No lawyers available for assignment.")

    ordered = sorted(lawyers, key=lambda lawyer: lawyer["id"])
    unassigned = [lead for lead in leads if not lead["assignedTo"]]
    return [
        (lead["id"], ordered[i % len(ordered)]["id"])
        for i, lead in enumerate(unassigned)
    ]


def calendar_link(lead: dict) -> str:
    params = {
        "action": "TEMPLATE",
        "text": f"Meeting with {lead['name']}",
        "details": f"Scheduled meeting to discuss: {lead['voice_transcript']}",
        "add": lead["email"],
    }
    return f"{CALENDAR_BASE_URL}?{urlencode(params)}"
