"""
leaddesk-dashboard Lambda handler.

Routes:
  GET  /dashboard                    → counts + 10 most recent leads
  GET  /leads                        → filtered/sorted lead table
  GET  /leads/existing               → leads flagged existing_lead
  GET  /leads/export                 → lead table as CSV
  POST /leads/assign-round-robin     → spread unassigned leads over lawyers
  GET  /leads/{id}                   → one lead
  GET  /leads/{id}/transcript        → transcript as chat messages
  GET  /leads/{id}/calendar-link     → Google Calendar template link
  POST /leads/{id}/assign            → assign lead to a lawyer
  GET  /meetings                     → scheduled meetings
  GET  /lawyers                      → lawyers
  PUT  /lawyers/{id}/availability    → replace a lawyer's time slots
"""

import json
import logging
import os
from collections import defaultdict

import availability
import db
import emailer
import leads
import transcript

logger = logging.getLogger()
logger.setLevel(logging.INFO)

LEADS_TABLE = os.environ["LEADS_TABLE_NAME"]
LAWYERS_TABLE = os.environ["LAWYERS_TABLE_NAME"]
AWS_REGION = os.environ.get("AWS_REGION", "us-east-1")
FIRM_EMAIL = os.environ.get("FIRM_EMAIL", "")
FROM_EMAIL = os.environ.get("FROM_EMAIL", "")

EXISTING_LEAD = "existing_lead"
SCHEDULED = "scheduled"
RECENT_LEADS = 10


def _cors_headers() -> dict:
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Headers": "Content-Type",
        "Access-Control-Allow-Methods": "GET,POST,PUT,OPTIONS",
    }


def _response(status_code: int, body) -> dict:
    return {
        "statusCode": status_code,
        "headers": {**_cors_headers(), "Content-Type": "application/json"},
        "body": json.dumps(body, default=str),
    }


def _csv_response(filename: str, text: str) -> dict:
    return {
        "statusCode": 200,
        "headers": {
            **_cors_headers(),
            "Content-Type": "text/csv; charset=utf-8",
            "Content-Disposition": f'attachment; filename="{filename}"',
        },
        "body": text,
    }


def _load_leads() -> list[dict]:
    items = db.scan_all(table_name=LEADS_TABLE, region=AWS_REGION)
    return [lead for lead in map(leads.to_lead, items) if leads.is_contactable(lead)]


def _load_lawyers() -> dict:
    items = db.scan_all(table_name=LAWYERS_TABLE, region=AWS_REGION)
    return {lawyer["id"]: lawyer for lawyer in map(leads.to_lawyer, items)}


def _load_lead(lead_id: str) -> dict | None:
    item = db.get_item(table_name=LEADS_TABLE, item_id=lead_id, region=AWS_REGION)
    return leads.to_lead(item) if item else None


def _table_params(params: dict) -> dict:
    """Query-string options for the lead table. Raises ValueError on a bad sort key."""
    sort = params.get("sort", "created_at")
    if sort not in leads.SORT_KEYS:
        raise ValueError(f"Cannot sort by '{sort}'. Must be one of: {', '.join(sorted(leads.SORT_KEYS))}")
    return {
        "query": params.get("q", ""),
        "language": params.get("language", ""),
        "assigned": params.get("assigned", ""),
        "sort": sort,
        "descending": params.get("order", "desc").lower() != "asc",
    }


def _lead_table(options: dict) -> tuple[list[dict], dict]:
    """Shared by /leads and /leads/export."""
    lawyers_by_id = _load_lawyers()
    rows = leads.filter_leads(
        _load_leads(),
        query=options["query"],
        language=options["language"],
        assigned=options["assigned"],
    )
    rows = leads.sort_leads(rows, key=options["sort"], descending=options["descending"])
    return rows, lawyers_by_id


def handle_dashboard():
    """GET /dashboard — aggregated counts and recent leads."""
    logger.info("Dashboard request received")

    try:
        all_leads = _load_leads()
        lawyers_by_id = _load_lawyers()
    except Exception as e:
        logger.error("DynamoDB scan failed | error=%s", str(e))
        return _response(500, {"error": "Failed to retrieve lead data."})

    by_language = defaultdict(int)
    assigned = 0
    scheduled = 0
    existing = 0

    for lead in all_leads:
        by_language[lead["language"] or "unknown"] += 1
        if lead["assignedTo"]:
            assigned += 1
        if lead["calendar_status"] == SCHEDULED:
            scheduled += 1
        if lead["lead_type"] == EXISTING_LEAD:
            existing += 1

    recent = leads.sort_leads(all_leads, key="created_at", descending=True)[:RECENT_LEADS]
    recent_leads = [
        {**lead, "allocatedTo": lawyers_by_id.get(lead["assignedTo"]) if lead["assignedTo"] else None}
        for lead in recent
    ]

    payload = {
        "total_leads": len(all_leads),
        "assigned_leads": assigned,
        "unassigned_leads": len(all_leads) - assigned,
        "scheduled_meetings": scheduled,
        "existing_leads": existing,
        "total_lawyers": len(lawyers_by_id),
        "by_language": dict(by_language),
        "recent_leads": recent_leads,
    }

    logger.info("Dashboard complete | total=%d | assigned=%d", len(all_leads), assigned)
    return _response(200, payload)


def handle_list_leads(params: dict):
    """GET /leads — lead table with filters, sort and lawyer names."""
    try:
        options = _table_params(params)
    except ValueError as e:
        return _response(400, {"error": str(e)})

    try:
        rows, lawyers_by_id = _lead_table(options)
    except Exception as e:
        logger.error("Lead list failed | error=%s", str(e))
        return _response(500, {"error": "Failed to retrieve leads."})

    payload = [
        {**lead, "assignedLawyerName": leads.lawyer_name(lead["assignedTo"], lawyers_by_id)}
        for lead in rows
    ]
    logger.info("Lead list complete | count=%d", len(payload))
    return _response(200, {"leads": payload, "count": len(payload)})


def handle_existing_leads():
    """GET /leads/existing — leads the intake pipeline matched to a client."""
    try:
        items = db.scan_where(
            table_name=LEADS_TABLE,
            field="lead_type",
            value=EXISTING_LEAD,
            region=AWS_REGION,
        )
        lawyers_by_id = _load_lawyers()
    except Exception as e:
        logger.error("Existing lead scan failed | error=%s", str(e))
        return _response(500, {"error": "Failed to retrieve existing leads."})

    rows = leads.sort_leads([leads.to_lead(item) for item in items])
    payload = [
        {**lead, "assignedLawyerName": leads.lawyer_name(lead["assignedTo"], lawyers_by_id)}
        for lead in rows
    ]
    return _response(200, {"leads": payload, "count": len(payload)})


def handle_export(params: dict):
    """GET /leads/export — the current lead table as CSV."""
    try:
        options = _table_params(params)
    except ValueError as e:
        return _response(400, {"error": str(e)})

    try:
        rows, lawyers_by_id = _lead_table(options)
    except Exception as e:
        logger.error("Lead export failed | error=%s", str(e))
        return _response(500, {"error": "Failed to export leads."})

    logger.info("Lead export complete | rows=%d", len(rows))
    return _csv_response("leads.csv", leads.leads_to_csv(rows, lawyers_by_id))


def handle_lead_detail(lead_id: str):
    """GET /leads/{id}"""
    logger.info("Lead detail request | lead_id=%s", lead_id)
    try:
        lead = _load_lead(lead_id)
    except Exception as e:
        logger.error("DynamoDB get failed | lead_id=%s | error=%s", lead_id, str(e))
        return _response(500, {"error": "Failed to retrieve lead."})

    if not lead:
        return _response(404, {"error": "Lead not found."})
    return _response(200, lead)


def handle_transcript(lead_id: str):
    """GET /leads/{id}/transcript — transcript rendered as chat messages."""
    try:
        lead = _load_lead(lead_id)
    except Exception as e:
        logger.error("DynamoDB get failed | lead_id=%s | error=%s", lead_id, str(e))
        return _response(500, {"error": "Failed to retrieve lead."})

    if not lead:
        return _response(404, {"error": "Lead not found."})

    messages = transcript.normalize(lead["voice_transcript"])
    if not messages:
        messages = [{"role": "system", "content": leads.NO_TRANSCRIPT}]

    return _response(200, {
        "lead_id": lead_id,
        "language": lead["language"],
        "messages": messages,
    })


def handle_calendar_link(lead_id: str):
    """GET /leads/{id}/calendar-link"""
    try:
        lead = _load_lead(lead_id)
    except Exception as e:
        logger.error("DynamoDB get failed | lead_id=%s | error=%s", lead_id, str(e))
        return _response(500, {"error": "Failed to retrieve lead."})

    if not lead:
        return _response(404, {"error": "Lead not found."})
    return _response(200, {"lead_id": lead_id, "url": leads.calendar_link(lead)})


def handle_assign(lead_id: str, body: dict):
    """POST /leads/{id}/assign — hand a lead to a lawyer."""
    lawyer_id = str(body.get("lawyer_id", "")).strip()
    logger.info("Assign request | lead_id=%s | lawyer_id=%s", lead_id, lawyer_id)

    if not lawyer_id:
        return _response(400, {"error": "Missing lawyer_id."})

    try:
        lawyer_item = db.get_item(table_name=LAWYERS_TABLE, item_id=lawyer_id, region=AWS_REGION)
    except Exception as e:
        logger.error("Lawyer lookup failed | lawyer_id=%s | error=%s", lawyer_id, str(e))
        return _response(500, {"error": "Failed to retrieve lawyer."})

    if not lawyer_item:
        return _response(404, {"error": "Lawyer not found."})

    try:
        db.update_fields(
            table_name=LEADS_TABLE,
            item_id=lead_id,
            fields={"assignedTo": lawyer_id},
            region=AWS_REGION,
        )
        lead = _load_lead(lead_id) or {"id": lead_id}
    except ValueError:
        return _response(404, {"error": "Lead not found."})
    except Exception as e:
        logger.error("Assignment failed | lead_id=%s | error=%s", lead_id, str(e))
        return _response(500, {"error": "Failed to assign lead."})

    lawyer = leads.to_lawyer(lawyer_item)
    emailer.send_assignment_alert(
        to_emails=[FIRM_EMAIL, lawyer["email"]],
        lead=lead,
        lawyer=lawyer,
        from_email=FROM_EMAIL,
        region=AWS_REGION,
    )

    logger.info("Lead assigned | lead_id=%s | lawyer_id=%s", lead_id, lawyer_id)
    return _response(200, {
        "lead_id": lead_id,
        "assignedTo": lawyer_id,
        "message": f"Lead assigned to {lawyer['name']}.",
    })


def handle_round_robin():
    """POST /leads/assign-round-robin"""
    try:
        all_leads = _load_leads()
        lawyers_by_id = _load_lawyers()
    except Exception as e:
        logger.error("DynamoDB scan failed | error=%s", str(e))
        return _response(500, {"error": "Failed to retrieve lead data."})

    try:
        pairs = leads.round_robin(all_leads, list(lawyers_by_id.values()))
    except ValueError as e:
        return _response(400, {"error": str(e)})

    assignments = []
    for lead_id, lawyer_id in pairs:
        try:
            db.update_fields(
                table_name=LEADS_TABLE,
                item_id=lead_id,
                fields={"assignedTo": lawyer_id},
                region=AWS_REGION,
            )
        except Exception as e:
            logger.error("Round-robin assignment failed | lead_id=%s | error=%s", lead_id, str(e))
            return _response(500, {
                "error": "Failed to assign all leads.",
                "assignments": assignments,
            })
        assignments.append({"lead_id": lead_id, "lawyer_id": lawyer_id})

    logger.info("Round-robin complete | assigned=%d | lawyers=%d", len(assignments), len(lawyers_by_id))
    return _response(200, {"assignments": assignments, "count": len(assignments)})


def handle_meetings():
    """GET /meetings — leads with a booked meeting."""
    try:
        items = db.scan_where(
            table_name=LEADS_TABLE,
            field="calendar_status",
            value=SCHEDULED,
            region=AWS_REGION,
        )
    except Exception as e:
        logger.error("Meeting scan failed | error=%s", str(e))
        return _response(500, {"error": "Failed to retrieve meetings."})

    meetings = sorted(map(leads.to_meeting, items), key=lambda m: m["startTime"])
    return _response(200, {"meetings": meetings, "count": len(meetings)})


def handle_lawyers():
    """GET /lawyers"""
    try:
        lawyers_by_id = _load_lawyers()
    except Exception as e:
        logger.error("Lawyer scan failed | error=%s", str(e))
        return _response(500, {"error": "Failed to retrieve lawyers."})

    lawyers = sorted(lawyers_by_id.values(), key=lambda lawyer: lawyer["name"].lower())
    return _response(200, {"lawyers": lawyers, "count": len(lawyers)})


def handle_set_availability(lawyer_id: str, body: dict):
    """PUT /lawyers/{id}/availability"""
    logger.info("Availability update request | lawyer_id=%s", lawyer_id)

    try:
        slots = availability.validate_availability(body.get("availability"))
    except ValueError as e:
        return _response(400, {"error": str(e)})

    try:
        db.update_fields(
            table_name=LAWYERS_TABLE,
            item_id=lawyer_id,
            fields={"availability": slots},
            region=AWS_REGION,
        )
    except ValueError:
        return _response(404, {"error": "Lawyer not found."})
    except Exception as e:
        logger.error("Availability update failed | lawyer_id=%s | error=%s", lawyer_id, str(e))
        return _response(500, {"error": "Failed to save availability."})

    logger.info("Availability saved | lawyer_id=%s | days=%d", lawyer_id, len(slots))
    return _response(200, {"lawyer_id": lawyer_id, "availability": slots})


def _parse_body(event: dict) -> dict:
    raw_body = event.get("body") or "{}"
    if isinstance(raw_body, str):
        body = json.loads(raw_body)
    else:
        body = raw_body
    if not isinstance(body, dict):
        raise ValueError("Request body must be a JSON object.")
    return body


def lambda_handler(event, context):
    """Main router — dispatches to correct handler based on path."""
    method = event.get("requestContext", {}).get("http", {}).get("method", "GET")
    path = event.get("rawPath", "/dashboard").rstrip("/") or "/"
    params = event.get("queryStringParameters") or {}

    logger.info("Request | method=%s | path=%s", method, path)

    # Handle CORS preflight
    if method == "OPTIONS":
        return _response(200, {})

    if method in ("POST", "PUT"):
        try:
            body = _parse_body(event)
        except (json.JSONDecodeError, ValueError):
            return _response(400, {"error": "Invalid JSON body."})
    else:
        body = {}

    parts = path.strip("/").split("/")

    if path == "/dashboard" and method == "GET":
        return handle_dashboard()

    if path == "/leads" and method == "GET":
        return handle_list_leads(params)

    if path == "/leads/existing" and method == "GET":
        return handle_existing_leads()

    if path == "/leads/export" and method == "GET":
        return handle_export(params)

    if path == "/leads/assign-round-robin" and method == "POST":
        return handle_round_robin()

    if path == "/meetings" and method == "GET":
        return handle_meetings()

    if path == "/lawyers" and method == "GET":
        return handle_lawyers()

    # Route: /leads/{id}[/...]
    if parts[0] == "leads" and len(parts) == 2 and method == "GET":
        return handle_lead_detail(parts[1])

    if parts[0] == "leads" and len(parts) == 3:
        lead_id, action = parts[1], parts[2]
        if action == "transcript" and method == "GET":
            return handle_transcript(lead_id)
        if action == "calendar-link" and method == "GET":
            return handle_calendar_link(lead_id)
        if action == "assign" and method == "POST":
            return handle_assign(lead_id, body)

    # Route: PUT /lawyers/{id}/availability
    if parts[0] == "lawyers" and len(parts) == 3 and parts[2] == "availability" and method == "PUT":
        return handle_set_availability(parts[1], body)

    return _response(404, {"error": f"Route not found: {method} {path}"})
