"""
leaddesk-ai Lambda handler.

Routes:
  POST /draft      → legal draft from case details
  POST /translate  → translate a transcript (English by default)
  POST /summary    → English summary of a voice transcript
"""
import json
import logging
import os

import ai_flows

logger = logging.getLogger()
logger.setLevel(logging.INFO)

ANTHROPIC_KEY   = os.environ["ANTHROPIC_API_KEY"]
ANTHROPIC_MODEL = os.environ.get("ANTHROPIC_MODEL", ai_flows.DEFAULT_MODEL)
FIRM_EMAIL      = os.environ.get("FIRM_EMAIL", "")
FIRM_ADDRESS    = os.environ.get("FIRM_ADDRESS", "")
FIRM_PRACTICE_AREAS = os.environ.get("FIRM_PRACTICE_AREAS", "")


def _cors_headers() -> dict:
    return {
        "Access-Control-Allow-Origin":  "*",
        "Access-Control-Allow-Headers": "Content-Type",
        "Access-Control-Allow-Methods": "POST,OPTIONS",
    }


def _response(status_code: int, body: dict) -> dict:
    return {
        "statusCode": status_code,
        "headers": {**_cors_headers(), "Content-Type": "application/json"},
        "body": json.dumps(body, default=str),
    }


def _draft_state(status_code: int, message: str, draft: str | None = None) -> dict:
    return _response(status_code, {
        "message": message,
        "draft":   draft,
        "error":   draft is None,
    })


def handle_draft(body: dict):
    """POST /draft — mirrors the draft form's {message, draft, error} state."""
    try:
        ai_flows.validate_draft_request(
            client_name=body.get("clientName", ""),
            case_details=body.get("caseDetails", ""),
            document_type=body.get("documentType", ""),
            relevant_jurisdiction=body.get("relevantJurisdiction", ""),
        )
    except ValueError as e:
        logger.warning("Draft validation failed | error=%s", str(e))
        return _draft_state(400, "Validation failed. Please check your inputs.")

    try:
        draft = ai_flows.generate_legal_draft(
            client_name=body["clientName"],
            case_details=body["caseDetails"],
            document_type=body["documentType"],
            relevant_jurisdiction=body["relevantJurisdiction"],
            api_key=ANTHROPIC_KEY,
            header=ai_flows.firm_header(FIRM_EMAIL, FIRM_ADDRESS, FIRM_PRACTICE_AREAS),
            model=ANTHROPIC_MODEL,
        )
    except Exception as e:
        logger.error("Draft generation failed | error=%s", str(e))
        return _draft_state(500, f"Error: {e}")

    return _draft_state(200, "Draft generated successfully.", draft)


def handle_translate(body: dict):
    """POST /translate"""
    text = body.get("text", "")
    target_language = str(body.get("targetLanguage") or "English").strip()

    try:
        translation = ai_flows.translate_text(
            text=text,
            api_key=ANTHROPIC_KEY,
            target_language=target_language,
            model=ANTHROPIC_MODEL,
        )
    except Exception as e:
        logger.error("Translation failed | error=%s", str(e))
        return _response(500, {"error": "Sorry, an error occurred during translation."})

    return _response(200, {"translation": translation, "targetLanguage": target_language})


def handle_summary(body: dict):
    """POST /summary"""
    transcript = body.get("transcript", "")
    language = body.get("language", "")

    try:
        summary = ai_flows.generate_transcript_summary(
            transcript=transcript,
            language=language,
            api_key=ANTHROPIC_KEY,
            model=ANTHROPIC_MODEL,
        )
    except Exception as e:
        logger.error("Summary failed | error=%s", str(e))
        return _response(500, {"error": "Failed to summarize transcript."})

    return _response(200, {"summary": summary})


ROUTES = {
    "/draft":     handle_draft,
    "/translate": handle_translate,
    "/summary":   handle_summary,
}


def lambda_handler(event, context):
    method = event.get("requestContext", {}).get("http", {}).get("method", "")
    path = event.get("rawPath", "")

    # Handle CORS preflight
    if method == "OPTIONS":
        return _response(200, {})

    logger.info("AI request | method=%s | path=%s", method, path)

    route = ROUTES.get(path)
    if route is None or method != "POST":
        return _response(404, {"error": f"Route not found: {method} {path}"})

    try:
        raw_body = event.get("body", "{}")
        if isinstance(raw_body, str):
            body = json.loads(raw_body)
        else:
            body = raw_body or {}
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON body | error=%s", str(e))
        return _response(400, {"error": "Invalid JSON in request body."})

    if not isinstance(body, dict):
        return _response(400, {"error": "Request body must be a JSON object."})

    return route(body)
