import logging
from datetime import date

import anthropic
from prompt import (
    DRAFT_SYSTEM_PROMPT,
    DRAFT_TEMPLATE,
    FIRM_HEADER_TEMPLATE,
    SUMMARY_SYSTEM_PROMPT,
    SUMMARY_TEMPLATE,
    TRANSLATE_TEMPLATE,
)

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-haiku-4-5-20251001"

DRAFT_REQUIRED_FIELDS = ("client_name", "document_type", "relevant_jurisdiction")
MIN_CASE_DETAILS_LENGTH = 10


def _strip_fences(text: str) -> str:
    """Remove accidental markdown code fences from model output."""
    text = text.strip()
    if text.startswith("```"):
        parts = text.split("```")
        content = parts[1]
        first_line, _, rest = content.partition("\n")
        if rest and first_line.strip().isalpha():
            content = rest
        return content.strip()
    return text


def _complete(
    user_message: str,
    api_key: str,
    system: str | None = None,
    model: str = DEFAULT_MODEL,
    max_tokens: int = 1024,
    temperature: float = 0.2,
) -> str:
    """One Messages API call. Returns the concatenated text blocks, fence-stripped."""
    client = anthropic.Anthropic(api_key=api_key)

    kwargs = {
        "model": model,
        "max_tokens": max_tokens,
        "temperature": temperature,
        "messages": [
            {"role": "user", "content": user_message}
        ],
    }
    if system:
        kwargs["system"] = system

    response = client.messages.create(**kwargs)

    raw_text = "".join(
        block.text for block in response.content if getattr(block, "type", "text") == "text"
    )
    logger.debug("Raw model response: %s", raw_text)
    return _strip_fences(raw_text)


def validate_draft_request(
    client_name: str,
    case_details: str,
    document_type: str,
    relevant_jurisdiction: str,
) -> dict:
    """
    Raise ValueError naming every invalid field.
    Returns the stripped values.
    """
    values = {
        "client_name": str(client_name or "").strip(),
        "case_details": str(case_details or "").strip(),
        "document_type": str(document_type or "").strip(),
        "relevant_jurisdiction": str(relevant_jurisdiction or "").strip(),
    }

    errors = {}
    for field in DRAFT_REQUIRED_FIELDS:
        if not values[field]:
            errors[field] = "is required"
    if len(values["case_details"]) < MIN_CASE_DETAILS_LENGTH:
        errors["case_details"] = f"must be at least {MIN_CASE_DETAILS_LENGTH} characters"

    if errors:
        raise ValueError(
            "; ".join(f"{field} {reason}" for field, reason in sorted(errors.items()))
        )
    return values


def firm_header(email: str, address: str, practice_areas: str) -> str:
    return FIRM_HEADER_TEMPLATE.format(
        email=email or "[Firm Email]",
        address=address or "[Firm Address]",
        practice_areas=practice_areas or "Legal Services",
    )


def generate_legal_draft(
    client_name: str,
    case_details: str,
    document_type: str,
    relevant_jurisdiction: str,
    api_key: str,
    header: str = "",
    model: str = DEFAULT_MODEL,
    today: date | None = None,
) -> str:
    """
    Draft a legal document (a legal notice by default) from case details.
    Raises ValueError on invalid input or an empty model response.
    """
    values = validate_draft_request(client_name, case_details, document_type, relevant_jurisdiction)

    user_message = DRAFT_TEMPLATE.format(
        firm_header=header or firm_header("", "", ""),
        document_title=values["document_type"].upper(),
        today=(today or date.today()).strftime("%d %B %Y"),
        **values,
    )

    draft = _complete(
        user_message,
        api_key=api_key,
        system=DRAFT_SYSTEM_PROMPT,
        model=model,
        max_tokens=4000,
        temperature=0.3,
    )

    if not draft:
        raise ValueError("Failed to generate legal draft from the AI model.")

    logger.info(
        "Draft generated | document_type=%s | jurisdiction=%s | chars=%d",
        values["document_type"],
        values["relevant_jurisdiction"],
        len(draft),
    )
    return draft


def translate_text(
    text: str,
    api_key: str,
    target_language: str = "English",
    model: str = DEFAULT_MODEL,
) -> str:
    """
    Translate `text` into `target_language`.
    Returns "" when there is nothing to translate or the model returns nothing.
    """
    if not (text or "").strip():
        return ""

    translated = _complete(
        TRANSLATE_TEMPLATE.format(target_language=target_language, text=text),
        api_key=api_key,
        model=model,
        max_tokens=4000,
        temperature=0.0,
    )
    logger.info("Translation complete | target=%s | chars=%d", target_language, len(translated))
    return translated


def generate_transcript_summary(
    transcript: str,
    language: str,
    api_key: str,
    model: str = DEFAULT_MODEL,
) -> str:
    """Concise English summary of a prospective client's voice transcript."""
    if not (transcript or "").strip():
        return ""

    summary = _complete(
        SUMMARY_TEMPLATE.format(language=language or "an unknown language", transcript=transcript),
        api_key=api_key,
        system=SUMMARY_SYSTEM_PROMPT,
        model=model,
        max_tokens=600,
        temperature=0.1,
    )
    logger.info("Summary complete | language=%s | chars=%d", language, len(summary))
    return summary
