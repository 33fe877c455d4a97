import logging
import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)


def _ses_client(region: str = "us-east-1"):
    return boto3.client("ses", region_name=region)


def send_assignment_alert(
    to_emails: list[str],
    lead: dict,
    lawyer: dict,
    from_email: str,
    region: str = "us-east-1",
) -> None:
    """
    Tell the firm (and the lawyer, when we have an address) that a lead
    has been assigned. Plain text, contact details up front.
    """
    recipients = [address for address in to_emails if address]
    if not recipients:
        logger.info("Assignment alert skipped, no recipients | lead_id=%s", lead.get("id"))
        return

    subject = f"Lead assigned: {lead.get('name') or 'Unnamed lead'} -> {lawyer.get('name', 'Unknown')}"

    body = (
        f"{lead.get('name') or 'A lead'} has been assigned to {lawyer.get('name', 'Unknown')}"
        f" ({lawyer.get('specialty', 'General Practice')}).\n\n"
        f"Email:    {lead.get('email') or 'N/A'}\n"
        f"WhatsApp: {lead.get('whatsapp') or 'N/A'}\n"
        f"Language: {lead.get('language') or 'N/A'}\n"
        f"Created:  {lead.get('created_at') or 'N/A'}\n\n"
        "Transcript:\n"
        f"{lead.get('voice_transcript') or 'No transcript available.'}\n\n"
        "---\n"
        "This message was sent automatically by LeadDesk."
    )

    try:
        _ses_client(region).send_email(
            Source=from_email,
            Destination={"ToAddresses": recipients},
            Message={
                "Subject": {"Data": subject, "Charset": "UTF-8"},
                "Body": {"Text": {"Data": body, "Charset": "UTF-8"}},
            },
        )
        logger.info("Assignment alert sent | to=%s | lead_id=%s", recipients, lead.get("id"))
    except ClientError as e:
        # Log but never fail the assignment over an email error
        logger.error(
            "Assignment alert FAILED | to=%s | lead_id=%s | error=%s",
            recipients,
            lead.get("id"),
            e.response["Error"]["Message"],
        )
    except BotoCoreError as e:
        logger.error(
            "Assignment alert FAILED | to=%s | lead_id=%s | error=%s",
            recipients,
            lead.get("id"),
            str(e),
        )
