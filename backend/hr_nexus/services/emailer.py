import logging
from email.message import EmailMessage

from sqlalchemy.orm import Session

from ..config import COMPANY_NAME
from ..schemas.records import CandidateProfile, User
from ..utils.error_handlers import ValidationError, get_error_message
from .repository import log_activity, update_candidate_status

logger = logging.getLogger(__name__)


def build_invitation_message(*, to_email: str, body: str, sender: User) -> EmailMessage:
    msg = EmailMessage()
    msg["Subject"] = f"Interview invitation from {COMPANY_NAME}"
    msg["From"] = sender.email
    msg["To"] = to_email
    msg.set_content(body)
    return msg


def send_interview_invitation(
    db: Session,
    *,
    candidate: CandidateProfile,
    body: str,
    sender: User,
) -> tuple[EmailMessage, CandidateProfile]:
    """
    Simulated send: the message is built and logged but never delivered.

    Inviting a PENDING candidate verifies them. Returns (message, candidate as stored after the send).
    """
    if not (body or "").strip():
        raise ValidationError(get_error_message("empty_email"))

    msg = build_invitation_message(
        to_email=candidate.email,
        body=body,
        sender=sender,
    )
    logger.info("Simulated invitation to=%s from=%s subject=%r", msg["To"], msg["From"], msg["Subject"])
    log_activity(db, sender.id, f"INVITATION_SENT:{candidate.id}")

    if candidate.status == "PENDING":
        updated = update_candidate_status(db, candidate.id, "VERIFIED")
        if updated is not None:
            log_activity(db, sender.id, f"STATUS_VERIFIED:{candidate.id}")
            candidate = updated
    return msg, candidate
