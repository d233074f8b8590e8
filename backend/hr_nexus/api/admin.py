import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from ..config import DEFAULT_ROLE_TITLE
from ..database import get_db
from ..schemas.records import CandidateProfile, CVMetadata, User
from ..services.candidate_search import filter_candidates
from ..services.cv_storage import decode_data_uri
from ..services.email_drafting import draft_interview_email
from ..services.emailer import send_interview_invitation
from ..services.repository import (
    get_activity,
    get_candidate_by_id,
    get_candidates,
    get_current_cv,
    log_activity,
    update_candidate_status,
)
from ..utils.error_handlers import get_error_message
from ..utils.roles import hr_admin_only
from ..utils.validation import validate_review_status, validate_status_filter, validate_string_field
from .candidate import public_cv

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


class StatusUpdateRequest(BaseModel):
    status: str


class DraftInvitationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    role_title: str | None = Field(default=None, alias="roleTitle")


class SendInvitationRequest(BaseModel):
    content: str


def _content_disposition(file_name: str) -> str:
    """ASCII `filename` fallback plus an RFC 5987 `filename*` carrying the real name."""
    fallback = "".join(ch for ch in file_name if 32 <= ord(ch) < 127 and ch not in "\"\\").strip()
    if not fallback or fallback.startswith("."):
        fallback = "cv" + fallback
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(file_name)}"


def _candidate_or_404(db: Session, candidate_id: str) -> CandidateProfile:
    candidate = get_candidate_by_id(db, candidate_id)
    if candidate is None:
        raise HTTPException(status_code=404, detail=get_error_message("candidate_not_found"))
    return candidate


def _current_cv_or_404(db: Session, candidate: CandidateProfile) -> CVMetadata:
    cv = get_current_cv(db, candidate)
    if cv is None:
        raise HTTPException(status_code=404, detail=get_error_message("no_cv"))
    return cv


@router.get("/candidates")
def list_candidates(
    search: str | None = Query(default=None, max_length=255),
    status: str | None = Query(default=None),
    db: Session = Depends(get_db),
    _admin: User = Depends(hr_admin_only),
):
    """Dashboard listing; cheap enough for the dashboard to poll."""
    status_filter = validate_status_filter(status)
    rows = filter_candidates(get_candidates(db), search=search, status=status_filter)
    return {"count": len(rows), "candidates": [c.to_storage() for c in rows]}


@router.patch("/candidates/{candidate_id}/status")
def change_candidate_status(
    candidate_id: str,
    payload: StatusUpdateRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(hr_admin_only),
):
    status = validate_review_status(payload.status)
    updated = update_candidate_status(db, candidate_id, status)
    if updated is None:
        raise HTTPException(status_code=404, detail=get_error_message("candidate_not_found"))
    log_activity(db, admin.id, f"STATUS_{status}:{candidate_id}")
    return {"message": f"Candidate marked as {status.lower()}", "candidate": updated.to_storage()}


@router.get("/candidates/{candidate_id}/cv")
def view_candidate_cv(
    candidate_id: str,
    db: Session = Depends(get_db),
    _admin: User = Depends(hr_admin_only),
):
    cv = _current_cv_or_404(db, _candidate_or_404(db, candidate_id))
    return {"cv": public_cv(cv), "content": cv.content}


@router.get("/candidates/{candidate_id}/cv/download")
def download_candidate_cv(
    candidate_id: str,
    db: Session = Depends(get_db),
    _admin: User = Depends(hr_admin_only),
):
    cv = _current_cv_or_404(db, _candidate_or_404(db, candidate_id))
    try:
        media_type, data = decode_data_uri(cv.content)
    except ValueError as e:
        logger.error(f"Stored CV id={cv.id} cannot be decoded: {e}")
        raise HTTPException(status_code=500, detail=get_error_message("storage_error"))
    return Response(
        content=data,
        media_type=media_type,
        headers={"Content-Disposition": _content_disposition(cv.file_name)},
    )


@router.post("/candidates/{candidate_id}/invitation/draft")
async def draft_invitation(
    candidate_id: str,
    payload: DraftInvitationRequest,
    db: Session = Depends(get_db),
    _admin: User = Depends(hr_admin_only),
):
    candidate = _candidate_or_404(db, candidate_id)
    role_title = validate_string_field(payload.role_title, "Role title", max_length=255, required=False)
    content, meta = await draft_interview_email(
        candidate_name=candidate.name,
        role_title=role_title or DEFAULT_ROLE_TITLE,
    )
    return {"content": content, "fallback": meta["fallback"], "meta": meta}


@router.post("/candidates/{candidate_id}/invitation/send")
def send_invitation(
    candidate_id: str,
    payload: SendInvitationRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(hr_admin_only),
):
    candidate = _candidate_or_404(db, candidate_id)
    msg, candidate = send_interview_invitation(db, candidate=candidate, body=payload.content, sender=admin)
    return {
        "message": f"Interview invitation sent to {candidate.name}",
        "subject": msg["Subject"],
        "candidate": candidate.to_storage(),
    }


@router.get("/activity")
def list_activity(
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
    _admin: User = Depends(hr_admin_only),
):
    # The log is append-only, so reversing it gives newest first.
    rows = list(reversed(get_activity(db)))[:limit]
    return {"count": len(rows), "activity": [a.to_storage() for a in rows]}
