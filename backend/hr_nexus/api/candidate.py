import logging
from pathlib import Path

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.orm import Session

from ..config import MAX_CV_BYTES
from ..database import get_db
from ..schemas.records import CVMetadata, CandidateProfile, User
from ..services.cv_storage import store_cv_upload
from ..services.repository import get_candidate_by_id, get_cvs_for_candidate, log_activity
from ..utils.error_handlers import get_error_message
from ..utils.roles import candidate_only
from ..utils.validation import sanitize_filename

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/candidates", tags=["Candidates"])

ALLOWED_CONTENT_TYPES = {"application/pdf"}


def _own_profile(db: Session, user: User) -> CandidateProfile:
    profile = get_candidate_by_id(db, user.id)
    if profile is None:
        raise HTTPException(status_code=404, detail=get_error_message("candidate_not_found"))
    return profile


def public_cv(cv: CVMetadata) -> dict:
    """CV metadata without the inline document."""
    return cv.model_dump(by_alias=True, exclude={"content"})


@router.get("/me")
def get_my_profile(db: Session = Depends(get_db), user: User = Depends(candidate_only)):
    return {"candidate": _own_profile(db, user).to_storage()}


@router.get("/me/cvs")
def list_my_cvs(db: Session = Depends(get_db), user: User = Depends(candidate_only)):
    rows = sorted(get_cvs_for_candidate(db, user.id), key=lambda cv: cv.upload_date, reverse=True)
    return {"success": True, "cvs": [public_cv(cv) for cv in rows]}


@router.post("/me/cv", status_code=201)
async def upload_my_cv(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user: User = Depends(candidate_only),
):
    if not file or not file.filename:
        raise HTTPException(status_code=400, detail=get_error_message("invalid_file_type"))

    file_name = sanitize_filename(Path(file.filename).name)
    if file.content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(status_code=400, detail=get_error_message("invalid_file_type"))

    _own_profile(db, user)

    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail=get_error_message("file_empty"))
    if len(data) > MAX_CV_BYTES:
        raise HTTPException(status_code=413, detail=get_error_message("file_too_large"))

    cv, profile = store_cv_upload(
        db,
        candidate_id=user.id,
        file_name=file_name,
        content_type=file.content_type,
        data=data,
    )
    log_activity(db, user.id, f"CV_UPLOAD:{cv.id}")
    return {
        "success": True,
        "message": "CV Uploaded successfully!",
        "cv": public_cv(cv),
        "candidate": profile.to_storage() if profile else None,
    }
