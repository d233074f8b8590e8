"""
Typed operations over the stored collections.

Every operation reads the whole collection, scans or mutates it in memory and
writes it back. Absence is reported as None or an empty list, never raised.
"""
import logging

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from ..schemas.records import ActivityLog, CandidateProfile, CandidateStatus, CVMetadata, Role, User
from ..store import ACTIVITY_KEY, CANDIDATES_KEY, CV_KEY, USERS_KEY, read_collection, write_collection
from ..utils.error_handlers import DuplicateEmailError, StorageCorruptionError
from ..utils.identifiers import new_id, next_timestamp, now_ms

logger = logging.getLogger(__name__)


def _same_email(a: str | None, b: str | None) -> bool:
    return (a or "").strip().casefold() == (b or "").strip().casefold()


def _index_of(records: list[dict], record_id: str) -> int:
    for i, r in enumerate(records):
        if r.get("id") == record_id:
            return i
    return -1


def _load_records(db: Session, key: str, model):
    """Read a collection and validate each row; a malformed row means corrupt storage."""
    try:
        return [model.model_validate(r) for r in read_collection(db, key)]
    except PydanticValidationError as e:
        raise StorageCorruptionError(key, f"malformed {model.__name__} record ({e.error_count()} errors)") from e


# -------------------- Users --------------------

def get_users(db: Session) -> list[User]:
    return _load_records(db, USERS_KEY, User)


def save_user(db: Session, user: User) -> User:
    """Append a user; one user per email (case-insensitive)."""
    users = read_collection(db, USERS_KEY)
    if any(_same_email(u.get("email"), user.email) for u in users):
        raise DuplicateEmailError(user.email)
    users.append(user.to_storage())
    write_collection(db, USERS_KEY, users)
    logger.info("Saved user id=%s role=%s", user.id, user.role)
    return user


def get_user_by_id(db: Session, user_id: str) -> User | None:
    return next((u for u in get_users(db) if u.id == user_id), None)


def get_user_by_email(db: Session, email: str, role: Role | None = None) -> User | None:
    for u in get_users(db):
        if _same_email(u.email, email) and (role is None or u.role == role):
            return u
    return None


# -------------------- Candidate profiles --------------------

def get_candidates(db: Session) -> list[CandidateProfile]:
    return _load_records(db, CANDIDATES_KEY, CandidateProfile)


def save_candidate_profile(db: Session, profile: CandidateProfile) -> CandidateProfile:
    """Upsert by id: replace in place when present, else append."""
    candidates = read_collection(db, CANDIDATES_KEY)
    index = _index_of(candidates, profile.id)
    if index != -1:
        candidates[index] = profile.to_storage()
    else:
        candidates.append(profile.to_storage())
    write_collection(db, CANDIDATES_KEY, candidates)
    return profile


def get_candidate_by_id(db: Session, candidate_id: str) -> CandidateProfile | None:
    return next((c for c in get_candidates(db) if c.id == candidate_id), None)


def get_candidate_by_email(db: Session, email: str) -> CandidateProfile | None:
    return next((c for c in get_candidates(db) if _same_email(c.email, email)), None)


def update_candidate_status(db: Session, candidate_id: str, status: CandidateStatus) -> CandidateProfile | None:
    """
    Set status and refresh lastUpdated. Unknown ids are a silent no-op (returns None).
    Re-applying the current status still refreshes lastUpdated.
    """
    candidates = read_collection(db, CANDIDATES_KEY)
    index = _index_of(candidates, candidate_id)
    if index == -1:
        logger.info("Status update skipped; candidate id=%s not found", candidate_id)
        return None

    try:
        profile = CandidateProfile.model_validate(candidates[index])
    except PydanticValidationError as e:
        raise StorageCorruptionError(CANDIDATES_KEY, f"malformed CandidateProfile record ({e.error_count()} errors)") from e
    # Validated on assignment; an unknown status raises here.
    profile.status = status
    profile.last_updated = next_timestamp(profile.last_updated)
    candidates[index] = profile.to_storage()
    write_collection(db, CANDIDATES_KEY, candidates)
    logger.info("Candidate id=%s status=%s", candidate_id, status)
    return profile


def attach_cv(db: Session, candidate_id: str, cv: CVMetadata) -> CandidateProfile | None:
    """Point the candidate's current CV at `cv` (already saved). None when the candidate is unknown."""
    profile = get_candidate_by_id(db, candidate_id)
    if profile is None:
        return None
    profile.cv_url = cv.id
    profile.cv_file_name = cv.file_name
    profile.last_updated = next_timestamp(profile.last_updated)
    return save_candidate_profile(db, profile)


# -------------------- CVs --------------------

def get_cvs(db: Session) -> list[CVMetadata]:
    return _load_records(db, CV_KEY, CVMetadata)


def save_cv(db: Session, cv: CVMetadata) -> CVMetadata:
    """Append-only; earlier uploads are kept."""
    cvs = read_collection(db, CV_KEY)
    cvs.append(cv.to_storage())
    write_collection(db, CV_KEY, cvs)
    return cv


def get_cv_by_id(db: Session, cv_id: str) -> CVMetadata | None:
    return next((cv for cv in get_cvs(db) if cv.id == cv_id), None)


def get_cvs_for_candidate(db: Session, candidate_id: str) -> list[CVMetadata]:
    return [cv for cv in get_cvs(db) if cv.candidate_id == candidate_id]


def get_current_cv(db: Session, profile: CandidateProfile) -> CVMetadata | None:
    """The CV the profile points at, else the candidate's latest upload."""
    if profile.cv_url:
        cv = get_cv_by_id(db, profile.cv_url)
        if cv is not None:
            return cv
    uploads = get_cvs_for_candidate(db, profile.id)
    return max(uploads, key=lambda cv: cv.upload_date) if uploads else None


# -------------------- Activity --------------------

def log_activity(db: Session, user_id: str, action: str) -> ActivityLog:
    entry = ActivityLog(id=new_id(), user_id=user_id, action=action, timestamp=now_ms())
    entries = read_collection(db, ACTIVITY_KEY)
    entries.append(entry.to_storage())
    write_collection(db, ACTIVITY_KEY, entries)
    return entry


def get_activity(db: Session) -> list[ActivityLog]:
    return _load_records(db, ACTIVITY_KEY, ActivityLog)
