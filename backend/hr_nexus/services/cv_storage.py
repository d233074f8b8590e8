import base64
import binascii
import logging
import re

from sqlalchemy.orm import Session

from ..schemas.records import CandidateProfile, CVMetadata
from ..utils.identifiers import new_id, now_ms
from .repository import attach_cv, save_cv

logger = logging.getLogger(__name__)

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+/-]*)(?:;[\w=.-]+)*;base64,(?P<payload>.*)$", re.S)


def encode_data_uri(data: bytes, content_type: str) -> str:
    return f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_uri(uri: str) -> tuple[str, bytes]:
    """Returns (mime type, raw bytes). Raises ValueError for anything but a base64 data URI."""
    m = _DATA_URI_RE.match(uri or "")
    if not m:
        raise ValueError("CV content is not a base64 data URI")
    try:
        data = base64.b64decode(m.group("payload"), validate=True)
    except binascii.Error as e:
        raise ValueError("CV content has an invalid base64 payload") from e
    return m.group("mime") or "application/octet-stream", data


def store_cv_upload(
    db: Session,
    *,
    candidate_id: str,
    file_name: str,
    content_type: str,
    data: bytes,
) -> tuple[CVMetadata, CandidateProfile | None]:
    """
    Append a CVMetadata row for this upload and make it the candidate's current CV.
    Earlier uploads stay in the collection.
    """
    cv = CVMetadata(
        id=new_id(),
        candidate_id=candidate_id,
        file_name=file_name,
        upload_date=now_ms(),
        content=encode_data_uri(data, content_type),
    )
    save_cv(db, cv)
    profile = attach_cv(db, candidate_id, cv)
    logger.info("Stored CV id=%s for candidate id=%s (%d bytes)", cv.id, candidate_id, len(data))
    return cv, profile
