import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.records import CandidateProfile, User
from ..services.repository import (
    get_candidate_by_email,
    get_user_by_email,
    get_user_by_id,
    log_activity,
    save_candidate_profile,
    save_user,
)
from ..services.session_state import SessionState
from ..utils.error_handlers import DuplicateEmailError, get_error_message
from ..utils.identifiers import new_id, now_ms
from ..utils.roles import get_session
from ..utils.validation import (
    validate_access_code,
    validate_country_code,
    validate_email,
    validate_password_present,
    validate_phone,
    validate_string_field,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

DEMO_ADMIN_ID = "demo-admin"
DEMO_ADMIN_NAME = "Demo Admin"
DEMO_ADMIN_EMAIL = "admin@technexus.com"


class CandidateRegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    email: str
    password: str
    phone: str | None = None
    country_code: str | None = Field(default=None, alias="countryCode")


class AdminRegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    email: str
    password: str
    access_code: str = Field(alias="accessCode")


class LoginRequest(BaseModel):
    email: str
    password: str


def _login_response(user: User) -> dict:
    return {"message": "Logged in successfully", "user": user.to_storage()}


@router.post("/candidates/register", status_code=201)
def register_candidate(payload: CandidateRegisterRequest, db: Session = Depends(get_db)):
    name = validate_string_field(payload.name, "Name", max_length=255)
    email = validate_email(payload.email)
    validate_password_present(payload.password)
    phone = validate_phone(payload.phone)
    country_code = validate_country_code(payload.country_code)

    if get_candidate_by_email(db, email) or get_user_by_email(db, email):
        raise HTTPException(status_code=400, detail=get_error_message("email_exists"))

    now = now_ms()
    profile = CandidateProfile(
        id=new_id(),
        name=name,
        email=email,
        role="CANDIDATE",
        phone=phone,
        country_code=country_code,
        status="PENDING",
        created_at=now,
        last_updated=now,
    )
    try:
        save_user(db, profile.as_user())
    except DuplicateEmailError:
        raise HTTPException(status_code=400, detail=get_error_message("email_exists"))
    save_candidate_profile(db, profile)
    log_activity(db, profile.id, "REGISTER")

    # Registration does not sign the candidate in; they log in next.
    return {"message": "Registration successful. Please login.", "candidate": profile.to_storage()}


@router.post("/candidates/login")
def login_candidate(
    payload: LoginRequest,
    db: Session = Depends(get_db),
    session: SessionState = Depends(get_session),
):
    email = validate_email(payload.email)
    validate_password_present(payload.password)

    profile = get_candidate_by_email(db, email)
    user = get_user_by_id(db, profile.id) if profile else None
    if user is None or user.role != "CANDIDATE":
        raise HTTPException(status_code=401, detail=get_error_message("invalid_credentials"))

    session.login(user)
    log_activity(db, user.id, "LOGIN")
    return _login_response(user)


@router.post("/admins/register", status_code=201)
def register_admin(
    payload: AdminRegisterRequest,
    db: Session = Depends(get_db),
    session: SessionState = Depends(get_session),
):
    # The access code is checked before anything else is looked at.
    validate_access_code(payload.access_code)
    name = validate_string_field(payload.name, "Name", max_length=255)
    email = validate_email(payload.email)
    validate_password_present(payload.password)

    admin = User(id=new_id(), name=name, email=email, role="HR_ADMIN", created_at=now_ms())
    try:
        save_user(db, admin)
    except DuplicateEmailError:
        raise HTTPException(status_code=400, detail=get_error_message("email_exists"))

    # Registering an admin signs them straight in.
    session.login(admin)
    log_activity(db, admin.id, "REGISTER")
    return _login_response(admin)


@router.post("/admins/login")
def login_admin(
    payload: LoginRequest,
    db: Session = Depends(get_db),
    session: SessionState = Depends(get_session),
):
    email = validate_email(payload.email)
    validate_password_present(payload.password)

    user = get_user_by_email(db, email, role="HR_ADMIN")
    if user is None:
        raise HTTPException(status_code=401, detail=get_error_message("admin_not_found"))

    session.login(user)
    log_activity(db, user.id, "LOGIN")
    return _login_response(user)


@router.post("/admins/demo")
def login_demo_admin(db: Session = Depends(get_db), session: SessionState = Depends(get_session)):
    """Quick login as the shared demo admin, creating it on first use."""
    admin = get_user_by_email(db, DEMO_ADMIN_EMAIL)
    if admin is None:
        admin = save_user(
            db,
            User(id=DEMO_ADMIN_ID, name=DEMO_ADMIN_NAME, email=DEMO_ADMIN_EMAIL, role="HR_ADMIN", created_at=now_ms()),
        )
    elif admin.role != "HR_ADMIN":
        raise HTTPException(status_code=409, detail="The demo admin email belongs to a candidate account.")

    session.login(admin)
    log_activity(db, admin.id, "LOGIN")
    return _login_response(admin)


@router.post("/logout")
def logout(db: Session = Depends(get_db), session: SessionState = Depends(get_session)):
    if session.current is not None:
        log_activity(db, session.current.id, "LOGOUT")
    session.logout()
    return {"message": "Logged out successfully"}


@router.get("/me")
def me(session: SessionState = Depends(get_session)):
    if session.current is None:
        raise HTTPException(status_code=401, detail=get_error_message("unauthorized"))
    return {"user": session.current.to_storage()}
