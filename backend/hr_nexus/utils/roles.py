from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.records import User
from ..services.session_state import SessionState
from .error_handlers import get_error_message

_DASHBOARDS = {
    "CANDIDATE": "/candidates/me",
    "HR_ADMIN": "/admin/candidates",
}


def get_session(db: Session = Depends(get_db)) -> SessionState:
    session = SessionState(db)
    session.restore()
    return session


def get_current_user(session: SessionState = Depends(get_session)) -> User:
    if not session.is_authenticated:
        raise HTTPException(status_code=401, detail=get_error_message("unauthorized"))
    return session.current


def _role_required(required_role: str):
    def check_role(user: User = Depends(get_current_user)) -> User:
        if user.role != required_role:
            raise HTTPException(
                status_code=403,
                detail=f"{get_error_message('forbidden')} Your dashboard is {_DASHBOARDS[user.role]}",
            )
        return user
    return check_role


candidate_only = _role_required("CANDIDATE")
hr_admin_only = _role_required("HR_ADMIN")
