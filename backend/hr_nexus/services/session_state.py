import json
import logging

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from ..schemas.records import User
from ..store import CURRENT_USER_KEY, load_json, remove_item, set_item
from ..utils.error_handlers import StorageCorruptionError
from .repository import get_user_by_id

logger = logging.getLogger(__name__)


class SessionState:
    """
    The signed-in user, mirrored under the `current_user` key so it survives restarts.

    Handed to routes explicitly (see `get_session`). At most one user is active;
    there is no expiry, the session lasts until logout.
    """

    def __init__(self, db: Session):
        self.db = db
        self._user: User | None = None

    @property
    def current(self) -> User | None:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    def restore(self) -> User | None:
        """Adopt the mirrored user if it still matches a stored user; otherwise drop it."""
        data = load_json(self.db, CURRENT_USER_KEY)
        if data is None:
            self._user = None
            return None

        try:
            cached = User.model_validate(data)
        except PydanticValidationError as e:
            raise StorageCorruptionError(CURRENT_USER_KEY, "not a user record") from e
        stored = get_user_by_id(self.db, cached.id)
        if stored is None or stored.role != cached.role:
            logger.warning("Dropping stale session for user id=%s", cached.id)
            remove_item(self.db, CURRENT_USER_KEY)
            self._user = None
            return None

        self._user = stored
        return stored

    def login(self, user: User) -> User:
        self._user = user
        set_item(self.db, CURRENT_USER_KEY, json.dumps(user.to_storage(), ensure_ascii=False))
        logger.info("Session started for user id=%s role=%s", user.id, user.role)
        return user

    def logout(self) -> None:
        if self._user is not None:
            logger.info("Session ended for user id=%s", self._user.id)
        self._user = None
        remove_item(self.db, CURRENT_USER_KEY)
