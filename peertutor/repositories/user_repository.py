from sqlalchemy.orm import Session

from peertutor.models.user import User
from peertutor.repositories.base import UserDirectory


class UserRepository(UserDirectory):
    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, user_id: int) -> User | None:
        return self.db.get(User, user_id)

    def get_display_name(self, user_id: int) -> str | None:
        user = self.get(user_id)
        if user is None:
            return None
        return user.display_name
