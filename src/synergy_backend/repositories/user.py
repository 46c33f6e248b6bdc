from typing import Optional

from sqlalchemy.orm import Session

from .base import BaseRepository
from ..model.auth import User


class UserRepository(BaseRepository[User]):

    def __init__(self, db: Session):
        super().__init__(db, User)

    def find_by_email(self, email: str) -> Optional[User]:
        return self.find_one_by(email=email)
