from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.db.models import User


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserStore:
    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def by_email(self, email: str) -> Optional[User]:
        return self.db.execute(select(User).where(User.email == normalize_email(email))).scalar_one_or_none()

    def all(self) -> List[User]:
        return list(self.db.execute(select(User).order_by(User.id)).scalars().all())

    def add(self, user: User) -> User:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def set_refresh_digest(self, user: User, digest: Optional[str]) -> None:
        # last writer wins; concurrent rotations for one user are not serialized
        user.refresh_token = digest
        self.db.add(user)
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
