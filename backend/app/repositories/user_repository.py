"""User repository for data access."""

from uuid import UUID

from sqlalchemy.orm import Session

from app.models.user import User, UserRole


class UserRepository:
    """Repository for User model."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: UUID) -> User | None:
        return self.db.query(User).filter(User.id == user_id).first()

    def create(
        self,
        *,
        name: str,
        phone: str | None = None,
        vehicle_number: str | None = None,
        role: UserRole = UserRole.USER,
    ) -> User:
        user = User(
            name=name,
            phone=phone,
            vehicle_number=vehicle_number,
            role=role.value,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user
