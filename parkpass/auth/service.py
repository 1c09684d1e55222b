import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from parkpass.auth.schemas import AdminUserCreate, AdminUserUpdate
from parkpass.auth.utils import get_password_hash, verify_password
from parkpass.models import AdminUser, Park

logger = logging.getLogger(__name__)

class AdminUserService:
    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[AdminUser]:
        """Get admin user by email"""
        return db.query(AdminUser).filter(AdminUser.email == email.lower()).first()

    @staticmethod
    def get_user_by_id(db: Session, user_id: int) -> Optional[AdminUser]:
        """Get admin user by ID"""
        return db.query(AdminUser).filter(AdminUser.id == user_id).first()

    @staticmethod
    def get_users(db: Session, role: Optional[str] = None) -> List[AdminUser]:
        query = db.query(AdminUser)
        if role:
            query = query.filter(AdminUser.role == role)
        return query.order_by(AdminUser.name).all()

    @staticmethod
    def authenticate(db: Session, email: str, password: str) -> Optional[AdminUser]:
        """Check credentials and record the login time"""
        user = AdminUserService.get_user_by_email(db, email)
        if not user or not user.is_active:
            return None
        if not verify_password(password, user.password_hash):
            return None

        user.last_login = datetime.now(timezone.utc)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def create_user(db: Session, user: AdminUserCreate) -> AdminUser:
        """Create a new admin user with its park assignments"""
        db_user = AdminUser(
            name=user.name,
            email=user.email.lower(),
            password_hash=get_password_hash(user.password),
            role=user.role.value,
            is_active=True
        )
        db_user.assigned_parks = AdminUserService._load_parks(db, user.assigned_park_ids)

        try:
            db.add(db_user)
            db.commit()
            db.refresh(db_user)
        except IntegrityError:
            db.rollback()
            raise ValueError("Email already registered")

        logger.info("Created %s account %s", db_user.role, db_user.email)
        return db_user

    @staticmethod
    def update_user(db: Session, user_id: int, user_update: AdminUserUpdate) -> Optional[AdminUser]:
        """Update admin user information"""
        db_user = AdminUserService.get_user_by_id(db, user_id)
        if not db_user:
            return None

        update_data = user_update.model_dump(exclude_unset=True)

        if "password" in update_data:
            password = update_data.pop("password")
            if password:
                db_user.password_hash = get_password_hash(password)
        if "assigned_park_ids" in update_data:
            park_ids = update_data.pop("assigned_park_ids") or []
            db_user.assigned_parks = AdminUserService._load_parks(db, park_ids)
        if update_data.get("email"):
            update_data["email"] = update_data["email"].lower()
        if update_data.get("role"):
            update_data["role"] = update_data["role"].value

        for field, value in update_data.items():
            if value is not None:
                setattr(db_user, field, value)

        try:
            db.commit()
            db.refresh(db_user)
        except IntegrityError:
            db.rollback()
            raise ValueError("Email already exists")
        return db_user

    @staticmethod
    def delete_user(db: Session, user_id: int) -> bool:
        db_user = AdminUserService.get_user_by_id(db, user_id)
        if not db_user:
            return False
        db.delete(db_user)
        db.commit()
        logger.info("Deleted account %s", user_id)
        return True

    @staticmethod
    def _load_parks(db: Session, park_ids: List[int]) -> List[Park]:
        if not park_ids:
            return []
        parks = db.query(Park).filter(Park.id.in_(park_ids)).all()
        missing = set(park_ids) - {park.id for park in parks}
        if missing:
            raise ValueError(f"Unknown park IDs: {', '.join(str(i) for i in sorted(missing))}")
        return parks
