from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from parkpass.auth.schemas import Actor
from parkpass.auth.service import AdminUserService
from parkpass.auth.utils import verify_token
from parkpass.bookings.guard import Action, authorize
from parkpass.bookings.http import raise_for_error
from parkpass.database import get_db
from parkpass.models import AdminUser

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> AdminUser:
    """Get current authenticated admin user"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    token_data = verify_token(token, credentials_exception)

    user = AdminUserService.get_user_by_id(db, user_id=token_data["user_id"])
    if user is None or not user.is_active:
        raise credentials_exception

    return user

def get_current_actor(current_user: AdminUser = Depends(get_current_user)) -> Actor:
    """Build the actor passed into service calls.

    Role and park assignments are read from the database on every request,
    so revoking an assignment takes effect before the token expires.
    """
    return Actor(
        user_id=current_user.id,
        role=current_user.role,
        assigned_parks=frozenset(current_user.assigned_park_ids)
    )

def require_super_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    """Require the super-admin role for user management"""
    raise_for_error(authorize(actor, None, Action.MANAGE_USERS))
    return actor
